"""Rotate client secret handler.

The previous secret stops working immediately unless a grace period is
configured (`client_secret_grace_seconds`).
"""

from src.application.commands.client_commands import RotateClientSecret
from src.application.dtos import RegisteredClient
from src.application.event_sourcing import AggregateRepository, retry_on_conflict
from src.core.enums import ErrorCode
from src.core.errors import DomainError, NotFoundError
from src.core.result import Failure, Result, Success
from src.domain.aggregates import Client
from src.domain.aggregates.client import rotate_secret
from src.domain.protocols import (
    ClockProtocol,
    PasswordHashingProtocol,
    SecretGeneratorProtocol,
)


def client_not_found(client_id: str) -> NotFoundError:
    return NotFoundError(
        code=ErrorCode.CLIENT_NOT_FOUND,
        message="Client not found",
        resource_type="Client",
        resource_id=client_id,
    )


class RotateClientSecretHandler:
    """Handler for client secret rotation."""

    def __init__(
        self,
        clients: AggregateRepository[Client],
        secrets: SecretGeneratorProtocol,
        password_service: PasswordHashingProtocol,
        clock: ClockProtocol,
        grace_seconds: int = 0,
        retry_attempts: int = 3,
    ) -> None:
        self._clients = clients
        self._secrets = secrets
        self._password_service = password_service
        self._clock = clock
        self._grace_seconds = grace_seconds
        self._attempts = retry_attempts

    async def handle(self, cmd: RotateClientSecret) -> Result[RegisteredClient, DomainError]:
        """Returns Success(RegisteredClient) carrying the new plain secret."""
        secret = self._secrets.generate_client_secret()
        secret_hash = self._password_service.hash_password(secret)

        async def operation() -> Result[RegisteredClient, DomainError]:
            loaded = await self._clients.load(cmd.client_id)
            if loaded is None:
                return Failure(error=client_not_found(cmd.client_id))
            decision = rotate_secret(
                loaded.state,
                secret_hash=secret_hash,
                grace_seconds=self._grace_seconds,
                occurred_at=self._clock.now(),
            )
            if isinstance(decision, Failure):
                return decision
            saved = await self._clients.save(cmd.client_id, loaded.version, decision.value)
            if isinstance(saved, Failure):
                return saved
            return Success(value=RegisteredClient(client_id=cmd.client_id, client_secret=secret))

        return await retry_on_conflict(operation, attempts=self._attempts)
