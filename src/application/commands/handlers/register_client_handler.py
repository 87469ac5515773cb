"""Register client handler.

Flow:
1. Generate the public client id
2. Confidential clients without a public key get a generated secret, stored
   only as a bcrypt hash
3. Validate and append ClientRegistered (redirect URIs, grant types and the
   PKCE rule are checked before any event)
4. Return Success(RegisteredClient) with the plain secret (shown once)
"""

from src.application.commands.client_commands import RegisterClient
from src.application.dtos import RegisteredClient
from src.application.event_sourcing import AggregateRepository, retry_on_conflict
from src.core.errors import DomainError
from src.core.result import Failure, Result, Success
from src.domain.aggregates import Client
from src.domain.aggregates.client import register_client
from src.domain.protocols import (
    ClockProtocol,
    PasswordHashingProtocol,
    SecretGeneratorProtocol,
)


class RegisterClientHandler:
    """Handler for client registration."""

    def __init__(
        self,
        clients: AggregateRepository[Client],
        secrets: SecretGeneratorProtocol,
        password_service: PasswordHashingProtocol,
        clock: ClockProtocol,
        retry_attempts: int = 3,
    ) -> None:
        self._clients = clients
        self._secrets = secrets
        self._password_service = password_service
        self._clock = clock
        self._attempts = retry_attempts

    async def handle(self, cmd: RegisterClient) -> Result[RegisteredClient, DomainError]:
        secret: str | None = None
        secret_hash: str | None = None
        if cmd.confidential and not cmd.public_key_pem:
            secret = self._secrets.generate_client_secret()
            secret_hash = self._password_service.hash_password(secret)

        async def operation() -> Result[RegisteredClient, DomainError]:
            client_id = self._secrets.generate_client_id()
            decision = register_client(
                client_id=client_id,
                name=cmd.name,
                redirect_uris=cmd.redirect_uris,
                grant_types=cmd.grant_types,
                confidential=cmd.confidential,
                pkce_required=cmd.pkce_required,
                allowed_scopes=cmd.allowed_scopes,
                secret_hash=secret_hash,
                public_key_pem=cmd.public_key_pem,
                access_token_ttl_seconds=cmd.access_token_ttl_seconds,
                refresh_token_ttl_seconds=cmd.refresh_token_ttl_seconds,
                occurred_at=self._clock.now(),
            )
            if isinstance(decision, Failure):
                return decision
            saved = await self._clients.save(client_id, 0, decision.value)
            if isinstance(saved, Failure):
                return saved
            return Success(value=RegisteredClient(client_id=client_id, client_secret=secret))

        return await retry_on_conflict(operation, attempts=self._attempts)
