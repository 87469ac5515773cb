"""Deactivate client handler.

Tokens issued to the client are not revoked one by one: verification reads
the Client aggregate and reports them REVOKED from the moment
ClientDeactivated commits.
"""

from src.application.commands.client_commands import DeactivateClient
from src.application.commands.handlers.rotate_client_secret_handler import client_not_found
from src.application.event_sourcing import AggregateRepository, retry_on_conflict
from src.core.errors import DomainError
from src.core.result import Failure, Result, Success
from src.domain.aggregates import Client
from src.domain.aggregates.client import deactivate_client
from src.domain.protocols import ClockProtocol


class DeactivateClientHandler:
    """Handler for client deactivation."""

    def __init__(
        self,
        clients: AggregateRepository[Client],
        clock: ClockProtocol,
        retry_attempts: int = 3,
    ) -> None:
        self._clients = clients
        self._clock = clock
        self._attempts = retry_attempts

    async def handle(self, cmd: DeactivateClient) -> Result[None, DomainError]:
        async def operation() -> Result[None, DomainError]:
            loaded = await self._clients.load(cmd.client_id)
            if loaded is None:
                return Failure(error=client_not_found(cmd.client_id))
            events = deactivate_client(loaded.state, reason=cmd.reason, occurred_at=self._clock.now())
            saved = await self._clients.save(cmd.client_id, loaded.version, events)
            if isinstance(saved, Failure):
                return saved
            return Success(value=None)

        return await retry_on_conflict(operation, attempts=self._attempts)
