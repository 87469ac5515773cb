"""Deactivate user handler.

Flow:
1. Append UserDeactivated (no event when already inactive)
2. Release the email claim (the address becomes registrable again)
3. Revoke every session of the user and the tokens attached to them

Tokens not bound to a session stop verifying too: verification checks the
subject identity.
"""

from src.application.commands.identity_commands import DeactivateUser
from src.application.event_sourcing import AggregateRepository, retry_on_conflict
from src.application.services.session_manager import SessionManager
from src.core.enums import ErrorCode
from src.core.errors import DomainError, NotFoundError
from src.core.result import Failure, Result, Success
from src.domain.aggregates import Identity
from src.domain.aggregates.identity import deactivate_user
from src.domain.protocols import ClockProtocol, IndexNamespace, IndexStoreProtocol


class DeactivateUserHandler:
    """Handler for user deactivation."""

    def __init__(
        self,
        identities: AggregateRepository[Identity],
        index: IndexStoreProtocol,
        session_manager: SessionManager,
        clock: ClockProtocol,
        retry_attempts: int = 3,
    ) -> None:
        self._identities = identities
        self._index = index
        self._session_manager = session_manager
        self._clock = clock
        self._attempts = retry_attempts

    async def handle(self, cmd: DeactivateUser) -> Result[None, DomainError]:
        async def operation() -> Result[Identity, DomainError]:
            loaded = await self._identities.load(str(cmd.user_id))
            if loaded is None:
                return Failure(
                    error=NotFoundError(
                        code=ErrorCode.USER_NOT_FOUND,
                        message="User not found",
                        resource_type="User",
                        resource_id=str(cmd.user_id),
                    )
                )
            events = deactivate_user(loaded.state, reason=cmd.reason, occurred_at=self._clock.now())
            saved = await self._identities.save(str(cmd.user_id), loaded.version, events)
            if isinstance(saved, Failure):
                return saved
            return Success(value=loaded.state)

        result = await retry_on_conflict(operation, attempts=self._attempts)
        if isinstance(result, Failure):
            return result

        state = result.value
        if await self._index.get(IndexNamespace.EMAIL, state.email) == str(state.id):
            await self._index.release(IndexNamespace.EMAIL, state.email)

        revoked = await self._session_manager.revoke_all(cmd.user_id, reason=cmd.reason)
        if isinstance(revoked, Failure):
            return revoked
        return Success(value=None)
