"""Role assignment handlers.

AssignRole / RevokeRole are idempotent: re-assigning a held role (or
revoking one not held) appends no event and succeeds.
"""

from collections.abc import Callable
from datetime import datetime
from uuid import UUID

from src.application.commands.identity_commands import AssignRole, RevokeRole
from src.application.event_sourcing import AggregateRepository, retry_on_conflict
from src.core.enums import ErrorCode
from src.core.errors import DomainError, NotFoundError, ValidationError
from src.core.result import Failure, Result, Success
from src.domain.aggregates import Identity, apply_identity_event, rehydrate
from src.domain.aggregates.identity import assign_role, revoke_role
from src.domain.protocols import ClockProtocol

RoleDecision = Callable[..., Result[list, DomainError]]


class ManageRolesHandler:
    """Handler for AssignRole and RevokeRole."""

    def __init__(
        self,
        identities: AggregateRepository[Identity],
        clock: ClockProtocol,
        retry_attempts: int = 3,
    ) -> None:
        self._identities = identities
        self._clock = clock
        self._attempts = retry_attempts

    async def assign(self, cmd: AssignRole) -> Result[frozenset[str], DomainError]:
        """Grant a role. Returns the user's roles afterwards."""
        return await self._apply(cmd.user_id, cmd.role, assign_role)

    async def revoke(self, cmd: RevokeRole) -> Result[frozenset[str], DomainError]:
        """Withdraw a role. Returns the user's roles afterwards."""
        return await self._apply(cmd.user_id, cmd.role, revoke_role)

    async def _apply(
        self, user_id: UUID, role: str, decide: RoleDecision
    ) -> Result[frozenset[str], DomainError]:
        role = role.strip().lower()
        if not role:
            return Failure(
                error=ValidationError(
                    code=ErrorCode.VALIDATION_FAILED,
                    message="Role must not be empty",
                    field="role",
                )
            )

        async def operation() -> Result[frozenset[str], DomainError]:
            loaded = await self._identities.load(str(user_id))
            if loaded is None:
                return Failure(
                    error=NotFoundError(
                        code=ErrorCode.USER_NOT_FOUND,
                        message="User not found",
                        resource_type="User",
                        resource_id=str(user_id),
                    )
                )
            now: datetime = self._clock.now()
            decision = decide(loaded.state, role=role, occurred_at=now)
            if isinstance(decision, Failure):
                return decision
            saved = await self._identities.save(str(user_id), loaded.version, decision.value)
            if isinstance(saved, Failure):
                return saved
            state = rehydrate(apply_identity_event, decision.value, loaded.state)
            return Success(value=state.roles)

        return await retry_on_conflict(operation, attempts=self._attempts)
