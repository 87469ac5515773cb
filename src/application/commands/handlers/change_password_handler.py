"""Change password handler.

Flow:
1. Check the new password against the policy
2. Hash the new password (once, outside the retry loop)
3. Load the identity, re-authenticate with the old password, append
   PasswordChanged (retried on concurrency conflicts)
4. Revoke every other session of the user (reason: password_changed)
5. Return Success(None)
"""

from src.application.commands.identity_commands import ChangePassword
from src.application.event_sourcing import AggregateRepository, retry_on_conflict
from src.application.services.session_manager import SessionManager
from src.core.enums import ErrorCode
from src.core.errors import DomainError, NotFoundError
from src.core.result import Failure, Result, Success
from src.domain.aggregates import Identity
from src.domain.aggregates.identity import change_password
from src.domain.protocols import ClockProtocol, PasswordHashingProtocol
from src.domain.value_objects.password_policy import PasswordPolicy

PASSWORD_CHANGED_REASON = "password_changed"


class ChangePasswordHandler:
    """Handler for password change command."""

    def __init__(
        self,
        identities: AggregateRepository[Identity],
        password_service: PasswordHashingProtocol,
        password_policy: PasswordPolicy,
        session_manager: SessionManager,
        clock: ClockProtocol,
        retry_attempts: int = 3,
    ) -> None:
        self._identities = identities
        self._password_service = password_service
        self._password_policy = password_policy
        self._session_manager = session_manager
        self._clock = clock
        self._attempts = retry_attempts

    async def handle(self, cmd: ChangePassword) -> Result[None, DomainError]:
        """Handle password change.

        Returns:
            Success(None), or Failure with PASSWORD_TOO_WEAK,
            INVALID_CREDENTIALS (wrong old password), PASSWORD_UNCHANGED or
            USER_NOT_FOUND.
        """
        policy = self._password_policy.check(cmd.new_password)
        if isinstance(policy, Failure):
            return policy
        new_hash = self._password_service.hash_password(cmd.new_password)

        async def operation() -> Result[None, DomainError]:
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
            state = loaded.state
            decision = change_password(
                state,
                old_password_matches=self._password_service.verify_password(
                    cmd.old_password, state.password_hash
                ),
                new_password_is_same=cmd.new_password == cmd.old_password,
                new_password_hash=new_hash,
                occurred_at=self._clock.now(),
            )
            if isinstance(decision, Failure):
                return decision
            saved = await self._identities.save(str(cmd.user_id), loaded.version, decision.value)
            if isinstance(saved, Failure):
                return saved
            return Success(value=None)

        result = await retry_on_conflict(operation, attempts=self._attempts)
        if isinstance(result, Failure):
            return result

        revoked = await self._session_manager.revoke_all(
            cmd.user_id,
            reason=PASSWORD_CHANGED_REASON,
            except_session_id=cmd.current_session_id,
        )
        if isinstance(revoked, Failure):
            return revoked
        return Success(value=None)
