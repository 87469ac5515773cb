"""Authenticate user handler.

Single responsibility: Verify user credentials.
Does NOT create sessions or issue tokens (see LoginUserHandler).

Flow:
1. Normalise the email and look the user up in the email index
2. Unknown email: one dummy bcrypt verification, publish
   AuthenticationRejected (email hash only), uniform failure
3. Verify the password against the current hash (bcrypt, constant time)
4. Append UserAuthenticated or AuthenticationFailed to the Identity stream
   (retried on concurrency conflicts; the bcrypt result is reused when the
   hash did not change)
5. Every `alert_threshold` consecutive failures publish
   RepeatedAuthenticationFailure for audit
6. Return Success(AuthenticatedUser)

Every failure (unknown email, wrong password, deactivated user) returns the
same AuthenticationError so callers cannot enumerate accounts.
"""

import hashlib

from src.application.commands.identity_commands import AuthenticateUser
from src.application.dtos import AuthenticatedUser
from src.application.event_sourcing import AggregateRepository, retry_on_conflict
from src.core.enums import ErrorCode
from src.core.errors import AuthenticationError, DomainError
from src.core.result import Failure, Result, Success
from src.domain.aggregates import Identity, apply_identity_event, rehydrate
from src.domain.aggregates.identity import authenticate
from src.domain.events import (
    AuthenticationRejected,
    RepeatedAuthenticationFailure,
    UserAuthenticated,
)
from src.domain.protocols import (
    ClockProtocol,
    EventBusProtocol,
    IndexNamespace,
    IndexStoreProtocol,
    PasswordHashingProtocol,
)
from src.domain.value_objects.email import Email


def _invalid_credentials() -> Failure[AuthenticationError]:
    return Failure(
        error=AuthenticationError(
            code=ErrorCode.INVALID_CREDENTIALS,
            message="Invalid email or password",
        )
    )


class AuthenticateUserHandler:
    """Handler for user authentication command.

    Single responsibility: Verify user credentials and return user data.
    Does NOT create sessions or generate tokens.
    """

    def __init__(
        self,
        identities: AggregateRepository[Identity],
        index: IndexStoreProtocol,
        password_service: PasswordHashingProtocol,
        event_bus: EventBusProtocol,
        clock: ClockProtocol,
        alert_threshold: int = 5,
        retry_attempts: int = 3,
    ) -> None:
        """Initialize authentication handler with dependencies.

        Args:
            identities: Identity aggregate repository.
            index: Index store (email lookup).
            password_service: Password hashing/verification service.
            event_bus: Event bus for security signals.
            clock: Injected clock.
            alert_threshold: Consecutive failures that raise a signal.
            retry_attempts: Conflict retry attempts.
        """
        self._identities = identities
        self._index = index
        self._password_service = password_service
        self._event_bus = event_bus
        self._clock = clock
        self._alert_threshold = alert_threshold
        self._attempts = retry_attempts

    async def handle(self, cmd: AuthenticateUser) -> Result[AuthenticatedUser, DomainError]:
        """Handle authentication command.

        Returns:
            Success(AuthenticatedUser) with the user's id, email and roles.
            Failure(AuthenticationError) with INVALID_CREDENTIALS.
        """
        parsed = Email.parse(cmd.email)
        address = parsed.value.value if isinstance(parsed, Success) else cmd.email.strip().lower()
        user_id = (
            await self._index.get(IndexNamespace.EMAIL, address)
            if isinstance(parsed, Success)
            else None
        )

        if user_id is None:
            return await self._reject(address, cmd)

        verified: dict[str, bool] = {}

        def password_matches(state: Identity) -> bool:
            if state.password_hash not in verified:
                verified[state.password_hash] = self._password_service.verify_password(
                    cmd.password, state.password_hash
                )
            return verified[state.password_hash]

        async def operation() -> Result[tuple[Identity, bool] | None, DomainError]:
            loaded = await self._identities.load(user_id)
            if loaded is None:
                return Success(value=None)

            events = authenticate(
                loaded.state,
                password_matches=password_matches(loaded.state),
                ip_address=cmd.ip_address,
                user_agent=cmd.user_agent,
                occurred_at=self._clock.now(),
            )
            saved = await self._identities.save(user_id, loaded.version, events)
            if isinstance(saved, Failure):
                return saved
            state = rehydrate(apply_identity_event, events, loaded.state)
            return Success(value=(state, isinstance(events[0], UserAuthenticated)))

        result = await retry_on_conflict(operation, attempts=self._attempts)
        if isinstance(result, Failure):
            return result
        if result.value is None:
            return await self._reject(address, cmd)

        state, succeeded = result.value
        if not succeeded:
            await self._signal_repeated_failures(state, cmd)
            return _invalid_credentials()

        return Success(
            value=AuthenticatedUser(
                user_id=state.id,
                email=state.email,
                roles=sorted(state.roles),
                authenticated_at=state.last_authenticated_at or self._clock.now(),
            )
        )

    async def _reject(self, address: str, cmd: AuthenticateUser) -> Failure[AuthenticationError]:
        self._password_service.dummy_verify(cmd.password)
        await self._event_bus.publish(
            AuthenticationRejected(
                email_hash=hashlib.sha256(address.encode("utf-8")).hexdigest(),
                ip_address=cmd.ip_address,
                occurred_at=self._clock.now(),
            )
        )
        return _invalid_credentials()

    async def _signal_repeated_failures(self, state: Identity, cmd: AuthenticateUser) -> None:
        failures = state.consecutive_failures
        if failures == 0 or failures % self._alert_threshold != 0:
            return
        await self._event_bus.publish(
            RepeatedAuthenticationFailure(
                user_id=state.id,
                email=state.email,
                consecutive_failures=failures,
                ip_address=cmd.ip_address,
                occurred_at=self._clock.now(),
            )
        )
