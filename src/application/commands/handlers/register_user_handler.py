"""Registration handler.

Flow:
1. Validate and normalise the email (email-validator)
2. Check the password policy
3. Claim the email in the index (uniqueness, before any event is appended)
4. Hash the password
5. Append UserRegistered + RoleAssigned(user) (+ RoleAssigned(admin) for
   bootstrap admin emails) to a new Identity stream
6. Return Success(user_id)

On failure after the claim (conflict or exception) the claim is released so
the address can be registered again.

Architecture:
- Application layer ONLY imports from domain layer (aggregates, protocols)
- NO infrastructure imports (stores are injected via protocols)
"""

from uuid import UUID

from uuid_extensions import uuid7

from src.application.commands.identity_commands import RegisterUser
from src.application.event_sourcing import AggregateRepository
from src.core.errors import DomainError
from src.core.result import Failure, Result, Success
from src.domain.aggregates import Identity, apply_identity_event, rehydrate
from src.domain.aggregates.identity import assign_role, register_user
from src.domain.enums import UserRole
from src.domain.protocols import (
    ClockProtocol,
    IndexNamespace,
    IndexStoreProtocol,
    PasswordHashingProtocol,
)
from src.domain.value_objects.email import Email
from src.domain.value_objects.password_policy import PasswordPolicy


class RegisterUserHandler:
    """Handler for user registration command.

    Follows hexagonal architecture:
    - Application layer (this handler)
    - Domain layer (Identity aggregate, protocols)
    - Infrastructure layer (event store, index store via dependency injection)
    """

    def __init__(
        self,
        identities: AggregateRepository[Identity],
        index: IndexStoreProtocol,
        password_service: PasswordHashingProtocol,
        password_policy: PasswordPolicy,
        clock: ClockProtocol,
        admin_emails: frozenset[str] = frozenset(),
    ) -> None:
        """Initialize registration handler with dependencies.

        Args:
            identities: Identity aggregate repository.
            index: Index store (email uniqueness).
            password_service: Password hashing service.
            password_policy: Configured password policy.
            clock: Injected clock.
            admin_emails: Normalised emails granted the admin role.
        """
        self._identities = identities
        self._index = index
        self._password_service = password_service
        self._password_policy = password_policy
        self._clock = clock
        self._admin_emails = admin_emails

    async def handle(self, cmd: RegisterUser) -> Result[UUID, DomainError]:
        """Handle user registration command.

        Returns:
            Success(user_id) on successful registration.
            Failure(ValidationError) for a malformed email or weak password.
            Failure(ConflictError) with EMAIL_ALREADY_EXISTS.
        """
        email = Email.parse(cmd.email)
        if isinstance(email, Failure):
            return email
        address = email.value.value

        policy = self._password_policy.check(cmd.password)
        if isinstance(policy, Failure):
            return policy

        user_id = uuid7()
        claimed = await self._index.claim(IndexNamespace.EMAIL, address, str(user_id))
        if isinstance(claimed, Failure):
            return claimed

        try:
            now = self._clock.now()
            events = register_user(
                user_id=user_id,
                email=address,
                password_hash=self._password_service.hash_password(cmd.password),
                occurred_at=now,
            )
            if address in self._admin_emails:
                state = rehydrate(apply_identity_event, events)
                granted = assign_role(state, role=UserRole.ADMIN.value, occurred_at=now)
                if isinstance(granted, Success):
                    events.extend(granted.value)

            saved = await self._identities.save(str(user_id), 0, events)
        except BaseException:
            await self._index.release(IndexNamespace.EMAIL, address)
            raise

        if isinstance(saved, Failure):
            await self._index.release(IndexNamespace.EMAIL, address)
            return saved
        return Success(value=user_id)
