"""Security signals published to the event bus.

These are not aggregate events: they are never appended to a stream, only
published so the audit and email handlers can react. They are always recorded,
whether or not the request that raised them succeeds.
"""

from dataclasses import dataclass
from uuid import UUID

from src.domain.events.base_event import DomainEvent


@dataclass(frozen=True, kw_only=True, slots=True)
class RepeatedAuthenticationFailure(DomainEvent):
    """Consecutive failed logins for one user reached the alert threshold."""

    user_id: UUID
    email: str
    consecutive_failures: int
    ip_address: str | None = None


@dataclass(frozen=True, kw_only=True, slots=True)
class AuthenticationRejected(DomainEvent):
    """A login named an email that has no active identity.

    Only a hash of the address is carried so the audit trail cannot be used
    to enumerate accounts.
    """

    email_hash: str
    ip_address: str | None = None


@dataclass(frozen=True, kw_only=True, slots=True)
class AuthorizationCodeReplayDetected(DomainEvent):
    """A redeemed authorization code was presented again.

    Attributes:
        request_id: Authorization request the code belongs to.
        client_id: Client that presented it.
        revoked_jtis: Tokens revoked in response.
    """

    request_id: UUID
    client_id: str
    revoked_jtis: tuple[str, ...]


SECURITY_EVENTS: tuple[type[DomainEvent], ...] = (
    RepeatedAuthenticationFailure,
    AuthenticationRejected,
    AuthorizationCodeReplayDetected,
)
