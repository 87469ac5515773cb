"""Session aggregate events.

One session per (user, device fingerprint). Repeat logins from the same device
record activity on the existing session instead of opening a new one.
"""

from dataclasses import dataclass
from uuid import UUID

from src.domain.events.base_event import DomainEvent


@dataclass(frozen=True, kw_only=True, slots=True)
class SessionCreated(DomainEvent):
    """A new device session was opened.

    Attributes:
        session_id: The new session's ID.
        user_id: User who logged in.
        device_fingerprint: SHA-256 device fingerprint.
        device_info: Parsed device info ("Chrome on Mac OS X").
        ip_address: Client IP address.
        handle_hash: SHA-256 of the opaque browser session handle.
    """

    session_id: UUID
    user_id: UUID
    device_fingerprint: str
    device_info: str | None = None
    ip_address: str | None = None
    handle_hash: str | None = None


@dataclass(frozen=True, kw_only=True, slots=True)
class SessionActivityRecorded(DomainEvent):
    """The user logged in again from the same device.

    A new `handle_hash` replaces the previous handle (rotation).
    """

    session_id: UUID
    ip_address: str | None = None
    handle_hash: str | None = None


@dataclass(frozen=True, kw_only=True, slots=True)
class SessionTokenAttached(DomainEvent):
    """A token was issued within this session."""

    session_id: UUID
    jti: str


@dataclass(frozen=True, kw_only=True, slots=True)
class SessionRevoked(DomainEvent):
    """The session was revoked (terminal).

    Attributes:
        session_id: The revoked session's ID.
        user_id: User who owned the session.
        reason: Why ("logout", "logout_all_devices", "password_changed", ...).
    """

    session_id: UUID
    user_id: UUID
    reason: str


type SessionEvent = SessionCreated | SessionActivityRecorded | SessionTokenAttached | SessionRevoked

SESSION_EVENTS: tuple[type[DomainEvent], ...] = (
    SessionCreated,
    SessionActivityRecorded,
    SessionTokenAttached,
    SessionRevoked,
)
