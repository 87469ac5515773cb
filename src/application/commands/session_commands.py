"""Session management commands (CQRS write operations)."""

from dataclasses import dataclass
from uuid import UUID


@dataclass(frozen=True, kw_only=True)
class LoginUser:
    """Authenticate and open (or refresh) the device session.

    Attributes:
        email: Email address as entered.
        password: Plain password.
        device_fingerprint: SHA-256 device fingerprint.
        device_info: Human-readable device summary.
        ip_address: Client IP.
        user_agent: Raw User-Agent.
    """

    email: str
    password: str
    device_fingerprint: str
    device_info: str | None = None
    ip_address: str | None = None
    user_agent: str | None = None


@dataclass(frozen=True, kw_only=True)
class RevokeSession:
    """Revoke one session and every token attached to it.

    Attributes:
        session_id: Session to revoke.
        user_id: Owner (a user can only revoke their own sessions).
        reason: Revocation reason for audit (logout, manual, ...).
    """

    session_id: UUID
    user_id: UUID
    reason: str = "logout"


@dataclass(frozen=True, kw_only=True)
class RevokeAllSessions:
    """Log out from all devices.

    Attributes:
        user_id: User whose sessions are revoked.
        except_session_id: Session to keep (the caller's own), if any.
        reason: Revocation reason for audit.
    """

    user_id: UUID
    except_session_id: UUID | None = None
    reason: str = "logout_all_devices"
