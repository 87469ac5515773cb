"""Session aggregate (one per user and device fingerprint).

Business Rules:
    - Created on the first successful login from a device; later logins from
      the same fingerprint record activity (and rotate the browser handle)
      instead of creating a duplicate
    - Tokens issued within the session are attached to it
    - Revocation is terminal and implies every attached token is revoked;
      verification checks the session itself, so this holds from the moment
      SessionRevoked commits
"""

from dataclasses import dataclass, replace
from datetime import datetime
from uuid import UUID

from src.core.enums import ErrorCode
from src.core.errors import DomainError, RevokedError
from src.core.result import Failure, Result, Success
from src.domain.aggregates.base import require_new, require_state, unknown_event
from src.domain.enums import AggregateType
from src.domain.events.base_event import DomainEvent
from src.domain.events.session_events import (
    SessionActivityRecorded,
    SessionCreated,
    SessionEvent,
    SessionRevoked,
    SessionTokenAttached,
)

AGGREGATE_TYPE = AggregateType.SESSION


@dataclass(frozen=True, slots=True, kw_only=True)
class Session:
    """Projected session state."""

    id: UUID
    user_id: UUID
    device_fingerprint: str
    created_at: datetime
    last_seen_at: datetime
    device_info: str | None = None
    ip_address: str | None = None
    handle_hash: str | None = None
    active_token_jtis: frozenset[str] = frozenset()
    revoked: bool = False
    revoked_at: datetime | None = None
    revoked_reason: str | None = None


def apply_session_event(state: Session | None, event: DomainEvent) -> Session:
    """Apply one event to the projected state (pure)."""
    match event:
        case SessionCreated():
            require_new(state, event, AGGREGATE_TYPE)
            return Session(
                id=event.session_id,
                user_id=event.user_id,
                device_fingerprint=event.device_fingerprint,
                created_at=event.occurred_at,
                last_seen_at=event.occurred_at,
                device_info=event.device_info,
                ip_address=event.ip_address,
                handle_hash=event.handle_hash,
            )
        case SessionActivityRecorded():
            current = require_state(state, event, AGGREGATE_TYPE)
            return replace(
                current,
                last_seen_at=event.occurred_at,
                ip_address=event.ip_address or current.ip_address,
                handle_hash=event.handle_hash or current.handle_hash,
            )
        case SessionTokenAttached():
            current = require_state(state, event, AGGREGATE_TYPE)
            return replace(current, active_token_jtis=current.active_token_jtis | {event.jti})
        case SessionRevoked():
            current = require_state(state, event, AGGREGATE_TYPE)
            return replace(
                current,
                revoked=True,
                revoked_at=event.occurred_at,
                revoked_reason=event.reason,
            )
        case _:
            raise unknown_event(event, AGGREGATE_TYPE)


def _revoked_error() -> RevokedError:
    return RevokedError(code=ErrorCode.SESSION_REVOKED, message="Session has been revoked")


# =========================================================================
# Decisions
# =========================================================================


def open_session(
    *,
    session_id: UUID,
    user_id: UUID,
    device_fingerprint: str,
    occurred_at: datetime,
    device_info: str | None = None,
    ip_address: str | None = None,
    handle_hash: str | None = None,
) -> list[SessionEvent]:
    """Open a session for a device seen for the first time."""
    return [
        SessionCreated(
            session_id=session_id,
            user_id=user_id,
            device_fingerprint=device_fingerprint,
            device_info=device_info,
            ip_address=ip_address,
            handle_hash=handle_hash,
            occurred_at=occurred_at,
        )
    ]


def record_activity(
    state: Session,
    *,
    occurred_at: datetime,
    ip_address: str | None = None,
    handle_hash: str | None = None,
) -> Result[list[SessionEvent], DomainError]:
    """Touch `last_seen_at` (and rotate the handle) on a repeat login."""
    if state.revoked:
        return Failure(error=_revoked_error())
    return Success(
        value=[
            SessionActivityRecorded(
                session_id=state.id,
                ip_address=ip_address,
                handle_hash=handle_hash,
                occurred_at=occurred_at,
            )
        ]
    )


def attach_token(
    state: Session, *, jti: str, occurred_at: datetime
) -> Result[list[SessionEvent], DomainError]:
    """Record a token issued within the session."""
    if state.revoked:
        return Failure(error=_revoked_error())
    if jti in state.active_token_jtis:
        return Success(value=[])
    return Success(value=[SessionTokenAttached(session_id=state.id, jti=jti, occurred_at=occurred_at)])


def revoke_session(state: Session, *, reason: str, occurred_at: datetime) -> list[SessionEvent]:
    """Revoke (no event when already revoked)."""
    if state.revoked:
        return []
    return [
        SessionRevoked(
            session_id=state.id,
            user_id=state.user_id,
            reason=reason,
            occurred_at=occurred_at,
        )
    ]
