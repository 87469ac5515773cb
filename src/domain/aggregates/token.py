"""Token aggregate (one stream per issued token, keyed by jti).

The revocation registry is this aggregate: a token is revoked when its stream
contains TokenRevoked or RefreshTokenRotated. Verification always reads the
stream, so a revocation is visible to every verifier as soon as it commits.

Refresh rotation chain:
    R0 --rotated--> R1 --rotated--> R2
    - child -> parent via `parent_jti` (TokenIssued)
    - parent -> children via `children` (RefreshTokenRotated)
"""

from dataclasses import dataclass, replace
from datetime import datetime
from uuid import UUID

from src.core.enums import ErrorCode
from src.core.errors import DomainError, ExpiredError, RevokedError, ValidationError
from src.core.result import Failure, Result, Success
from src.domain.aggregates.base import require_new, require_state, unknown_event
from src.domain.enums import AggregateType, TokenUse
from src.domain.events.base_event import DomainEvent
from src.domain.events.token_events import (
    RefreshTokenReuseDetected,
    RefreshTokenRotated,
    TokenEvent,
    TokenIssued,
    TokenRevoked,
)

AGGREGATE_TYPE = AggregateType.TOKEN

ROTATED_REASON = "rotated"


@dataclass(frozen=True, slots=True, kw_only=True)
class Token:
    """Projected token state."""

    jti: str
    token_use: TokenUse
    subject: str
    client_id: str
    scopes: frozenset[str]
    issued_at: datetime
    expires_at: datetime
    revoked: bool = False
    revoked_reason: str | None = None
    parent_jti: str | None = None
    session_id: UUID | None = None
    request_id: UUID | None = None
    children: tuple[str, ...] = ()
    reuse_detected: bool = False

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at

    def is_active(self, now: datetime) -> bool:
        return not self.revoked and not self.is_expired(now)


def apply_token_event(state: Token | None, event: DomainEvent) -> Token:
    """Apply one event to the projected state (pure)."""
    match event:
        case TokenIssued():
            require_new(state, event, AGGREGATE_TYPE)
            return Token(
                jti=event.jti,
                token_use=event.token_use,
                subject=event.subject,
                client_id=event.client_id,
                scopes=event.scopes,
                issued_at=event.occurred_at,
                expires_at=event.expires_at,
                parent_jti=event.parent_jti,
                session_id=event.session_id,
                request_id=event.request_id,
            )
        case RefreshTokenRotated():
            current = require_state(state, event, AGGREGATE_TYPE)
            return replace(
                current,
                revoked=True,
                revoked_reason=ROTATED_REASON,
                children=current.children + event.child_jtis,
            )
        case TokenRevoked():
            current = require_state(state, event, AGGREGATE_TYPE)
            return replace(
                current,
                revoked=True,
                revoked_reason=current.revoked_reason or event.reason,
            )
        case RefreshTokenReuseDetected():
            current = require_state(state, event, AGGREGATE_TYPE)
            return replace(current, reuse_detected=True)
        case _:
            raise unknown_event(event, AGGREGATE_TYPE)


# =========================================================================
# Decisions
# =========================================================================


def issue_token(
    *,
    jti: str,
    token_use: TokenUse,
    subject: str,
    client_id: str,
    scopes: frozenset[str],
    expires_at: datetime,
    occurred_at: datetime,
    parent_jti: str | None = None,
    session_id: UUID | None = None,
    request_id: UUID | None = None,
) -> list[TokenEvent]:
    """Open the stream of a freshly minted token."""
    return [
        TokenIssued(
            jti=jti,
            token_use=token_use,
            subject=subject,
            client_id=client_id,
            scopes=scopes,
            expires_at=expires_at,
            parent_jti=parent_jti,
            session_id=session_id,
            request_id=request_id,
            occurred_at=occurred_at,
        )
    ]


def rotate_refresh_token(
    state: Token,
    *,
    child_jtis: tuple[str, ...],
    now: datetime,
) -> Result[list[TokenEvent], DomainError]:
    """Exchange a live refresh token; it is revoked by the same event.

    A revoked (or already rotated) token is NOT handled here: the caller
    must treat it as reuse (see `detect_reuse`).
    """
    if state.token_use is not TokenUse.REFRESH:
        return Failure(
            error=ValidationError(
                code=ErrorCode.TOKEN_INVALID,
                message="Token is not a refresh token",
                field="refresh_token",
            )
        )
    if state.revoked:
        return Failure(
            error=RevokedError(code=ErrorCode.REFRESH_TOKEN_REUSED, message="Refresh token was revoked")
        )
    if state.is_expired(now):
        return Failure(
            error=ExpiredError(code=ErrorCode.TOKEN_EXPIRED, message="Refresh token has expired")
        )
    return Success(
        value=[RefreshTokenRotated(jti=state.jti, child_jtis=child_jtis, occurred_at=now)]
    )


def detect_reuse(state: Token, *, family_root_jti: str, occurred_at: datetime) -> list[TokenEvent]:
    """Flag presentation of a revoked refresh token for audit."""
    return [
        RefreshTokenReuseDetected(
            jti=state.jti,
            client_id=state.client_id,
            subject=state.subject,
            family_root_jti=family_root_jti,
            occurred_at=occurred_at,
        )
    ]


def revoke_token(state: Token, *, reason: str, occurred_at: datetime) -> list[TokenEvent]:
    """Revoke (no event when already revoked)."""
    if state.revoked:
        return []
    return [TokenRevoked(jti=state.jti, reason=reason, occurred_at=occurred_at)]
