"""Token aggregate events.

Every issued token (access, refresh, ID) is its own stream keyed by `jti`.
The refresh rotation chain is recorded on both ends: the child carries
`parent_jti` in TokenIssued, the parent lists its children in
RefreshTokenRotated.
"""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from src.domain.enums import TokenUse
from src.domain.events.base_event import DomainEvent


@dataclass(frozen=True, kw_only=True, slots=True)
class TokenIssued(DomainEvent):
    """A token was minted.

    Attributes:
        jti: Unique token identifier (stream id).
        token_use: Access, refresh or ID.
        subject: User id, or the client id for client_credentials tokens.
        client_id: Audience / issuing client.
        scopes: Granted scopes.
        expires_at: Expiry (UTC).
        parent_jti: Refresh token this one was rotated from.
        session_id: Session the token is bound to, when any.
        request_id: Authorization request the token descends from, when any.
    """

    jti: str
    token_use: TokenUse
    subject: str
    client_id: str
    scopes: frozenset[str]
    expires_at: datetime
    parent_jti: str | None = None
    session_id: UUID | None = None
    request_id: UUID | None = None


@dataclass(frozen=True, kw_only=True, slots=True)
class RefreshTokenRotated(DomainEvent):
    """The refresh token was exchanged; it is revoked from now on.

    Attributes:
        jti: Rotated (now revoked) refresh token.
        child_jtis: Tokens issued by the rotation.
    """

    jti: str
    child_jtis: tuple[str, ...]


@dataclass(frozen=True, kw_only=True, slots=True)
class TokenRevoked(DomainEvent):
    """The token was revoked (terminal)."""

    jti: str
    reason: str


@dataclass(frozen=True, kw_only=True, slots=True)
class RefreshTokenReuseDetected(DomainEvent):
    """An already-rotated or revoked refresh token was presented again.

    Flagged for audit; the whole family rooted at `family_root_jti` is
    revoked in response.
    """

    jti: str
    client_id: str
    subject: str
    family_root_jti: str


type TokenEvent = TokenIssued | RefreshTokenRotated | TokenRevoked | RefreshTokenReuseDetected

TOKEN_EVENTS: tuple[type[DomainEvent], ...] = (
    TokenIssued,
    RefreshTokenRotated,
    TokenRevoked,
    RefreshTokenReuseDetected,
)
