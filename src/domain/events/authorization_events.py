"""Authorization request (authorization-code grant) events.

Closed `AuthorizationEvent` union. The lifecycle is
Created -> Consented -> CodeIssued -> {Redeemed | Expired | Revoked}.
"""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from src.domain.enums import CodeChallengeMethod
from src.domain.events.base_event import DomainEvent


@dataclass(frozen=True, kw_only=True, slots=True)
class AuthorizationRequested(DomainEvent):
    """A validated authorization request was recorded (Created)."""

    request_id: UUID
    client_id: str
    redirect_uri: str
    scopes: frozenset[str]
    state: str | None = None
    nonce: str | None = None
    code_challenge: str | None = None
    code_challenge_method: CodeChallengeMethod | None = None


@dataclass(frozen=True, kw_only=True, slots=True)
class AuthorizationConsented(DomainEvent):
    """An authenticated user approved the request (Consented).

    Attributes:
        request_id: Authorization request.
        user_id: Authenticated user.
        session_id: Browser session the user authenticated with.
        granted_scopes: Scopes the user approved.
        auth_time: When the user authenticated (ID token `auth_time`).
    """

    request_id: UUID
    user_id: UUID
    session_id: UUID | None
    granted_scopes: frozenset[str]
    auth_time: datetime


@dataclass(frozen=True, kw_only=True, slots=True)
class AuthorizationCodeIssued(DomainEvent):
    """A single-use code was bound to the request (CodeIssued).

    Only the SHA-256 of the code is recorded.
    """

    request_id: UUID
    code_hash: str
    expires_at: datetime


@dataclass(frozen=True, kw_only=True, slots=True)
class AuthorizationCodeRedeemed(DomainEvent):
    """The code was exchanged at the token endpoint (Redeemed).

    Attributes:
        request_id: Authorization request.
        issued_jtis: Identifiers reserved for the tokens minted from this
            redemption; they are revoked if the code is ever replayed.
    """

    request_id: UUID
    issued_jtis: tuple[str, ...]


@dataclass(frozen=True, kw_only=True, slots=True)
class AuthorizationExpired(DomainEvent):
    """The code passed its expiry unredeemed (terminal)."""

    request_id: UUID


@dataclass(frozen=True, kw_only=True, slots=True)
class AuthorizationRevoked(DomainEvent):
    """The request was revoked (terminal).

    Attributes:
        request_id: Authorization request.
        reason: Why ("redirect_uri_mismatch", "pkce_verification_failed",
            "code_replayed", ...).
    """

    request_id: UUID
    reason: str


type AuthorizationEvent = (
    AuthorizationRequested
    | AuthorizationConsented
    | AuthorizationCodeIssued
    | AuthorizationCodeRedeemed
    | AuthorizationExpired
    | AuthorizationRevoked
)

AUTHORIZATION_EVENTS: tuple[type[DomainEvent], ...] = (
    AuthorizationRequested,
    AuthorizationConsented,
    AuthorizationCodeIssued,
    AuthorizationCodeRedeemed,
    AuthorizationExpired,
    AuthorizationRevoked,
)
