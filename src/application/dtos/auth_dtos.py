"""Authentication and token DTOs (Data Transfer Objects).

Response/result dataclasses for command handlers. These carry data from
handlers back to the presentation layer.

DTOs:
    - AuthenticatedUser: Result from AuthenticateUser
    - SessionLogin: Result from SessionManager.login (session id + handle)
    - UserLogin: Result from LoginUser (user + session)
    - AuthorizationStarted: Result from StartAuthorization
    - IssuedCode: Result from ApproveAuthorization
    - IssuedTokens: Result from every token grant
    - RegisteredClient: Result from RegisterClient / RotateClientSecret
"""

from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID


@dataclass(frozen=True, kw_only=True)
class AuthenticatedUser:
    """Response from successful authentication.

    Attributes:
        user_id: User's unique identifier.
        email: User's email address (normalized).
        roles: User's roles for authorization.
        authenticated_at: When the credential check succeeded (ID token
            `auth_time`).
    """

    user_id: UUID
    email: str
    roles: list[str]
    authenticated_at: datetime


@dataclass(frozen=True, kw_only=True)
class SessionLogin:
    """Browser session opened or refreshed by a login.

    Attributes:
        session_id: Session identifier.
        handle: Opaque session handle for the cookie (returned once; only
            its digest is stored).
        created: False when an existing device session was reused.
    """

    session_id: UUID
    handle: str
    created: bool


@dataclass(frozen=True, kw_only=True)
class UserLogin:
    """Authenticated user plus the device session the login opened."""

    user: AuthenticatedUser
    session: SessionLogin


@dataclass(frozen=True, kw_only=True)
class AuthorizationStarted:
    """A validated authorization request awaiting login and consent."""

    request_id: UUID
    client_id: str
    redirect_uri: str
    state: str | None
    scopes: frozenset[str]


@dataclass(frozen=True, kw_only=True)
class IssuedCode:
    """Authorization code ready to be sent back to the client.

    Attributes:
        code: Plain code for the redirect (only its digest is stored).
        redirect_uri: Registered redirect URI of the request.
        state: Opaque client state to echo back.
    """

    code: str
    redirect_uri: str
    state: str | None


@dataclass(frozen=True, kw_only=True)
class IssuedTokens:
    """Token endpoint response body.

    Attributes:
        access_token: Signed access token.
        expires_in: Access token lifetime in seconds.
        scope: Granted scopes (space-delimited).
        refresh_token: Signed refresh token, when the client may refresh.
        id_token: Signed ID token, when `openid` was granted.
        token_type: Always "Bearer".
        jtis: Identifiers of every token issued.
    """

    access_token: str
    expires_in: int
    scope: str
    refresh_token: str | None = None
    id_token: str | None = None
    token_type: str = "Bearer"
    jtis: tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True, kw_only=True)
class RegisteredClient:
    """Client registration or secret rotation result.

    Attributes:
        client_id: Public client identifier.
        client_secret: Plain secret, returned exactly once (None for public
            and private_key_jwt clients).
    """

    client_id: str
    client_secret: str | None = None
