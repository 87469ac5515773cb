"""Token endpoint commands (CQRS write operations).

Each grant is its own command. The client is already authenticated by the
presentation layer (ClientAuthenticator) when a command is built.
"""

from dataclasses import dataclass

from src.domain.aggregates import Client


@dataclass(frozen=True, kw_only=True)
class ExchangeAuthorizationCode:
    """`grant_type=authorization_code`.

    Attributes:
        client: Authenticated client.
        code: Authorization code from the redirect.
        redirect_uri: Must equal the one used at /authorize.
        code_verifier: PKCE verifier.
    """

    client: Client
    code: str
    redirect_uri: str | None
    code_verifier: str | None = None


@dataclass(frozen=True, kw_only=True)
class RefreshTokens:
    """`grant_type=refresh_token` (rotation).

    Attributes:
        client: Authenticated client.
        refresh_token: Refresh token being exchanged.
        scope: Optional narrower scope.
    """

    client: Client
    refresh_token: str
    scope: str | None = None


@dataclass(frozen=True, kw_only=True)
class IssueClientCredentials:
    """`grant_type=client_credentials` (confidential clients only)."""

    client: Client
    scope: str | None = None
