"""Client commands (CQRS write operations)."""

from dataclasses import dataclass

from src.domain.enums import GrantType


@dataclass(frozen=True, kw_only=True)
class RegisterClient:
    """Register an OAuth2/OIDC client.

    Attributes:
        name: Display name.
        redirect_uris: Exact-match redirect URI whitelist.
        grant_types: Grants the client may use.
        confidential: Whether the client can keep a secret.
        pkce_required: Whether authorization requests must carry a challenge
            (always true for public clients).
        allowed_scopes: Upper bound for requested scopes.
        public_key_pem: RSA public key for private_key_jwt authentication;
            when given no secret is generated.
        access_token_ttl_seconds: Per-client access token lifetime.
        refresh_token_ttl_seconds: Per-client refresh token lifetime.
    """

    name: str
    redirect_uris: frozenset[str]
    grant_types: frozenset[GrantType]
    confidential: bool
    pkce_required: bool
    allowed_scopes: frozenset[str]
    public_key_pem: str | None = None
    access_token_ttl_seconds: int | None = None
    refresh_token_ttl_seconds: int | None = None


@dataclass(frozen=True, kw_only=True)
class RotateClientSecret:
    """Issue a new client secret; the old one stops working (after the grace)."""

    client_id: str


@dataclass(frozen=True, kw_only=True)
class DeactivateClient:
    """Deactivate a client; its tokens stop verifying."""

    client_id: str
    reason: str = "deactivated"


@dataclass(frozen=True, kw_only=True)
class AuthenticateClient:
    """Client credentials presented at the token, introspection or revocation
    endpoint.

    Attributes:
        client_id: From HTTP Basic, the form body, or the assertion.
        client_secret: client_secret_basic / client_secret_post.
        client_assertion_type: Must be the jwt-bearer URN when an assertion
            is given.
        client_assertion: private_key_jwt assertion.
        via_basic: True when the credentials came from the Authorization
            header.
    """

    client_id: str | None = None
    client_secret: str | None = None
    client_assertion_type: str | None = None
    client_assertion: str | None = None
    via_basic: bool = False
