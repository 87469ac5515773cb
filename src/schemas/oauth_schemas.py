"""OAuth2 / OpenID Connect protocol schemas.

Pydantic models for the protocol endpoints. Request bodies on these
endpoints are form-encoded (RFC 6749), so only responses are modelled here;
form fields are declared on the route functions.

Endpoints:
    POST /oauth2/token                       - Token response (RFC 6749 5.1)
    POST /oauth2/introspect                  - Introspection (RFC 7662)
    GET  /oauth2/authorize/{request_id}      - Login page data
    GET  /.well-known/openid_configuration   - Discovery document
    GET  /jwks                               - JSON Web Key Set
"""

from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

# =============================================================================
# Token Endpoint
# =============================================================================


class TokenResponse(BaseModel):
    """Successful token endpoint response.

    POST /oauth2/token
    Returns: 200 OK (Cache-Control: no-store)
    """

    access_token: str = Field(..., description="Signed JWT access token")
    token_type: str = Field(default="Bearer", description="Always 'Bearer'")
    expires_in: int = Field(..., description="Access token lifetime in seconds")
    scope: str = Field(..., description="Granted scopes (space-delimited)")
    refresh_token: str | None = Field(
        None,
        description="Refresh token (clients with the refresh_token grant)",
    )
    id_token: str | None = Field(
        None,
        description="OIDC ID token (when 'openid' was granted)",
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "access_token": "eyJhbGciOiJSUzI1NiIsImtpZCI6ImtleXdhcmQtMSJ9...",
                "token_type": "Bearer",
                "expires_in": 900,
                "scope": "openid email",
                "refresh_token": "eyJhbGciOiJSUzI1NiIsImtpZCI6ImtleXdhcmQtMSJ9...",
                "id_token": "eyJhbGciOiJSUzI1NiIsImtpZCI6ImtleXdhcmQtMSJ9...",
            }
        }
    )


class OAuthErrorResponse(BaseModel):
    """OAuth2 error body (RFC 6749 section 5.2)."""

    error: str = Field(..., description="OAuth2 error code")
    error_description: str | None = Field(None, description="Human-readable detail")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "error": "invalid_grant",
                "error_description": "Authorization code has already been redeemed",
            }
        }
    )


# =============================================================================
# Introspection
# =============================================================================


class IntrospectionResponse(BaseModel):
    """Token introspection response (RFC 7662).

    Inactive, unknown, expired, revoked and foreign tokens all produce
    `{"active": false}` with no other member.
    """

    active: bool = Field(..., description="Whether the token is currently valid")
    scope: str | None = Field(None, description="Scopes carried by the token")
    client_id: str | None = Field(None, description="Client the token was issued to")
    sub: str | None = Field(None, description="Subject (user id or client id)")
    exp: int | None = Field(None, description="Expiry (seconds since epoch)")
    iat: int | None = Field(None, description="Issued at (seconds since epoch)")
    jti: str | None = Field(None, description="Token identifier")
    token_type: str | None = Field(None, description="Bearer, refresh_token or id_token")


# =============================================================================
# Authorization Request (login page)
# =============================================================================


class AuthorizationRequestResponse(BaseModel):
    """Pending authorization request shown by the login page.

    GET /oauth2/authorize/{request_id}
    Returns: 200 OK
    """

    request_id: UUID = Field(..., description="Authorization request identifier")
    client_id: str = Field(..., description="Requesting client")
    scopes: list[str] = Field(..., description="Requested scopes")
    status: str = Field(..., description="Lifecycle status")
    awaiting_login: bool = Field(..., description="Whether the login form can be submitted")


# =============================================================================
# Discovery
# =============================================================================


class DiscoveryDocument(BaseModel):
    """OpenID Provider metadata (OIDC Discovery 1.0 section 3)."""

    issuer: str
    authorization_endpoint: str
    token_endpoint: str
    introspection_endpoint: str
    revocation_endpoint: str
    jwks_uri: str
    response_types_supported: list[str]
    grant_types_supported: list[str]
    subject_types_supported: list[str]
    id_token_signing_alg_values_supported: list[str]
    scopes_supported: list[str]
    token_endpoint_auth_methods_supported: list[str]
    code_challenge_methods_supported: list[str]
    claims_supported: list[str]
