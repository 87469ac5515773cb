"""OAuth client registration schemas (admin API).

RESTful Endpoints:
    POST   /api/v1/clients               - Register client
    POST   /api/v1/clients/{id}/secret   - Rotate client secret
    DELETE /api/v1/clients/{id}          - Deactivate client
"""

from pydantic import BaseModel, ConfigDict, Field

from src.domain.enums import GrantType
from src.domain.types import RedirectUri


class ClientCreateRequest(BaseModel):
    """Request schema for client registration.

    POST /api/v1/clients
    Returns: 201 Created
    """

    name: str = Field(..., min_length=1, max_length=255, description="Display name")
    redirect_uris: list[RedirectUri] = Field(
        default_factory=list,
        description="Exact-match redirect URIs (required for authorization_code)",
    )
    grant_types: list[GrantType] = Field(
        ...,
        min_length=1,
        description="Grants the client may use",
    )
    confidential: bool = Field(
        default=True,
        description="Confidential clients authenticate at the token endpoint",
    )
    pkce_required: bool = Field(
        default=True,
        description="Require PKCE (always required for public clients)",
    )
    allowed_scopes: list[str] = Field(
        default_factory=lambda: ["openid"],
        description="Scopes the client may request",
    )
    public_key_pem: str | None = Field(
        None,
        description="RSA public key for private_key_jwt authentication "
        "(no secret is issued when set)",
    )
    access_token_ttl_seconds: int | None = Field(None, gt=0)
    refresh_token_ttl_seconds: int | None = Field(None, gt=0)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "name": "Example SPA",
                "redirect_uris": ["https://app.example.com/callback"],
                "grant_types": ["authorization_code", "refresh_token"],
                "confidential": False,
                "pkce_required": True,
                "allowed_scopes": ["openid", "email"],
            }
        }
    )


class ClientCredentialsResponse(BaseModel):
    """Client id plus the plain secret, shown exactly once.

    Returned by registration (201) and secret rotation (200).
    """

    client_id: str = Field(..., description="Public client identifier")
    client_secret: str | None = Field(
        None,
        description="Client secret (None for public and private_key_jwt clients)",
    )
