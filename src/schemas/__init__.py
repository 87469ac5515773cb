"""Request/response schemas for API endpoints.

All Pydantic models for HTTP request validation and response serialization.
Schemas are kept separate from domain entities (HTTP-layer concerns only).

Usage:
    from src.schemas import UserCreateRequest, TokenResponse
"""

from src.schemas.client_schemas import ClientCreateRequest, ClientCredentialsResponse
from src.schemas.oauth_schemas import (
    AuthorizationRequestResponse,
    DiscoveryDocument,
    IntrospectionResponse,
    OAuthErrorResponse,
    TokenResponse,
)
from src.schemas.session_schemas import (
    SessionListResponse,
    SessionResponse,
    SessionRevokeAllResponse,
)
from src.schemas.user_schemas import (
    IdentityLinkRequest,
    IdentityLinkResponse,
    PasswordChangeRequest,
    RolesResponse,
    UserCreateRequest,
    UserCreateResponse,
    UserResponse,
)

__all__ = [
    # OAuth2 / OIDC
    "AuthorizationRequestResponse",
    "DiscoveryDocument",
    "IntrospectionResponse",
    "OAuthErrorResponse",
    "TokenResponse",
    # Users
    "IdentityLinkRequest",
    "IdentityLinkResponse",
    "PasswordChangeRequest",
    "RolesResponse",
    "UserCreateRequest",
    "UserCreateResponse",
    "UserResponse",
    # Sessions
    "SessionListResponse",
    "SessionResponse",
    "SessionRevokeAllResponse",
    # Clients
    "ClientCreateRequest",
    "ClientCredentialsResponse",
]
