"""User request/response schemas.

Pydantic models for user API request validation and response serialization.
Kept separate from domain entities - these are HTTP-layer concerns.

RESTful Endpoints:
    POST   /api/v1/users                      - Create user (registration)
    GET    /api/v1/users/me                   - Current user's profile
    PATCH  /api/v1/users/me/password          - Change password
    POST   /api/v1/users/me/identities        - Link an external identity
    PUT    /api/v1/users/{id}/roles/{role}    - Assign role (admin)
    DELETE /api/v1/users/{id}/roles/{role}    - Revoke role (admin)
    DELETE /api/v1/users/{id}                 - Deactivate user (admin)
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from src.domain.types import Email, PlainPassword

# =============================================================================
# Registration
# =============================================================================


class UserCreateRequest(BaseModel):
    """Request schema for user creation (registration).

    POST /api/v1/users
    Returns: 201 Created
    """

    email: Email
    password: PlainPassword

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "email": "user@example.com",
                "password": "SecurePass123!",
            }
        }
    )


class UserCreateResponse(BaseModel):
    """Response schema for user creation (201 Created)."""

    id: UUID = Field(..., description="Created user's ID")
    email: str = Field(..., description="User's email address (normalized)")


# =============================================================================
# Profile
# =============================================================================


class UserResponse(BaseModel):
    """Current user's profile.

    GET /api/v1/users/me
    Returns: 200 OK
    """

    id: UUID = Field(..., description="User identifier")
    email: str = Field(..., description="Email address")
    roles: list[str] = Field(..., description="Granted roles")
    linked_identities: list[str] = Field(
        default_factory=list,
        description="Linked external accounts ('provider:external_id')",
    )
    active: bool = Field(..., description="False once deactivated")
    created_at: datetime = Field(..., description="Registration time")
    last_authenticated_at: datetime | None = Field(
        None,
        description="Last successful login",
    )


# =============================================================================
# Password
# =============================================================================


class PasswordChangeRequest(BaseModel):
    """Request schema for password change.

    PATCH /api/v1/users/me/password
    Returns: 204 No Content (other sessions are revoked)
    """

    old_password: PlainPassword
    new_password: PlainPassword

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "old_password": "SecurePass123!",
                "new_password": "EvenBetter456?",
            }
        }
    )


# =============================================================================
# Federation
# =============================================================================


class IdentityLinkRequest(BaseModel):
    """Request schema for linking an external identity.

    POST /api/v1/users/me/identities
    Returns: 201 Created
    """

    provider: str = Field(
        ...,
        min_length=1,
        max_length=64,
        description="Configured external identity provider",
        examples=["corporate-sso"],
    )
    assertion: str = Field(
        ...,
        min_length=1,
        description="Signed identity assertion issued by the provider",
    )


class IdentityLinkResponse(BaseModel):
    """Linked external account."""

    provider: str = Field(..., description="External identity provider")
    external_id: str = Field(..., description="Account identifier at the provider")


# =============================================================================
# Roles (admin)
# =============================================================================


class RolesResponse(BaseModel):
    """Roles held by a user after an assignment or revocation."""

    user_id: UUID = Field(..., description="User identifier")
    roles: list[str] = Field(..., description="Granted roles")
