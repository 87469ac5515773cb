"""Session management response schemas.

Pydantic models for session API response serialization.
Kept separate from domain entities - these are HTTP-layer concerns.

RESTful Endpoints:
    GET    /api/v1/sessions           - List user sessions
    DELETE /api/v1/sessions/{id}      - Revoke specific session
    DELETE /api/v1/sessions           - Revoke all sessions (except current)
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

# =============================================================================
# Session Response (shared)
# =============================================================================


class SessionResponse(BaseModel):
    """Response schema for a single session (list item)."""

    id: UUID = Field(..., description="Session identifier")
    device_info: str | None = Field(
        None,
        description="Parsed device info (e.g., 'Chrome on Mac OS X')",
    )
    ip_address: str | None = Field(
        None,
        description="IP address of the latest login",
    )
    created_at: datetime = Field(..., description="When session was created")
    last_seen_at: datetime = Field(..., description="Latest login on this device")
    active_token_count: int = Field(
        ...,
        description="Tokens issued within this session that are not yet revoked",
    )
    is_current: bool = Field(
        default=False,
        description="Whether this is the session of the calling access token",
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": "0192f8e1-7c4a-7d2e-9f00-5b8a1c2d3e4f",
                "device_info": "Chrome on Mac OS X",
                "ip_address": "192.168.1.1",
                "created_at": "2026-01-15T10:30:00Z",
                "last_seen_at": "2026-01-15T14:45:00Z",
                "active_token_count": 2,
                "is_current": True,
            }
        }
    )


# =============================================================================
# List Sessions
# =============================================================================


class SessionListResponse(BaseModel):
    """Response schema for session list.

    GET /api/v1/sessions
    Returns: 200 OK
    """

    sessions: list[SessionResponse] = Field(..., description="Live sessions")
    total_count: int = Field(..., description="Number of sessions returned")


# =============================================================================
# Revoke All Sessions
# =============================================================================


class SessionRevokeAllResponse(BaseModel):
    """Response schema for revoking all sessions.

    DELETE /api/v1/sessions
    Returns: 200 OK
    """

    revoked_count: int = Field(..., description="Number of sessions revoked")

    model_config = ConfigDict(json_schema_extra={"example": {"revoked_count": 3}})
