"""Annotated types with centralized validation (DRY principle).

Define validation once, use everywhere. Request schemas use these so malformed
input is rejected before it reaches a command handler.

Usage:
    from src.domain.types import Email, CodeVerifier

    class RegisterUserRequest(BaseModel):
        email: Email
"""

from typing import Annotated

from pydantic import AfterValidator, Field

from src.domain.validators import (
    validate_email,
    validate_pkce_value,
    validate_redirect_uri,
)

Email = Annotated[
    str,
    Field(
        min_length=3,
        max_length=255,
        description="Email address",
        examples=["user@example.com"],
    ),
    AfterValidator(validate_email),
]
"""Email address, validated with email-validator and normalized to lowercase."""

PlainPassword = Annotated[
    str,
    Field(
        min_length=1,
        max_length=128,
        description="Password (complexity is enforced by the configured policy)",
        examples=["SecurePass123!"],
    ),
]

RedirectUri = Annotated[
    str,
    Field(
        max_length=2048,
        description="Absolute https redirect URI (http only for localhost)",
        examples=["https://app.example.com/callback"],
    ),
    AfterValidator(validate_redirect_uri),
]

CodeVerifier = Annotated[
    str,
    Field(
        description="PKCE code verifier (RFC 7636)",
        examples=["dBjftJeZ4CVP-mB92K27uhbUJU1p1r_wW1gFWFOEjXk"],
    ),
    AfterValidator(validate_pkce_value),
]
