"""Validators package exports."""

from src.domain.validators.functions import (
    validate_email,
    validate_pkce_value,
    validate_redirect_uri,
    validate_scope_token,
)

__all__ = [
    "validate_email",
    "validate_pkce_value",
    "validate_redirect_uri",
    "validate_scope_token",
]
