"""Domain value objects with validation.

Immutable value objects that enforce business constraints.
"""

from src.domain.value_objects.email import Email
from src.domain.value_objects.password_policy import PasswordPolicy
from src.domain.value_objects.pkce import compute_s256_challenge, verify_code_verifier
from src.domain.value_objects.scope import (
    EMAIL_SCOPE,
    OPENID_SCOPE,
    format_scope,
    parse_scope,
)

__all__ = [
    "EMAIL_SCOPE",
    "Email",
    "OPENID_SCOPE",
    "PasswordPolicy",
    "compute_s256_challenge",
    "format_scope",
    "parse_scope",
    "verify_code_verifier",
]
