"""Centralized validation functions (DRY principle).

All protocol-level validation logic defined once, reused by aggregates and by
the Annotated types in `src.domain.types`. Validators are pure functions that
raise ValueError on validation failure.
"""

import re
from urllib.parse import urlsplit

from email_validator import EmailNotValidError
from email_validator import validate_email as _validate_email_address

# RFC 7636 section 4.1: unreserved characters, 43..128 long
_PKCE_PATTERN = re.compile(r"^[A-Za-z0-9\-._~]{43,128}$")

# RFC 6749 section 3.3: scope-token = 1*( %x21 / %x23-5B / %x5D-7E )
_SCOPE_TOKEN_PATTERN = re.compile(r"^[\x21\x23-\x5B\x5D-\x7E]+$")

_LOOPBACK_HOSTS = frozenset({"localhost", "127.0.0.1", "::1"})


def validate_email(v: str) -> str:
    """Validate and normalize an email address.

    Uses the email-validator library (no deliverability check).

    Args:
        v: Email address to validate.

    Returns:
        Normalized email (lowercase).

    Raises:
        ValueError: If email format is invalid.

    Example:
        >>> validate_email("User@Example.COM")
        'user@example.com'
    """
    try:
        validated = _validate_email_address(v, check_deliverability=False)
    except EmailNotValidError as e:
        raise ValueError(f"Invalid email: {e}") from e
    return validated.normalized.lower()


def validate_redirect_uri(v: str) -> str:
    """Validate a client redirect URI for registration.

    Rules (RFC 6749 section 3.1.2, OAuth 2.0 Security BCP):
        - Absolute URI with scheme and host
        - No fragment component
        - `https`, or plain `http` only for loopback hosts

    Args:
        v: Redirect URI.

    Returns:
        The URI unchanged (exact matching is done on the registered string).

    Raises:
        ValueError: If the URI is not acceptable.
    """
    parts = urlsplit(v)
    if not parts.scheme or not parts.hostname:
        raise ValueError(f"Redirect URI must be absolute: {v}")
    if parts.fragment or "#" in v:
        raise ValueError(f"Redirect URI must not contain a fragment: {v}")
    if parts.scheme == "https":
        return v
    if parts.scheme == "http" and parts.hostname in _LOOPBACK_HOSTS:
        return v
    raise ValueError(f"Redirect URI must use https (http only for localhost): {v}")


def validate_pkce_value(v: str) -> str:
    """Validate a PKCE code verifier or S256 code challenge.

    Args:
        v: Verifier or challenge.

    Returns:
        Value unchanged.

    Raises:
        ValueError: If not 43-128 characters of the unreserved set.
    """
    if not _PKCE_PATTERN.match(v):
        raise ValueError("Must be 43-128 characters of [A-Za-z0-9-._~]")
    return v


def validate_scope_token(v: str) -> str:
    """Validate a single scope token.

    Raises:
        ValueError: If it contains spaces, quotes or backslashes.
    """
    if not _SCOPE_TOKEN_PATTERN.match(v):
        raise ValueError(f"Invalid scope token: {v!r}")
    return v
