"""OAuth2 scope strings (space-delimited, order-insensitive)."""

from src.core.enums import ErrorCode
from src.core.errors import ValidationError
from src.core.result import Failure, Result, Success
from src.domain.validators import validate_scope_token

OPENID_SCOPE = "openid"
EMAIL_SCOPE = "email"


def parse_scope(raw: str | None) -> Result[frozenset[str], ValidationError]:
    """Split a `scope` parameter into a set of scope tokens.

    An absent or blank parameter yields the empty set; callers decide the
    default.
    """
    if raw is None or not raw.strip():
        return Success(value=frozenset())
    tokens = raw.split()
    for token in tokens:
        try:
            validate_scope_token(token)
        except ValueError as e:
            return Failure(
                error=ValidationError(
                    code=ErrorCode.INVALID_SCOPE,
                    message=str(e),
                    field="scope",
                )
            )
    return Success(value=frozenset(tokens))


def format_scope(scopes: frozenset[str] | set[str]) -> str:
    """Join scopes into the canonical (sorted) space-delimited form."""
    return " ".join(sorted(scopes))
