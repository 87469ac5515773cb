"""Email value object with validation.

Immutable value object that validates email format.
"""

from dataclasses import dataclass

from src.core.enums import ErrorCode
from src.core.errors import ValidationError
from src.core.result import Failure, Result, Success
from src.domain.validators import validate_email


@dataclass(frozen=True)
class Email:
    """Email value object with format validation.

    Uses the email-validator library for RFC-compliant validation and stores
    the lowercase normalized form, so uniqueness checks are case-insensitive.

    Attributes:
        value: The email address string (validated, lowercase)

    Raises:
        ValueError: If email format is invalid

    Example:
        >>> str(Email("User@Example.com"))
        'user@example.com'
    """

    value: str

    def __post_init__(self) -> None:
        """Validate and normalize the address.

        Raises:
            ValueError: If email format is invalid.
        """
        object.__setattr__(self, "value", validate_email(self.value))

    @classmethod
    def parse(cls, raw: str) -> Result["Email", ValidationError]:
        """Build an Email, returning a ValidationError instead of raising."""
        try:
            return Success(value=cls(raw))
        except ValueError as e:
            return Failure(
                error=ValidationError(
                    code=ErrorCode.INVALID_EMAIL,
                    message=str(e),
                    field="email",
                )
            )

    def __str__(self) -> str:
        return self.value

    def __repr__(self) -> str:
        return f"Email('{self.value}')"
