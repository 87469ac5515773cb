"""Password complexity policy.

Thresholds are configuration inputs (see `Settings.password_*`); the container
builds the policy from settings and hands it to the identity handlers.
"""

import re
from dataclasses import dataclass

from src.core.enums import ErrorCode
from src.core.errors import ValidationError
from src.core.result import Failure, Result, Success

_SPECIAL_CHARACTERS = re.compile(r"[^A-Za-z0-9]")

# bcrypt only reads the first 72 bytes
MAX_PASSWORD_BYTES = 72


@dataclass(frozen=True, slots=True, kw_only=True)
class PasswordPolicy:
    """Configurable password complexity rules.

    Attributes:
        min_length: Minimum number of characters.
        require_uppercase: At least one A-Z.
        require_lowercase: At least one a-z.
        require_digit: At least one 0-9.
        require_special: At least one character outside [A-Za-z0-9].
    """

    min_length: int = 8
    require_uppercase: bool = True
    require_lowercase: bool = True
    require_digit: bool = True
    require_special: bool = True

    def check(self, password: str) -> Result[None, ValidationError]:
        """Validate a plaintext password against the policy.

        Returns:
            Success(None) when compliant, otherwise Failure listing every
            unmet rule in the message.
        """
        problems: list[str] = []
        if len(password) < self.min_length:
            problems.append(f"at least {self.min_length} characters")
        if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
            problems.append(f"no more than {MAX_PASSWORD_BYTES} bytes")
        if self.require_uppercase and not re.search(r"[A-Z]", password):
            problems.append("an uppercase letter")
        if self.require_lowercase and not re.search(r"[a-z]", password):
            problems.append("a lowercase letter")
        if self.require_digit and not re.search(r"\d", password):
            problems.append("a digit")
        if self.require_special and not _SPECIAL_CHARACTERS.search(password):
            problems.append("a special character")

        if problems:
            return Failure(
                error=ValidationError(
                    code=ErrorCode.PASSWORD_TOO_WEAK,
                    message="Password must contain " + ", ".join(problems),
                    field="password",
                )
            )
        return Success(value=None)
