"""Identity queries (CQRS read operations)."""

from dataclasses import dataclass
from uuid import UUID


@dataclass(frozen=True, kw_only=True)
class GetUser:
    """Get a user's profile by ID.

    Attributes:
        user_id: User identifier.
    """

    user_id: UUID
