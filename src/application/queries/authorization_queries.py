"""Authorization request queries (CQRS read operations)."""

from dataclasses import dataclass
from uuid import UUID


@dataclass(frozen=True, kw_only=True)
class GetAuthorizationRequest:
    """Get a pending authorization request (login page round trip).

    Attributes:
        request_id: Authorization request identifier.
    """

    request_id: UUID
