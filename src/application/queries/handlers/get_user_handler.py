"""Get user query handler.

Also provides `lookup_email`, the email resolver the email notification
handler is wired with.
"""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from src.application.event_sourcing import AggregateRepository
from src.application.queries.identity_queries import GetUser
from src.core.enums import ErrorCode
from src.core.errors import DomainError, NotFoundError
from src.core.result import Failure, Result, Success
from src.domain.aggregates import Identity


@dataclass
class UserProfile:
    """Public view of an identity (never carries the password hash)."""

    id: UUID
    email: str
    roles: list[str]
    linked_identities: list[str]
    active: bool
    created_at: datetime
    last_authenticated_at: datetime | None


class GetUserHandler:
    """Handler for user profile lookups."""

    def __init__(self, identities: AggregateRepository[Identity]) -> None:
        self._identities = identities

    async def handle(self, query: GetUser) -> Result[UserProfile, DomainError]:
        loaded = await self._identities.load(str(query.user_id))
        if loaded is None:
            return Failure(
                error=NotFoundError(
                    code=ErrorCode.USER_NOT_FOUND,
                    message="User not found",
                    resource_type="User",
                    resource_id=str(query.user_id),
                )
            )

        identity = loaded.state
        return Success(
            value=UserProfile(
                id=identity.id,
                email=identity.email,
                roles=sorted(identity.roles),
                linked_identities=sorted(link.index_key for link in identity.linked_identities),
                active=identity.active,
                created_at=identity.created_at,
                last_authenticated_at=identity.last_authenticated_at,
            )
        )

    async def lookup_email(self, user_id: UUID) -> str | None:
        """Current email of a user, or None when unknown."""
        loaded = await self._identities.load(str(user_id))
        return loaded.state.email if loaded else None
