"""Get authorization request query handler.

Used by the login page round trip: the page receives `request_id`, shows
which client asks for which scopes, and posts the credentials back.
"""

from dataclasses import dataclass
from uuid import UUID

from src.application.commands.handlers.approve_authorization_handler import (
    authorization_request_not_found,
)
from src.application.event_sourcing import AggregateRepository
from src.application.queries.authorization_queries import GetAuthorizationRequest
from src.core.errors import DomainError
from src.core.result import Failure, Result, Success
from src.domain.aggregates import AuthorizationRequest
from src.domain.enums import AuthorizationStatus


@dataclass
class AuthorizationRequestView:
    """Pending authorization request as shown on the login page."""

    request_id: UUID
    client_id: str
    redirect_uri: str
    scopes: list[str]
    state: str | None
    status: AuthorizationStatus

    @property
    def awaiting_login(self) -> bool:
        return self.status == AuthorizationStatus.CREATED


class GetAuthorizationRequestHandler:
    """Handler for authorization request lookups."""

    def __init__(self, authorizations: AggregateRepository[AuthorizationRequest]) -> None:
        self._authorizations = authorizations

    async def handle(
        self, query: GetAuthorizationRequest
    ) -> Result[AuthorizationRequestView, DomainError]:
        loaded = await self._authorizations.load(str(query.request_id))
        if loaded is None:
            return Failure(error=authorization_request_not_found(query.request_id))

        request = loaded.state
        return Success(
            value=AuthorizationRequestView(
                request_id=request.id,
                client_id=request.client_id,
                redirect_uri=request.redirect_uri,
                scopes=sorted(request.scopes),
                state=request.state,
                status=request.status,
            )
        )
