"""Start authorization handler (`GET /oauth2/authorize`).

Flow:
1. Load the client (unknown -> NotFoundError, never redirected)
2. Validate the request against the client: active, redirect URI registered
   (exact match), response_type, grant, scope subset, PKCE
3. Append AuthorizationRequested to a new AuthorizationRequest stream
4. Track the request for the retention sweeper
5. Return Success(AuthorizationStarted)

Errors about the client or the redirect URI must be shown to the user agent
instead of redirected (RFC 6749 section 4.1.2.1); `is_redirectable` tells
the presentation layer which is which.
"""

from uuid_extensions import uuid7

from src.application.commands.authorization_commands import StartAuthorization
from src.application.dtos import AuthorizationStarted
from src.application.event_sourcing import AggregateRepository
from src.core.enums import ErrorCode
from src.core.errors import DomainError, NotFoundError
from src.core.result import Failure, Result, Success
from src.domain.aggregates import AuthorizationRequest, Client
from src.domain.aggregates.authorization_request import request_authorization
from src.domain.protocols import (
    ClockProtocol,
    ExpiryKey,
    IndexNamespace,
    IndexStoreProtocol,
)

_NOT_REDIRECTABLE = frozenset({ErrorCode.CLIENT_INACTIVE, ErrorCode.INVALID_REDIRECT_URI})


def is_redirectable(error: DomainError) -> bool:
    """Whether an authorization error may be sent to the client's redirect URI."""
    return not isinstance(error, NotFoundError) and error.code not in _NOT_REDIRECTABLE


class StartAuthorizationHandler:
    """Handler for authorization requests."""

    def __init__(
        self,
        clients: AggregateRepository[Client],
        authorizations: AggregateRepository[AuthorizationRequest],
        index: IndexStoreProtocol,
        clock: ClockProtocol,
    ) -> None:
        self._clients = clients
        self._authorizations = authorizations
        self._index = index
        self._clock = clock

    async def handle(self, cmd: StartAuthorization) -> Result[AuthorizationStarted, DomainError]:
        loaded = await self._clients.load(cmd.client_id) if cmd.client_id else None
        if loaded is None:
            return Failure(
                error=NotFoundError(
                    code=ErrorCode.CLIENT_NOT_FOUND,
                    message="Unknown client_id",
                    resource_type="Client",
                    resource_id=cmd.client_id or "",
                )
            )

        request_id = uuid7()
        decision = request_authorization(
            request_id=request_id,
            client=loaded.state,
            redirect_uri=cmd.redirect_uri,
            response_type=cmd.response_type,
            scope=cmd.scope,
            state=cmd.state,
            nonce=cmd.nonce,
            code_challenge=cmd.code_challenge,
            code_challenge_method=cmd.code_challenge_method,
            occurred_at=self._clock.now(),
        )
        if isinstance(decision, Failure):
            return decision

        saved = await self._authorizations.save(str(request_id), 0, decision.value)
        if isinstance(saved, Failure):
            return saved
        await self._index.add_member(IndexNamespace.EXPIRING, ExpiryKey.AUTHORIZATION, str(request_id))

        requested = decision.value[0]
        return Success(
            value=AuthorizationStarted(
                request_id=request_id,
                client_id=requested.client_id,
                redirect_uri=requested.redirect_uri,
                state=requested.state,
                scopes=requested.scopes,
            )
        )
