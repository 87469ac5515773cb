"""Sessions resource router.

RESTful endpoints for the caller's device sessions. Sessions are opened by
the login step of the authorization code flow (`/oauth2/authorize`), not
here.

Endpoints:
    GET    /api/v1/sessions         - List user sessions
    DELETE /api/v1/sessions/{id}    - Revoke specific session
    DELETE /api/v1/sessions         - Revoke all sessions (except current)
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Request, status
from fastapi.responses import JSONResponse, Response

from src.application.commands import RevokeAllSessions, RevokeSession
from src.application.commands.handlers.revoke_all_sessions_handler import (
    RevokeAllSessionsHandler,
)
from src.application.commands.handlers.revoke_session_handler import (
    RevokeSessionHandler,
)
from src.application.queries import ListUserSessions
from src.application.queries.handlers.list_sessions_handler import ListSessionsHandler
from src.core.container import (
    get_list_sessions_handler,
    get_revoke_all_sessions_handler,
    get_revoke_session_handler,
)
from src.core.result import Failure, Success
from src.presentation.api.errors import ErrorResponseBuilder
from src.presentation.api.errors.problem_details import ProblemDetails
from src.presentation.api.middleware.auth_dependencies import (
    CurrentUser,
    get_current_user,
)
from src.presentation.api.middleware.trace_middleware import get_trace_id
from src.schemas.session_schemas import (
    SessionListResponse,
    SessionResponse,
    SessionRevokeAllResponse,
)

router = APIRouter(prefix="/sessions", tags=["Sessions"])


@router.get(
    "",
    response_model=SessionListResponse,
    responses={401: {"description": "Not authenticated"}},
    summary="List sessions",
    description="List the caller's live sessions, most recently seen first.",
)
async def list_sessions(
    request: Request,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    handler: ListSessionsHandler = Depends(get_list_sessions_handler),
) -> SessionListResponse | JSONResponse:
    """List user sessions.

    GET /api/v1/sessions → 200 OK

    Args:
        request: FastAPI request object.
        current_user: Authenticated caller (injected).
        handler: List sessions handler (injected).

    Returns:
        SessionListResponse; the session the access token belongs to is
        flagged `is_current`.
    """
    result = await handler.handle(
        ListUserSessions(
            user_id=current_user.user_id,
            current_session_id=current_user.session_id,
        )
    )

    match result:
        case Failure(error=error):
            return ErrorResponseBuilder.from_domain_error(error, request, get_trace_id())
        case Success(value=listing):
            return SessionListResponse(
                sessions=[
                    SessionResponse(
                        id=item.id,
                        device_info=item.device_info,
                        ip_address=item.ip_address,
                        created_at=item.created_at,
                        last_seen_at=item.last_seen_at,
                        active_token_count=item.active_token_count,
                        is_current=item.is_current,
                    )
                    for item in listing.sessions
                ],
                total_count=listing.total_count,
            )


@router.delete(
    "/{session_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={
        204: {"description": "Session revoked (with every token bound to it)"},
        401: {"description": "Not authenticated"},
        404: {"description": "Session not found", "model": ProblemDetails},
    },
    summary="Revoke session",
)
async def revoke_session(
    request: Request,
    session_id: Annotated[UUID, Path(description="Session to revoke")],
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    handler: RevokeSessionHandler = Depends(get_revoke_session_handler),
) -> Response:
    """Revoke one of the caller's sessions.

    DELETE /api/v1/sessions/{id} → 204 No Content

    Another user's session id gets 404, the same as an unknown id.
    """
    result = await handler.handle(
        RevokeSession(
            session_id=session_id,
            user_id=current_user.user_id,
            reason="manual",
        )
    )

    if isinstance(result, Failure):
        return ErrorResponseBuilder.from_domain_error(result.error, request, get_trace_id())
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.delete(
    "",
    response_model=SessionRevokeAllResponse,
    responses={401: {"description": "Not authenticated"}},
    summary="Revoke all sessions",
    description="Log out every other device. The current session is kept.",
)
async def revoke_all_sessions(
    request: Request,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    handler: RevokeAllSessionsHandler = Depends(get_revoke_all_sessions_handler),
) -> SessionRevokeAllResponse | JSONResponse:
    """Revoke all sessions except the current one.

    DELETE /api/v1/sessions → 200 OK
    """
    result = await handler.handle(
        RevokeAllSessions(
            user_id=current_user.user_id,
            except_session_id=current_user.session_id,
        )
    )

    match result:
        case Failure(error=error):
            return ErrorResponseBuilder.from_domain_error(error, request, get_trace_id())
        case Success(value=revoked_count):
            return SessionRevokeAllResponse(revoked_count=revoked_count)
