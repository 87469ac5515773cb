"""Global exception handlers for FastAPI application.

Exceptions are reserved for infrastructure failures (event store, index
store, signer, identity verifier unavailable; deadlines exceeded) and
programming errors. They are logged with the request's trace id and
rendered generically. Stack traces and storage details never reach the
client.

Rendering:
    /oauth2/*   server_error (500) for every exception
    elsewhere   Problem Details: 503 for outages and deadlines, 500 otherwise

Exports:
    register_exception_handlers: Register all exception handlers with FastAPI app
"""

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from src.core.config import get_settings
from src.core.container import get_logger
from src.domain.errors import CollaboratorUnavailableError
from src.presentation.api.errors.oauth_errors import (
    SERVER_ERROR,
    OAuthError,
    oauth_error_response,
)
from src.presentation.api.errors.problem_details import ProblemDetails

OAUTH_PATH_PREFIX = "/oauth2"

_OAUTH_DETAIL = "The authorization server encountered an unexpected condition."
_UNAVAILABLE_DETAIL = "A backing service is temporarily unavailable. Please retry."
_INTERNAL_DETAIL = "An unexpected error occurred. Please contact support with the trace ID."


def _render(request: Request, *, status_code: int, error_type: str, title: str, detail: str) -> JSONResponse:
    if request.url.path.startswith(OAUTH_PATH_PREFIX):
        return oauth_error_response(
            OAuthError(
                error=SERVER_ERROR,
                description=_OAUTH_DETAIL,
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            )
        )

    problem = ProblemDetails(
        type=f"{get_settings().issuer}/errors/{error_type}",
        title=title,
        status=status_code,
        detail=detail,
        instance=str(request.url.path),
        errors=None,
        trace_id=getattr(request.state, "trace_id", None),
    )
    return JSONResponse(status_code=status_code, content=problem.model_dump(exclude_none=True))


async def unavailable_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle collaborator outages and exceeded deadlines."""
    get_logger().error(
        "collaborator_unavailable",
        error=exc,
        trace_id=getattr(request.state, "trace_id", None),
        request_path=request.url.path,
        request_method=request.method,
    )
    return _render(
        request,
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        error_type="service_unavailable",
        title="Service Unavailable",
        detail=_UNAVAILABLE_DETAIL,
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected Python exceptions (500).

    Example:
        >>> # When any unhandled exception occurs:
        >>> raise RehydrationError("...")
        >>> # Returns server_error / Problem Details with trace_id for debugging
    """
    get_logger().error(
        "unhandled_exception",
        error=exc,
        trace_id=getattr(request.state, "trace_id", None),
        request_path=request.url.path,
        request_method=request.method,
    )
    return _render(
        request,
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        error_type=SERVER_ERROR,
        title="Internal Server Error",
        detail=_INTERNAL_DETAIL,
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with FastAPI application.

    Example:
        >>> app = FastAPI()
        >>> register_exception_handlers(app)
    """
    app.add_exception_handler(CollaboratorUnavailableError, unavailable_exception_handler)
    app.add_exception_handler(TimeoutError, unavailable_exception_handler)
    app.add_exception_handler(Exception, generic_exception_handler)
