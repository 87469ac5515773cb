"""Error response builder for RFC 9457 Problem Details.

Converts domain errors returned by command and query handlers into Problem
Details responses for the `/api/v1` routes.

Exports:
    ErrorResponseBuilder: Utility class for building Problem Details responses
"""

from fastapi import Request, status
from fastapi.responses import JSONResponse

from src.core.config import get_settings
from src.core.enums import ErrorCode
from src.core.errors import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    DomainError,
    ExpiredError,
    NotFoundError,
    RevokedError,
    ValidationError,
)
from src.presentation.api.errors.problem_details import ErrorDetail, ProblemDetails

_STATUS_BY_TYPE: list[tuple[type[DomainError], int, str]] = [
    (ValidationError, status.HTTP_400_BAD_REQUEST, "Validation Failed"),
    (NotFoundError, status.HTTP_404_NOT_FOUND, "Resource Not Found"),
    (ConflictError, status.HTTP_409_CONFLICT, "Resource Conflict"),
    (AuthenticationError, status.HTTP_401_UNAUTHORIZED, "Authentication Failed"),
    (AuthorizationError, status.HTTP_403_FORBIDDEN, "Access Denied"),
    (ExpiredError, status.HTTP_400_BAD_REQUEST, "Expired"),
    (RevokedError, status.HTTP_400_BAD_REQUEST, "Revoked"),
]


class ErrorResponseBuilder:
    """Build Problem Details error responses from domain errors.

    Example:
        >>> response = ErrorResponseBuilder.from_domain_error(
        ...     error=result.error,
        ...     request=request,
        ...     trace_id=get_trace_id(),
        ... )
    """

    @staticmethod
    def from_domain_error(
        error: DomainError,
        request: Request,
        trace_id: str | None,
    ) -> JSONResponse:
        """Convert a DomainError to a Problem Details JSON response.

        Args:
            error: Domain error from a handler Result
            request: FastAPI Request object (for instance URL)
            trace_id: Request trace ID for debugging

        Returns:
            JSONResponse with ProblemDetails content
        """
        status_code, title = ErrorResponseBuilder.classify(error)

        problem = ProblemDetails(
            type=f"{get_settings().issuer}/errors/{error.code.value}",
            title=title,
            status=status_code,
            detail=error.message,
            instance=str(request.url.path),
            errors=None,
            trace_id=trace_id,
        )

        if isinstance(error, ValidationError) and error.field:
            problem.errors = [
                ErrorDetail(
                    field=error.field,
                    code=error.code.value,
                    message=error.message,
                )
            ]

        return JSONResponse(
            status_code=status_code,
            content=problem.model_dump(exclude_none=True),
        )

    @staticmethod
    def classify(error: DomainError) -> tuple[int, str]:
        """HTTP status and title for a domain error (by error class).

        Example:
            >>> ErrorResponseBuilder.classify(not_found_error)
            (404, 'Resource Not Found')
        """
        if error.code == ErrorCode.CONCURRENCY_CONFLICT:
            return status.HTTP_503_SERVICE_UNAVAILABLE, "Temporarily Unavailable"
        for error_type, status_code, title in _STATUS_BY_TYPE:
            if isinstance(error, error_type):
                return status_code, title
        return status.HTTP_400_BAD_REQUEST, "Request Failed"
