"""HTTP error rendering: OAuth2 error bodies and RFC 9457 Problem Details."""

from src.presentation.api.errors.error_response_builder import ErrorResponseBuilder
from src.presentation.api.errors.exception_handlers import register_exception_handlers
from src.presentation.api.errors.oauth_errors import (
    ACCESS_DENIED,
    INVALID_CLIENT,
    INVALID_GRANT,
    INVALID_REQUEST,
    INVALID_SCOPE,
    NO_STORE_HEADERS,
    SERVER_ERROR,
    TEMPORARILY_UNAVAILABLE,
    UNAUTHORIZED_CLIENT,
    UNSUPPORTED_GRANT_TYPE,
    UNSUPPORTED_RESPONSE_TYPE,
    OAuthError,
    authorization_error_redirect,
    oauth_error_response,
    to_oauth_error,
)
from src.presentation.api.errors.problem_details import ErrorDetail, ProblemDetails

__all__ = [
    # OAuth2 error codes
    "ACCESS_DENIED",
    "INVALID_CLIENT",
    "INVALID_GRANT",
    "INVALID_REQUEST",
    "INVALID_SCOPE",
    "SERVER_ERROR",
    "TEMPORARILY_UNAVAILABLE",
    "UNAUTHORIZED_CLIENT",
    "UNSUPPORTED_GRANT_TYPE",
    "UNSUPPORTED_RESPONSE_TYPE",
    # Rendering
    "NO_STORE_HEADERS",
    "ErrorDetail",
    "ErrorResponseBuilder",
    "OAuthError",
    "ProblemDetails",
    "authorization_error_redirect",
    "oauth_error_response",
    "register_exception_handlers",
    "to_oauth_error",
]
