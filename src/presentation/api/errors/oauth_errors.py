"""OAuth2 error mapping (RFC 6749 sections 4.1.2.1 and 5.2).

Every domain error maps deterministically to one OAuth2 `error` value and
HTTP status. The error code decides first; the error class is the fallback.
Unknown clients and users are never distinguished from bad credentials.

Exports:
    OAuthError: Mapped error (code, description, status)
    to_oauth_error: DomainError -> OAuthError
    oauth_error_response: JSON error body for the token-style endpoints
    authorization_error_redirect: Error redirect back to the client
    NO_STORE_HEADERS: Cache headers required on token responses
"""

from dataclasses import dataclass
from urllib.parse import urlencode

from fastapi import status
from fastapi.responses import JSONResponse, RedirectResponse

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
from src.domain.errors import TokenVerificationError

NO_STORE_HEADERS = {"Cache-Control": "no-store", "Pragma": "no-cache"}

INVALID_REQUEST = "invalid_request"
INVALID_CLIENT = "invalid_client"
INVALID_GRANT = "invalid_grant"
INVALID_SCOPE = "invalid_scope"
UNAUTHORIZED_CLIENT = "unauthorized_client"
UNSUPPORTED_GRANT_TYPE = "unsupported_grant_type"
UNSUPPORTED_RESPONSE_TYPE = "unsupported_response_type"
ACCESS_DENIED = "access_denied"
SERVER_ERROR = "server_error"
TEMPORARILY_UNAVAILABLE = "temporarily_unavailable"

_CLIENT_FAILURE_DESCRIPTION = "Client authentication failed"
_GRANT_FAILURE_DESCRIPTION = "The provided authorization grant is invalid"

_BY_CODE: dict[ErrorCode, tuple[str, int]] = {
    # Client authentication (401 + WWW-Authenticate)
    ErrorCode.CLIENT_AUTHENTICATION_FAILED: (INVALID_CLIENT, status.HTTP_401_UNAUTHORIZED),
    ErrorCode.CLIENT_NOT_FOUND: (INVALID_CLIENT, status.HTTP_401_UNAUTHORIZED),
    ErrorCode.CLIENT_INACTIVE: (INVALID_CLIENT, status.HTTP_401_UNAUTHORIZED),
    # Request shape
    ErrorCode.INVALID_SCOPE: (INVALID_SCOPE, status.HTTP_400_BAD_REQUEST),
    ErrorCode.UNSUPPORTED_GRANT_TYPE: (UNSUPPORTED_GRANT_TYPE, status.HTTP_400_BAD_REQUEST),
    ErrorCode.UNSUPPORTED_RESPONSE_TYPE: (UNSUPPORTED_RESPONSE_TYPE, status.HTTP_400_BAD_REQUEST),
    ErrorCode.UNAUTHORIZED_CLIENT: (UNAUTHORIZED_CLIENT, status.HTTP_400_BAD_REQUEST),
    # Grant failures
    ErrorCode.INVALID_STATE_TRANSITION: (INVALID_GRANT, status.HTTP_400_BAD_REQUEST),
    ErrorCode.AUTHORIZATION_REQUEST_NOT_FOUND: (INVALID_GRANT, status.HTTP_400_BAD_REQUEST),
    ErrorCode.TOKEN_INVALID: (INVALID_GRANT, status.HTTP_400_BAD_REQUEST),
    # Authorization
    ErrorCode.PERMISSION_DENIED: (ACCESS_DENIED, status.HTTP_403_FORBIDDEN),
    # Concurrency (bounded retries exhausted)
    ErrorCode.CONCURRENCY_CONFLICT: (TEMPORARILY_UNAVAILABLE, status.HTTP_503_SERVICE_UNAVAILABLE),
}

_BY_TYPE: list[tuple[type[DomainError], str, int]] = [
    (TokenVerificationError, INVALID_GRANT, status.HTTP_400_BAD_REQUEST),
    (ValidationError, INVALID_REQUEST, status.HTTP_400_BAD_REQUEST),
    (AuthenticationError, INVALID_GRANT, status.HTTP_400_BAD_REQUEST),
    (ExpiredError, INVALID_GRANT, status.HTTP_400_BAD_REQUEST),
    (RevokedError, INVALID_GRANT, status.HTTP_400_BAD_REQUEST),
    (NotFoundError, INVALID_GRANT, status.HTTP_400_BAD_REQUEST),
    (AuthorizationError, ACCESS_DENIED, status.HTTP_403_FORBIDDEN),
    (ConflictError, TEMPORARILY_UNAVAILABLE, status.HTTP_503_SERVICE_UNAVAILABLE),
]


@dataclass(frozen=True, slots=True)
class OAuthError:
    """An OAuth2 error ready to be rendered.

    Attributes:
        error: RFC 6749 error code.
        description: `error_description` (never names a resource).
        status_code: HTTP status for JSON responses.
    """

    error: str
    description: str
    status_code: int = status.HTTP_400_BAD_REQUEST

    def body(self) -> dict[str, str]:
        return {"error": self.error, "error_description": self.description}


def to_oauth_error(error: DomainError) -> OAuthError:
    """Map a domain error to its OAuth2 error.

    Example:
        >>> to_oauth_error(ExpiredError(code=ErrorCode.CODE_EXPIRED, message="..."))
        OAuthError(error='invalid_grant', description='...', status_code=400)
    """
    mapped = _BY_CODE.get(error.code)
    if mapped is None:
        mapped = next(
            ((code, status_code) for error_type, code, status_code in _BY_TYPE if isinstance(error, error_type)),
            (INVALID_REQUEST, status.HTTP_400_BAD_REQUEST),
        )
    oauth_code, status_code = mapped

    if oauth_code == INVALID_CLIENT:
        description = _CLIENT_FAILURE_DESCRIPTION
    elif isinstance(error, NotFoundError) or error.code == ErrorCode.INVALID_CREDENTIALS:
        description = _GRANT_FAILURE_DESCRIPTION
    else:
        description = error.message
    return OAuthError(error=oauth_code, description=description, status_code=status_code)


def oauth_error_response(oauth_error: OAuthError) -> JSONResponse:
    """JSON error body with no-store headers (and a Basic challenge on 401)."""
    headers = dict(NO_STORE_HEADERS)
    if oauth_error.status_code == status.HTTP_401_UNAUTHORIZED:
        headers["WWW-Authenticate"] = 'Basic realm="oauth2"'
    return JSONResponse(
        status_code=oauth_error.status_code,
        content=oauth_error.body(),
        headers=headers,
    )


def authorization_error_redirect(
    redirect_uri: str, oauth_error: OAuthError, state: str | None
) -> RedirectResponse:
    """Send an authorization error back to the client's redirect URI."""
    params = oauth_error.body()
    if state is not None:
        params["state"] = state
    separator = "&" if "?" in redirect_uri else "?"
    return RedirectResponse(
        url=f"{redirect_uri}{separator}{urlencode(params)}",
        status_code=status.HTTP_302_FOUND,
    )
