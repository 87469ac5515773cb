"""Authorization-code grant commands (CQRS write operations)."""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID


@dataclass(frozen=True, kw_only=True)
class StartAuthorization:
    """Validate a `/oauth2/authorize` request (raw query parameters).

    Attributes mirror the request parameters; validation happens in the
    handler so errors can be classified as redirectable or not.
    """

    client_id: str | None
    redirect_uri: str | None
    response_type: str | None
    scope: str | None = None
    state: str | None = None
    nonce: str | None = None
    code_challenge: str | None = None
    code_challenge_method: str | None = None


@dataclass(frozen=True, kw_only=True)
class ApproveAuthorization:
    """Record consent for an authenticated user and issue the code.

    Attributes:
        request_id: Authorization request.
        user_id: Authenticated user.
        session_id: Browser session the user authenticated with.
        auth_time: When the user authenticated.
    """

    request_id: UUID
    user_id: UUID
    session_id: UUID | None
    auth_time: datetime
