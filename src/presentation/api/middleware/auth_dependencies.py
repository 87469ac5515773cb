"""Bearer token authentication dependencies.

FastAPI dependencies that verify an access token with the TokenService
(signature, expiry, token use, and the revocation state of the token, its
session, its client and its user) and expose the caller.

Usage:
    # Protected route (requires auth)
    @router.get("/protected")
    async def protected_route(
        current_user: Annotated[CurrentUser, Depends(get_current_user)],
    ):
        return {"user_id": str(current_user.user_id)}

    # Admin-only route
    @router.post("/clients")
    async def register_client(
        admin: Annotated[CurrentUser, Depends(require_admin)],
    ): ...
"""

from dataclasses import dataclass
from typing import Annotated
from uuid import UUID

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from src.application.queries import GetUser
from src.application.queries.handlers.get_user_handler import GetUserHandler
from src.application.services import TokenService
from src.core.container import get_get_user_handler, get_token_service
from src.core.result import Failure
from src.domain.enums import TokenUse, UserRole

# HTTP Bearer token extractor
# auto_error=False so a missing header gets the same challenge as a bad token
bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True, slots=True, kw_only=True)
class CurrentUser:
    """Authenticated caller of a protected route.

    Attributes:
        user_id: User's unique identifier (JWT `sub`).
        email: Current email (from the Identity aggregate).
        roles: Current roles (from the Identity aggregate, not the token).
        session_id: Device session the token was issued in (JWT `sid`).
        token_jti: Access token identifier.
        client_id: Client the token was issued to.
    """

    user_id: UUID
    email: str
    roles: frozenset[str]
    session_id: UUID | None = None
    token_jti: str | None = None
    client_id: str | None = None

    @property
    def is_admin(self) -> bool:
        return UserRole.ADMIN.value in self.roles


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": 'Bearer error="invalid_token"'},
    )


def _parse_uuid(value: object) -> UUID | None:
    if not isinstance(value, str):
        return None
    try:
        return UUID(value)
    except ValueError:
        return None


async def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    token_service: Annotated[TokenService, Depends(get_token_service)],
    user_handler: Annotated[GetUserHandler, Depends(get_get_user_handler)],
) -> CurrentUser:
    """Get current authenticated user from a Bearer access token.

    Raises:
        HTTPException 401: Token missing, invalid, expired, revoked, or not
            issued to a user (client credentials tokens have no user).
    """
    if credentials is None:
        raise _unauthorized("Not authenticated")

    verified = await token_service.verify(credentials.credentials, expected_use=TokenUse.ACCESS)
    if isinstance(verified, Failure):
        raise _unauthorized(verified.error.message)
    claims = verified.value

    user_id = _parse_uuid(claims.get("sub"))
    if user_id is None:
        raise _unauthorized("Token is not bound to a user")

    profile = await user_handler.handle(GetUser(user_id=user_id))
    if isinstance(profile, Failure) or not profile.value.active:
        raise _unauthorized("User is not active")

    return CurrentUser(
        user_id=user_id,
        email=profile.value.email,
        roles=frozenset(profile.value.roles),
        session_id=_parse_uuid(claims.get("sid")),
        token_jti=claims.get("jti"),
        client_id=claims.get("client_id"),
    )


async def require_admin(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
) -> CurrentUser:
    """Require the `admin` role.

    Raises:
        HTTPException 403: Caller is authenticated but not an admin.
    """
    if not current_user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Admin role required",
        )
    return current_user
