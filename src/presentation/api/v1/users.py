"""Users resource router.

RESTful endpoints for identity management.

Endpoints:
    POST   /api/v1/users                      - Register user
    GET    /api/v1/users/me                   - Current user profile
    PATCH  /api/v1/users/me/password          - Change password
    POST   /api/v1/users/me/identities        - Link external identity
    PUT    /api/v1/users/{id}/roles/{role}    - Assign role (admin)
    DELETE /api/v1/users/{id}/roles/{role}    - Revoke role (admin)
    DELETE /api/v1/users/{id}                 - Deactivate user (admin)
"""

from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Request, status
from fastapi.responses import JSONResponse, Response

from src.application.commands import (
    AssignRole,
    ChangePassword,
    DeactivateUser,
    LinkIdentity,
    RegisterUser,
    RevokeRole,
)
from src.application.commands.handlers.change_password_handler import ChangePasswordHandler
from src.application.commands.handlers.deactivate_user_handler import DeactivateUserHandler
from src.application.commands.handlers.link_identity_handler import LinkIdentityHandler
from src.application.commands.handlers.manage_roles_handler import ManageRolesHandler
from src.application.commands.handlers.register_user_handler import RegisterUserHandler
from src.application.queries import GetUser
from src.application.queries.handlers.get_user_handler import GetUserHandler
from src.core.container import (
    get_change_password_handler,
    get_deactivate_user_handler,
    get_get_user_handler,
    get_link_identity_handler,
    get_manage_roles_handler,
    get_register_user_handler,
)
from src.core.result import Failure, Success
from src.domain.enums import UserRole
from src.presentation.api.errors import ErrorResponseBuilder
from src.presentation.api.errors.problem_details import ProblemDetails
from src.presentation.api.middleware.auth_dependencies import (
    CurrentUser,
    get_current_user,
    require_admin,
)
from src.presentation.api.middleware.trace_middleware import get_trace_id
from src.schemas.user_schemas import (
    IdentityLinkRequest,
    IdentityLinkResponse,
    PasswordChangeRequest,
    RolesResponse,
    UserCreateRequest,
    UserCreateResponse,
    UserResponse,
)

router = APIRouter(prefix="/users", tags=["Users"])


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=UserCreateResponse,
    responses={
        201: {"description": "User registered", "model": UserCreateResponse},
        400: {"description": "Invalid email or weak password", "model": ProblemDetails},
        409: {"description": "Email already registered", "model": ProblemDetails},
    },
    summary="Register user",
)
async def create_user(
    request: Request,
    data: UserCreateRequest,
    handler: RegisterUserHandler = Depends(get_register_user_handler),
) -> UserCreateResponse | JSONResponse:
    """Register a new user.

    POST /api/v1/users → 201 Created

    Args:
        request: FastAPI request object.
        data: Registration request (email, password).
        handler: Registration handler (injected).

    Returns:
        UserCreateResponse on success (201 Created).
        JSONResponse with Problem Details on failure (400/409).
    """
    result = await handler.handle(RegisterUser(email=data.email, password=data.password))

    match result:
        case Failure(error=error):
            return ErrorResponseBuilder.from_domain_error(error, request, get_trace_id())
        case Success(value=user_id):
            return UserCreateResponse(id=user_id, email=data.email)


@router.get(
    "/me",
    response_model=UserResponse,
    responses={401: {"description": "Not authenticated"}},
    summary="Current user",
)
async def get_me(
    request: Request,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    handler: GetUserHandler = Depends(get_get_user_handler),
) -> UserResponse | JSONResponse:
    """Profile of the access token's subject."""
    result = await handler.handle(GetUser(user_id=current_user.user_id))

    match result:
        case Failure(error=error):
            return ErrorResponseBuilder.from_domain_error(error, request, get_trace_id())
        case Success(value=profile):
            return UserResponse(
                id=profile.id,
                email=profile.email,
                roles=profile.roles,
                linked_identities=profile.linked_identities,
                active=profile.active,
                created_at=profile.created_at,
                last_authenticated_at=profile.last_authenticated_at,
            )


@router.patch(
    "/me/password",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={
        204: {"description": "Password changed; other sessions revoked"},
        400: {"description": "Weak password", "model": ProblemDetails},
        401: {"description": "Current password incorrect", "model": ProblemDetails},
    },
    summary="Change password",
)
async def change_password(
    request: Request,
    data: PasswordChangeRequest,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    handler: ChangePasswordHandler = Depends(get_change_password_handler),
) -> Response:
    """Change the caller's password.

    PATCH /api/v1/users/me/password → 204 No Content

    Every session except the one the access token belongs to is revoked.
    """
    result = await handler.handle(
        ChangePassword(
            user_id=current_user.user_id,
            old_password=data.old_password,
            new_password=data.new_password,
            current_session_id=current_user.session_id,
        )
    )

    if isinstance(result, Failure):
        return ErrorResponseBuilder.from_domain_error(result.error, request, get_trace_id())
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/me/identities",
    status_code=status.HTTP_201_CREATED,
    response_model=IdentityLinkResponse,
    responses={
        400: {"description": "Unknown provider", "model": ProblemDetails},
        401: {"description": "Assertion rejected", "model": ProblemDetails},
        409: {"description": "External account already linked", "model": ProblemDetails},
    },
    summary="Link external identity",
)
async def link_identity(
    request: Request,
    data: IdentityLinkRequest,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    handler: LinkIdentityHandler = Depends(get_link_identity_handler),
) -> IdentityLinkResponse | JSONResponse:
    """Link an external account proven by a provider-signed assertion."""
    result = await handler.handle(
        LinkIdentity(
            user_id=current_user.user_id,
            provider=data.provider,
            assertion=data.assertion,
        )
    )

    match result:
        case Failure(error=error):
            return ErrorResponseBuilder.from_domain_error(error, request, get_trace_id())
        case Success(value=linked):
            return IdentityLinkResponse(provider=linked.provider, external_id=linked.external_id)


# =============================================================================
# Admin
# =============================================================================


@router.put(
    "/{user_id}/roles/{role}",
    response_model=RolesResponse,
    responses={
        403: {"description": "Admin role required"},
        404: {"description": "User not found", "model": ProblemDetails},
    },
    summary="Assign role",
)
async def assign_role(
    request: Request,
    user_id: Annotated[UUID, Path()],
    role: Annotated[UserRole, Path()],
    admin: Annotated[CurrentUser, Depends(require_admin)],
    handler: ManageRolesHandler = Depends(get_manage_roles_handler),
) -> RolesResponse | JSONResponse:
    """Grant a role. Granting a role the user already has is a no-op."""
    result = await handler.assign(AssignRole(user_id=user_id, role=role.value))

    match result:
        case Failure(error=error):
            return ErrorResponseBuilder.from_domain_error(error, request, get_trace_id())
        case Success(value=roles):
            return RolesResponse(user_id=user_id, roles=sorted(roles))


@router.delete(
    "/{user_id}/roles/{role}",
    response_model=RolesResponse,
    responses={
        403: {"description": "Admin role required"},
        404: {"description": "User not found", "model": ProblemDetails},
    },
    summary="Revoke role",
)
async def revoke_role(
    request: Request,
    user_id: Annotated[UUID, Path()],
    role: Annotated[UserRole, Path()],
    admin: Annotated[CurrentUser, Depends(require_admin)],
    handler: ManageRolesHandler = Depends(get_manage_roles_handler),
) -> RolesResponse | JSONResponse:
    """Withdraw a role. Revoking a role the user lacks is a no-op."""
    result = await handler.revoke(RevokeRole(user_id=user_id, role=role.value))

    match result:
        case Failure(error=error):
            return ErrorResponseBuilder.from_domain_error(error, request, get_trace_id())
        case Success(value=roles):
            return RolesResponse(user_id=user_id, roles=sorted(roles))


@router.delete(
    "/{user_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={
        204: {"description": "User deactivated; every session revoked"},
        403: {"description": "Admin role required"},
        404: {"description": "User not found", "model": ProblemDetails},
    },
    summary="Deactivate user",
)
async def deactivate_user(
    request: Request,
    user_id: Annotated[UUID, Path()],
    admin: Annotated[CurrentUser, Depends(require_admin)],
    handler: DeactivateUserHandler = Depends(get_deactivate_user_handler),
) -> Response:
    """Deactivate a user. Their event history is kept."""
    result = await handler.handle(DeactivateUser(user_id=user_id, reason="admin_deactivation"))

    if isinstance(result, Failure):
        return ErrorResponseBuilder.from_domain_error(result.error, request, get_trace_id())
    return Response(status_code=status.HTTP_204_NO_CONTENT)
