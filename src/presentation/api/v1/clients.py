"""Clients resource router (admin).

OAuth client registration and lifecycle. Every endpoint requires the
`admin` role.

Endpoints:
    POST   /api/v1/clients               - Register client
    POST   /api/v1/clients/{id}/secret   - Rotate client secret
    DELETE /api/v1/clients/{id}          - Deactivate client
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Path, Request, status
from fastapi.responses import JSONResponse, Response

from src.application.commands import DeactivateClient, RegisterClient, RotateClientSecret
from src.application.commands.handlers.deactivate_client_handler import (
    DeactivateClientHandler,
)
from src.application.commands.handlers.register_client_handler import (
    RegisterClientHandler,
)
from src.application.commands.handlers.rotate_client_secret_handler import (
    RotateClientSecretHandler,
)
from src.core.container import (
    get_deactivate_client_handler,
    get_register_client_handler,
    get_rotate_client_secret_handler,
)
from src.core.result import Failure, Success
from src.presentation.api.errors import ErrorResponseBuilder
from src.presentation.api.errors.problem_details import ProblemDetails
from src.presentation.api.middleware.auth_dependencies import CurrentUser, require_admin
from src.presentation.api.middleware.trace_middleware import get_trace_id
from src.schemas.client_schemas import ClientCreateRequest, ClientCredentialsResponse

router = APIRouter(prefix="/clients", tags=["Clients"])


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=ClientCredentialsResponse,
    responses={
        201: {"description": "Client registered", "model": ClientCredentialsResponse},
        400: {"description": "Inconsistent client configuration", "model": ProblemDetails},
        403: {"description": "Admin role required"},
    },
    summary="Register client",
)
async def register_client(
    request: Request,
    data: ClientCreateRequest,
    admin: Annotated[CurrentUser, Depends(require_admin)],
    handler: RegisterClientHandler = Depends(get_register_client_handler),
) -> ClientCredentialsResponse | JSONResponse:
    """Register an OAuth client.

    POST /api/v1/clients → 201 Created

    The plain client secret (confidential clients only) is returned once;
    only its hash is stored.
    """
    result = await handler.handle(
        RegisterClient(
            name=data.name,
            redirect_uris=frozenset(data.redirect_uris),
            grant_types=frozenset(data.grant_types),
            confidential=data.confidential,
            pkce_required=data.pkce_required,
            allowed_scopes=frozenset(data.allowed_scopes),
            public_key_pem=data.public_key_pem,
            access_token_ttl_seconds=data.access_token_ttl_seconds,
            refresh_token_ttl_seconds=data.refresh_token_ttl_seconds,
        )
    )

    match result:
        case Failure(error=error):
            return ErrorResponseBuilder.from_domain_error(error, request, get_trace_id())
        case Success(value=registered):
            return ClientCredentialsResponse(
                client_id=registered.client_id,
                client_secret=registered.client_secret,
            )


@router.post(
    "/{client_id}/secret",
    response_model=ClientCredentialsResponse,
    responses={
        400: {"description": "Public clients have no secret", "model": ProblemDetails},
        403: {"description": "Admin role required"},
        404: {"description": "Client not found", "model": ProblemDetails},
    },
    summary="Rotate client secret",
)
async def rotate_client_secret(
    request: Request,
    client_id: Annotated[str, Path()],
    admin: Annotated[CurrentUser, Depends(require_admin)],
    handler: RotateClientSecretHandler = Depends(get_rotate_client_secret_handler),
) -> ClientCredentialsResponse | JSONResponse:
    """Issue a new secret; the previous one stays valid for the grace period."""
    result = await handler.handle(RotateClientSecret(client_id=client_id))

    match result:
        case Failure(error=error):
            return ErrorResponseBuilder.from_domain_error(error, request, get_trace_id())
        case Success(value=rotated):
            return ClientCredentialsResponse(
                client_id=rotated.client_id,
                client_secret=rotated.client_secret,
            )


@router.delete(
    "/{client_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={
        204: {"description": "Client deactivated; its tokens stop verifying"},
        403: {"description": "Admin role required"},
        404: {"description": "Client not found", "model": ProblemDetails},
    },
    summary="Deactivate client",
)
async def deactivate_client(
    request: Request,
    client_id: Annotated[str, Path()],
    admin: Annotated[CurrentUser, Depends(require_admin)],
    handler: DeactivateClientHandler = Depends(get_deactivate_client_handler),
) -> Response:
    """Deactivate a client."""
    result = await handler.handle(DeactivateClient(client_id=client_id, reason="admin_deactivation"))

    if isinstance(result, Failure):
        return ErrorResponseBuilder.from_domain_error(result.error, request, get_trace_id())
    return Response(status_code=status.HTTP_204_NO_CONTENT)
