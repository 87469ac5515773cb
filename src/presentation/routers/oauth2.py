"""OAuth2 protocol router.

Protocol endpoints live outside the versioned API: their paths and wire
formats are fixed by RFC 6749, RFC 7636, RFC 7662, RFC 7009 and OpenID
Connect Core, not by our API versioning strategy.

Endpoints:
    GET  /oauth2/authorize                      - Start authorization code flow
    GET  /oauth2/authorize/{request_id}         - Pending request (login page)
    POST /oauth2/authorize/{request_id}/login   - Authenticate and approve
    POST /oauth2/token                          - Token endpoint
    POST /oauth2/introspect                     - Token introspection
    POST /oauth2/revoke                         - Token revocation

Error rendering:
    - /authorize errors go back to the client's redirect URI, except when
      the client or redirect URI itself cannot be trusted (400 JSON).
    - Token, introspection and revocation errors are RFC 6749 section 5.2
      JSON bodies with `Cache-Control: no-store`.
"""

import base64
import binascii
from typing import Annotated
from urllib.parse import unquote_plus, urlencode
from uuid import UUID

from fastapi import APIRouter, Depends, Form, Path, Query, Request, status
from fastapi.responses import JSONResponse, RedirectResponse, Response

from src.application.commands import (
    ApproveAuthorization,
    AuthenticateClient,
    ExchangeAuthorizationCode,
    IssueClientCredentials,
    LoginUser,
    RefreshTokens,
    StartAuthorization,
)
from src.application.commands.handlers.approve_authorization_handler import (
    ApproveAuthorizationHandler,
)
from src.application.commands.handlers.exchange_authorization_code_handler import (
    ExchangeAuthorizationCodeHandler,
)
from src.application.commands.handlers.login_user_handler import LoginUserHandler
from src.application.commands.handlers.start_authorization_handler import (
    StartAuthorizationHandler,
    is_redirectable,
)
from src.application.dtos import IssuedCode, IssuedTokens
from src.application.queries import GetAuthorizationRequest
from src.application.queries.handlers.get_authorization_request_handler import (
    GetAuthorizationRequestHandler,
)
from src.application.services import ClientAuthenticator, SessionManager, TokenService
from src.core.config import get_settings
from src.core.container import (
    get_approve_authorization_handler,
    get_client_authenticator,
    get_exchange_authorization_code_handler,
    get_get_authorization_request_handler,
    get_login_user_handler,
    get_session_manager,
    get_start_authorization_handler,
    get_token_service,
)
from src.core.errors import DomainError
from src.core.fingerprinting import describe_device, generate_device_fingerprint
from src.core.result import Failure, Success
from src.domain.aggregates import Client
from src.domain.enums import GrantType
from src.presentation.api.errors import (
    INVALID_CLIENT,
    INVALID_REQUEST,
    NO_STORE_HEADERS,
    UNSUPPORTED_GRANT_TYPE,
    ErrorResponseBuilder,
    OAuthError,
    authorization_error_redirect,
    oauth_error_response,
    to_oauth_error,
)
from src.presentation.api.middleware.trace_middleware import get_trace_id
from src.schemas.oauth_schemas import (
    AuthorizationRequestResponse,
    IntrospectionResponse,
    OAuthErrorResponse,
    TokenResponse,
)

oauth2_router = APIRouter(prefix="/oauth2", tags=["OAuth2"])

_CLIENT_AUTH_FAILED = OAuthError(
    error=INVALID_CLIENT,
    description="Client authentication failed",
    status_code=status.HTTP_401_UNAUTHORIZED,
)


# =============================================================================
# Authorization Endpoint
# =============================================================================


@oauth2_router.get(
    "/authorize",
    status_code=status.HTTP_302_FOUND,
    responses={
        302: {"description": "Redirect to the client (code or error) or to the login page"},
        400: {"description": "Unknown client or untrusted redirect URI", "model": OAuthErrorResponse},
    },
    summary="Authorization endpoint",
)
async def authorize(
    request: Request,
    response_type: Annotated[str | None, Query()] = None,
    client_id: Annotated[str | None, Query()] = None,
    redirect_uri: Annotated[str | None, Query()] = None,
    scope: Annotated[str | None, Query()] = None,
    state: Annotated[str | None, Query()] = None,
    nonce: Annotated[str | None, Query()] = None,
    code_challenge: Annotated[str | None, Query()] = None,
    code_challenge_method: Annotated[str | None, Query()] = None,
    start_handler: StartAuthorizationHandler = Depends(get_start_authorization_handler),
    approve_handler: ApproveAuthorizationHandler = Depends(get_approve_authorization_handler),
    session_manager: SessionManager = Depends(get_session_manager),
) -> Response:
    """Start the authorization code flow.

    GET /oauth2/authorize → 302 Found

    A browser that already carries a live session cookie is approved
    immediately and sent back to the client with a code. Otherwise the
    browser is sent to the login page with the request id.
    """
    result = await start_handler.handle(
        StartAuthorization(
            client_id=client_id,
            redirect_uri=redirect_uri,
            response_type=response_type,
            scope=scope,
            state=state,
            nonce=nonce,
            code_challenge=code_challenge,
            code_challenge_method=code_challenge_method,
        )
    )

    match result:
        case Failure(error=error):
            if not is_redirectable(error) or redirect_uri is None:
                return _untrusted_authorize_error(error)
            return authorization_error_redirect(redirect_uri, to_oauth_error(error), state)
        case Success(value=started):
            pass

    settings = get_settings()
    handle = request.cookies.get(settings.session_cookie_name)
    session = await session_manager.resolve_handle(handle) if handle else None
    if session is None:
        query = urlencode({"request_id": str(started.request_id)})
        return RedirectResponse(
            url=f"{settings.login_page_url}?{query}",
            status_code=status.HTTP_302_FOUND,
        )

    approved = await approve_handler.handle(
        ApproveAuthorization(
            request_id=started.request_id,
            user_id=session.user_id,
            session_id=session.id,
            auth_time=session.last_seen_at,
        )
    )
    if isinstance(approved, Failure):
        return authorization_error_redirect(started.redirect_uri, to_oauth_error(approved.error), started.state)
    return _code_redirect(approved.value)


@oauth2_router.get(
    "/authorize/{request_id}",
    response_model=AuthorizationRequestResponse,
    responses={404: {"description": "Unknown authorization request"}},
    summary="Get pending authorization request",
)
async def get_authorization_request(
    request: Request,
    request_id: Annotated[UUID, Path()],
    handler: GetAuthorizationRequestHandler = Depends(get_get_authorization_request_handler),
) -> AuthorizationRequestResponse | JSONResponse:
    """Data the login page needs to render a pending request."""
    result = await handler.handle(GetAuthorizationRequest(request_id=request_id))

    match result:
        case Failure(error=error):
            return ErrorResponseBuilder.from_domain_error(error, request, get_trace_id())
        case Success(value=view):
            return AuthorizationRequestResponse(
                request_id=view.request_id,
                client_id=view.client_id,
                scopes=sorted(view.scopes),
                status=view.status.value,
                awaiting_login=view.awaiting_login,
            )


@oauth2_router.post(
    "/authorize/{request_id}/login",
    status_code=status.HTTP_302_FOUND,
    responses={
        302: {"description": "Redirect to the client with a code (session cookie set)"},
        400: {"description": "Request already completed or expired"},
        401: {"description": "Invalid credentials"},
        404: {"description": "Unknown authorization request"},
    },
    summary="Log in and approve",
)
async def login_and_approve(
    request: Request,
    request_id: Annotated[UUID, Path()],
    email: Annotated[str, Form()],
    password: Annotated[str, Form()],
    query_handler: GetAuthorizationRequestHandler = Depends(get_get_authorization_request_handler),
    login_handler: LoginUserHandler = Depends(get_login_user_handler),
    approve_handler: ApproveAuthorizationHandler = Depends(get_approve_authorization_handler),
) -> Response:
    """Authenticate the resource owner, open a device session, approve.

    POST /oauth2/authorize/{request_id}/login → 302 Found
    """
    trace_id = get_trace_id()
    pending = await query_handler.handle(GetAuthorizationRequest(request_id=request_id))
    match pending:
        case Failure(error=error):
            return ErrorResponseBuilder.from_domain_error(error, request, trace_id)
        case Success(value=view):
            pass
    if not view.awaiting_login:
        return oauth_error_response(
            OAuthError(error=INVALID_REQUEST, description="Authorization request is no longer pending")
        )

    user_agent = request.headers.get("user-agent")
    login = await login_handler.handle(
        LoginUser(
            email=email,
            password=password,
            device_fingerprint=generate_device_fingerprint(request),
            device_info=describe_device(user_agent),
            ip_address=request.client.host if request.client else None,
            user_agent=user_agent,
        )
    )
    match login:
        case Failure(error=error):
            return ErrorResponseBuilder.from_domain_error(error, request, trace_id)
        case Success(value=user_login):
            pass

    approved = await approve_handler.handle(
        ApproveAuthorization(
            request_id=request_id,
            user_id=user_login.user.user_id,
            session_id=user_login.session.session_id,
            auth_time=user_login.user.authenticated_at,
        )
    )
    if isinstance(approved, Failure):
        response: Response = authorization_error_redirect(
            view.redirect_uri, to_oauth_error(approved.error), view.state
        )
    else:
        response = _code_redirect(approved.value)

    settings = get_settings()
    response.set_cookie(
        key=settings.session_cookie_name,
        value=user_login.session.handle,
        httponly=True,
        secure=settings.issuer.startswith("https://"),
        samesite="lax",
        path="/oauth2",
    )
    return response


def _code_redirect(issued: IssuedCode) -> RedirectResponse:
    params = {"code": issued.code}
    if issued.state is not None:
        params["state"] = issued.state
    separator = "&" if "?" in issued.redirect_uri else "?"
    return RedirectResponse(
        url=f"{issued.redirect_uri}{separator}{urlencode(params)}",
        status_code=status.HTTP_302_FOUND,
    )


def _untrusted_authorize_error(error: DomainError) -> JSONResponse:
    """Errors that must not be redirected are shown to the user agent."""
    mapped = to_oauth_error(error)
    return oauth_error_response(
        OAuthError(
            error=mapped.error,
            description=mapped.description,
            status_code=status.HTTP_400_BAD_REQUEST,
        )
    )


# =============================================================================
# Client Authentication
# =============================================================================


def _basic_credentials(authorization: str | None) -> tuple[str, str] | None:
    """Parse `Authorization: Basic` client credentials (RFC 6749 2.3.1).

    Raises:
        ValueError: Header uses the Basic scheme but is malformed.
    """
    if not authorization:
        return None
    scheme, _, encoded = authorization.partition(" ")
    if scheme.lower() != "basic":
        return None
    try:
        decoded = base64.b64decode(encoded.strip(), validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError) as e:
        raise ValueError("Malformed Basic credentials") from e
    client_id, separator, client_secret = decoded.partition(":")
    if not separator or not client_id:
        raise ValueError("Malformed Basic credentials")
    return unquote_plus(client_id), unquote_plus(client_secret)


async def _authenticate_client(
    request: Request,
    authenticator: ClientAuthenticator,
    *,
    client_id: str | None,
    client_secret: str | None,
    client_assertion_type: str | None,
    client_assertion: str | None,
) -> Client | JSONResponse:
    """Resolve the calling client or the error response to send."""
    try:
        basic = _basic_credentials(request.headers.get("authorization"))
    except ValueError:
        return oauth_error_response(_CLIENT_AUTH_FAILED)

    if basic is not None:
        if client_secret is not None or client_assertion is not None:
            return oauth_error_response(
                OAuthError(
                    error=INVALID_REQUEST,
                    description="Only one client authentication method may be used",
                )
            )
        if client_id is not None and client_id != basic[0]:
            return oauth_error_response(_CLIENT_AUTH_FAILED)
        client_id, client_secret = basic

    result = await authenticator.authenticate(
        AuthenticateClient(
            client_id=client_id,
            client_secret=client_secret,
            client_assertion_type=client_assertion_type,
            client_assertion=client_assertion,
            via_basic=basic is not None,
        )
    )
    if isinstance(result, Failure):
        return oauth_error_response(_CLIENT_AUTH_FAILED)
    return result.value


# =============================================================================
# Token Endpoint
# =============================================================================


@oauth2_router.post(
    "/token",
    response_model=TokenResponse,
    responses={
        400: {"description": "invalid_request / invalid_grant / invalid_scope", "model": OAuthErrorResponse},
        401: {"description": "invalid_client", "model": OAuthErrorResponse},
        500: {"description": "server_error", "model": OAuthErrorResponse},
        503: {"description": "temporarily_unavailable (lost concurrency retries)", "model": OAuthErrorResponse},
    },
    summary="Token endpoint",
)
async def token(
    request: Request,
    grant_type: Annotated[str | None, Form()] = None,
    code: Annotated[str | None, Form()] = None,
    redirect_uri: Annotated[str | None, Form()] = None,
    code_verifier: Annotated[str | None, Form()] = None,
    refresh_token: Annotated[str | None, Form()] = None,
    scope: Annotated[str | None, Form()] = None,
    client_id: Annotated[str | None, Form()] = None,
    client_secret: Annotated[str | None, Form()] = None,
    client_assertion_type: Annotated[str | None, Form()] = None,
    client_assertion: Annotated[str | None, Form()] = None,
    authenticator: ClientAuthenticator = Depends(get_client_authenticator),
    exchange_handler: ExchangeAuthorizationCodeHandler = Depends(get_exchange_authorization_code_handler),
    token_service: TokenService = Depends(get_token_service),
) -> JSONResponse:
    """Exchange a grant for tokens.

    POST /oauth2/token → 200 OK (Cache-Control: no-store)

    Grants:
        - authorization_code: code + redirect_uri (+ code_verifier)
        - refresh_token: refresh_token (+ narrower scope)
        - client_credentials: confidential clients only (+ scope)
    """
    if not grant_type:
        return oauth_error_response(OAuthError(error=INVALID_REQUEST, description="grant_type is required"))
    try:
        grant = GrantType(grant_type)
    except ValueError:
        return oauth_error_response(
            OAuthError(error=UNSUPPORTED_GRANT_TYPE, description=f"Unsupported grant_type: {grant_type}")
        )

    client = await _authenticate_client(
        request,
        authenticator,
        client_id=client_id,
        client_secret=client_secret,
        client_assertion_type=client_assertion_type,
        client_assertion=client_assertion,
    )
    if isinstance(client, JSONResponse):
        return client

    match grant:
        case GrantType.AUTHORIZATION_CODE:
            if not code:
                return oauth_error_response(OAuthError(error=INVALID_REQUEST, description="code is required"))
            result = await exchange_handler.handle(
                ExchangeAuthorizationCode(
                    client=client,
                    code=code,
                    redirect_uri=redirect_uri,
                    code_verifier=code_verifier,
                )
            )
        case GrantType.REFRESH_TOKEN:
            if not refresh_token:
                return oauth_error_response(
                    OAuthError(error=INVALID_REQUEST, description="refresh_token is required")
                )
            result = await token_service.rotate_refresh(
                RefreshTokens(client=client, refresh_token=refresh_token, scope=scope)
            )
        case GrantType.CLIENT_CREDENTIALS:
            result = await token_service.issue_client_credentials(
                IssueClientCredentials(client=client, scope=scope)
            )

    match result:
        case Failure(error=error):
            return oauth_error_response(to_oauth_error(error))
        case Success(value=issued):
            return _token_response(issued)


def _token_response(issued: IssuedTokens) -> JSONResponse:
    body = TokenResponse(
        access_token=issued.access_token,
        token_type=issued.token_type,
        expires_in=issued.expires_in,
        scope=issued.scope,
        refresh_token=issued.refresh_token,
        id_token=issued.id_token,
    )
    return JSONResponse(
        content=body.model_dump(exclude_none=True),
        headers=NO_STORE_HEADERS,
    )


# =============================================================================
# Introspection and Revocation
# =============================================================================


@oauth2_router.post(
    "/introspect",
    response_model=IntrospectionResponse,
    responses={401: {"description": "invalid_client", "model": OAuthErrorResponse}},
    summary="Token introspection",
)
async def introspect(
    request: Request,
    token: Annotated[str | None, Form()] = None,
    token_type_hint: Annotated[str | None, Form()] = None,
    client_id: Annotated[str | None, Form()] = None,
    client_secret: Annotated[str | None, Form()] = None,
    client_assertion_type: Annotated[str | None, Form()] = None,
    client_assertion: Annotated[str | None, Form()] = None,
    authenticator: ClientAuthenticator = Depends(get_client_authenticator),
    token_service: TokenService = Depends(get_token_service),
) -> JSONResponse:
    """Report whether a token is active (RFC 7662).

    POST /oauth2/introspect → 200 OK

    `token_type_hint` is accepted and ignored; every token kind is looked
    up by its `jti`.
    """
    client = await _authenticate_client(
        request,
        authenticator,
        client_id=client_id,
        client_secret=client_secret,
        client_assertion_type=client_assertion_type,
        client_assertion=client_assertion,
    )
    if isinstance(client, JSONResponse):
        return client
    if not token:
        return oauth_error_response(OAuthError(error=INVALID_REQUEST, description="token is required"))

    body = await token_service.introspect(token, client)
    return JSONResponse(content=body, headers=NO_STORE_HEADERS)


@oauth2_router.post(
    "/revoke",
    responses={
        200: {"description": "Token revoked (or was unknown / already invalid)"},
        401: {"description": "invalid_client", "model": OAuthErrorResponse},
    },
    summary="Token revocation",
)
async def revoke(
    request: Request,
    token: Annotated[str | None, Form()] = None,
    token_type_hint: Annotated[str | None, Form()] = None,
    client_id: Annotated[str | None, Form()] = None,
    client_secret: Annotated[str | None, Form()] = None,
    client_assertion_type: Annotated[str | None, Form()] = None,
    client_assertion: Annotated[str | None, Form()] = None,
    authenticator: ClientAuthenticator = Depends(get_client_authenticator),
    token_service: TokenService = Depends(get_token_service),
) -> Response:
    """Revoke a token (RFC 7009).

    POST /oauth2/revoke → 200 OK

    Unknown, invalid and foreign tokens also get 200 so the endpoint
    reveals nothing about them.
    """
    client = await _authenticate_client(
        request,
        authenticator,
        client_id=client_id,
        client_secret=client_secret,
        client_assertion_type=client_assertion_type,
        client_assertion=client_assertion,
    )
    if isinstance(client, JSONResponse):
        return client
    if not token:
        return oauth_error_response(OAuthError(error=INVALID_REQUEST, description="token is required"))

    await token_service.revoke(token, client)
    return Response(status_code=status.HTTP_200_OK, headers=NO_STORE_HEADERS)
