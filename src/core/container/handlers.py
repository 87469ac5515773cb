"""Command and query handler factories.

Handlers hold no per-request state (every collaborator is app-scoped), so
each factory returns a cached instance. Routers depend on these factories
through FastAPI `Depends`, which tests override with
`app.dependency_overrides`.
"""

from functools import lru_cache

from src.application.commands.handlers.approve_authorization_handler import (
    ApproveAuthorizationHandler,
)
from src.application.commands.handlers.authenticate_user_handler import (
    AuthenticateUserHandler,
)
from src.application.commands.handlers.change_password_handler import ChangePasswordHandler
from src.application.commands.handlers.deactivate_client_handler import (
    DeactivateClientHandler,
)
from src.application.commands.handlers.deactivate_user_handler import DeactivateUserHandler
from src.application.commands.handlers.exchange_authorization_code_handler import (
    ExchangeAuthorizationCodeHandler,
)
from src.application.commands.handlers.link_identity_handler import LinkIdentityHandler
from src.application.commands.handlers.login_user_handler import LoginUserHandler
from src.application.commands.handlers.manage_roles_handler import ManageRolesHandler
from src.application.commands.handlers.register_client_handler import RegisterClientHandler
from src.application.commands.handlers.register_user_handler import RegisterUserHandler
from src.application.commands.handlers.revoke_all_sessions_handler import (
    RevokeAllSessionsHandler,
)
from src.application.commands.handlers.revoke_session_handler import RevokeSessionHandler
from src.application.commands.handlers.rotate_client_secret_handler import (
    RotateClientSecretHandler,
)
from src.application.commands.handlers.start_authorization_handler import (
    StartAuthorizationHandler,
)
from src.application.queries.handlers.get_authorization_request_handler import (
    GetAuthorizationRequestHandler,
)
from src.application.queries.handlers.get_user_handler import GetUserHandler
from src.application.queries.handlers.list_sessions_handler import ListSessionsHandler
from src.core.config import get_settings
from src.core.container.events import get_event_bus
from src.core.container.infrastructure import (
    get_clock,
    get_identity_verifier,
    get_index_store,
    get_logger,
    get_password_policy,
    get_password_service,
    get_secrets,
)
from src.core.container.repositories import (
    get_authorization_repository,
    get_client_repository,
    get_identity_repository,
)
from src.core.container.services import get_session_manager, get_token_service
from src.domain.value_objects import Email

# ============================================================================
# Identity Handlers
# ============================================================================


@lru_cache()
def get_register_user_handler() -> RegisterUserHandler:
    """Registration handler; BOOTSTRAP_ADMIN_EMAILS are normalised here.

    Raises:
        ValueError: A bootstrap admin email is malformed.
    """
    admin_emails = frozenset(
        Email(raw).value for raw in get_settings().bootstrap_admin_emails
    )
    return RegisterUserHandler(
        identities=get_identity_repository(),
        index=get_index_store(),
        password_service=get_password_service(),
        password_policy=get_password_policy(),
        clock=get_clock(),
        admin_emails=admin_emails,
    )


@lru_cache()
def get_authenticate_user_handler() -> AuthenticateUserHandler:
    settings = get_settings()
    return AuthenticateUserHandler(
        identities=get_identity_repository(),
        index=get_index_store(),
        password_service=get_password_service(),
        event_bus=get_event_bus(),
        clock=get_clock(),
        alert_threshold=settings.auth_failure_alert_threshold,
        retry_attempts=settings.conflict_retry_attempts,
    )


@lru_cache()
def get_login_user_handler() -> LoginUserHandler:
    return LoginUserHandler(
        authenticate_handler=get_authenticate_user_handler(),
        session_manager=get_session_manager(),
    )


@lru_cache()
def get_change_password_handler() -> ChangePasswordHandler:
    return ChangePasswordHandler(
        identities=get_identity_repository(),
        password_service=get_password_service(),
        password_policy=get_password_policy(),
        session_manager=get_session_manager(),
        clock=get_clock(),
        retry_attempts=get_settings().conflict_retry_attempts,
    )


@lru_cache()
def get_link_identity_handler() -> LinkIdentityHandler:
    settings = get_settings()
    return LinkIdentityHandler(
        identities=get_identity_repository(),
        index=get_index_store(),
        verifier=get_identity_verifier(),
        clock=get_clock(),
        verifier_timeout_seconds=settings.identity_verifier_timeout_seconds,
        retry_attempts=settings.conflict_retry_attempts,
    )


@lru_cache()
def get_manage_roles_handler() -> ManageRolesHandler:
    return ManageRolesHandler(
        identities=get_identity_repository(),
        clock=get_clock(),
        retry_attempts=get_settings().conflict_retry_attempts,
    )


@lru_cache()
def get_deactivate_user_handler() -> DeactivateUserHandler:
    return DeactivateUserHandler(
        identities=get_identity_repository(),
        index=get_index_store(),
        session_manager=get_session_manager(),
        clock=get_clock(),
        retry_attempts=get_settings().conflict_retry_attempts,
    )


# ============================================================================
# Client Handlers
# ============================================================================


@lru_cache()
def get_register_client_handler() -> RegisterClientHandler:
    return RegisterClientHandler(
        clients=get_client_repository(),
        secrets=get_secrets(),
        password_service=get_password_service(),
        clock=get_clock(),
        retry_attempts=get_settings().conflict_retry_attempts,
    )


@lru_cache()
def get_rotate_client_secret_handler() -> RotateClientSecretHandler:
    settings = get_settings()
    return RotateClientSecretHandler(
        clients=get_client_repository(),
        secrets=get_secrets(),
        password_service=get_password_service(),
        clock=get_clock(),
        grace_seconds=settings.client_secret_grace_seconds,
        retry_attempts=settings.conflict_retry_attempts,
    )


@lru_cache()
def get_deactivate_client_handler() -> DeactivateClientHandler:
    return DeactivateClientHandler(
        clients=get_client_repository(),
        clock=get_clock(),
        retry_attempts=get_settings().conflict_retry_attempts,
    )


# ============================================================================
# Authorization Code Flow Handlers
# ============================================================================


@lru_cache()
def get_start_authorization_handler() -> StartAuthorizationHandler:
    return StartAuthorizationHandler(
        clients=get_client_repository(),
        authorizations=get_authorization_repository(),
        index=get_index_store(),
        clock=get_clock(),
    )


@lru_cache()
def get_approve_authorization_handler() -> ApproveAuthorizationHandler:
    settings = get_settings()
    return ApproveAuthorizationHandler(
        authorizations=get_authorization_repository(),
        index=get_index_store(),
        secrets=get_secrets(),
        clock=get_clock(),
        code_ttl_seconds=settings.authorization_code_ttl_seconds,
        retry_attempts=settings.conflict_retry_attempts,
    )


@lru_cache()
def get_exchange_authorization_code_handler() -> ExchangeAuthorizationCodeHandler:
    return ExchangeAuthorizationCodeHandler(
        authorizations=get_authorization_repository(),
        index=get_index_store(),
        secrets=get_secrets(),
        token_service=get_token_service(),
        event_bus=get_event_bus(),
        clock=get_clock(),
        logger=get_logger(),
        retry_attempts=get_settings().conflict_retry_attempts,
    )


# ============================================================================
# Session Handlers
# ============================================================================


@lru_cache()
def get_revoke_session_handler() -> RevokeSessionHandler:
    return RevokeSessionHandler(session_manager=get_session_manager())


@lru_cache()
def get_revoke_all_sessions_handler() -> RevokeAllSessionsHandler:
    return RevokeAllSessionsHandler(session_manager=get_session_manager())


# ============================================================================
# Query Handlers
# ============================================================================


@lru_cache()
def get_list_sessions_handler() -> ListSessionsHandler:
    return ListSessionsHandler(session_manager=get_session_manager())


@lru_cache()
def get_get_user_handler() -> GetUserHandler:
    return GetUserHandler(identities=get_identity_repository())


@lru_cache()
def get_get_authorization_request_handler() -> GetAuthorizationRequestHandler:
    return GetAuthorizationRequestHandler(authorizations=get_authorization_repository())
