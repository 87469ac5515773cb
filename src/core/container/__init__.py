"""Container module - Centralized dependency injection.

This module re-exports all factory functions from submodules:

    from src.core.container import get_event_bus, get_token_service, ...

The container is organized into modules by layer:
- infrastructure: Logging, storage, signing, hashing, audit, email, clock
- events: Event bus and registry-driven subscriptions
- repositories: One AggregateRepository per aggregate type
- services: Token, session, revocation, client authentication, retention
- handlers: Command and query handler factories

Every factory is an `lru_cache` singleton; `reset_container()` clears them
all (tests use it to get a fresh event log per test).
"""

from src.core.container import events, handlers, infrastructure, repositories, services

# Infrastructure services
from src.core.container.infrastructure import (
    get_audit_sink,
    get_client_assertion_verifier,
    get_clock,
    get_database,
    get_email_notifier,
    get_event_codec,
    get_event_store,
    get_identity_verifier,
    get_index_store,
    get_logger,
    get_password_policy,
    get_password_service,
    get_secrets,
    get_signer,
)

# Event bus
from src.core.container.events import get_event_bus

# Repositories
from src.core.container.repositories import (
    get_authorization_repository,
    get_client_repository,
    get_identity_repository,
    get_session_repository,
    get_token_repository,
)

# Application services
from src.core.container.services import (
    get_client_authenticator,
    get_retention_sweeper,
    get_session_manager,
    get_token_revoker,
    get_token_service,
)

# Handlers
from src.core.container.handlers import (
    get_approve_authorization_handler,
    get_authenticate_user_handler,
    get_change_password_handler,
    get_deactivate_client_handler,
    get_deactivate_user_handler,
    get_exchange_authorization_code_handler,
    get_get_authorization_request_handler,
    get_get_user_handler,
    get_link_identity_handler,
    get_list_sessions_handler,
    get_login_user_handler,
    get_manage_roles_handler,
    get_register_client_handler,
    get_register_user_handler,
    get_revoke_all_sessions_handler,
    get_revoke_session_handler,
    get_rotate_client_secret_handler,
    get_start_authorization_handler,
)


def reset_container() -> None:
    """Drop every cached singleton (settings included)."""
    from src.core.config import get_settings

    get_settings.cache_clear()
    for module in (infrastructure, events, repositories, services, handlers):
        for name in dir(module):
            factory = getattr(module, name)
            if name.startswith("get_") and hasattr(factory, "cache_clear"):
                factory.cache_clear()


__all__ = [
    # Infrastructure
    "get_audit_sink",
    "get_client_assertion_verifier",
    "get_clock",
    "get_database",
    "get_email_notifier",
    "get_event_codec",
    "get_event_store",
    "get_identity_verifier",
    "get_index_store",
    "get_logger",
    "get_password_policy",
    "get_password_service",
    "get_secrets",
    "get_signer",
    # Events
    "get_event_bus",
    # Repositories
    "get_authorization_repository",
    "get_client_repository",
    "get_identity_repository",
    "get_session_repository",
    "get_token_repository",
    # Services
    "get_client_authenticator",
    "get_retention_sweeper",
    "get_session_manager",
    "get_token_revoker",
    "get_token_service",
    # Handlers
    "get_approve_authorization_handler",
    "get_authenticate_user_handler",
    "get_change_password_handler",
    "get_deactivate_client_handler",
    "get_deactivate_user_handler",
    "get_exchange_authorization_code_handler",
    "get_get_authorization_request_handler",
    "get_get_user_handler",
    "get_link_identity_handler",
    "get_list_sessions_handler",
    "get_login_user_handler",
    "get_manage_roles_handler",
    "get_register_client_handler",
    "get_register_user_handler",
    "get_revoke_all_sessions_handler",
    "get_revoke_session_handler",
    "get_rotate_client_secret_handler",
    "get_start_authorization_handler",
    # Lifecycle
    "reset_container",
]
