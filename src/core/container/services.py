"""Application service factories.

Application-scoped singletons for the services shared by several handlers:
token revocation cascade, device sessions, token issuance and verification,
client authentication and the retention sweeper.
"""

from datetime import timedelta
from functools import lru_cache

from src.application.services import (
    ClientAuthenticator,
    RetentionSweeper,
    SessionManager,
    TokenPolicy,
    TokenRevoker,
    TokenService,
)
from src.core.config import get_settings
from src.core.container.infrastructure import (
    get_client_assertion_verifier,
    get_clock,
    get_index_store,
    get_logger,
    get_password_service,
    get_secrets,
    get_signer,
)
from src.core.container.repositories import (
    get_authorization_repository,
    get_client_repository,
    get_identity_repository,
    get_session_repository,
    get_token_repository,
)


@lru_cache()
def get_token_revoker() -> TokenRevoker:
    return TokenRevoker(
        tokens=get_token_repository(),
        clock=get_clock(),
        retry_attempts=get_settings().conflict_retry_attempts,
    )


@lru_cache()
def get_session_manager() -> SessionManager:
    return SessionManager(
        sessions=get_session_repository(),
        index=get_index_store(),
        revoker=get_token_revoker(),
        secrets=get_secrets(),
        clock=get_clock(),
        retry_attempts=get_settings().conflict_retry_attempts,
    )


@lru_cache()
def get_token_service() -> TokenService:
    """Token issuance, rotation, verification and introspection (app-scoped).

    Lifetimes come from settings; a client's own access/refresh TTL wins
    when it registered one.
    """
    settings = get_settings()
    return TokenService(
        tokens=get_token_repository(),
        clients=get_client_repository(),
        sessions=get_session_repository(),
        identities=get_identity_repository(),
        session_manager=get_session_manager(),
        revoker=get_token_revoker(),
        signer=get_signer(),
        index=get_index_store(),
        clock=get_clock(),
        policy=TokenPolicy(
            issuer=settings.issuer,
            access_token_ttl_seconds=settings.access_token_ttl_seconds,
            refresh_token_ttl_seconds=settings.refresh_token_ttl_seconds,
            id_token_ttl_seconds=settings.id_token_ttl_seconds,
            signer_timeout_seconds=settings.signer_timeout_seconds,
        ),
        logger=get_logger(),
        retry_attempts=settings.conflict_retry_attempts,
    )


@lru_cache()
def get_client_authenticator() -> ClientAuthenticator:
    return ClientAuthenticator(
        clients=get_client_repository(),
        password_service=get_password_service(),
        assertion_verifier=get_client_assertion_verifier(),
        clock=get_clock(),
    )


@lru_cache()
def get_retention_sweeper() -> RetentionSweeper:
    settings = get_settings()
    return RetentionSweeper(
        authorizations=get_authorization_repository(),
        tokens=get_token_repository(),
        index=get_index_store(),
        clock=get_clock(),
        retention_window=timedelta(seconds=settings.retention_window_seconds),
        abandon_after=timedelta(seconds=settings.authorization_code_ttl_seconds),
        logger=get_logger(),
    )
