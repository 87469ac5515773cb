"""Infrastructure dependency factories.

Application-scoped singletons for core infrastructure services:
- Logging (structlog console/JSON)
- Database (SQLAlchemy async, only for the sqlalchemy event store)
- Event store (in-memory / SQLAlchemy)
- Index store (in-memory / Redis)
- Signing key ring (RS256 JWT)
- Opaque secrets (codes, session handles, client credentials)
- Password hashing (bcrypt)
- Audit sink and email notifier
- Clock
"""

from functools import lru_cache
from typing import TYPE_CHECKING

from src.core.config import get_settings
from src.domain.value_objects import PasswordPolicy

if TYPE_CHECKING:
    from src.domain.protocols import (
        AuditSinkProtocol,
        ClientAssertionVerifierProtocol,
        ClockProtocol,
        EmailNotifierProtocol,
        EventStoreProtocol,
        ExternalIdentityVerifierProtocol,
        IndexStoreProtocol,
        LoggerProtocol,
        PasswordHashingProtocol,
        SecretGeneratorProtocol,
    )
    from src.infrastructure.event_store.codec import EventCodec
    from src.infrastructure.persistence.database import Database
    from src.infrastructure.security.jwt_signer import JWTSigner


# ============================================================================
# Logging (Application-Scoped)
# ============================================================================


@lru_cache()
def get_logger() -> "LoggerProtocol":
    """Return the application-scoped logger singleton.

    Adapter selection is centralized here (composition root):
    - development: ConsoleAdapter (human-readable)
    - testing/ci: ConsoleAdapter (JSON)
    - production: ConsoleAdapter (JSON when LOG_JSON=true)
    """
    from src.infrastructure.logging.console_adapter import ConsoleAdapter

    settings = get_settings()
    use_json = settings.log_json or settings.is_testing or settings.is_ci
    return ConsoleAdapter(use_json=use_json, level=settings.log_level)


# ============================================================================
# Storage (Application-Scoped)
# ============================================================================


@lru_cache()
def get_database() -> "Database":
    """Get database manager singleton (app-scoped).

    Raises:
        RuntimeError: DATABASE_URL is not configured.
    """
    from src.infrastructure.persistence.database import Database

    settings = get_settings()
    if not settings.database_url:
        raise RuntimeError("DATABASE_URL is required for the sqlalchemy event store")
    return Database(database_url=settings.database_url, echo=settings.db_echo)


@lru_cache()
def get_event_codec() -> "EventCodec":
    """Event codec built from the event registry (app-scoped)."""
    from src.infrastructure.event_store.codec import EventCodec

    return EventCodec()


@lru_cache()
def get_event_store() -> "EventStoreProtocol":
    """Get event store singleton (app-scoped).

    Returns correct adapter based on EVENT_STORE_BACKEND:
        - 'memory': InMemoryEventStore (development, tests, single process)
        - 'sqlalchemy': SQLAlchemyEventStore (PostgreSQL via asyncpg)
    """
    settings = get_settings()
    if settings.event_store_backend == "sqlalchemy":
        from src.infrastructure.event_store.sqlalchemy_event_store import (
            SQLAlchemyEventStore,
        )

        return SQLAlchemyEventStore(database=get_database(), codec=get_event_codec())

    from src.infrastructure.event_store.in_memory_event_store import InMemoryEventStore

    return InMemoryEventStore(codec=get_event_codec())


@lru_cache()
def get_index_store() -> "IndexStoreProtocol":
    """Get index store singleton (app-scoped).

    Returns correct adapter based on INDEX_STORE_BACKEND:
        - 'memory': InMemoryIndexStore
        - 'redis': RedisIndexStore with a shared connection pool

    Raises:
        RuntimeError: REDIS_URL is not configured for the redis backend.
    """
    settings = get_settings()
    if settings.index_store_backend == "redis":
        from redis.asyncio import ConnectionPool, Redis

        from src.infrastructure.index.redis_index_store import RedisIndexStore

        if not settings.redis_url:
            raise RuntimeError("REDIS_URL is required for the redis index store")
        pool = ConnectionPool.from_url(
            settings.redis_url,
            max_connections=50,
            decode_responses=False,
            socket_connect_timeout=settings.index_store_timeout_seconds,
            socket_timeout=settings.index_store_timeout_seconds,
            retry_on_timeout=True,
            socket_keepalive=True,
        )
        return RedisIndexStore(redis_client=Redis(connection_pool=pool))

    from src.infrastructure.index.in_memory_index_store import InMemoryIndexStore

    return InMemoryIndexStore()


# ============================================================================
# Security Services (Application-Scoped)
# ============================================================================


@lru_cache()
def get_signer() -> "JWTSigner":
    """Get the signing key ring singleton (app-scoped).

    Without SIGNING_KEY_PEM an ephemeral key is generated (logged as a
    warning in production; tokens will not verify after a restart).
    """
    from src.infrastructure.security.jwt_signer import JWTSigner

    settings = get_settings()
    if settings.signing_key_pem is None and settings.is_production:
        get_logger().warning(
            "ephemeral_signing_key",
            key_id=settings.signing_key_id,
        )
    return JWTSigner(
        key_id=settings.signing_key_id,
        private_key_pem=settings.signing_key_pem,
        previous_keys_pem=settings.previous_signing_keys_pem,
        algorithm=settings.signing_algorithm,
    )


@lru_cache()
def get_secrets() -> "SecretGeneratorProtocol":
    """Opaque secret generator (codes, handles, client credentials)."""
    from src.infrastructure.security.opaque_token_service import OpaqueTokenService

    return OpaqueTokenService()


@lru_cache()
def get_password_service() -> "PasswordHashingProtocol":
    """Get password hashing service singleton (app-scoped).

    Returns BcryptPasswordService with the configured cost factor. Used for
    user passwords and confidential client secrets.
    """
    from src.infrastructure.security.bcrypt_password_service import BcryptPasswordService

    return BcryptPasswordService(cost_factor=get_settings().bcrypt_rounds)


@lru_cache()
def get_password_policy() -> PasswordPolicy:
    settings = get_settings()
    return PasswordPolicy(
        min_length=settings.password_min_length,
        require_uppercase=settings.password_require_uppercase,
        require_lowercase=settings.password_require_lowercase,
        require_digit=settings.password_require_digit,
        require_special=settings.password_require_special,
    )


@lru_cache()
def get_client_assertion_verifier() -> "ClientAssertionVerifierProtocol":
    """private_key_jwt verifier; the audience is the token endpoint."""
    from src.infrastructure.security.client_assertion_verifier import (
        JWTClientAssertionVerifier,
    )

    return JWTClientAssertionVerifier(audience=get_settings().token_endpoint)


@lru_cache()
def get_identity_verifier() -> "ExternalIdentityVerifierProtocol":
    """Verifier for external identity proofs (account linking)."""
    from src.infrastructure.security.external_assertion_verifier import (
        SharedSecretAssertionVerifier,
    )

    settings = get_settings()
    return SharedSecretAssertionVerifier(
        provider_secrets=settings.external_identity_providers,
        audience=settings.issuer,
    )


@lru_cache()
def get_clock() -> "ClockProtocol":
    from src.infrastructure.clock import SystemClock

    return SystemClock()


# ============================================================================
# Audit and Email (Application-Scoped)
# ============================================================================


@lru_cache()
def get_audit_sink() -> "AuditSinkProtocol":
    """Get audit sink singleton (app-scoped).

    Audit records go to the `audit_logs` table when a database is configured
    (sqlalchemy event store), otherwise to the structured log.
    """
    if get_settings().event_store_backend == "sqlalchemy":
        from src.infrastructure.audit.database_audit_sink import DatabaseAuditSink

        return DatabaseAuditSink(database=get_database(), logger=get_logger())

    from src.infrastructure.audit.logging_audit_sink import LoggingAuditSink

    return LoggingAuditSink(logger=get_logger())


@lru_cache()
def get_email_notifier() -> "EmailNotifierProtocol":
    """Email notifier singleton (stub that logs instead of sending)."""
    from src.infrastructure.email.stub_email_notifier import StubEmailNotifier

    return StubEmailNotifier(logger=get_logger())
