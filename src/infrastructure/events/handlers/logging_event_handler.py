"""Logging event handler for domain events.

This module implements structured logging for every registered domain event.
Each event gets its own `handle_<snake_case_name>` method so the container can
subscribe it from EVENT_REGISTRY.

Log Levels:
    - INFO: Normal lifecycle facts (registered, issued, rotated, revoked)
    - WARNING: Authentication failures and security signals (refresh token
      reuse, code replay, repeated failures)

Structured Fields:
    - event_id: UUID for event correlation and deduplication
    - occurred_at: ISO 8601 timestamp (UTC)
    - Event-specific identifiers (user_id, client_id, jti, session_id, ...)

Security:
    Password hashes, client secret hashes, code hashes and session handle
    hashes are never logged.

Usage:
    >>> logging_handler = LoggingEventHandler(logger=get_logger())
    >>> event_bus.subscribe(UserRegistered, logging_handler.handle_user_registered)
"""

from src.domain.events import (
    AuthenticationFailed,
    AuthenticationRejected,
    AuthorizationCodeIssued,
    AuthorizationCodeRedeemed,
    AuthorizationCodeReplayDetected,
    AuthorizationConsented,
    AuthorizationExpired,
    AuthorizationRequested,
    AuthorizationRevoked,
    ClientDeactivated,
    ClientRegistered,
    ClientSecretRotated,
    IdentityLinked,
    PasswordChanged,
    RefreshTokenReuseDetected,
    RefreshTokenRotated,
    RepeatedAuthenticationFailure,
    RoleAssigned,
    RoleRevoked,
    SessionActivityRecorded,
    SessionCreated,
    SessionRevoked,
    SessionTokenAttached,
    TokenIssued,
    TokenRevoked,
    UserAuthenticated,
    UserDeactivated,
    UserRegistered,
)
from src.domain.events.base_event import DomainEvent
from src.domain.protocols.logger_protocol import LoggerProtocol


class LoggingEventHandler:
    """Event handler for structured logging of domain events.

    Attributes:
        _logger: Logger protocol implementation (from container).
    """

    def __init__(self, logger: LoggerProtocol) -> None:
        """Initialize logging handler with logger.

        Args:
            logger: Logger protocol implementation from container.
        """
        self._logger = logger

    def _info(self, message: str, event: DomainEvent, **context: object) -> None:
        self._logger.info(
            message,
            event_id=str(event.event_id),
            occurred_at=event.occurred_at.isoformat(),
            **context,
        )

    def _warning(self, message: str, event: DomainEvent, **context: object) -> None:
        self._logger.warning(
            message,
            event_id=str(event.event_id),
            occurred_at=event.occurred_at.isoformat(),
            **context,
        )

    # =========================================================================
    # Identity Event Handlers
    # =========================================================================

    async def handle_user_registered(self, event: UserRegistered) -> None:
        """Log user registration (INFO level).

        Args:
            event: UserRegistered event. The password hash is not logged.
        """
        self._info("user_registered", event, user_id=str(event.user_id), email=event.email)

    async def handle_user_authenticated(self, event: UserAuthenticated) -> None:
        self._info(
            "user_authenticated",
            event,
            user_id=str(event.user_id),
            ip_address=event.ip_address,
        )

    async def handle_authentication_failed(self, event: AuthenticationFailed) -> None:
        """Log failed password check for a known user (WARNING level)."""
        self._warning(
            "authentication_failed",
            event,
            user_id=str(event.user_id),
            reason=event.reason,
            ip_address=event.ip_address,
        )

    async def handle_password_changed(self, event: PasswordChanged) -> None:
        self._info("password_changed", event, user_id=str(event.user_id))

    async def handle_identity_linked(self, event: IdentityLinked) -> None:
        self._info(
            "identity_linked",
            event,
            user_id=str(event.user_id),
            provider=event.provider,
        )

    async def handle_role_assigned(self, event: RoleAssigned) -> None:
        self._info("role_assigned", event, user_id=str(event.user_id), role=event.role)

    async def handle_role_revoked(self, event: RoleRevoked) -> None:
        self._info("role_revoked", event, user_id=str(event.user_id), role=event.role)

    async def handle_user_deactivated(self, event: UserDeactivated) -> None:
        self._info(
            "user_deactivated",
            event,
            user_id=str(event.user_id),
            reason=event.reason,
        )

    # =========================================================================
    # Client Event Handlers
    # =========================================================================

    async def handle_client_registered(self, event: ClientRegistered) -> None:
        """Log client registration (INFO level).

        Args:
            event: ClientRegistered event. The secret hash is not logged.
        """
        self._info(
            "client_registered",
            event,
            client_id=event.client_id,
            name=event.name,
            confidential=event.confidential,
            grant_types=sorted(grant.value for grant in event.grant_types),
        )

    async def handle_client_secret_rotated(self, event: ClientSecretRotated) -> None:
        self._info(
            "client_secret_rotated",
            event,
            client_id=event.client_id,
            previous_valid_until=(
                event.previous_valid_until.isoformat() if event.previous_valid_until else None
            ),
        )

    async def handle_client_deactivated(self, event: ClientDeactivated) -> None:
        self._info(
            "client_deactivated",
            event,
            client_id=event.client_id,
            reason=event.reason,
        )

    # =========================================================================
    # Authorization Event Handlers
    # =========================================================================

    async def handle_authorization_requested(self, event: AuthorizationRequested) -> None:
        self._info(
            "authorization_requested",
            event,
            request_id=str(event.request_id),
            client_id=event.client_id,
            scopes=sorted(event.scopes),
            pkce=event.code_challenge is not None,
        )

    async def handle_authorization_consented(self, event: AuthorizationConsented) -> None:
        self._info(
            "authorization_consented",
            event,
            request_id=str(event.request_id),
            user_id=str(event.user_id),
            granted_scopes=sorted(event.granted_scopes),
        )

    async def handle_authorization_code_issued(self, event: AuthorizationCodeIssued) -> None:
        """Log code issuance (INFO level). The code hash is not logged."""
        self._info(
            "authorization_code_issued",
            event,
            request_id=str(event.request_id),
            expires_at=event.expires_at.isoformat(),
        )

    async def handle_authorization_code_redeemed(
        self, event: AuthorizationCodeRedeemed
    ) -> None:
        self._info(
            "authorization_code_redeemed",
            event,
            request_id=str(event.request_id),
            issued_jtis=list(event.issued_jtis),
        )

    async def handle_authorization_expired(self, event: AuthorizationExpired) -> None:
        self._info("authorization_expired", event, request_id=str(event.request_id))

    async def handle_authorization_revoked(self, event: AuthorizationRevoked) -> None:
        self._warning(
            "authorization_revoked",
            event,
            request_id=str(event.request_id),
            reason=event.reason,
        )

    # =========================================================================
    # Token Event Handlers
    # =========================================================================

    async def handle_token_issued(self, event: TokenIssued) -> None:
        self._info(
            "token_issued",
            event,
            jti=event.jti,
            token_use=event.token_use.value,
            client_id=event.client_id,
            subject=event.subject,
            expires_at=event.expires_at.isoformat(),
            parent_jti=event.parent_jti,
        )

    async def handle_refresh_token_rotated(self, event: RefreshTokenRotated) -> None:
        self._info(
            "refresh_token_rotated",
            event,
            jti=event.jti,
            child_jtis=list(event.child_jtis),
        )

    async def handle_token_revoked(self, event: TokenRevoked) -> None:
        self._info("token_revoked", event, jti=event.jti, reason=event.reason)

    async def handle_refresh_token_reuse_detected(
        self, event: RefreshTokenReuseDetected
    ) -> None:
        """Log refresh token reuse (WARNING level, security signal).

        Args:
            event: RefreshTokenReuseDetected event. The whole family has
                already been revoked when this is published.
        """
        self._warning(
            "refresh_token_reuse_detected",
            event,
            jti=event.jti,
            client_id=event.client_id,
            subject=event.subject,
            family_root_jti=event.family_root_jti,
        )

    # =========================================================================
    # Session Event Handlers
    # =========================================================================

    async def handle_session_created(self, event: SessionCreated) -> None:
        self._info(
            "session_created",
            event,
            session_id=str(event.session_id),
            user_id=str(event.user_id),
            device_info=event.device_info,
            ip_address=event.ip_address,
        )

    async def handle_session_activity_recorded(self, event: SessionActivityRecorded) -> None:
        self._logger.debug(
            "session_activity_recorded",
            event_id=str(event.event_id),
            occurred_at=event.occurred_at.isoformat(),
            session_id=str(event.session_id),
            ip_address=event.ip_address,
        )

    async def handle_session_token_attached(self, event: SessionTokenAttached) -> None:
        self._logger.debug(
            "session_token_attached",
            event_id=str(event.event_id),
            occurred_at=event.occurred_at.isoformat(),
            session_id=str(event.session_id),
            jti=event.jti,
        )

    async def handle_session_revoked(self, event: SessionRevoked) -> None:
        self._info(
            "session_revoked",
            event,
            session_id=str(event.session_id),
            user_id=str(event.user_id),
            reason=event.reason,
        )

    # =========================================================================
    # Security Signal Handlers
    # =========================================================================

    async def handle_repeated_authentication_failure(
        self, event: RepeatedAuthenticationFailure
    ) -> None:
        self._warning(
            "repeated_authentication_failure",
            event,
            user_id=str(event.user_id),
            consecutive_failures=event.consecutive_failures,
            ip_address=event.ip_address,
        )

    async def handle_authentication_rejected(self, event: AuthenticationRejected) -> None:
        """Log a login attempt for an unknown email (WARNING level).

        Only the email hash is logged, so the log does not reveal which
        addresses are registered.
        """
        self._warning(
            "authentication_rejected",
            event,
            email_hash=event.email_hash,
            ip_address=event.ip_address,
        )

    async def handle_authorization_code_replay_detected(
        self, event: AuthorizationCodeReplayDetected
    ) -> None:
        self._warning(
            "authorization_code_replay_detected",
            event,
            request_id=str(event.request_id),
            client_id=event.client_id,
            revoked_jtis=list(event.revoked_jtis),
        )
