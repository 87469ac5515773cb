"""Audit event handler for domain events.

This module implements audit trail recording for security-relevant domain
events. Maps each event to its AuditAction and records it through the audit
sink with the identifiers an investigator needs.

Event → Audit Action Mapping:
    - UserRegistered → USER_REGISTERED
    - UserAuthenticated → USER_AUTHENTICATED
    - AuthenticationFailed → USER_AUTHENTICATION_FAILED
    - AuthenticationRejected → USER_AUTHENTICATION_REJECTED
    - RepeatedAuthenticationFailure → USER_REPEATED_AUTHENTICATION_FAILURE
    - PasswordChanged → USER_PASSWORD_CHANGED
    - IdentityLinked → USER_IDENTITY_LINKED
    - RoleAssigned / RoleRevoked → USER_ROLE_ASSIGNED / USER_ROLE_REVOKED
    - UserDeactivated → USER_DEACTIVATED
    - ClientRegistered / ClientSecretRotated / ClientDeactivated → CLIENT_*
    - AuthorizationCodeIssued / Redeemed → AUTHORIZATION_CODE_ISSUED / REDEEMED
    - AuthorizationRevoked → AUTHORIZATION_REVOKED
    - AuthorizationCodeReplayDetected → AUTHORIZATION_CODE_REPLAYED
    - TokenRevoked → TOKEN_REVOKED
    - RefreshTokenReuseDetected → REFRESH_TOKEN_REUSED
    - SessionCreated / SessionRevoked → SESSION_CREATED / SESSION_REVOKED

Audit Record Structure:
    - action: AuditAction enum (machine-readable)
    - user_id: UUID (None for client and token events without a user subject)
    - resource_type: identity, client, authorization, token or session
    - resource_id: Stream identifier of the affected resource
    - context: JSON dict with event-specific fields (never secrets or hashes)

Usage:
    >>> audit_handler = AuditEventHandler(audit=get_audit())
    >>> event_bus.subscribe(UserRegistered, audit_handler.handle_user_registered)
"""

from typing import Any
from uuid import UUID

from src.domain.enums import AggregateType, AuditAction
from src.domain.events import (
    AuthenticationFailed,
    AuthenticationRejected,
    AuthorizationCodeIssued,
    AuthorizationCodeRedeemed,
    AuthorizationCodeReplayDetected,
    AuthorizationRevoked,
    ClientDeactivated,
    ClientRegistered,
    ClientSecretRotated,
    IdentityLinked,
    PasswordChanged,
    RefreshTokenReuseDetected,
    RepeatedAuthenticationFailure,
    RoleAssigned,
    RoleRevoked,
    SessionCreated,
    SessionRevoked,
    TokenRevoked,
    UserAuthenticated,
    UserDeactivated,
    UserRegistered,
)
from src.domain.events.base_event import DomainEvent
from src.domain.protocols.audit_protocol import AuditSinkProtocol


def _subject_user_id(subject: str) -> UUID | None:
    """Token subjects are user ids, except for client_credentials tokens."""
    try:
        return UUID(subject)
    except ValueError:
        return None


class AuditEventHandler:
    """Event handler for audit trail recording.

    Attributes:
        _audit: Audit sink (from container).
    """

    def __init__(self, audit: AuditSinkProtocol) -> None:
        """Initialize audit handler.

        Args:
            audit: Audit sink implementation from container.
        """
        self._audit = audit

    async def _record(
        self,
        event: DomainEvent,
        *,
        action: AuditAction,
        resource_type: AggregateType,
        resource_id: str,
        user_id: UUID | None = None,
        ip_address: str | None = None,
        **context: Any,
    ) -> None:
        await self._audit.record(
            action=action,
            resource_type=resource_type.value,
            user_id=user_id,
            resource_id=resource_id,
            ip_address=ip_address,
            context={
                "event_id": str(event.event_id),
                "occurred_at": event.occurred_at.isoformat(),
                **context,
            },
        )

    # =========================================================================
    # Identity Event Handlers
    # =========================================================================

    async def handle_user_registered(self, event: UserRegistered) -> None:
        """Record user registration.

        Audit Record:
            - action: USER_REGISTERED
            - resource_id: user_id
            - context: {email}
        """
        await self._record(
            event,
            action=AuditAction.USER_REGISTERED,
            resource_type=AggregateType.IDENTITY,
            resource_id=str(event.user_id),
            user_id=event.user_id,
            email=event.email,
        )

    async def handle_user_authenticated(self, event: UserAuthenticated) -> None:
        await self._record(
            event,
            action=AuditAction.USER_AUTHENTICATED,
            resource_type=AggregateType.IDENTITY,
            resource_id=str(event.user_id),
            user_id=event.user_id,
            ip_address=event.ip_address,
            user_agent=event.user_agent,
        )

    async def handle_authentication_failed(self, event: AuthenticationFailed) -> None:
        await self._record(
            event,
            action=AuditAction.USER_AUTHENTICATION_FAILED,
            resource_type=AggregateType.IDENTITY,
            resource_id=str(event.user_id),
            user_id=event.user_id,
            ip_address=event.ip_address,
            reason=event.reason,
        )

    async def handle_authentication_rejected(self, event: AuthenticationRejected) -> None:
        """Record a login attempt for an unknown email.

        Audit Record:
            - action: USER_AUTHENTICATION_REJECTED
            - user_id: None (no such user)
            - resource_id: SHA-256 of the normalised email
        """
        await self._record(
            event,
            action=AuditAction.USER_AUTHENTICATION_REJECTED,
            resource_type=AggregateType.IDENTITY,
            resource_id=event.email_hash,
            ip_address=event.ip_address,
        )

    async def handle_repeated_authentication_failure(
        self, event: RepeatedAuthenticationFailure
    ) -> None:
        await self._record(
            event,
            action=AuditAction.USER_REPEATED_AUTHENTICATION_FAILURE,
            resource_type=AggregateType.IDENTITY,
            resource_id=str(event.user_id),
            user_id=event.user_id,
            ip_address=event.ip_address,
            consecutive_failures=event.consecutive_failures,
        )

    async def handle_password_changed(self, event: PasswordChanged) -> None:
        await self._record(
            event,
            action=AuditAction.USER_PASSWORD_CHANGED,
            resource_type=AggregateType.IDENTITY,
            resource_id=str(event.user_id),
            user_id=event.user_id,
        )

    async def handle_identity_linked(self, event: IdentityLinked) -> None:
        await self._record(
            event,
            action=AuditAction.USER_IDENTITY_LINKED,
            resource_type=AggregateType.IDENTITY,
            resource_id=str(event.user_id),
            user_id=event.user_id,
            provider=event.provider,
            external_id=event.external_id,
        )

    async def handle_role_assigned(self, event: RoleAssigned) -> None:
        await self._record(
            event,
            action=AuditAction.USER_ROLE_ASSIGNED,
            resource_type=AggregateType.IDENTITY,
            resource_id=str(event.user_id),
            user_id=event.user_id,
            role=event.role,
        )

    async def handle_role_revoked(self, event: RoleRevoked) -> None:
        await self._record(
            event,
            action=AuditAction.USER_ROLE_REVOKED,
            resource_type=AggregateType.IDENTITY,
            resource_id=str(event.user_id),
            user_id=event.user_id,
            role=event.role,
        )

    async def handle_user_deactivated(self, event: UserDeactivated) -> None:
        await self._record(
            event,
            action=AuditAction.USER_DEACTIVATED,
            resource_type=AggregateType.IDENTITY,
            resource_id=str(event.user_id),
            user_id=event.user_id,
            reason=event.reason,
        )

    # =========================================================================
    # Client Event Handlers
    # =========================================================================

    async def handle_client_registered(self, event: ClientRegistered) -> None:
        await self._record(
            event,
            action=AuditAction.CLIENT_REGISTERED,
            resource_type=AggregateType.CLIENT,
            resource_id=event.client_id,
            name=event.name,
            confidential=event.confidential,
            redirect_uris=sorted(event.redirect_uris),
            grant_types=sorted(grant.value for grant in event.grant_types),
        )

    async def handle_client_secret_rotated(self, event: ClientSecretRotated) -> None:
        await self._record(
            event,
            action=AuditAction.CLIENT_SECRET_ROTATED,
            resource_type=AggregateType.CLIENT,
            resource_id=event.client_id,
            previous_valid_until=(
                event.previous_valid_until.isoformat() if event.previous_valid_until else None
            ),
        )

    async def handle_client_deactivated(self, event: ClientDeactivated) -> None:
        await self._record(
            event,
            action=AuditAction.CLIENT_DEACTIVATED,
            resource_type=AggregateType.CLIENT,
            resource_id=event.client_id,
            reason=event.reason,
        )

    # =========================================================================
    # Authorization Event Handlers
    # =========================================================================

    async def handle_authorization_code_issued(self, event: AuthorizationCodeIssued) -> None:
        await self._record(
            event,
            action=AuditAction.AUTHORIZATION_CODE_ISSUED,
            resource_type=AggregateType.AUTHORIZATION,
            resource_id=str(event.request_id),
            expires_at=event.expires_at.isoformat(),
        )

    async def handle_authorization_code_redeemed(
        self, event: AuthorizationCodeRedeemed
    ) -> None:
        await self._record(
            event,
            action=AuditAction.AUTHORIZATION_CODE_REDEEMED,
            resource_type=AggregateType.AUTHORIZATION,
            resource_id=str(event.request_id),
            issued_jtis=list(event.issued_jtis),
        )

    async def handle_authorization_revoked(self, event: AuthorizationRevoked) -> None:
        await self._record(
            event,
            action=AuditAction.AUTHORIZATION_REVOKED,
            resource_type=AggregateType.AUTHORIZATION,
            resource_id=str(event.request_id),
            reason=event.reason,
        )

    async def handle_authorization_code_replay_detected(
        self, event: AuthorizationCodeReplayDetected
    ) -> None:
        """Record a replayed authorization code.

        Audit Record:
            - action: AUTHORIZATION_CODE_REPLAYED
            - resource_id: request_id
            - context: {client_id, revoked_jtis}
        """
        await self._record(
            event,
            action=AuditAction.AUTHORIZATION_CODE_REPLAYED,
            resource_type=AggregateType.AUTHORIZATION,
            resource_id=str(event.request_id),
            client_id=event.client_id,
            revoked_jtis=list(event.revoked_jtis),
        )

    # =========================================================================
    # Token Event Handlers
    # =========================================================================

    async def handle_token_revoked(self, event: TokenRevoked) -> None:
        await self._record(
            event,
            action=AuditAction.TOKEN_REVOKED,
            resource_type=AggregateType.TOKEN,
            resource_id=event.jti,
            reason=event.reason,
        )

    async def handle_refresh_token_reuse_detected(
        self, event: RefreshTokenReuseDetected
    ) -> None:
        """Record refresh token reuse.

        Audit Record:
            - action: REFRESH_TOKEN_REUSED
            - user_id: subject when it is a user
            - resource_id: the reused jti
            - context: {client_id, family_root_jti}
        """
        await self._record(
            event,
            action=AuditAction.REFRESH_TOKEN_REUSED,
            resource_type=AggregateType.TOKEN,
            resource_id=event.jti,
            user_id=_subject_user_id(event.subject),
            client_id=event.client_id,
            family_root_jti=event.family_root_jti,
        )

    # =========================================================================
    # Session Event Handlers
    # =========================================================================

    async def handle_session_created(self, event: SessionCreated) -> None:
        await self._record(
            event,
            action=AuditAction.SESSION_CREATED,
            resource_type=AggregateType.SESSION,
            resource_id=str(event.session_id),
            user_id=event.user_id,
            ip_address=event.ip_address,
            device_info=event.device_info,
        )

    async def handle_session_revoked(self, event: SessionRevoked) -> None:
        await self._record(
            event,
            action=AuditAction.SESSION_REVOKED,
            resource_type=AggregateType.SESSION,
            resource_id=str(event.session_id),
            user_id=event.user_id,
            reason=event.reason,
        )
