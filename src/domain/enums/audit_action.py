"""Audit action types for security event tracking.

This enum defines every auditable action the service records. Security-relevant
failures (repeated authentication failure, refresh-token reuse, authorization
code replay) are always recorded, whether or not the request that triggered
them eventually succeeded.

Extensibility:
    New actions can be added without database schema changes. Action-specific
    context is stored in the JSON `context` column.

Usage:
    from src.domain.enums import AuditAction

    await audit.record(
        action=AuditAction.USER_AUTHENTICATED,
        user_id=user_id,
        resource_type="identity",
        context={"ip_address": "203.0.113.7"},
    )
"""

from enum import Enum


class AuditAction(str, Enum):
    """Audit action types.

    String Enum:
        Values are snake_case strings stored verbatim in `audit_logs.action`.

    Categories:
        Identity: registration, authentication, password, linking, roles
        Client: registration, secret rotation, deactivation
        Authorization: code issuance, redemption, revocation, replay
        Token: issuance, revocation, refresh reuse
        Session: creation, revocation
    """

    # =========================================================================
    # Identity
    # =========================================================================
    USER_REGISTERED = "user_registered"
    USER_AUTHENTICATED = "user_authenticated"
    USER_AUTHENTICATION_FAILED = "user_authentication_failed"
    """Failed login for a known user. Context: reason, consecutive_failures."""

    USER_AUTHENTICATION_REJECTED = "user_authentication_rejected"
    """Failed login for an unknown email. Context: email_hash only."""

    USER_REPEATED_AUTHENTICATION_FAILURE = "user_repeated_authentication_failure"
    """Consecutive failures reached the alert threshold (security signal)."""

    USER_PASSWORD_CHANGED = "user_password_changed"
    USER_IDENTITY_LINKED = "user_identity_linked"
    USER_ROLE_ASSIGNED = "user_role_assigned"
    USER_ROLE_REVOKED = "user_role_revoked"
    USER_DEACTIVATED = "user_deactivated"

    # =========================================================================
    # Client
    # =========================================================================
    CLIENT_REGISTERED = "client_registered"
    CLIENT_SECRET_ROTATED = "client_secret_rotated"
    CLIENT_DEACTIVATED = "client_deactivated"

    # =========================================================================
    # Authorization
    # =========================================================================
    AUTHORIZATION_CODE_ISSUED = "authorization_code_issued"
    AUTHORIZATION_CODE_REDEEMED = "authorization_code_redeemed"
    AUTHORIZATION_REVOKED = "authorization_revoked"
    AUTHORIZATION_CODE_REPLAYED = "authorization_code_replayed"
    """A redeemed code was presented again (security signal)."""

    # =========================================================================
    # Token
    # =========================================================================
    TOKEN_REVOKED = "token_revoked"
    REFRESH_TOKEN_REUSED = "refresh_token_reused"
    """A rotated refresh token was presented again (security signal)."""

    # =========================================================================
    # Session
    # =========================================================================
    SESSION_CREATED = "session_created"
    SESSION_REVOKED = "session_revoked"
