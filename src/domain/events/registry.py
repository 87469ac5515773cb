"""Domain Events Registry - Single Source of Truth.

This registry catalogs ALL domain events in the system with their metadata.
Used for:
- Event codec (event_type name -> class for decoding stored events)
- Container wiring (automated bus subscription)
- Validation tests (verify no drift between events, audit actions, handlers)

Adding new events:
1. Define event dataclass in the appropriate *_events.py file
2. Add it to that module's closed union and the fold that consumes it
3. Add an entry to EVENT_REGISTRY below
4. Run tests - they'll tell you what's missing (audit action, fold case)
"""

import re
from dataclasses import dataclass

from src.domain.enums import AggregateType
from src.domain.events.authorization_events import (
    AuthorizationCodeIssued,
    AuthorizationCodeRedeemed,
    AuthorizationConsented,
    AuthorizationExpired,
    AuthorizationRequested,
    AuthorizationRevoked,
)
from src.domain.events.base_event import DomainEvent
from src.domain.events.client_events import (
    ClientDeactivated,
    ClientRegistered,
    ClientSecretRotated,
)
from src.domain.events.identity_events import (
    AuthenticationFailed,
    IdentityLinked,
    PasswordChanged,
    RoleAssigned,
    RoleRevoked,
    UserAuthenticated,
    UserDeactivated,
    UserRegistered,
)
from src.domain.events.security_events import (
    AuthenticationRejected,
    AuthorizationCodeReplayDetected,
    RepeatedAuthenticationFailure,
)
from src.domain.events.session_events import (
    SessionActivityRecorded,
    SessionCreated,
    SessionRevoked,
    SessionTokenAttached,
)
from src.domain.events.token_events import (
    RefreshTokenReuseDetected,
    RefreshTokenRotated,
    TokenIssued,
    TokenRevoked,
)


@dataclass(frozen=True)
class EventMetadata:
    """Metadata for a domain event.

    Attributes:
        event_class: The event dataclass.
        aggregate_type: Stream the event is appended to; None for bus-only
            security signals.
        requires_logging: LoggingEventHandler handles this event.
        requires_audit: AuditEventHandler handles this event.
        requires_email: EmailEventHandler handles this event.
        security_signal: Logged at warning and always audited.
        audit_action_name: Expected AuditAction enum name.
    """

    event_class: type[DomainEvent]
    aggregate_type: AggregateType | None
    requires_logging: bool = True
    requires_audit: bool = False
    requires_email: bool = False
    security_signal: bool = False
    audit_action_name: str = ""


# ═══════════════════════════════════════════════════════════════
# EVENT REGISTRY - Single Source of Truth
# ═══════════════════════════════════════════════════════════════

EVENT_REGISTRY: list[EventMetadata] = [
    # Identity
    EventMetadata(
        event_class=UserRegistered,
        aggregate_type=AggregateType.IDENTITY,
        requires_audit=True,
        requires_email=True,
        audit_action_name="USER_REGISTERED",
    ),
    EventMetadata(
        event_class=UserAuthenticated,
        aggregate_type=AggregateType.IDENTITY,
        requires_audit=True,
        audit_action_name="USER_AUTHENTICATED",
    ),
    EventMetadata(
        event_class=AuthenticationFailed,
        aggregate_type=AggregateType.IDENTITY,
        requires_audit=True,
        audit_action_name="USER_AUTHENTICATION_FAILED",
    ),
    EventMetadata(
        event_class=PasswordChanged,
        aggregate_type=AggregateType.IDENTITY,
        requires_audit=True,
        requires_email=True,
        audit_action_name="USER_PASSWORD_CHANGED",
    ),
    EventMetadata(
        event_class=IdentityLinked,
        aggregate_type=AggregateType.IDENTITY,
        requires_audit=True,
        audit_action_name="USER_IDENTITY_LINKED",
    ),
    EventMetadata(
        event_class=RoleAssigned,
        aggregate_type=AggregateType.IDENTITY,
        requires_audit=True,
        audit_action_name="USER_ROLE_ASSIGNED",
    ),
    EventMetadata(
        event_class=RoleRevoked,
        aggregate_type=AggregateType.IDENTITY,
        requires_audit=True,
        audit_action_name="USER_ROLE_REVOKED",
    ),
    EventMetadata(
        event_class=UserDeactivated,
        aggregate_type=AggregateType.IDENTITY,
        requires_audit=True,
        audit_action_name="USER_DEACTIVATED",
    ),
    # Client
    EventMetadata(
        event_class=ClientRegistered,
        aggregate_type=AggregateType.CLIENT,
        requires_audit=True,
        audit_action_name="CLIENT_REGISTERED",
    ),
    EventMetadata(
        event_class=ClientSecretRotated,
        aggregate_type=AggregateType.CLIENT,
        requires_audit=True,
        audit_action_name="CLIENT_SECRET_ROTATED",
    ),
    EventMetadata(
        event_class=ClientDeactivated,
        aggregate_type=AggregateType.CLIENT,
        requires_audit=True,
        audit_action_name="CLIENT_DEACTIVATED",
    ),
    # Authorization
    EventMetadata(
        event_class=AuthorizationRequested,
        aggregate_type=AggregateType.AUTHORIZATION,
    ),
    EventMetadata(
        event_class=AuthorizationConsented,
        aggregate_type=AggregateType.AUTHORIZATION,
    ),
    EventMetadata(
        event_class=AuthorizationCodeIssued,
        aggregate_type=AggregateType.AUTHORIZATION,
        requires_audit=True,
        audit_action_name="AUTHORIZATION_CODE_ISSUED",
    ),
    EventMetadata(
        event_class=AuthorizationCodeRedeemed,
        aggregate_type=AggregateType.AUTHORIZATION,
        requires_audit=True,
        audit_action_name="AUTHORIZATION_CODE_REDEEMED",
    ),
    EventMetadata(
        event_class=AuthorizationExpired,
        aggregate_type=AggregateType.AUTHORIZATION,
    ),
    EventMetadata(
        event_class=AuthorizationRevoked,
        aggregate_type=AggregateType.AUTHORIZATION,
        requires_audit=True,
        audit_action_name="AUTHORIZATION_REVOKED",
    ),
    # Token
    EventMetadata(
        event_class=TokenIssued,
        aggregate_type=AggregateType.TOKEN,
    ),
    EventMetadata(
        event_class=RefreshTokenRotated,
        aggregate_type=AggregateType.TOKEN,
    ),
    EventMetadata(
        event_class=TokenRevoked,
        aggregate_type=AggregateType.TOKEN,
        requires_audit=True,
        audit_action_name="TOKEN_REVOKED",
    ),
    EventMetadata(
        event_class=RefreshTokenReuseDetected,
        aggregate_type=AggregateType.TOKEN,
        requires_audit=True,
        requires_email=True,
        security_signal=True,
        audit_action_name="REFRESH_TOKEN_REUSED",
    ),
    # Session
    EventMetadata(
        event_class=SessionCreated,
        aggregate_type=AggregateType.SESSION,
        requires_audit=True,
        audit_action_name="SESSION_CREATED",
    ),
    EventMetadata(
        event_class=SessionActivityRecorded,
        aggregate_type=AggregateType.SESSION,
    ),
    EventMetadata(
        event_class=SessionTokenAttached,
        aggregate_type=AggregateType.SESSION,
    ),
    EventMetadata(
        event_class=SessionRevoked,
        aggregate_type=AggregateType.SESSION,
        requires_audit=True,
        audit_action_name="SESSION_REVOKED",
    ),
    # Security signals (bus only)
    EventMetadata(
        event_class=RepeatedAuthenticationFailure,
        aggregate_type=None,
        requires_audit=True,
        requires_email=True,
        security_signal=True,
        audit_action_name="USER_REPEATED_AUTHENTICATION_FAILURE",
    ),
    EventMetadata(
        event_class=AuthenticationRejected,
        aggregate_type=None,
        requires_audit=True,
        security_signal=True,
        audit_action_name="USER_AUTHENTICATION_REJECTED",
    ),
    EventMetadata(
        event_class=AuthorizationCodeReplayDetected,
        aggregate_type=None,
        requires_audit=True,
        security_signal=True,
        audit_action_name="AUTHORIZATION_CODE_REPLAYED",
    ),
]


# ═══════════════════════════════════════════════════════════════
# Computed Views (for wiring and validation)
# ═══════════════════════════════════════════════════════════════


def get_all_events() -> list[type[DomainEvent]]:
    """Get all registered event classes."""
    return [meta.event_class for meta in EVENT_REGISTRY]


def get_persisted_events() -> dict[str, type[DomainEvent]]:
    """Map event type name to class for every event that is stored in a stream.

    Returns:
        Dict keyed by class name (the `event_type` column of stored events).
    """
    return {
        meta.event_class.__name__: meta.event_class
        for meta in EVENT_REGISTRY
        if meta.aggregate_type is not None
    }


def get_events_requiring_handler(handler_type: str) -> list[type[DomainEvent]]:
    """Get events requiring specific handler.

    Args:
        handler_type: "logging", "audit", or "email".

    Returns:
        List of event classes requiring that handler.

    Raises:
        ValueError: If handler_type is invalid.
    """
    field_map = {
        "logging": "requires_logging",
        "audit": "requires_audit",
        "email": "requires_email",
    }

    if handler_type not in field_map:
        raise ValueError(
            f"Invalid handler_type: {handler_type}. "
            f"Must be one of: {list(field_map.keys())}"
        )

    field = field_map[handler_type]
    return [meta.event_class for meta in EVENT_REGISTRY if getattr(meta, field)]


def get_security_signals() -> set[type[DomainEvent]]:
    """Events that are logged at warning level and always audited."""
    return {meta.event_class for meta in EVENT_REGISTRY if meta.security_signal}


def get_expected_audit_actions() -> dict[type[DomainEvent], str]:
    """Get mapping of event to expected AuditAction enum name."""
    return {
        meta.event_class: meta.audit_action_name
        for meta in EVENT_REGISTRY
        if meta.requires_audit
    }


def handler_method_name(event_class: type[DomainEvent]) -> str:
    """Name of the handler method subscribed for `event_class`.

    Example:
        RefreshTokenReuseDetected -> "handle_refresh_token_reuse_detected"
    """
    snake = re.sub(r"(?<!^)(?=[A-Z])", "_", event_class.__name__).lower()
    return f"handle_{snake}"
