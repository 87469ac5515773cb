"""Domain events module.

Aggregate events (the append-only log every aggregate is folded from) and
bus-only security signals.

Usage:
    >>> from src.domain.events import UserRegistered
    >>>
    >>> event = UserRegistered(user_id=user_id, email="test@example.com", password_hash=h)
    >>> await event_bus.publish(event)
"""

from src.domain.events.authorization_events import (
    AUTHORIZATION_EVENTS,
    AuthorizationCodeIssued,
    AuthorizationCodeRedeemed,
    AuthorizationConsented,
    AuthorizationEvent,
    AuthorizationExpired,
    AuthorizationRequested,
    AuthorizationRevoked,
)
from src.domain.events.base_event import DomainEvent, StoredEvent
from src.domain.events.client_events import (
    CLIENT_EVENTS,
    ClientDeactivated,
    ClientEvent,
    ClientRegistered,
    ClientSecretRotated,
)
from src.domain.events.identity_events import (
    IDENTITY_EVENTS,
    AuthenticationFailed,
    IdentityEvent,
    IdentityLinked,
    PasswordChanged,
    RoleAssigned,
    RoleRevoked,
    UserAuthenticated,
    UserDeactivated,
    UserRegistered,
)
from src.domain.events.security_events import (
    SECURITY_EVENTS,
    AuthenticationRejected,
    AuthorizationCodeReplayDetected,
    RepeatedAuthenticationFailure,
)
from src.domain.events.session_events import (
    SESSION_EVENTS,
    SessionActivityRecorded,
    SessionCreated,
    SessionEvent,
    SessionRevoked,
    SessionTokenAttached,
)
from src.domain.events.token_events import (
    TOKEN_EVENTS,
    RefreshTokenReuseDetected,
    RefreshTokenRotated,
    TokenEvent,
    TokenIssued,
    TokenRevoked,
)

__all__ = [
    # Base
    "DomainEvent",
    "StoredEvent",
    # Identity
    "IDENTITY_EVENTS",
    "IdentityEvent",
    "UserRegistered",
    "UserAuthenticated",
    "AuthenticationFailed",
    "PasswordChanged",
    "IdentityLinked",
    "RoleAssigned",
    "RoleRevoked",
    "UserDeactivated",
    # Client
    "CLIENT_EVENTS",
    "ClientEvent",
    "ClientRegistered",
    "ClientSecretRotated",
    "ClientDeactivated",
    # Authorization
    "AUTHORIZATION_EVENTS",
    "AuthorizationEvent",
    "AuthorizationRequested",
    "AuthorizationConsented",
    "AuthorizationCodeIssued",
    "AuthorizationCodeRedeemed",
    "AuthorizationExpired",
    "AuthorizationRevoked",
    # Token
    "TOKEN_EVENTS",
    "TokenEvent",
    "TokenIssued",
    "RefreshTokenRotated",
    "TokenRevoked",
    "RefreshTokenReuseDetected",
    # Session
    "SESSION_EVENTS",
    "SessionEvent",
    "SessionCreated",
    "SessionActivityRecorded",
    "SessionTokenAttached",
    "SessionRevoked",
    # Security signals
    "SECURITY_EVENTS",
    "RepeatedAuthenticationFailure",
    "AuthenticationRejected",
    "AuthorizationCodeReplayDetected",
]
