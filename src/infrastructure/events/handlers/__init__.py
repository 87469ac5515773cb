"""Event handlers for infrastructure integration.

This module exports all event handlers that react to domain events and perform
infrastructure-specific side effects (logging, audit, email).

Handlers:
    - LoggingEventHandler: Structured logging with appropriate severity levels
    - AuditEventHandler: Records immutable audit trail entries
    - EmailEventHandler: Sends notifications through the email notifier

Every handler method is named `handle_<snake_case_event_name>`; the container
subscribes them from EVENT_REGISTRY. All handlers follow fail-open design -
one handler failure doesn't break others.

Usage:
    >>> from src.infrastructure.events.handlers import (
    ...     LoggingEventHandler,
    ...     AuditEventHandler,
    ...     EmailEventHandler,
    ... )
    >>>
    >>> logging_handler = LoggingEventHandler(logger=logger)
    >>> audit_handler = AuditEventHandler(audit=audit_sink)
    >>>
    >>> event_bus.subscribe(UserRegistered, logging_handler.handle_user_registered)
    >>> event_bus.subscribe(UserRegistered, audit_handler.handle_user_registered)
"""

from src.infrastructure.events.handlers.audit_event_handler import AuditEventHandler
from src.infrastructure.events.handlers.email_event_handler import EmailEventHandler
from src.infrastructure.events.handlers.logging_event_handler import LoggingEventHandler

__all__ = [
    "LoggingEventHandler",
    "AuditEventHandler",
    "EmailEventHandler",
]
