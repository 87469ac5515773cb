# mypy: disable-error-code="arg-type"
"""Event bus dependency factory.

Application-scoped singleton for domain event publishing. Configures all
event handlers and subscriptions at startup using registry-driven
auto-wiring.
"""

from functools import lru_cache
from typing import TYPE_CHECKING
from uuid import UUID

if TYPE_CHECKING:
    from src.domain.protocols.event_bus_protocol import EventBusProtocol


async def _lookup_email(user_id: UUID) -> str | None:
    # Resolved per call: the identity repository itself depends on the bus.
    from src.core.container.handlers import get_get_user_handler

    return await get_get_user_handler().lookup_email(user_id)


@lru_cache()
def get_event_bus() -> "EventBusProtocol":
    """Get event bus singleton (app-scoped).

    Event handlers are registered at startup from EVENT_REGISTRY. For each
    registered event the factory:
        1. Computes the handler method name (`handle_<snake_case_event>`)
        2. Subscribes the logging, audit and email handlers the metadata
           asks for

    Wiring is strict: a registry entry whose handler method is missing
    raises at startup instead of silently dropping an audit record.

    Returns:
        Event bus implementing EventBusProtocol.

    Raises:
        RuntimeError: A required handler method is missing.

    Usage:
        event_bus = get_event_bus()
        await event_bus.publish(RepeatedAuthenticationFailure(...))
    """
    from src.core.container.infrastructure import (
        get_audit_sink,
        get_email_notifier,
        get_logger,
    )
    from src.domain.events.registry import EVENT_REGISTRY, handler_method_name
    from src.infrastructure.events.handlers.audit_event_handler import AuditEventHandler
    from src.infrastructure.events.handlers.email_event_handler import EmailEventHandler
    from src.infrastructure.events.handlers.logging_event_handler import (
        LoggingEventHandler,
    )
    from src.infrastructure.events.in_memory_event_bus import InMemoryEventBus

    logger = get_logger()
    event_bus = InMemoryEventBus(logger=logger)

    handlers = {
        "logging": LoggingEventHandler(logger=logger),
        "audit": AuditEventHandler(audit=get_audit_sink()),
        "email": EmailEventHandler(
            notifier=get_email_notifier(),
            email_lookup=_lookup_email,
            logger=logger,
        ),
    }

    for metadata in EVENT_REGISTRY:
        event_class = metadata.event_class
        method_name = handler_method_name(event_class)
        required = {
            "logging": metadata.requires_logging,
            "audit": metadata.requires_audit or metadata.security_signal,
            "email": metadata.requires_email,
        }

        for kind, is_required in required.items():
            if not is_required:
                continue
            handler_method = getattr(handlers[kind], method_name, None)
            if handler_method is None:
                raise RuntimeError(
                    f"Missing required {kind} handler\n"
                    f"Event: {event_class.__name__}\n"
                    f"Expected method: {type(handlers[kind]).__name__}.{method_name}"
                )
            event_bus.subscribe(event_class, handler_method)

    return event_bus
