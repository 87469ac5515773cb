"""Email event handler for domain events.

This module turns committed events into notifications sent through the
EmailNotifierProtocol. Delivery itself is out of scope: the bundled
StubEmailNotifier only logs what would be sent.

Templates:
    - welcome: after UserRegistered
    - password_changed: after PasswordChanged
    - security_alert: after RefreshTokenReuseDetected (user subjects only) and
      RepeatedAuthenticationFailure

Recipient lookup:
    Events other than UserRegistered and RepeatedAuthenticationFailure carry
    only a user id. The handler resolves the address through an injected
    async `email_lookup(user_id)` callable (the container passes one that
    folds the Identity stream), so infrastructure never imports application
    code.

Usage:
    >>> email_handler = EmailEventHandler(
    ...     notifier=get_email_notifier(),
    ...     email_lookup=lookup_email,
    ...     logger=get_logger(),
    ... )
    >>> event_bus.subscribe(UserRegistered, email_handler.handle_user_registered)
"""

from collections.abc import Awaitable, Callable
from uuid import UUID

from src.domain.events import (
    PasswordChanged,
    RefreshTokenReuseDetected,
    RepeatedAuthenticationFailure,
    UserRegistered,
)
from src.domain.protocols.email_protocol import EmailNotifierProtocol, EmailTemplate
from src.domain.protocols.logger_protocol import LoggerProtocol

EmailLookup = Callable[[UUID], Awaitable[str | None]]


class EmailEventHandler:
    """Event handler for email notifications.

    Attributes:
        _notifier: Email notifier (from container).
        _email_lookup: Resolves a user id to the user's current email.
        _logger: Logger for skipped notifications.
    """

    def __init__(
        self,
        notifier: EmailNotifierProtocol,
        email_lookup: EmailLookup,
        logger: LoggerProtocol,
    ) -> None:
        self._notifier = notifier
        self._email_lookup = email_lookup
        self._logger = logger

    async def _send_to_user(self, user_id: UUID, template: str, context: dict) -> None:
        recipient = await self._email_lookup(user_id)
        if recipient is None:
            self._logger.debug(
                "email_skipped_no_recipient",
                template=template,
                user_id=str(user_id),
            )
            return
        await self._notifier.send(template, recipient, context)

    # =========================================================================
    # Identity Event Handlers
    # =========================================================================

    async def handle_user_registered(self, event: UserRegistered) -> None:
        """Send welcome email.

        Args:
            event: UserRegistered event (carries the normalised email).
        """
        await self._notifier.send(
            EmailTemplate.WELCOME,
            event.email,
            {"user_id": str(event.user_id)},
        )

    async def handle_password_changed(self, event: PasswordChanged) -> None:
        """Send password change notice to the account's address."""
        await self._send_to_user(
            event.user_id,
            EmailTemplate.PASSWORD_CHANGED,
            {"changed_at": event.occurred_at.isoformat()},
        )

    # =========================================================================
    # Security Signal Handlers
    # =========================================================================

    async def handle_refresh_token_reuse_detected(
        self, event: RefreshTokenReuseDetected
    ) -> None:
        """Alert the user whose refresh token was replayed.

        client_credentials tokens have a client id as subject; there is
        nobody to notify for those.
        """
        try:
            user_id = UUID(event.subject)
        except ValueError:
            return
        await self._send_to_user(
            user_id,
            EmailTemplate.SECURITY_ALERT,
            {
                "alert": "refresh_token_reuse",
                "client_id": event.client_id,
                "detected_at": event.occurred_at.isoformat(),
            },
        )

    async def handle_repeated_authentication_failure(
        self, event: RepeatedAuthenticationFailure
    ) -> None:
        await self._notifier.send(
            EmailTemplate.SECURITY_ALERT,
            event.email,
            {
                "alert": "repeated_authentication_failure",
                "consecutive_failures": event.consecutive_failures,
                "ip_address": event.ip_address,
            },
        )
