"""Email notifier protocol (port).

Outbound email delivery is an external concern; the core only names a
template and a recipient.
"""

from typing import Any, Protocol


class EmailTemplate:
    """Templates the service sends."""

    WELCOME = "welcome"
    PASSWORD_CHANGED = "password_changed"
    SECURITY_ALERT = "security_alert"


class EmailNotifierProtocol(Protocol):
    """Fire-and-forget email sender.

    Implementations:
        - StubEmailNotifier: logs the template and recipient, no delivery
    """

    async def send(
        self,
        template: str,
        recipient: str,
        context: dict[str, Any] | None = None,
    ) -> None:
        """Send `template` to `recipient`.

        Args:
            template: Template name (see EmailTemplate).
            recipient: Email address.
            context: Template variables.
        """
        ...
