"""Stub email notifier.

Implements EmailNotifierProtocol by logging the template and recipient
instead of delivering mail. Real delivery (SMTP, SES, SendGrid) is a separate
adapter behind the same protocol.
"""

from typing import Any

from src.domain.protocols.logger_protocol import LoggerProtocol


class StubEmailNotifier:
    """Logs emails that would be sent.

    Example:
        >>> notifier = StubEmailNotifier(logger=get_logger())
        >>> await notifier.send("welcome", "user@example.com")
        >>> # Log output: {"event": "email_would_be_sent", "template": "welcome", ...}
    """

    def __init__(self, logger: LoggerProtocol) -> None:
        self._logger = logger

    async def send(
        self,
        template: str,
        recipient: str,
        context: dict[str, Any] | None = None,
    ) -> None:
        self._logger.info(
            "email_would_be_sent",
            template=template,
            recipient=recipient,
            context_keys=sorted(context or {}),
        )
