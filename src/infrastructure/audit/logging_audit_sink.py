"""Structured-log implementation of AuditSinkProtocol.

Writes each audit entry as one `audit_record` log line. Used when the event
store runs in memory (development, tests) or when audit records are shipped
from the log stream instead of the database.
"""

from typing import Any
from uuid import UUID

from src.domain.enums import AuditAction
from src.domain.protocols.logger_protocol import LoggerProtocol


class LoggingAuditSink:
    """Audit sink that logs entries at info level.

    Attributes:
        _logger: Logger bound with `audit=True` so entries can be filtered.
    """

    def __init__(self, logger: LoggerProtocol) -> None:
        self._logger = logger.bind(audit=True)

    async def record(
        self,
        *,
        action: AuditAction,
        resource_type: str,
        user_id: UUID | None = None,
        resource_id: str | None = None,
        ip_address: str | None = None,
        context: dict[str, Any] | None = None,
    ) -> None:
        self._logger.info(
            "audit_record",
            action=action.value,
            resource_type=resource_type,
            user_id=str(user_id) if user_id else None,
            resource_id=resource_id,
            ip_address=ip_address,
            context=context or {},
        )
