"""Database implementation of AuditSinkProtocol.

This adapter writes the immutable audit trail to the `audit_logs` table with
async SQLAlchemy:
- INSERT only; records are never updated or deleted
- Each record commits in its own transaction, independent of the command
  that produced the event
- JSON storage for flexible context data

Following hexagonal architecture:
- Infrastructure implements domain protocol (AuditSinkProtocol)
- Domain doesn't know about SQLAlchemy
- LoggingAuditSink is the drop-in replacement when no database is configured

Failure handling:
    Database errors are logged and re-raised. The event bus isolates the
    failing handler, so the originating command is never rolled back.

Usage:
    from src.infrastructure.audit import DatabaseAuditSink

    sink = DatabaseAuditSink(database=get_database(), logger=get_logger())
    await sink.record(
        action=AuditAction.TOKEN_REVOKED,
        resource_type="token",
        resource_id=jti,
        context={"reason": "logout"},
    )
"""

from typing import Any
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError

from src.domain.enums import AuditAction
from src.domain.protocols.logger_protocol import LoggerProtocol
from src.infrastructure.persistence.database import Database
from src.infrastructure.persistence.models.audit_log import AuditLog


class DatabaseAuditSink:
    """SQLAlchemy implementation of AuditSinkProtocol.

    This adapter is stateless - all state lives in the database. It opens
    its own session per record.

    Attributes:
        _database: Database manager providing transactional sessions.
        _logger: Logger for failed inserts.
    """

    def __init__(self, database: Database, logger: LoggerProtocol) -> None:
        """Initialize sink.

        Args:
            database: Database manager (from container).
            logger: Logger (from container).
        """
        self._database = database
        self._logger = logger

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
        """Insert an immutable audit entry.

        Args:
            action: What happened (enum for type safety).
            resource_type: What was affected (identity, client, token, ...).
            user_id: Whom the entry concerns (None for client or system actions).
            resource_id: Specific resource identifier.
            ip_address: Client IP address, when known.
            context: Additional event context (stored as JSON).

        Raises:
            SQLAlchemyError: The insert failed (after logging it).

        Note:
            - Timestamp is set automatically (created_at)
            - Context is stored as JSON (flexible schema)
        """
        audit_log = AuditLog(
            action=action.value,
            user_id=user_id,
            resource_type=resource_type,
            resource_id=resource_id,
            ip_address=ip_address,
            context=context,
        )
        try:
            async with self._database.transaction() as session:
                session.add(audit_log)
        except SQLAlchemyError as e:
            self._logger.error(
                "audit_record_failed",
                error=e,
                action=action.value,
                resource_type=resource_type,
            )
            raise
