"""Audit sink protocol (port).

Fire-and-forget consumer of security-relevant events. A failing sink never
rolls back the command that produced the event: the event bus isolates
handler failures and logs them.

Usage:
    from src.domain.protocols import AuditSinkProtocol
    from src.domain.enums import AuditAction

    await audit.record(
        action=AuditAction.SESSION_REVOKED,
        resource_type="session",
        user_id=user_id,
        resource_id=str(session_id),
        context={"reason": "logout"},
    )
"""

from typing import Any, Protocol
from uuid import UUID

from src.domain.enums import AuditAction


class AuditSinkProtocol(Protocol):
    """Append-only audit trail.

    Implementations:
        - LoggingAuditSink: structured log lines
        - DatabaseAuditSink: `audit_logs` table (insert-only)

    Implementations MUST NOT update or delete records.
    """

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
        """Record an immutable audit entry.

        Args:
            action: What happened.
            resource_type: What was affected (identity, client, token, ...).
            user_id: Who the entry concerns; None for client or system actions.
            resource_id: Specific resource identifier (jti, client id, ...).
            ip_address: Client IP address, when known.
            context: Additional event context (JSON, never secrets).
        """
        ...
