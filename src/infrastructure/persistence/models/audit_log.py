"""Audit log database model.

This module defines the AuditLog model for storing the immutable audit trail
written by DatabaseAuditSink: logins, failures, client changes, token
revocations and security signals such as refresh-token reuse.

CRITICAL: This table is IMMUTABLE. Records cannot be modified or deleted.
Only INSERT is ever issued against it.
"""

from typing import Any
from uuid import UUID

from sqlalchemy import Index, JSON, String
from sqlalchemy.orm import Mapped, mapped_column

from src.infrastructure.persistence.base import BaseModel


class AuditLog(BaseModel):
    """Audit log model - IMMUTABLE (cannot be updated or deleted).

    Fields:
        id: UUID primary key (from BaseModel)
        created_at: Timestamp when logged (from BaseModel, immutable)
        action: What happened (AuditAction value, e.g. "refresh_token_reused")
        user_id: Whom the entry concerns (None for client or system actions)
        resource_type: What was affected (identity, client, token, session, ...)
        resource_id: Specific resource identifier (jti, client id, UUID, ...)
        ip_address: Where from (when known)
        context: Additional event context (JSON, never secrets)

    Indexes:
        - idx_audit_user_action: (user_id, action) for user activity queries
        - idx_audit_resource: (resource_type, resource_id) for resource audits

    Note:
        This model inherits from BaseModel because audit logs are immutable
        and have no updated_at field.
    """

    __tablename__ = "audit_logs"

    action: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        index=True,
        comment="Audit action type (e.g., user_authenticated, token_revoked)",
    )

    user_id: Mapped[UUID | None] = mapped_column(
        index=True,
        nullable=True,
        comment="User the entry concerns (None for client or system actions)",
    )

    resource_type: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        index=True,
        comment="Type of resource affected (identity, client, token, etc.)",
    )

    # Resource ids are not all UUIDs (client ids, jtis)
    resource_id: Mapped[str | None] = mapped_column(
        String(255),
        index=True,
        nullable=True,
        comment="Specific resource identifier (if applicable)",
    )

    ip_address: Mapped[str | None] = mapped_column(
        String(45),  # IPv6 max length
        nullable=True,
        comment="Client IP address, when known",
    )

    context: Mapped[dict[str, Any] | None] = mapped_column(
        JSON,
        nullable=True,
        default=None,
        comment="Additional event context",
    )

    __table_args__ = (
        Index("idx_audit_user_action", "user_id", "action"),
        Index("idx_audit_resource", "resource_type", "resource_id"),
    )

    def __repr__(self) -> str:
        """String representation for debugging.

        Returns:
            str: Human-readable representation of audit log.
        """
        return (
            f"<AuditLog("
            f"id={self.id}, "
            f"action={self.action!r}, "
            f"user_id={self.user_id}, "
            f"created_at={self.created_at}"
            f")>"
        )
