"""Base model for all database entities.

This module provides BaseModel (id, created_at), the declarative base of the
append-only tables: `events` and `audit_logs`. Neither table is ever updated,
so there is no updated_at mixin.

Following hexagonal architecture:
- This is an infrastructure concern (database implementation detail)
- Domain events and aggregate states do NOT inherit from this
- The event codec maps events to and from EventRecord rows

Usage:
    class AuditLog(BaseModel):
        __tablename__ = "audit_logs"
        action: Mapped[str]
        # Has: id, created_at

Note: We keep the base model database-agnostic by using SQLAlchemy's Uuid
type, so the event store runs on PostgreSQL and on SQLite in tests.
"""

from datetime import datetime
from typing import Any
from uuid import UUID as PythonUUID, uuid4

from sqlalchemy import DateTime, Uuid, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class BaseModel(DeclarativeBase):
    """Base class for all database models (append-only tables).

    Provides common fields that ALL database models need:
    - id: UUID primary key (auto-generated)
    - created_at: Timestamp when record was created (UTC)

    This is an infrastructure concern - domain code should not
    inherit from or depend on this class.
    """

    __abstract__ = True

    # Every model gets a UUID primary key
    id: Mapped[PythonUUID] = mapped_column(
        Uuid,  # SQLAlchemy's generic UUID type
        primary_key=True,
        default=uuid4,
        nullable=False,
    )

    # Timestamp for creation (all models have this)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),  # Database sets this on INSERT
    )

    def __repr__(self) -> str:
        """String representation for debugging.

        Returns:
            str: String showing class name and ID.
        """
        return f"<{self.__class__.__name__}(id={self.id})>"

    def to_dict(self) -> dict[str, Any]:
        """Convert model to dictionary (for debugging/logging).

        Returns:
            dict: Dictionary representation of the model.
        """
        return {
            "id": str(self.id),
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


