"""Event log database model.

One row per appended event. The unique constraint on
`(aggregate_id, version)` is what makes concurrent appends to the same stream
safe: the loser of a race hits an IntegrityError and the store reports a
version conflict.

CRITICAL: Rows are never updated. They are only deleted by the retention
sweeper, for expired authorization-request and token streams.
"""

from datetime import datetime
from typing import Any
from uuid import UUID

from sqlalchemy import JSON, DateTime, Index, Integer, String, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from src.infrastructure.persistence.base import BaseModel


class EventRecord(BaseModel):
    """Stored event (append-only).

    Fields:
        id: UUID primary key (from BaseModel)
        created_at: Insert time (from BaseModel)
        aggregate_id: Stream identifier
        aggregate_type: Stream kind (identity, client, authorization, token, session)
        version: 1-based position within the stream
        event_type: Registered event name
        event_id: Unique event identifier
        payload: Event body
        occurred_at: When the event happened
    """

    __tablename__ = "events"

    aggregate_id: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        comment="Stream identifier (user id, client id, jti, ...)",
    )

    aggregate_type: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        index=True,
        comment="Stream kind",
    )

    version: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
        comment="Position within the stream (1-based, gapless)",
    )

    event_type: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        comment="Registered event name",
    )

    event_id: Mapped[UUID] = mapped_column(
        Uuid,
        nullable=False,
        unique=True,
    )

    payload: Mapped[dict[str, Any]] = mapped_column(
        JSON,
        nullable=False,
    )

    occurred_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
    )

    __table_args__ = (
        UniqueConstraint("aggregate_id", "version", name="uq_events_aggregate_version"),
        Index("idx_events_aggregate", "aggregate_id", "version"),
    )

    def __repr__(self) -> str:
        return (
            f"<EventRecord("
            f"aggregate_id={self.aggregate_id!r}, "
            f"version={self.version}, "
            f"event_type={self.event_type!r}"
            f")>"
        )
