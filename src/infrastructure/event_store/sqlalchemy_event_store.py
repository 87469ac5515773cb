"""SQLAlchemy implementation of EventStoreProtocol.

Durable event log on the `events` table (PostgreSQL in production, SQLite in
integration tests).

Concurrency:
    The version check and the inserts run in one transaction. Two writers that
    both pass the check race on the unique `(aggregate_id, version)`
    constraint; the loser's transaction rolls back and it gets a
    ConflictError, exactly as if the check had failed. Nothing is locked
    across aggregates.

Cancellation:
    A cancelled append exits the session context before commit, so the
    transaction is rolled back and no event of the batch is visible.
"""

from collections.abc import Sequence
from datetime import UTC

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from src.core.enums import ErrorCode
from src.core.errors import ConflictError
from src.core.result import Failure, Result, Success
from src.domain.errors import EventStoreUnavailableError
from src.domain.events.base_event import DomainEvent, StoredEvent
from src.infrastructure.event_store.codec import EventCodec
from src.infrastructure.persistence.database import Database
from src.infrastructure.persistence.models.event_record import EventRecord


class SQLAlchemyEventStore:
    """Event log backed by a relational database.

    Attributes:
        database: Database (engine + session factory).
        codec: Event <-> payload codec.
    """

    def __init__(self, database: Database, codec: EventCodec | None = None) -> None:
        self._database = database
        self._codec = codec or EventCodec()

    async def append(
        self,
        aggregate_id: str,
        aggregate_type: str,
        expected_version: int,
        events: Sequence[DomainEvent],
    ) -> Result[int, ConflictError]:
        encoded = [(event, *self._codec.encode(event)) for event in events]
        try:
            async with self._database.transaction() as session:
                current = await self._version(session, aggregate_id)
                if current != expected_version:
                    return Failure(
                        error=_conflict(aggregate_type, aggregate_id, expected_version, current)
                    )
                session.add_all(
                    EventRecord(
                        aggregate_id=aggregate_id,
                        aggregate_type=aggregate_type,
                        version=current + offset,
                        event_type=event_type,
                        event_id=event.event_id,
                        payload=payload,
                        occurred_at=event.occurred_at,
                    )
                    for offset, (event, event_type, payload) in enumerate(encoded, start=1)
                )
                await session.flush()
        except IntegrityError:
            actual = await self.current_version(aggregate_id)
            return Failure(
                error=_conflict(aggregate_type, aggregate_id, expected_version, actual)
            )
        except OperationalError as e:
            raise EventStoreUnavailableError(f"Event store append failed: {type(e).__name__}") from e
        return Success(value=expected_version + len(encoded))

    async def load(self, aggregate_id: str, after_version: int = 0) -> list[StoredEvent]:
        stmt = (
            select(EventRecord)
            .where(EventRecord.aggregate_id == aggregate_id)
            .where(EventRecord.version > after_version)
            .order_by(EventRecord.version.asc())
        )
        try:
            async with self._database.get_session() as session:
                records = (await session.execute(stmt)).scalars().all()
        except OperationalError as e:
            raise EventStoreUnavailableError(f"Event store load failed: {type(e).__name__}") from e
        return [_to_stored(record) for record in records]

    async def current_version(self, aggregate_id: str) -> int:
        try:
            async with self._database.get_session() as session:
                return await self._version(session, aggregate_id)
        except OperationalError as e:
            raise EventStoreUnavailableError(f"Event store read failed: {type(e).__name__}") from e

    async def purge(self, aggregate_id: str) -> int:
        try:
            async with self._database.transaction() as session:
                result = await session.execute(
                    delete(EventRecord).where(EventRecord.aggregate_id == aggregate_id)
                )
        except OperationalError as e:
            raise EventStoreUnavailableError(f"Event store purge failed: {type(e).__name__}") from e
        return result.rowcount or 0

    @staticmethod
    async def _version(session: AsyncSession, aggregate_id: str) -> int:
        stmt = select(func.max(EventRecord.version)).where(
            EventRecord.aggregate_id == aggregate_id
        )
        return (await session.execute(stmt)).scalar_one_or_none() or 0


def _to_stored(record: EventRecord) -> StoredEvent:
    occurred_at = record.occurred_at
    if occurred_at.tzinfo is None:
        # SQLite drops the offset; values are always written in UTC
        occurred_at = occurred_at.replace(tzinfo=UTC)
    return StoredEvent(
        aggregate_id=record.aggregate_id,
        aggregate_type=record.aggregate_type,
        version=record.version,
        event_type=record.event_type,
        payload=record.payload,
        occurred_at=occurred_at,
        event_id=record.event_id,
    )


def _conflict(
    aggregate_type: str, aggregate_id: str, expected: int, actual: int
) -> ConflictError:
    return ConflictError(
        code=ErrorCode.CONCURRENCY_CONFLICT,
        message=f"Stream {aggregate_id} is at version {actual}, expected {expected}",
        resource_type=aggregate_type,
        expected_version=expected,
        actual_version=actual,
    )
