"""Unit tests for the event codec, the in-memory event store and index store.

Tests cover:
- Codec: JSON-safe payloads, envelope fields, unknown event types
- Event store: optimistic concurrency, gapless versions, purge
- Index store: single-holder claims and member sets
"""

import asyncio
from datetime import UTC, datetime

import pytest
from uuid_extensions import uuid7

from src.core.enums import ErrorCode
from src.core.result import Failure, Success
from src.domain.enums import CodeChallengeMethod
from src.domain.errors import UnknownEventTypeError
from src.domain.events import AuthorizationRequested, StoredEvent, UserRegistered
from src.domain.events.base_event import DomainEvent
from src.domain.protocols.index_store_protocol import IndexNamespace
from src.infrastructure.event_store import EventCodec, InMemoryEventStore
from src.infrastructure.index import InMemoryIndexStore

NOW = datetime(2026, 1, 15, 12, 0, tzinfo=UTC)


def _registered(user_id=None):
    return UserRegistered(
        user_id=user_id or uuid7(), email="a@example.com", password_hash="h", occurred_at=NOW
    )


@pytest.mark.unit
class TestEventCodec:
    """Round trip through the stored envelope."""

    def test_payload_excludes_envelope_fields(self):
        event_type, payload = EventCodec().encode(_registered())

        assert event_type == "UserRegistered"
        assert "event_id" not in payload
        assert "occurred_at" not in payload
        assert isinstance(payload["user_id"], str)

    def test_decode_restores_sets_enums_and_envelope(self):
        codec = EventCodec()
        event = AuthorizationRequested(
            request_id=uuid7(),
            client_id="client-1",
            redirect_uri="https://app.example.com/cb",
            scopes=frozenset({"openid", "email"}),
            code_challenge="c" * 43,
            code_challenge_method=CodeChallengeMethod.S256,
            occurred_at=NOW,
        )
        event_type, payload = codec.encode(event)

        decoded = codec.decode(
            StoredEvent(
                aggregate_id=str(event.request_id),
                aggregate_type="authorization",
                version=1,
                event_type=event_type,
                payload=payload,
                occurred_at=event.occurred_at,
                event_id=event.event_id,
            )
        )

        assert decoded == event
        assert decoded.scopes == frozenset({"openid", "email"})
        assert decoded.code_challenge_method is CodeChallengeMethod.S256

    def test_unregistered_class_cannot_be_encoded(self):
        class Unregistered(DomainEvent):
            pass

        with pytest.raises(UnknownEventTypeError):
            EventCodec().encode(Unregistered())

    def test_unknown_stored_type_is_fatal(self):
        stored = StoredEvent(
            aggregate_id="x",
            aggregate_type="identity",
            version=1,
            event_type="SomethingRenamed",
            payload={},
            occurred_at=NOW,
            event_id=uuid7(),
        )

        with pytest.raises(UnknownEventTypeError):
            EventCodec().decode(stored)


@pytest.mark.unit
class TestInMemoryEventStore:
    """Append-only log with optimistic concurrency."""

    async def test_append_assigns_gapless_versions(self):
        store = InMemoryEventStore()
        user_id = uuid7()

        first = await store.append(str(user_id), "identity", 0, [_registered(user_id)])
        second = await store.append(str(user_id), "identity", 1, [_registered(user_id)])

        assert first == Success(value=1)
        assert second == Success(value=2)
        stored = await store.load(str(user_id))
        assert [event.version for event in stored] == [1, 2]
        assert await store.current_version(str(user_id)) == 2

    async def test_stale_expected_version_conflicts(self):
        store = InMemoryEventStore()
        await store.append("agg", "identity", 0, [_registered()])

        result = await store.append("agg", "identity", 0, [_registered()])

        assert isinstance(result, Failure)
        assert result.error.code == ErrorCode.CONCURRENCY_CONFLICT
        assert await store.current_version("agg") == 1

    async def test_concurrent_appends_one_wins(self):
        store = InMemoryEventStore()

        results = await asyncio.gather(
            *(store.append("agg", "identity", 0, [_registered()]) for _ in range(5))
        )

        assert sum(isinstance(r, Success) for r in results) == 1
        assert await store.current_version("agg") == 1

    async def test_empty_append_checks_version_only(self):
        store = InMemoryEventStore()

        assert await store.append("agg", "identity", 0, []) == Success(value=0)
        assert isinstance(await store.append("agg", "identity", 3, []), Failure)

    async def test_load_after_version(self):
        store = InMemoryEventStore()
        await store.append("agg", "identity", 0, [_registered(), _registered()])

        tail = await store.load("agg", after_version=1)

        assert [event.version for event in tail] == [2]

    async def test_purge_removes_stream(self):
        store = InMemoryEventStore()
        await store.append("agg", "identity", 0, [_registered(), _registered()])

        assert await store.purge("agg") == 2
        assert await store.load("agg") == []
        assert await store.purge("agg") == 0


@pytest.mark.unit
class TestInMemoryIndexStore:
    async def test_claim_is_exclusive(self):
        index = InMemoryIndexStore()

        first = await index.claim(IndexNamespace.EMAIL, "a@example.com", "user-1")
        again = await index.claim(IndexNamespace.EMAIL, "a@example.com", "user-1")
        other = await index.claim(IndexNamespace.EMAIL, "a@example.com", "user-2")

        assert isinstance(first, Success)
        assert isinstance(again, Success)
        assert isinstance(other, Failure)
        assert other.error.code == ErrorCode.EMAIL_ALREADY_EXISTS

    async def test_linked_identity_conflict_code(self):
        index = InMemoryIndexStore()
        await index.claim(IndexNamespace.LINKED_IDENTITY, "acme:1", "user-1")

        result = await index.claim(IndexNamespace.LINKED_IDENTITY, "acme:1", "user-2")

        assert result.error.code == ErrorCode.IDENTITY_ALREADY_LINKED

    async def test_release_frees_key(self):
        index = InMemoryIndexStore()
        await index.claim(IndexNamespace.EMAIL, "a@example.com", "user-1")

        await index.release(IndexNamespace.EMAIL, "a@example.com")

        assert await index.get(IndexNamespace.EMAIL, "a@example.com") is None
        assert isinstance(await index.claim(IndexNamespace.EMAIL, "a@example.com", "user-2"), Success)

    async def test_member_sets(self):
        index = InMemoryIndexStore()
        await index.add_member(IndexNamespace.USER_SESSIONS, "user-1", "s1")
        await index.add_member(IndexNamespace.USER_SESSIONS, "user-1", "s2")

        await index.remove_member(IndexNamespace.USER_SESSIONS, "user-1", "s1")
        await index.remove_member(IndexNamespace.USER_SESSIONS, "user-9", "s1")

        assert await index.members(IndexNamespace.USER_SESSIONS, "user-1") == {"s2"}
        assert await index.members(IndexNamespace.USER_SESSIONS, "user-9") == set()
