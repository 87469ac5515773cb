"""Unit tests for infrastructure container factories.

Tests cover:
- Adapter selection from settings (event store, index store, audit sink)
- Missing connection URLs for the durable backends
- Singleton behavior and reset_container()

Architecture:
- Environment is patched with monkeypatch, then the container is reset so
  the cached settings are rebuilt
"""

from unittest.mock import patch

import pytest

from src.core.container import (
    get_audit_sink,
    get_event_store,
    get_index_store,
    get_logger,
    get_password_service,
    reset_container,
)
from src.infrastructure.audit.database_audit_sink import DatabaseAuditSink
from src.infrastructure.audit.logging_audit_sink import LoggingAuditSink
from src.infrastructure.event_store.in_memory_event_store import InMemoryEventStore
from src.infrastructure.event_store.sqlalchemy_event_store import SQLAlchemyEventStore
from src.infrastructure.index.in_memory_index_store import InMemoryIndexStore
from src.infrastructure.index.redis_index_store import RedisIndexStore


@pytest.fixture
def configure(monkeypatch):
    def apply(**env: str) -> None:
        for name, value in env.items():
            if value is None:
                monkeypatch.delenv(name, raising=False)
            else:
                monkeypatch.setenv(name, value)
        reset_container()

    return apply


@pytest.mark.unit
class TestEventStoreSelection:
    def test_memory_backend(self, configure):
        configure(EVENT_STORE_BACKEND="memory")

        assert isinstance(get_event_store(), InMemoryEventStore)

    def test_sqlalchemy_backend(self, configure):
        configure(EVENT_STORE_BACKEND="sqlalchemy", DATABASE_URL="sqlite+aiosqlite://")

        assert isinstance(get_event_store(), SQLAlchemyEventStore)

    def test_sqlalchemy_backend_requires_database_url(self, configure):
        configure(EVENT_STORE_BACKEND="sqlalchemy", DATABASE_URL=None)

        with pytest.raises(RuntimeError, match="DATABASE_URL"):
            get_event_store()


@pytest.mark.unit
class TestIndexStoreSelection:
    def test_memory_backend(self, configure):
        configure(INDEX_STORE_BACKEND="memory")

        assert isinstance(get_index_store(), InMemoryIndexStore)

    def test_redis_backend(self, configure):
        configure(INDEX_STORE_BACKEND="redis", REDIS_URL="redis://localhost:6379/1")

        assert isinstance(get_index_store(), RedisIndexStore)

    def test_redis_backend_requires_redis_url(self, configure):
        configure(INDEX_STORE_BACKEND="redis", REDIS_URL=None)

        with pytest.raises(RuntimeError, match="REDIS_URL"):
            get_index_store()


@pytest.mark.unit
class TestAuditSinkSelection:
    def test_logs_without_a_database(self, configure):
        configure(EVENT_STORE_BACKEND="memory")

        assert isinstance(get_audit_sink(), LoggingAuditSink)

    def test_writes_to_the_database_with_the_sqlalchemy_store(self, configure):
        configure(EVENT_STORE_BACKEND="sqlalchemy", DATABASE_URL="sqlite+aiosqlite://")

        assert isinstance(get_audit_sink(), DatabaseAuditSink)


@pytest.mark.unit
class TestLoggerSelection:
    @pytest.mark.parametrize(
        ("environment", "log_json", "expected_json"),
        [
            ("development", "false", False),
            ("development", "true", True),
            ("testing", "false", True),
            ("ci", "false", True),
            ("production", "false", False),
        ],
    )
    def test_json_output(self, configure, environment, log_json, expected_json):
        configure(ENVIRONMENT=environment, LOG_JSON=log_json, LOG_LEVEL="DEBUG")

        with patch("src.infrastructure.logging.console_adapter.ConsoleAdapter") as adapter:
            get_logger()

        adapter.assert_called_once_with(use_json=expected_json, level="DEBUG")


@pytest.mark.unit
class TestSingletons:
    def test_factories_are_cached(self):
        assert get_event_store() is get_event_store()
        assert get_password_service() is get_password_service()

    def test_reset_container_drops_instances(self):
        store = get_event_store()

        reset_container()

        assert get_event_store() is not store
