"""Unit tests for RegisterUserHandler.

Tests cover:
- Successful user registration (default role, bootstrap admin)
- Email already exists (case-insensitive)
- Weak password and malformed email
- Index claim released when the append fails

Architecture:
- Real in-memory event store and index store
- Mocked password service and event bus
- Async tests (handler uses async repositories)
"""

from unittest.mock import AsyncMock, Mock

import pytest

from src.application.commands import RegisterUser
from src.application.commands.handlers.register_user_handler import RegisterUserHandler
from src.application.event_sourcing import AggregateRepository
from src.core.enums import ErrorCode
from src.core.result import Failure, Success
from src.domain.aggregates import apply_identity_event
from src.domain.enums import AggregateType
from src.domain.protocols import IndexNamespace
from src.domain.value_objects.password_policy import PasswordPolicy
from src.infrastructure.event_store import EventCodec, InMemoryEventStore
from src.infrastructure.index import InMemoryIndexStore
from tests.utils.utils import FrozenClock


@pytest.fixture
def index():
    return InMemoryIndexStore()


@pytest.fixture
def store():
    return InMemoryEventStore()


@pytest.fixture
def identities(store):
    bus = Mock()
    bus.publish = AsyncMock()
    return AggregateRepository(
        aggregate_type=AggregateType.IDENTITY,
        fold=apply_identity_event,
        event_store=store,
        event_bus=bus,
        decode=EventCodec().decode,
    )


@pytest.fixture
def password_service():
    service = Mock()
    service.hash_password.return_value = "hashed_password_123"
    return service


@pytest.fixture
def handler(identities, index, password_service):
    return RegisterUserHandler(
        identities=identities,
        index=index,
        password_service=password_service,
        password_policy=PasswordPolicy(),
        clock=FrozenClock(),
        admin_emails=frozenset({"admin@example.com"}),
    )


@pytest.mark.unit
class TestRegisterUserHandlerSuccess:
    """Test successful user registration scenarios."""

    async def test_register_user_success_returns_user_id(self, handler, identities, index):
        """Test successful registration returns Success with user_id."""
        result = await handler.handle(RegisterUser(email="User@Example.com", password="SecurePass123!"))

        assert isinstance(result, Success)
        loaded = await identities.load(str(result.value))
        assert loaded.state.email == "user@example.com"
        assert loaded.state.password_hash == "hashed_password_123"
        assert loaded.state.roles == frozenset({"user"})
        assert await index.get(IndexNamespace.EMAIL, "user@example.com") == str(result.value)

    async def test_password_is_hashed_not_stored(self, handler, password_service, store):
        result = await handler.handle(RegisterUser(email="a@example.com", password="SecurePass123!"))

        password_service.hash_password.assert_called_once_with("SecurePass123!")
        stored = await store.load(str(result.value))
        assert "SecurePass123!" not in str([event.payload for event in stored])

    async def test_bootstrap_admin_gets_admin_role(self, handler, identities):
        result = await handler.handle(RegisterUser(email="Admin@Example.com", password="SecurePass123!"))

        loaded = await identities.load(str(result.value))
        assert loaded.state.roles == frozenset({"user", "admin"})


@pytest.mark.unit
class TestRegisterUserHandlerFailures:
    """Test registration failure scenarios."""

    async def test_duplicate_email_is_conflict(self, handler):
        await handler.handle(RegisterUser(email="dup@example.com", password="SecurePass123!"))

        result = await handler.handle(RegisterUser(email="DUP@example.com", password="SecurePass123!"))

        assert isinstance(result, Failure)
        assert result.error.code == ErrorCode.EMAIL_ALREADY_EXISTS

    async def test_invalid_email(self, handler, password_service):
        result = await handler.handle(RegisterUser(email="not-an-email", password="SecurePass123!"))

        assert result.error.code == ErrorCode.INVALID_EMAIL
        password_service.hash_password.assert_not_called()

    async def test_weak_password(self, handler, index):
        result = await handler.handle(RegisterUser(email="weak@example.com", password="weak"))

        assert result.error.code == ErrorCode.PASSWORD_TOO_WEAK
        assert await index.get(IndexNamespace.EMAIL, "weak@example.com") is None

    async def test_claim_released_when_hashing_fails(self, handler, index, password_service):
        password_service.hash_password.side_effect = RuntimeError("hasher down")

        with pytest.raises(RuntimeError):
            await handler.handle(RegisterUser(email="retry@example.com", password="SecurePass123!"))

        assert await index.get(IndexNamespace.EMAIL, "retry@example.com") is None
