"""Unit tests for infrastructure event handlers.

Tests cover:
- LoggingEventHandler: Logs events with correct severity and fields
- AuditEventHandler: Creates audit records with correct actions
- EmailEventHandler: Template and recipient selection
- InMemoryEventBus: Handler failure isolation (fail-open behavior)

Test Strategy:
- Mock protocols (LoggerProtocol, AuditSinkProtocol, EmailNotifierProtocol)
- Verify correct data passed to protocol methods
"""

from unittest.mock import AsyncMock, MagicMock
from uuid import UUID

import pytest

from src.domain.enums import AggregateType
from src.domain.enums.audit_action import AuditAction
from src.domain.events import (
    AuthenticationFailed,
    PasswordChanged,
    RefreshTokenReuseDetected,
    RepeatedAuthenticationFailure,
    SessionRevoked,
    UserRegistered,
)
from src.domain.protocols.email_protocol import EmailTemplate
from src.infrastructure.events.handlers.audit_event_handler import AuditEventHandler
from src.infrastructure.events.handlers.email_event_handler import EmailEventHandler
from src.infrastructure.events.handlers.logging_event_handler import LoggingEventHandler
from src.infrastructure.events.in_memory_event_bus import InMemoryEventBus

# =============================================================================
# Fixtures
# =============================================================================


@pytest.fixture
def mock_logger():
    """Create mock LoggerProtocol."""
    return MagicMock()


@pytest.fixture
def mock_audit():
    """Create mock AuditSinkProtocol."""
    audit = MagicMock()
    audit.record = AsyncMock()
    return audit


@pytest.fixture
def mock_notifier():
    notifier = MagicMock()
    notifier.send = AsyncMock()
    return notifier


@pytest.fixture
def sample_user_id() -> UUID:
    """Sample user UUID for tests."""
    return UUID("12345678-1234-5678-1234-567812345678")


def _reuse_event(subject: str) -> RefreshTokenReuseDetected:
    return RefreshTokenReuseDetected(
        jti="jti-2",
        client_id="client-1",
        subject=subject,
        family_root_jti="jti-1",
    )


# =============================================================================
# LoggingEventHandler Tests
# =============================================================================


@pytest.mark.unit
class TestLoggingEventHandler:
    """Test LoggingEventHandler logs events with correct severity."""

    async def test_user_registered_logs_info_without_hash(self, mock_logger, sample_user_id):
        handler = LoggingEventHandler(logger=mock_logger)

        await handler.handle_user_registered(
            UserRegistered(user_id=sample_user_id, email="a@example.com", password_hash="secret")
        )

        mock_logger.info.assert_called_once()
        args, kwargs = mock_logger.info.call_args
        assert args[0] == "user_registered"
        assert kwargs["email"] == "a@example.com"
        assert "secret" not in str(kwargs)

    async def test_authentication_failure_logs_warning(self, mock_logger, sample_user_id):
        handler = LoggingEventHandler(logger=mock_logger)

        await handler.handle_authentication_failed(
            AuthenticationFailed(user_id=sample_user_id, reason="invalid_password")
        )

        mock_logger.warning.assert_called_once()
        assert mock_logger.warning.call_args.kwargs["reason"] == "invalid_password"

    async def test_refresh_token_reuse_logs_warning(self, mock_logger, sample_user_id):
        handler = LoggingEventHandler(logger=mock_logger)

        await handler.handle_refresh_token_reuse_detected(_reuse_event(str(sample_user_id)))

        args, kwargs = mock_logger.warning.call_args
        assert args[0] == "refresh_token_reuse_detected"
        assert kwargs["family_root_jti"] == "jti-1"


# =============================================================================
# AuditEventHandler Tests
# =============================================================================


@pytest.mark.unit
class TestAuditEventHandler:
    """Test AuditEventHandler records the right action and resource."""

    async def test_user_registered(self, mock_audit, sample_user_id):
        handler = AuditEventHandler(audit=mock_audit)

        await handler.handle_user_registered(
            UserRegistered(user_id=sample_user_id, email="a@example.com", password_hash="h")
        )

        kwargs = mock_audit.record.call_args.kwargs
        assert kwargs["action"] == AuditAction.USER_REGISTERED
        assert kwargs["resource_type"] == AggregateType.IDENTITY.value
        assert kwargs["user_id"] == sample_user_id
        assert kwargs["context"]["email"] == "a@example.com"
        assert "password_hash" not in kwargs["context"]

    async def test_session_revoked(self, mock_audit, sample_user_id):
        handler = AuditEventHandler(audit=mock_audit)
        session_id = UUID("aaaaaaaa-1234-5678-1234-567812345678")

        await handler.handle_session_revoked(
            SessionRevoked(session_id=session_id, user_id=sample_user_id, reason="logout")
        )

        kwargs = mock_audit.record.call_args.kwargs
        assert kwargs["action"] == AuditAction.SESSION_REVOKED
        assert kwargs["resource_id"] == str(session_id)

    async def test_reuse_by_client_subject_has_no_user(self, mock_audit):
        handler = AuditEventHandler(audit=mock_audit)

        await handler.handle_refresh_token_reuse_detected(_reuse_event("client-1"))

        kwargs = mock_audit.record.call_args.kwargs
        assert kwargs["action"] == AuditAction.REFRESH_TOKEN_REUSED
        assert kwargs["user_id"] is None
        assert kwargs["context"]["family_root_jti"] == "jti-1"


# =============================================================================
# EmailEventHandler Tests
# =============================================================================


@pytest.mark.unit
class TestEmailEventHandler:
    """Test template selection and recipient lookup."""

    async def test_welcome_email_uses_event_address(self, mock_notifier, mock_logger, sample_user_id):
        lookup = AsyncMock()
        handler = EmailEventHandler(notifier=mock_notifier, email_lookup=lookup, logger=mock_logger)

        await handler.handle_user_registered(
            UserRegistered(user_id=sample_user_id, email="a@example.com", password_hash="h")
        )

        template, recipient, _ = mock_notifier.send.call_args.args
        assert template == EmailTemplate.WELCOME
        assert recipient == "a@example.com"
        lookup.assert_not_awaited()

    async def test_password_changed_looks_up_recipient(self, mock_notifier, mock_logger, sample_user_id):
        lookup = AsyncMock(return_value="current@example.com")
        handler = EmailEventHandler(notifier=mock_notifier, email_lookup=lookup, logger=mock_logger)

        await handler.handle_password_changed(PasswordChanged(user_id=sample_user_id, password_hash="h"))

        lookup.assert_awaited_once_with(sample_user_id)
        assert mock_notifier.send.call_args.args[1] == "current@example.com"

    async def test_unknown_recipient_is_skipped(self, mock_notifier, mock_logger, sample_user_id):
        handler = EmailEventHandler(
            notifier=mock_notifier, email_lookup=AsyncMock(return_value=None), logger=mock_logger
        )

        await handler.handle_password_changed(PasswordChanged(user_id=sample_user_id, password_hash="h"))

        mock_notifier.send.assert_not_awaited()

    async def test_reuse_alert_skips_client_subjects(self, mock_notifier, mock_logger):
        lookup = AsyncMock()
        handler = EmailEventHandler(notifier=mock_notifier, email_lookup=lookup, logger=mock_logger)

        await handler.handle_refresh_token_reuse_detected(_reuse_event("client-1"))

        lookup.assert_not_awaited()
        mock_notifier.send.assert_not_awaited()

    async def test_repeated_failure_alert(self, mock_notifier, mock_logger, sample_user_id):
        handler = EmailEventHandler(notifier=mock_notifier, email_lookup=AsyncMock(), logger=mock_logger)

        await handler.handle_repeated_authentication_failure(
            RepeatedAuthenticationFailure(
                user_id=sample_user_id, email="a@example.com", consecutive_failures=5
            )
        )

        template, recipient, context = mock_notifier.send.call_args.args
        assert template == EmailTemplate.SECURITY_ALERT
        assert context["consecutive_failures"] == 5


# =============================================================================
# Event Bus Failure Isolation
# =============================================================================


@pytest.mark.unit
class TestEventBusFailOpen:
    async def test_failing_handler_does_not_stop_others(self, mock_logger, sample_user_id):
        bus = InMemoryEventBus(logger=mock_logger)
        received = []

        async def failing(event):
            raise RuntimeError("sink down")

        async def working(event):
            received.append(event)

        bus.subscribe(PasswordChanged, failing)
        bus.subscribe(PasswordChanged, working)
        event = PasswordChanged(user_id=sample_user_id, password_hash="h")

        await bus.publish(event)

        assert received == [event]
        mock_logger.warning.assert_called_once()
        assert mock_logger.warning.call_args.kwargs["error_type"] == "RuntimeError"

    async def test_publish_without_handlers_is_noop(self, mock_logger, sample_user_id):
        bus = InMemoryEventBus(logger=mock_logger)

        await bus.publish(PasswordChanged(user_id=sample_user_id, password_hash="h"))

        assert bus.handler_count(PasswordChanged) == 0
