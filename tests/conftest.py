"""Pytest configuration.

This configuration ensures:
1. Settings are test-friendly before `src` is imported (the settings
   singleton is built at import time)
2. Every test gets a fresh container (empty event log and indexes)
3. Time-sensitive tests run against a frozen clock
4. Async tests are marked automatically
"""

import inspect
import os

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa


def _generate_signing_key() -> str:
    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    return key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode("utf-8")


# Test defaults; explicit environment variables win.
os.environ.setdefault("ENVIRONMENT", "testing")
os.environ.setdefault("LOG_LEVEL", "WARNING")
os.environ.setdefault("ISSUER", "http://testserver")
os.environ.setdefault("LOGIN_PAGE_URL", "http://testserver/login")
os.environ.setdefault("EVENT_STORE_BACKEND", "memory")
os.environ.setdefault("INDEX_STORE_BACKEND", "memory")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("RETENTION_SWEEP_INTERVAL_SECONDS", "0")
os.environ.setdefault("BOOTSTRAP_ADMIN_EMAILS", '["admin@example.com"]')
os.environ.setdefault(
    "EXTERNAL_IDENTITY_PROVIDERS",
    '{"acme": "acme-shared-secret-used-only-in-tests-0123456789"}',
)
os.environ.setdefault("SIGNING_KEY_PEM", _generate_signing_key())

from src.core.container import reset_container  # noqa: E402
from src.infrastructure.clock import SystemClock  # noqa: E402
from tests.utils.utils import FrozenClock  # noqa: E402


@pytest.fixture(autouse=True)
def fresh_container():
    """Drop every cached singleton so each test starts with an empty log."""
    reset_container()
    yield
    reset_container()


@pytest.fixture
def clock(monkeypatch) -> FrozenClock:
    """Freeze the application clock.

    Every component built by the container reads time through SystemClock,
    so patching it freezes the whole stack. Advance with `clock.advance()`.
    """
    frozen = FrozenClock()
    monkeypatch.setattr(SystemClock, "now", lambda self: frozen.now())
    return frozen


# Pytest markers for different test types
def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests with in-memory or mocked dependencies")
    config.addinivalue_line("markers", "integration: Integration tests with a real database")
    config.addinivalue_line("markers", "api: HTTP tests through the FastAPI app")
    config.addinivalue_line("markers", "asyncio: Async test that requires event loop")


# Test execution configuration
def pytest_collection_modifyitems(config, items):
    """Automatically add asyncio marker to async test functions.

    This ensures all async tests are properly marked even if
    the developer forgets to add @pytest.mark.asyncio.
    """
    for item in items:
        if inspect.iscoroutinefunction(item.function):
            item.add_marker(pytest.mark.asyncio)
