"""Fixtures for HTTP tests.

The TestClient is entered as a context manager so the app lifespan runs and
every request shares one event loop. Builders that must run before any HTTP
call (the first client, which no admin can register yet) go through the
client's portal onto that same loop.
"""

from collections.abc import Iterator
from functools import partial

import pytest
from fastapi.testclient import TestClient

from src.application.dtos import RegisteredClient
from src.main import app
from tests.utils.utils import obtain_tokens, register_client, signup

ADMIN_EMAIL = "admin@example.com"


@pytest.fixture
def api() -> Iterator[TestClient]:
    with TestClient(app, raise_server_exceptions=False, follow_redirects=False) as test_client:
        yield test_client


@pytest.fixture
def make_client(api):
    """Register a client on the app's event loop: `make_client(confidential=False)`."""

    def _make(**options) -> RegisteredClient:
        return api.portal.call(partial(register_client, **options))

    return _make


@pytest.fixture
def app_client(make_client) -> RegisteredClient:
    """Confidential client with the authorization_code and refresh_token grants."""
    return make_client()


@pytest.fixture
def admin_tokens(api, app_client) -> dict:
    """Token response for the bootstrap admin."""
    signup(api, ADMIN_EMAIL)
    return obtain_tokens(api, app_client, ADMIN_EMAIL)
