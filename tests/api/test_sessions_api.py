"""API tests for session management endpoints.

Tests the complete HTTP request/response cycle for:
- GET    /api/v1/sessions        (list, current session flagged)
- DELETE /api/v1/sessions/{id}   (revoke one)
- DELETE /api/v1/sessions        (revoke all other devices)

Architecture:
- Real app and container; each device logs in with its own User-Agent,
  which gives it its own device fingerprint and therefore its own session
"""

from unittest.mock import patch
from uuid import uuid4

import pytest

from src.core.container import get_event_store
from src.domain.errors import EventStoreUnavailableError
from tests.utils.utils import bearer, obtain_tokens, random_email, signup

CHROME_ON_MAC = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)
SAFARI_ON_IPHONE = (
    "Mozilla/5.0 (iPhone; CPU iPhone OS 17_0 like Mac OS X) AppleWebKit/605.1.15 "
    "(KHTML, like Gecko) Version/17.0 Mobile/15E148 Safari/604.1"
)


def _login_from(api, app_client, email, user_agent):
    api.headers["user-agent"] = user_agent
    return obtain_tokens(api, app_client, email)


@pytest.fixture
def two_devices(api, app_client):
    """Token responses for one user on a laptop and on a phone."""
    email = random_email()
    signup(api, email)
    laptop = _login_from(api, app_client, email, CHROME_ON_MAC)
    phone = _login_from(api, app_client, email, SAFARI_ON_IPHONE)
    return laptop, phone


@pytest.mark.api
class TestListSessions:
    def test_lists_both_devices(self, api, two_devices):
        laptop, _ = two_devices

        response = api.get("/api/v1/sessions", headers=bearer(laptop["access_token"]))

        assert response.status_code == 200
        data = response.json()
        assert data["total_count"] == 2
        current = [session for session in data["sessions"] if session["is_current"]]
        assert len(current) == 1
        assert current[0]["device_info"] == "Chrome on Mac OS X"
        assert all(session["active_token_count"] >= 1 for session in data["sessions"])

    def test_requires_authentication(self, api):
        response = api.get("/api/v1/sessions")

        assert response.status_code == 401


@pytest.mark.api
class TestRevokeSession:
    def test_revoking_the_other_device_logs_it_out(self, api, two_devices):
        laptop, phone = two_devices
        listing = api.get("/api/v1/sessions", headers=bearer(laptop["access_token"])).json()
        (other,) = [session for session in listing["sessions"] if not session["is_current"]]

        response = api.delete(f"/api/v1/sessions/{other['id']}", headers=bearer(laptop["access_token"]))

        assert response.status_code == 204
        assert api.get("/api/v1/sessions", headers=bearer(phone["access_token"])).status_code == 401
        remaining = api.get("/api/v1/sessions", headers=bearer(laptop["access_token"])).json()
        assert remaining["total_count"] == 1

    def test_unknown_session(self, api, two_devices):
        laptop, _ = two_devices

        response = api.delete(f"/api/v1/sessions/{uuid4()}", headers=bearer(laptop["access_token"]))

        assert response.status_code == 404

    def test_other_users_session_is_not_found(self, api, app_client, two_devices):
        laptop, _ = two_devices
        stranger = random_email()
        signup(api, stranger)
        stranger_tokens = obtain_tokens(api, app_client, stranger)
        listing = api.get("/api/v1/sessions", headers=bearer(laptop["access_token"])).json()
        target = listing["sessions"][0]["id"]

        response = api.delete(f"/api/v1/sessions/{target}", headers=bearer(stranger_tokens["access_token"]))

        assert response.status_code == 404


@pytest.mark.api
class TestRevokeAllSessions:
    def test_keeps_the_current_session(self, api, two_devices):
        laptop, phone = two_devices

        response = api.delete("/api/v1/sessions", headers=bearer(laptop["access_token"]))

        assert response.status_code == 200
        assert response.json() == {"revoked_count": 1}
        assert api.get("/api/v1/sessions", headers=bearer(laptop["access_token"])).status_code == 200
        assert api.get("/api/v1/sessions", headers=bearer(phone["access_token"])).status_code == 401


@pytest.mark.api
class TestSessionsOutage:
    def test_event_store_outage_is_service_unavailable(self, api, two_devices):
        laptop, _ = two_devices

        with patch.object(get_event_store(), "load", side_effect=EventStoreUnavailableError("db down at 10.0.0.5")):
            response = api.get("/api/v1/sessions", headers=bearer(laptop["access_token"]))

        assert response.status_code == 503
        data = response.json()
        assert data["type"].endswith("/errors/service_unavailable")
        assert "10.0.0.5" not in response.text
