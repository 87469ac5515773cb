"""API tests for OAuth client administration.

Tests the complete HTTP request/response cycle for:
- POST   /api/v1/clients               (register)
- POST   /api/v1/clients/{id}/secret   (rotate secret)
- DELETE /api/v1/clients/{id}          (deactivate)

All three require the admin role; the bootstrap admin is configured in the
test environment.
"""

import pytest

from tests.utils.utils import REDIRECT_URI, basic_auth, bearer, obtain_tokens, random_email, signup


def _client_credentials(api, client_id, client_secret):
    return api.post(
        "/oauth2/token",
        data={"grant_type": "client_credentials"},
        headers=basic_auth(client_id, client_secret),
    )


@pytest.fixture
def admin_headers(admin_tokens):
    return bearer(admin_tokens["access_token"])


@pytest.fixture
def service(api, admin_headers):
    """A confidential client_credentials client registered over HTTP."""
    response = api.post(
        "/api/v1/clients",
        json={
            "name": "Reporting job",
            "grant_types": ["client_credentials"],
            "allowed_scopes": ["reports.read"],
        },
        headers=admin_headers,
    )
    assert response.status_code == 201, response.text
    return response.json()


@pytest.mark.api
class TestRegisterClient:
    def test_confidential_client_gets_a_secret(self, api, service):
        assert service["client_id"]
        assert service["client_secret"]

        issued = _client_credentials(api, service["client_id"], service["client_secret"])

        assert issued.status_code == 200

    def test_public_client_gets_no_secret(self, api, admin_headers):
        response = api.post(
            "/api/v1/clients",
            json={
                "name": "SPA",
                "redirect_uris": [REDIRECT_URI],
                "grant_types": ["authorization_code"],
                "confidential": False,
            },
            headers=admin_headers,
        )

        assert response.status_code == 201
        assert response.json()["client_secret"] is None

    def test_authorization_code_needs_a_redirect_uri(self, api, admin_headers):
        response = api.post(
            "/api/v1/clients",
            json={"name": "Broken", "grant_types": ["authorization_code"]},
            headers=admin_headers,
        )

        assert response.status_code == 400

    def test_unknown_grant_type(self, api, admin_headers):
        response = api.post(
            "/api/v1/clients",
            json={"name": "Broken", "grant_types": ["password"]},
            headers=admin_headers,
        )

        assert response.status_code == 422

    def test_requires_admin(self, api, app_client):
        email = random_email()
        signup(api, email)
        tokens = obtain_tokens(api, app_client, email)

        response = api.post(
            "/api/v1/clients",
            json={"name": "Sneaky", "grant_types": ["client_credentials"]},
            headers=bearer(tokens["access_token"]),
        )

        assert response.status_code == 403

    def test_requires_authentication(self, api):
        response = api.post(
            "/api/v1/clients",
            json={"name": "Anonymous", "grant_types": ["client_credentials"]},
        )

        assert response.status_code == 401


@pytest.mark.api
class TestRotateSecret:
    def test_old_secret_stops_working(self, api, admin_headers, service):
        response = api.post(f"/api/v1/clients/{service['client_id']}/secret", headers=admin_headers)

        assert response.status_code == 200
        rotated = response.json()
        assert rotated["client_id"] == service["client_id"]
        assert rotated["client_secret"] != service["client_secret"]
        assert _client_credentials(api, service["client_id"], service["client_secret"]).status_code == 401
        assert _client_credentials(api, service["client_id"], rotated["client_secret"]).status_code == 200

    def test_unknown_client(self, api, admin_headers):
        response = api.post("/api/v1/clients/no-such-client/secret", headers=admin_headers)

        assert response.status_code == 404


@pytest.mark.api
class TestDeactivateClient:
    def test_deactivated_client_and_its_tokens_stop_working(self, api, admin_headers, service):
        issued = _client_credentials(api, service["client_id"], service["client_secret"]).json()

        response = api.delete(f"/api/v1/clients/{service['client_id']}", headers=admin_headers)

        assert response.status_code == 204
        assert _client_credentials(api, service["client_id"], service["client_secret"]).status_code == 401
        assert api.get("/api/v1/users/me", headers=bearer(issued["access_token"])).status_code == 401

    def test_unknown_client(self, api, admin_headers):
        response = api.delete("/api/v1/clients/no-such-client", headers=admin_headers)

        assert response.status_code == 404
