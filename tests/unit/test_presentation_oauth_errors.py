"""Unit tests for the OAuth2 error mapping.

Tests cover:
- Code-specific mappings win over class-based fallbacks
- Client failures and unknown resources get generic descriptions
- JSON rendering (no-store, Basic challenge on 401) and error redirects
"""

import json

import pytest
from fastapi import status

from src.core.enums import ErrorCode
from src.core.errors import (
    AuthenticationError,
    ConflictError,
    ExpiredError,
    NotFoundError,
    RevokedError,
    ValidationError,
)
from src.domain.enums import TokenFailureReason
from src.domain.errors import TokenVerificationError
from src.presentation.api.errors import (
    OAuthError,
    authorization_error_redirect,
    oauth_error_response,
    to_oauth_error,
)
from tests.utils.utils import query_params


@pytest.mark.unit
class TestToOAuthError:
    @pytest.mark.parametrize(
        ("error", "expected_error", "expected_status"),
        [
            (
                AuthenticationError(code=ErrorCode.CLIENT_AUTHENTICATION_FAILED, message="bad secret"),
                "invalid_client",
                401,
            ),
            (NotFoundError(code=ErrorCode.CLIENT_NOT_FOUND, message="no client"), "invalid_client", 401),
            (ValidationError(code=ErrorCode.INVALID_SCOPE, message="scope"), "invalid_scope", 400),
            (
                ValidationError(code=ErrorCode.UNAUTHORIZED_CLIENT, message="grant"),
                "unauthorized_client",
                400,
            ),
            (ValidationError(code=ErrorCode.PKCE_REQUIRED, message="pkce"), "invalid_request", 400),
            (ExpiredError(code=ErrorCode.CODE_EXPIRED, message="expired"), "invalid_grant", 400),
            (RevokedError(code=ErrorCode.CODE_ALREADY_REDEEMED, message="replay"), "invalid_grant", 400),
            (
                AuthenticationError(code=ErrorCode.PKCE_VERIFICATION_FAILED, message="pkce"),
                "invalid_grant",
                400,
            ),
            (
                TokenVerificationError(
                    code=ErrorCode.TOKEN_INVALID,
                    message="bad token",
                    reason=TokenFailureReason.MALFORMED,
                ),
                "invalid_grant",
                400,
            ),
            (
                ConflictError(code=ErrorCode.CONCURRENCY_CONFLICT, message="retry"),
                "temporarily_unavailable",
                503,
            ),
        ],
    )
    def test_mapping(self, error, expected_error, expected_status):
        mapped = to_oauth_error(error)

        assert mapped.error == expected_error
        assert mapped.status_code == expected_status

    def test_client_failures_share_one_description(self):
        unknown = to_oauth_error(NotFoundError(code=ErrorCode.CLIENT_NOT_FOUND, message="client abc missing"))
        wrong = to_oauth_error(
            AuthenticationError(code=ErrorCode.CLIENT_AUTHENTICATION_FAILED, message="secret mismatch")
        )

        assert unknown.description == wrong.description == "Client authentication failed"

    def test_not_found_does_not_echo_the_message(self):
        mapped = to_oauth_error(
            NotFoundError(code=ErrorCode.AUTHORIZATION_REQUEST_NOT_FOUND, message="request 123 missing")
        )

        assert "123" not in mapped.description

    def test_other_messages_pass_through(self):
        mapped = to_oauth_error(ExpiredError(code=ErrorCode.CODE_EXPIRED, message="Authorization code expired"))

        assert mapped.description == "Authorization code expired"


@pytest.mark.unit
class TestRendering:
    def test_json_error_has_no_store_headers(self):
        response = oauth_error_response(OAuthError(error="invalid_grant", description="nope"))

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert json.loads(response.body) == {"error": "invalid_grant", "error_description": "nope"}
        assert response.headers["cache-control"] == "no-store"
        assert "www-authenticate" not in response.headers

    def test_unauthorized_carries_basic_challenge(self):
        response = oauth_error_response(
            OAuthError(error="invalid_client", description="Client authentication failed", status_code=401)
        )

        assert response.headers["www-authenticate"] == 'Basic realm="oauth2"'

    def test_redirect_keeps_existing_query_and_state(self):
        response = authorization_error_redirect(
            "https://app.example.com/cb?tenant=7",
            OAuthError(error="access_denied", description="denied"),
            "xyz",
        )

        assert response.status_code == status.HTTP_302_FOUND
        params = query_params(response.headers["location"])
        assert params == {
            "tenant": "7",
            "error": "access_denied",
            "error_description": "denied",
            "state": "xyz",
        }
