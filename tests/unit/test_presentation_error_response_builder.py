"""Unit tests for ErrorResponseBuilder utility.

Tests the domain error to Problem Details conversion used by the /api/v1
routes.
"""

import json
from unittest.mock import MagicMock

import pytest
from fastapi import status

from src.core.enums import ErrorCode
from src.core.errors import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    NotFoundError,
    RevokedError,
    ValidationError,
)
from src.presentation.api.errors import ErrorResponseBuilder


def _request(path: str = "/api/v1/users") -> MagicMock:
    request = MagicMock()
    request.url.path = path
    return request


@pytest.mark.unit
class TestErrorResponseBuilder:
    """Unit tests for ErrorResponseBuilder utility class."""

    def test_not_found(self):
        """NotFoundError becomes a 404 problem with instance and trace id."""
        error = NotFoundError(code=ErrorCode.SESSION_NOT_FOUND, message="Session not found")
        trace_id = "550e8400-e29b-41d4-a716-446655440000"

        response = ErrorResponseBuilder.from_domain_error(error, _request("/api/v1/sessions/123"), trace_id)

        assert response.status_code == 404
        content = json.loads(response.body)
        assert content["type"] == "http://testserver/errors/session_not_found"
        assert content["title"] == "Resource Not Found"
        assert content["detail"] == "Session not found"
        assert content["instance"] == "/api/v1/sessions/123"
        assert content["trace_id"] == trace_id

    def test_validation_error_with_field(self):
        """Field-level validation errors are listed under `errors`."""
        error = ValidationError(
            code=ErrorCode.PASSWORD_TOO_WEAK,
            message="Password must contain a digit",
            field="password",
        )

        response = ErrorResponseBuilder.from_domain_error(error, _request(), "trace-123")

        assert response.status_code == 400
        content = json.loads(response.body)
        assert content["errors"] == [
            {"field": "password", "code": "password_too_weak", "message": "Password must contain a digit"}
        ]

    def test_validation_error_without_field(self):
        error = ValidationError(code=ErrorCode.VALIDATION_FAILED, message="Role must not be empty")

        response = ErrorResponseBuilder.from_domain_error(error, _request(), None)

        content = json.loads(response.body)
        assert "errors" not in content
        assert "trace_id" not in content

    @pytest.mark.parametrize(
        ("error", "expected_status", "expected_title"),
        [
            (
                ConflictError(code=ErrorCode.EMAIL_ALREADY_EXISTS, message="taken"),
                status.HTTP_409_CONFLICT,
                "Resource Conflict",
            ),
            (
                AuthenticationError(code=ErrorCode.INVALID_CREDENTIALS, message="bad"),
                status.HTTP_401_UNAUTHORIZED,
                "Authentication Failed",
            ),
            (
                AuthorizationError(code=ErrorCode.PERMISSION_DENIED, message="no"),
                status.HTTP_403_FORBIDDEN,
                "Access Denied",
            ),
            (
                RevokedError(code=ErrorCode.SESSION_REVOKED, message="gone"),
                status.HTTP_400_BAD_REQUEST,
                "Revoked",
            ),
            (
                ConflictError(code=ErrorCode.CONCURRENCY_CONFLICT, message="busy"),
                status.HTTP_503_SERVICE_UNAVAILABLE,
                "Temporarily Unavailable",
            ),
        ],
    )
    def test_classify(self, error, expected_status, expected_title):
        assert ErrorResponseBuilder.classify(error) == (expected_status, expected_title)
