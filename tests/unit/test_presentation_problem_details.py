"""Unit tests for the Problem Details schemas (RFC 9457)."""

import pytest
from pydantic import ValidationError

from src.presentation.api.errors import ErrorDetail, ProblemDetails


@pytest.mark.unit
class TestErrorDetail:
    def test_serializes_to_dict(self):
        detail = ErrorDetail(field="email", code="invalid_email", message="Email address is invalid")

        assert detail.model_dump() == {
            "field": "email",
            "code": "invalid_email",
            "message": "Email address is invalid",
        }

    def test_requires_all_fields(self):
        with pytest.raises(ValidationError):
            ErrorDetail(field="email", code="invalid_email")


@pytest.mark.unit
class TestProblemDetails:
    def test_optional_fields_are_dropped(self):
        problem = ProblemDetails(
            type="http://testserver/errors/session_not_found",
            title="Resource Not Found",
            status=404,
            detail="Session not found",
            instance="/api/v1/sessions/123",
        )

        assert problem.model_dump(exclude_none=True) == {
            "type": "http://testserver/errors/session_not_found",
            "title": "Resource Not Found",
            "status": 404,
            "detail": "Session not found",
            "instance": "/api/v1/sessions/123",
        }

    def test_field_errors_and_trace_id(self):
        problem = ProblemDetails(
            type="http://testserver/errors/password_too_weak",
            title="Validation Failed",
            status=400,
            detail="Password does not meet the policy",
            instance="/api/v1/users",
            errors=[
                ErrorDetail(field="password", code="password_too_weak", message="Must contain a digit"),
            ],
            trace_id="trace-123",
        )

        serialized = problem.model_dump(exclude_none=True)
        assert serialized["errors"][0]["field"] == "password"
        assert serialized["trace_id"] == "trace-123"

    def test_requires_status_and_title(self):
        with pytest.raises(ValidationError):
            ProblemDetails(
                type="http://testserver/errors/conflict",
                detail="Email already registered",
                instance="/api/v1/users",
            )
