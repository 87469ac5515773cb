"""Unit tests for the Token aggregate (revocation registry and rotation chain)."""

from datetime import UTC, datetime, timedelta

import pytest

from src.core.enums import ErrorCode
from src.core.result import Failure, Success
from src.domain.aggregates import apply_token_event, rehydrate
from src.domain.aggregates.token import (
    ROTATED_REASON,
    detect_reuse,
    issue_token,
    revoke_token,
    rotate_refresh_token,
)
from src.domain.enums import TokenUse
from src.domain.events import RefreshTokenRotated

NOW = datetime(2026, 1, 15, 12, 0, tzinfo=UTC)


def _token(token_use=TokenUse.REFRESH, jti="jti-1", parent_jti=None):
    events = issue_token(
        jti=jti,
        token_use=token_use,
        subject="user-1",
        client_id="client-1",
        scopes=frozenset({"openid"}),
        expires_at=NOW + timedelta(days=30),
        occurred_at=NOW,
        parent_jti=parent_jti,
    )
    return rehydrate(apply_token_event, events)


@pytest.mark.unit
class TestTokenLifecycle:
    def test_issued_token_is_active_until_expiry(self):
        token = _token(TokenUse.ACCESS)

        assert token.is_active(NOW)
        assert not token.is_active(NOW + timedelta(days=30))

    def test_revocation_is_idempotent_and_keeps_first_reason(self):
        token = _token()

        events = revoke_token(token, reason="logout", occurred_at=NOW)
        token = rehydrate(apply_token_event, events, token)

        assert token.revoked is True
        assert token.revoked_reason == "logout"
        assert revoke_token(token, reason="again", occurred_at=NOW) == []


@pytest.mark.unit
class TestRotateRefreshToken:
    def test_rotation_revokes_parent_and_records_children(self):
        token = _token()

        result = rotate_refresh_token(token, child_jtis=("a2", "r2"), now=NOW)

        assert isinstance(result, Success)
        assert isinstance(result.value[0], RefreshTokenRotated)
        token = rehydrate(apply_token_event, result.value, token)
        assert token.revoked is True
        assert token.revoked_reason == ROTATED_REASON
        assert token.children == ("a2", "r2")

    def test_rotated_token_cannot_rotate_again(self):
        token = _token()
        token = rehydrate(
            apply_token_event,
            rotate_refresh_token(token, child_jtis=("r2",), now=NOW).value,
            token,
        )

        result = rotate_refresh_token(token, child_jtis=("r3",), now=NOW)

        assert isinstance(result, Failure)
        assert result.error.code == ErrorCode.REFRESH_TOKEN_REUSED

    def test_access_token_is_not_rotatable(self):
        result = rotate_refresh_token(_token(TokenUse.ACCESS), child_jtis=("x",), now=NOW)

        assert result.error.code == ErrorCode.TOKEN_INVALID

    def test_expired_refresh_token(self):
        result = rotate_refresh_token(_token(), child_jtis=("x",), now=NOW + timedelta(days=31))

        assert result.error.code == ErrorCode.TOKEN_EXPIRED

    def test_reuse_detection_marks_token(self):
        token = _token(jti="r2", parent_jti="r1")

        events = detect_reuse(token, family_root_jti="r1", occurred_at=NOW)
        token = rehydrate(apply_token_event, events, token)

        assert events[0].family_root_jti == "r1"
        assert token.reuse_detected is True
