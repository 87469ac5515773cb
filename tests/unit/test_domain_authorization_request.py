"""Unit tests for the AuthorizationRequest aggregate.

Tests cover:
- Request validation order (client/redirect errors before redirectable ones)
- The CREATED -> CONSENTED -> CODE_ISSUED -> REDEEMED state machine
- Redemption failures (replay, expiry, client/redirect mismatch, PKCE)
- Abandoned-request expiry and revocation
"""

from datetime import UTC, datetime, timedelta

import pytest
from uuid_extensions import uuid7

from src.core.enums import ErrorCode
from src.core.errors import AuthenticationError, ExpiredError, RevokedError
from src.core.result import Failure, Success
from src.domain.aggregates import (
    apply_authorization_event,
    apply_client_event,
    rehydrate,
)
from src.domain.aggregates.authorization_request import (
    consent,
    expire,
    issue_code,
    redeem,
    request_authorization,
    revoke,
)
from src.domain.aggregates.client import deactivate_client, register_client
from src.domain.enums import AuthorizationStatus, CodeChallengeMethod, GrantType
from src.domain.events import (
    AuthorizationCodeRedeemed,
    AuthorizationExpired,
    AuthorizationRevoked,
)
from src.domain.value_objects.pkce import compute_s256_challenge

NOW = datetime(2026, 1, 15, 12, 0, tzinfo=UTC)
CALLBACK = "https://app.example.com/callback"
VERIFIER = "dBjftJeZ4CVP-mB92K27uhbUJU1p1r_wW1gFWFOEjXk"
CHALLENGE = compute_s256_challenge(VERIFIER)


def _client(**overrides):
    params = {
        "client_id": "client-1",
        "name": "Test App",
        "redirect_uris": frozenset({CALLBACK}),
        "grant_types": frozenset({GrantType.AUTHORIZATION_CODE}),
        "confidential": True,
        "pkce_required": True,
        "allowed_scopes": frozenset({"openid", "email", "profile"}),
        "occurred_at": NOW,
        "secret_hash": "hash",
    }
    params.update(overrides)
    return rehydrate(apply_client_event, register_client(**params).value)


def _request(client=None, **overrides):
    params = {
        "request_id": uuid7(),
        "client": client or _client(),
        "redirect_uri": CALLBACK,
        "response_type": "code",
        "scope": "openid email",
        "occurred_at": NOW,
        "state": "xyz",
        "code_challenge": CHALLENGE,
        "code_challenge_method": "S256",
    }
    params.update(overrides)
    return request_authorization(**params)


def _created(**overrides):
    result = _request(**overrides)
    assert isinstance(result, Success), result
    return rehydrate(apply_authorization_event, result.value)


def _code_issued(**overrides):
    state = _created(**overrides)
    state = rehydrate(
        apply_authorization_event,
        consent(state, user_id=uuid7(), session_id=uuid7(), auth_time=NOW, occurred_at=NOW).value,
        state,
    )
    return rehydrate(
        apply_authorization_event,
        issue_code(
            state,
            code_hash="code-hash",
            expires_at=NOW + timedelta(minutes=10),
            occurred_at=NOW,
        ).value,
        state,
    )


def _redeem(state, **overrides):
    params = {
        "client_id": "client-1",
        "redirect_uri": CALLBACK,
        "code_verifier": VERIFIER,
        "issued_jtis": ("jti-a", "jti-r"),
        "now": NOW + timedelta(minutes=1),
    }
    params.update(overrides)
    return redeem(state, **params)


@pytest.mark.unit
class TestRequestAuthorization:
    """Validation of /authorize parameters."""

    def test_valid_request_is_created(self):
        state = _created()

        assert state.status is AuthorizationStatus.CREATED
        assert state.scopes == frozenset({"openid", "email"})
        assert state.code_challenge_method is CodeChallengeMethod.S256

    def test_missing_scope_defaults_to_allowed_scopes(self):
        state = _created(scope=None)

        assert state.scopes == frozenset({"openid", "email", "profile"})

    def test_challenge_method_defaults_to_plain(self):
        state = _created(code_challenge=VERIFIER, code_challenge_method=None)

        assert state.code_challenge_method is CodeChallengeMethod.PLAIN

    @pytest.mark.parametrize(
        "overrides,code",
        [
            ({"redirect_uri": None}, ErrorCode.INVALID_REDIRECT_URI),
            ({"redirect_uri": "https://evil.example.com/cb"}, ErrorCode.INVALID_REDIRECT_URI),
            ({"response_type": "token"}, ErrorCode.UNSUPPORTED_RESPONSE_TYPE),
            ({"scope": "openid admin"}, ErrorCode.INVALID_SCOPE),
            ({"scope": 'bad"scope'}, ErrorCode.INVALID_SCOPE),
            ({"code_challenge": None, "code_challenge_method": None}, ErrorCode.PKCE_REQUIRED),
            ({"code_challenge": None}, ErrorCode.INVALID_CODE_CHALLENGE),
            ({"code_challenge": "short"}, ErrorCode.INVALID_CODE_CHALLENGE),
            ({"code_challenge_method": "S512"}, ErrorCode.INVALID_CODE_CHALLENGE),
        ],
    )
    def test_invalid_requests(self, overrides, code):
        result = _request(**overrides)

        assert isinstance(result, Failure)
        assert result.error.code == code

    def test_redirect_uri_checked_before_response_type(self):
        result = _request(redirect_uri="https://evil.example.com/cb", response_type="token")

        assert result.error.code == ErrorCode.INVALID_REDIRECT_URI

    def test_inactive_client_is_rejected(self):
        client = _client()
        client = rehydrate(
            apply_client_event, deactivate_client(client, reason="x", occurred_at=NOW), client
        )

        result = _request(client=client)

        assert result.error.code == ErrorCode.CLIENT_INACTIVE

    def test_client_without_code_grant_is_unauthorized(self):
        client = _client(grant_types=frozenset({GrantType.CLIENT_CREDENTIALS}))

        result = _request(client=client)

        assert result.error.code == ErrorCode.UNAUTHORIZED_CLIENT

    def test_pkce_optional_client_without_challenge(self):
        state = _created(
            client=_client(pkce_required=False), code_challenge=None, code_challenge_method=None
        )

        assert state.code_challenge is None


@pytest.mark.unit
class TestStateMachine:
    """Consent and code issuance transitions."""

    def test_consent_then_issue(self):
        state = _code_issued()

        assert state.status is AuthorizationStatus.CODE_ISSUED
        assert state.code_hash == "code-hash"
        assert state.granted_scopes == frozenset({"openid", "email"})

    def test_consent_twice_is_invalid_transition(self):
        state = _code_issued()

        result = consent(state, user_id=uuid7(), session_id=None, auth_time=NOW, occurred_at=NOW)

        assert result.error.code == ErrorCode.INVALID_STATE_TRANSITION

    def test_issue_code_requires_consent(self):
        result = issue_code(
            _created(), code_hash="h", expires_at=NOW + timedelta(minutes=10), occurred_at=NOW
        )

        assert result.error.code == ErrorCode.INVALID_STATE_TRANSITION


@pytest.mark.unit
class TestRedeem:
    """Token-endpoint exchange decisions."""

    def test_successful_redemption_records_jtis(self):
        state = _code_issued()

        redemption = _redeem(state)

        assert redemption.error is None
        assert isinstance(redemption.events[0], AuthorizationCodeRedeemed)
        state = rehydrate(apply_authorization_event, redemption.events, state)
        assert state.status is AuthorizationStatus.REDEEMED
        assert state.issued_jtis == ("jti-a", "jti-r")

    def test_second_redemption_is_a_replay(self):
        state = _code_issued()
        state = rehydrate(apply_authorization_event, _redeem(state).events, state)

        redemption = _redeem(state)

        assert redemption.replayed is True
        assert isinstance(redemption.error, RevokedError)
        assert redemption.error.code == ErrorCode.CODE_ALREADY_REDEEMED
        assert redemption.events == []
        assert state.status is AuthorizationStatus.REDEEMED

    def test_expired_code(self):
        redemption = _redeem(_code_issued(), now=NOW + timedelta(minutes=10))

        assert isinstance(redemption.error, ExpiredError)
        assert isinstance(redemption.events[0], AuthorizationExpired)

    def test_wrong_client_revokes_code(self):
        redemption = _redeem(_code_issued(), client_id="client-2")

        assert redemption.error.code == ErrorCode.CODE_CLIENT_MISMATCH
        assert isinstance(redemption.events[0], AuthorizationRevoked)

    def test_redirect_uri_must_match_exactly(self):
        redemption = _redeem(_code_issued(), redirect_uri=CALLBACK + "/")

        assert redemption.error.code == ErrorCode.REDIRECT_URI_MISMATCH

    def test_wrong_verifier_revokes_code(self):
        state = _code_issued()

        redemption = _redeem(state, code_verifier="x" * 43)
        state = rehydrate(apply_authorization_event, redemption.events, state)

        assert isinstance(redemption.error, AuthenticationError)
        assert redemption.error.code == ErrorCode.PKCE_VERIFICATION_FAILED
        retry = _redeem(state)
        assert retry.error.code == ErrorCode.CODE_REVOKED
        assert retry.events == []

    def test_missing_verifier_fails(self):
        redemption = _redeem(_code_issued(), code_verifier=None)

        assert redemption.error.code == ErrorCode.PKCE_VERIFICATION_FAILED

    def test_verifier_without_challenge_fails(self):
        state = _code_issued(
            client=_client(pkce_required=False), code_challenge=None, code_challenge_method=None
        )

        redemption = _redeem(state)

        assert redemption.error.code == ErrorCode.PKCE_VERIFICATION_FAILED

    def test_code_not_yet_issued_is_not_redeemable(self):
        redemption = _redeem(_created())

        assert redemption.error.code == ErrorCode.CODE_REVOKED
        assert redemption.events == []


@pytest.mark.unit
class TestExpireAndRevoke:
    def test_issued_code_expires_after_ttl(self):
        state = _code_issued()

        assert expire(state, now=NOW + timedelta(minutes=5), abandon_after=timedelta(minutes=10)) == []
        events = expire(state, now=NOW + timedelta(minutes=10), abandon_after=timedelta(minutes=10))
        assert isinstance(events[0], AuthorizationExpired)

    def test_abandoned_request_expires(self):
        state = _created()

        events = expire(state, now=NOW + timedelta(minutes=10), abandon_after=timedelta(minutes=10))

        assert len(events) == 1

    def test_revoke_is_noop_when_terminal(self):
        state = _created()
        state = rehydrate(
            apply_authorization_event, revoke(state, reason="x", occurred_at=NOW), state
        )

        assert state.status is AuthorizationStatus.REVOKED
        assert revoke(state, reason="x", occurred_at=NOW) == []

    def test_redeemed_request_cannot_be_revoked(self):
        state = _code_issued()
        state = rehydrate(apply_authorization_event, _redeem(state).events, state)

        assert revoke(state, reason="x", occurred_at=NOW) == []
