"""Unit tests for the authorization code flow handlers.

Tests cover:
- StartAuthorizationHandler: validation and redirectability of errors
- ApproveAuthorizationHandler: consent and code issuance
- ExchangeAuthorizationCodeHandler: redemption, PKCE, replay, expiry
- GetAuthorizationRequestHandler: login page lookup

Architecture:
- Real container (in-memory event store and index) with a frozen clock
"""

import asyncio
from uuid import uuid4

import pytest

from src.application.commands import (
    ApproveAuthorization,
    DeactivateUser,
    ExchangeAuthorizationCode,
    StartAuthorization,
)
from src.application.commands.handlers.start_authorization_handler import is_redirectable
from src.application.queries import GetAuthorizationRequest
from src.core.container import (
    get_approve_authorization_handler,
    get_authorization_repository,
    get_deactivate_user_handler,
    get_event_bus,
    get_exchange_authorization_code_handler,
    get_get_authorization_request_handler,
    get_index_store,
    get_secrets,
    get_start_authorization_handler,
    get_token_service,
)
from src.core.enums import ErrorCode
from src.core.result import Failure, Success
from src.domain.enums import AuthorizationStatus, GrantType, TokenFailureReason, TokenUse
from src.domain.events import AuthorizationCodeRedeemed, AuthorizationCodeReplayDetected
from src.domain.protocols import IndexNamespace
from tests.utils.utils import (
    REDIRECT_URI,
    issue_code,
    load_client,
    login,
    make_pkce_pair,
    random_email,
    register_client,
    register_user,
)


def _start(client_id, **overrides):
    params = {
        "client_id": client_id,
        "redirect_uri": REDIRECT_URI,
        "response_type": "code",
        "scope": "openid email",
        "state": "xyz",
    }
    params.update(overrides)
    return get_start_authorization_handler().handle(StartAuthorization(**params))


async def _prepared(*, confidential=True, scope="openid email", nonce=None, **client_options):
    """Registered client, logged-in user, code and its PKCE verifier."""
    email = random_email()
    await register_user(email)
    registered = await register_client(confidential=confidential, **client_options)
    client = await load_client(registered.client_id)
    user_login = await login(email)
    verifier, challenge = make_pkce_pair()
    code = await issue_code(client.id, user_login, scope=scope, code_challenge=challenge, nonce=nonce)
    return client, user_login, code, verifier


def _exchange(client, code, verifier, redirect_uri=REDIRECT_URI):
    return get_exchange_authorization_code_handler().handle(
        ExchangeAuthorizationCode(client=client, code=code, redirect_uri=redirect_uri, code_verifier=verifier)
    )


# =============================================================================
# Start
# =============================================================================


@pytest.mark.unit
class TestStartAuthorization:
    async def test_valid_request(self, clock):
        registered = await register_client()
        _, challenge = make_pkce_pair()

        result = await _start(
            registered.client_id, code_challenge=challenge, code_challenge_method="S256"
        )

        assert isinstance(result, Success)
        assert result.value.scopes == frozenset({"openid", "email"})
        assert result.value.state == "xyz"
        view = await get_get_authorization_request_handler().handle(
            GetAuthorizationRequest(request_id=result.value.request_id)
        )
        assert view.value.awaiting_login is True
        assert view.value.scopes == ["email", "openid"]

    async def test_unknown_client_is_not_redirectable(self, clock):
        result = await _start("no-such-client")

        assert result.error.code == ErrorCode.CLIENT_NOT_FOUND
        assert is_redirectable(result.error) is False

    async def test_unregistered_redirect_is_not_redirectable(self, clock):
        registered = await register_client()

        result = await _start(registered.client_id, redirect_uri="https://evil.example.com/cb")

        assert result.error.code == ErrorCode.INVALID_REDIRECT_URI
        assert is_redirectable(result.error) is False

    async def test_missing_pkce_is_redirectable(self, clock):
        registered = await register_client()

        result = await _start(registered.client_id)

        assert result.error.code == ErrorCode.PKCE_REQUIRED
        assert is_redirectable(result.error) is True

    async def test_scope_outside_allowed_scopes(self, clock):
        registered = await register_client(pkce_required=False)

        result = await _start(registered.client_id, scope="openid admin")

        assert result.error.code == ErrorCode.INVALID_SCOPE

    async def test_unsupported_response_type(self, clock):
        registered = await register_client(pkce_required=False)

        result = await _start(registered.client_id, response_type="token")

        assert result.error.code == ErrorCode.UNSUPPORTED_RESPONSE_TYPE


# =============================================================================
# Approve
# =============================================================================


@pytest.mark.unit
class TestApproveAuthorization:
    async def test_unknown_request(self, clock):
        email = random_email()
        await register_user(email)
        user_login = await login(email)

        result = await get_approve_authorization_handler().handle(
            ApproveAuthorization(
                request_id=uuid4(),
                user_id=user_login.user.user_id,
                session_id=user_login.session.session_id,
                auth_time=clock.now(),
            )
        )

        assert result.error.code == ErrorCode.AUTHORIZATION_REQUEST_NOT_FOUND

    async def test_request_cannot_be_approved_twice(self, clock):
        email = random_email()
        await register_user(email)
        registered = await register_client(pkce_required=False)
        user_login = await login(email)
        started = await _start(registered.client_id)
        approve = ApproveAuthorization(
            request_id=started.value.request_id,
            user_id=user_login.user.user_id,
            session_id=user_login.session.session_id,
            auth_time=clock.now(),
        )

        first = await get_approve_authorization_handler().handle(approve)
        second = await get_approve_authorization_handler().handle(approve)

        assert isinstance(first, Success)
        assert first.value.redirect_uri == REDIRECT_URI
        assert first.value.state == "xyz"
        assert second.error.code == ErrorCode.INVALID_STATE_TRANSITION


# =============================================================================
# Exchange
# =============================================================================


@pytest.mark.unit
class TestExchangeAuthorizationCode:
    async def test_exchange_issues_all_tokens(self, clock):
        client, user_login, code, verifier = await _prepared(nonce="n-0S6")

        result = await _exchange(client, code, verifier)

        assert isinstance(result, Success)
        tokens = result.value
        assert tokens.token_type == "Bearer"
        assert tokens.scope == "email openid"
        assert tokens.refresh_token is not None
        assert len(tokens.jtis) == 3

        service = get_token_service()
        access = (await service.verify(tokens.access_token, TokenUse.ACCESS)).value
        assert access["sub"] == str(user_login.user.user_id)
        assert access["sid"] == str(user_login.session.session_id)
        id_claims = (await service.verify(tokens.id_token, TokenUse.ID)).value
        assert id_claims["nonce"] == "n-0S6"
        assert id_claims["email"] == user_login.user.email
        assert id_claims["aud"] == client.id
        assert "at_hash" in id_claims

    async def test_no_id_token_without_openid(self, clock):
        client, _, code, verifier = await _prepared(scope="email")

        result = await _exchange(client, code, verifier)

        assert result.value.id_token is None

    async def test_no_refresh_token_without_refresh_grant(self, clock):
        client, _, code, verifier = await _prepared(
            grant_types=frozenset({GrantType.AUTHORIZATION_CODE})
        )

        result = await _exchange(client, code, verifier)

        assert result.value.refresh_token is None
        assert len(result.value.jtis) == 2

    async def test_public_client(self, clock):
        client, _, code, verifier = await _prepared(confidential=False)

        result = await _exchange(client, code, verifier)

        assert isinstance(result, Success)

    async def test_unknown_code(self, clock):
        registered = await register_client()
        client = await load_client(registered.client_id)

        result = await _exchange(client, "made-up-code", "v" * 43)

        assert result.error.code == ErrorCode.AUTHORIZATION_REQUEST_NOT_FOUND

    async def test_replay_revokes_first_tokens(self, clock):
        client, _, code, verifier = await _prepared()
        replays = []

        async def collect(event):
            replays.append(event)

        get_event_bus().subscribe(AuthorizationCodeReplayDetected, collect)
        first = await _exchange(client, code, verifier)

        second = await _exchange(client, code, verifier)

        assert second.error.code == ErrorCode.CODE_ALREADY_REDEEMED
        service = get_token_service()
        for token in (first.value.access_token, first.value.refresh_token, first.value.id_token):
            verified = await service.verify(token)
            assert verified.error.reason == TokenFailureReason.REVOKED
        assert len(replays) == 1
        assert set(replays[0].revoked_jtis) == set(first.value.jtis)

    async def test_replay_while_first_exchange_is_in_flight(self, clock):
        client, _, code, verifier = await _prepared()
        redeemed = asyncio.Event()
        release = asyncio.Event()

        async def hold(event):
            redeemed.set()
            await release.wait()

        get_event_bus().subscribe(AuthorizationCodeRedeemed, hold)
        in_flight = asyncio.create_task(_exchange(client, code, verifier))
        await redeemed.wait()

        second = await _exchange(client, code, verifier)
        release.set()
        first = await in_flight

        assert second.error.code == ErrorCode.CODE_ALREADY_REDEEMED
        assert isinstance(first, Success)
        service = get_token_service()
        for token in (first.value.access_token, first.value.refresh_token, first.value.id_token):
            verified = await service.verify(token)
            assert verified.error.reason == TokenFailureReason.REVOKED

    async def test_replay_leaves_the_request_redeemed(self, clock):
        client, _, code, verifier = await _prepared()
        await _exchange(client, code, verifier)

        await _exchange(client, code, verifier)

        request_id = await get_index_store().get(
            IndexNamespace.AUTHORIZATION_CODE, get_secrets().digest(code)
        )
        loaded = await get_authorization_repository().load(request_id)
        assert loaded.state.status == AuthorizationStatus.REDEEMED
        assert loaded.version == 4

    async def test_expired_code(self, clock):
        client, _, code, verifier = await _prepared()
        clock.advance(minutes=11)

        result = await _exchange(client, code, verifier)

        assert result.error.code == ErrorCode.CODE_EXPIRED

    async def test_wrong_verifier_burns_the_code(self, clock):
        client, _, code, verifier = await _prepared()

        wrong = await _exchange(client, code, "x" * 43)
        retry = await _exchange(client, code, verifier)

        assert wrong.error.code == ErrorCode.PKCE_VERIFICATION_FAILED
        assert retry.error.code == ErrorCode.CODE_REVOKED

    async def test_other_client_cannot_redeem(self, clock):
        _, _, code, verifier = await _prepared()
        other = await load_client((await register_client()).client_id)

        result = await _exchange(other, code, verifier)

        assert result.error.code == ErrorCode.CODE_CLIENT_MISMATCH

    async def test_redirect_uri_must_match(self, clock):
        client, _, code, verifier = await _prepared()

        result = await _exchange(client, code, verifier, redirect_uri="https://app.example.com/other")

        assert result.error.code == ErrorCode.REDIRECT_URI_MISMATCH

    async def test_deactivated_user_gets_no_tokens(self, clock):
        client, user_login, code, verifier = await _prepared()
        await get_deactivate_user_handler().handle(DeactivateUser(user_id=user_login.user.user_id))

        result = await _exchange(client, code, verifier)

        assert isinstance(result, Failure)
        assert result.error.code == ErrorCode.USER_INACTIVE

    async def test_request_is_redeemed(self, clock):
        client, _, code, verifier = await _prepared()

        await _exchange(client, code, verifier)

        request_id = await get_index_store().get(
            IndexNamespace.AUTHORIZATION_CODE, get_secrets().digest(code)
        )
        loaded = await get_authorization_repository().load(request_id)
        assert loaded.state.status == AuthorizationStatus.REDEEMED
