"""Unit tests for TokenService.

Tests cover:
- Refresh rotation (new pair, old token revoked, narrower scope)
- Refresh reuse detection (family revoked, RefreshTokenReuseDetected)
- client_credentials grant
- Verification order: signature, expiry, token use, revocation, bindings
- Introspection (RFC 7662) and revocation (RFC 7009)

Architecture:
- Real container (in-memory event store and index) with a frozen clock
"""

import asyncio
from uuid import UUID

import pytest

from src.application.commands import DeactivateClient, IssueClientCredentials, RefreshTokens, RevokeSession
from src.core.container import (
    get_deactivate_client_handler,
    get_event_bus,
    get_revoke_session_handler,
    get_token_service,
)
from src.core.enums import ErrorCode
from src.core.result import Failure, Success
from src.domain.enums import GrantType, TokenFailureReason, TokenUse
from src.domain.events import RefreshTokenReuseDetected, RefreshTokenRotated
from tests.utils.utils import issue_user_tokens, load_client, register_client


async def _refresh(client, refresh_token, scope=None):
    return await get_token_service().rotate_refresh(
        RefreshTokens(client=client, refresh_token=refresh_token, scope=scope)
    )


async def _service_client(**options):
    registered = await register_client(
        grant_types=frozenset({GrantType.CLIENT_CREDENTIALS}),
        redirect_uris=frozenset(),
        allowed_scopes=frozenset({"reports.read", "reports.write"}),
        **options,
    )
    return await load_client(registered.client_id)


# =============================================================================
# Refresh rotation
# =============================================================================


@pytest.mark.unit
class TestRefreshRotation:
    async def test_rotation_issues_new_pair(self, clock):
        client, tokens = await issue_user_tokens()

        result = await _refresh(client, tokens.refresh_token)

        assert isinstance(result, Success)
        rotated = result.value
        assert rotated.refresh_token != tokens.refresh_token
        assert rotated.id_token is None
        claims = (await get_token_service().verify(rotated.refresh_token, TokenUse.REFRESH)).value
        assert claims["parent_jti"] in tokens.jtis

    async def test_rotated_token_stops_verifying(self, clock):
        client, tokens = await issue_user_tokens()

        await _refresh(client, tokens.refresh_token)

        verified = await get_token_service().verify(tokens.refresh_token)
        assert verified.error.reason == TokenFailureReason.REVOKED

    async def test_scope_can_narrow_but_not_widen(self, clock):
        client, tokens = await issue_user_tokens(scope="openid email")

        narrowed = await _refresh(client, tokens.refresh_token, scope="email")
        widened = await _refresh(client, narrowed.value.refresh_token, scope="email profile")

        assert narrowed.value.scope == "email"
        assert widened.error.code == ErrorCode.INVALID_SCOPE

    async def test_access_token_is_not_a_refresh_token(self, clock):
        client, tokens = await issue_user_tokens()

        result = await _refresh(client, tokens.access_token)

        assert result.error.code == ErrorCode.TOKEN_INVALID

    async def test_other_client_cannot_refresh(self, clock):
        _, tokens = await issue_user_tokens()
        other = await load_client((await register_client()).client_id)

        result = await _refresh(other, tokens.refresh_token)

        assert result.error.code == ErrorCode.TOKEN_INVALID

    async def test_expired_refresh_token(self, clock):
        client, tokens = await issue_user_tokens(
            client=await register_client(refresh_token_ttl_seconds=60)
        )
        clock.advance(seconds=61)

        result = await _refresh(client, tokens.refresh_token)

        assert isinstance(result, Failure)
        assert result.error.code == ErrorCode.TOKEN_EXPIRED


@pytest.mark.unit
class TestRefreshReuse:
    async def test_reuse_revokes_the_family(self, clock):
        client, tokens = await issue_user_tokens()
        detected = []

        async def collect(event):
            detected.append(event)

        get_event_bus().subscribe(RefreshTokenReuseDetected, collect)
        rotated = (await _refresh(client, tokens.refresh_token)).value

        reused = await _refresh(client, tokens.refresh_token)

        assert reused.error.code == ErrorCode.REFRESH_TOKEN_REUSED
        service = get_token_service()
        for token in (rotated.access_token, rotated.refresh_token):
            verified = await service.verify(token)
            assert verified.error.reason == TokenFailureReason.REVOKED
        assert len(detected) == 1
        assert detected[0].client_id == client.id

    async def test_reuse_of_a_middle_token_walks_to_the_root(self, clock):
        client, tokens = await issue_user_tokens()
        first = (await _refresh(client, tokens.refresh_token)).value
        second = (await _refresh(client, first.refresh_token)).value

        reused = await _refresh(client, first.refresh_token)

        assert reused.error.code == ErrorCode.REFRESH_TOKEN_REUSED
        verified = await get_token_service().verify(second.refresh_token)
        assert verified.error.reason == TokenFailureReason.REVOKED

    async def test_reuse_is_reported_once(self, clock):
        client, tokens = await issue_user_tokens()
        detected = []

        async def collect(event):
            detected.append(event)

        get_event_bus().subscribe(RefreshTokenReuseDetected, collect)
        await _refresh(client, tokens.refresh_token)

        await _refresh(client, tokens.refresh_token)
        again = await _refresh(client, tokens.refresh_token)

        assert again.error.code == ErrorCode.REFRESH_TOKEN_REUSED
        assert len(detected) == 1

    async def test_reuse_while_rotation_is_in_flight_revokes_the_new_pair(self, clock):
        client, tokens = await issue_user_tokens()
        rotated = asyncio.Event()
        release = asyncio.Event()

        async def hold(event):
            rotated.set()
            await release.wait()

        get_event_bus().subscribe(RefreshTokenRotated, hold)
        in_flight = asyncio.create_task(_refresh(client, tokens.refresh_token))
        await rotated.wait()

        reused = await _refresh(client, tokens.refresh_token)
        release.set()
        issued = await in_flight

        assert reused.error.code == ErrorCode.REFRESH_TOKEN_REUSED
        assert isinstance(issued, Success)
        service = get_token_service()
        for token in (issued.value.access_token, issued.value.refresh_token):
            verified = await service.verify(token)
            assert verified.error.reason == TokenFailureReason.REVOKED


# =============================================================================
# Client credentials
# =============================================================================


@pytest.mark.unit
class TestClientCredentials:
    async def test_grant_defaults_to_allowed_scopes(self, clock):
        client = await _service_client()

        result = await get_token_service().issue_client_credentials(IssueClientCredentials(client=client))

        assert result.value.scope == "reports.read reports.write"
        assert result.value.refresh_token is None
        assert result.value.id_token is None
        claims = (await get_token_service().verify(result.value.access_token)).value
        assert claims["sub"] == client.id

    async def test_requested_scope_must_be_allowed(self, clock):
        client = await _service_client()

        result = await get_token_service().issue_client_credentials(
            IssueClientCredentials(client=client, scope="reports.delete")
        )

        assert result.error.code == ErrorCode.INVALID_SCOPE

    async def test_client_without_the_grant(self, clock):
        client = await load_client((await register_client()).client_id)

        result = await get_token_service().issue_client_credentials(IssueClientCredentials(client=client))

        assert result.error.code == ErrorCode.UNAUTHORIZED_CLIENT

    async def test_per_client_access_lifetime(self, clock):
        client = await _service_client(access_token_ttl_seconds=120)

        result = await get_token_service().issue_client_credentials(IssueClientCredentials(client=client))

        assert result.value.expires_in == 120


# =============================================================================
# Verification
# =============================================================================


@pytest.mark.unit
class TestVerify:
    async def test_garbage_is_malformed(self, clock):
        verified = await get_token_service().verify("not-a-token")

        assert verified.error.reason == TokenFailureReason.MALFORMED

    async def test_tampered_signature(self, clock):
        _, tokens = await issue_user_tokens()
        header, payload, signature = tokens.access_token.split(".")
        tampered = f"{header}.{payload}.{signature[:-4]}AAAA"

        verified = await get_token_service().verify(tampered)

        assert verified.error.reason == TokenFailureReason.SIGNATURE_INVALID

    async def test_expiry_uses_the_clock(self, clock):
        _, tokens = await issue_user_tokens()
        clock.advance(seconds=901)

        verified = await get_token_service().verify(tokens.access_token)

        assert verified.error.reason == TokenFailureReason.EXPIRED
        assert verified.error.code == ErrorCode.TOKEN_EXPIRED

    async def test_wrong_token_use(self, clock):
        _, tokens = await issue_user_tokens()

        verified = await get_token_service().verify(tokens.id_token, TokenUse.ACCESS)

        assert verified.error.reason == TokenFailureReason.MALFORMED

    async def test_deactivated_client_revokes_its_tokens(self, clock):
        client, tokens = await issue_user_tokens()

        await get_deactivate_client_handler().handle(DeactivateClient(client_id=client.id))

        verified = await get_token_service().verify(tokens.access_token)
        assert verified.error.reason == TokenFailureReason.REVOKED

    async def test_revoked_session_revokes_its_tokens(self, clock):
        _, tokens = await issue_user_tokens()
        claims = (await get_token_service().verify(tokens.access_token)).value

        await get_revoke_session_handler().handle(
            RevokeSession(session_id=UUID(claims["sid"]), user_id=UUID(claims["sub"]))
        )

        for token in (tokens.access_token, tokens.refresh_token, tokens.id_token):
            verified = await get_token_service().verify(token)
            assert verified.error.reason == TokenFailureReason.REVOKED


# =============================================================================
# Introspection and revocation
# =============================================================================


@pytest.mark.unit
class TestIntrospectAndRevoke:
    async def test_active_access_token(self, clock):
        client, tokens = await issue_user_tokens()

        response = await get_token_service().introspect(tokens.access_token, client)

        assert response["active"] is True
        assert response["client_id"] == client.id
        assert response["token_type"] == "Bearer"
        assert response["scope"] == "email openid"

    async def test_foreign_client_sees_inactive(self, clock):
        _, tokens = await issue_user_tokens()
        other = await load_client((await register_client()).client_id)

        response = await get_token_service().introspect(tokens.access_token, other)

        assert response == {"active": False}

    async def test_revoke_refresh_cascades_to_descendants(self, clock):
        client, tokens = await issue_user_tokens()
        rotated = (await _refresh(client, tokens.refresh_token)).value
        service = get_token_service()

        await service.revoke(tokens.refresh_token, client)

        for token in (rotated.access_token, rotated.refresh_token):
            assert (await service.introspect(token, client)) == {"active": False}

    async def test_revoke_foreign_or_garbage_is_silent(self, clock):
        client, tokens = await issue_user_tokens()
        other = await load_client((await register_client()).client_id)
        service = get_token_service()

        await service.revoke("garbage", client)
        await service.revoke(tokens.access_token, other)

        assert (await service.introspect(tokens.access_token, client))["active"] is True
