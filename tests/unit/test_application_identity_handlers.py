"""Unit tests for the identity command handlers.

Tests cover:
- LoginUserHandler: device sessions opened and refreshed
- ChangePasswordHandler: policy, re-authentication, other sessions revoked
- LinkIdentityHandler: assertion checks and link exclusivity
- ManageRolesHandler: idempotent assign/revoke
- DeactivateUserHandler: email released, sessions and tokens revoked
- GetUserHandler: profile without secrets

Architecture:
- Real container (in-memory event store and index)
"""

import asyncio
import time
from uuid import UUID, uuid4

import jwt
import pytest

from src.application.commands import (
    AssignRole,
    ChangePassword,
    DeactivateUser,
    LinkIdentity,
    LoginUser,
    RegisterUser,
    RevokeRole,
)
from src.application.commands.handlers.link_identity_handler import LinkIdentityHandler
from src.application.queries import GetUser, ListUserSessions
from src.core.container import (
    get_change_password_handler,
    get_clock,
    get_deactivate_user_handler,
    get_get_user_handler,
    get_identity_repository,
    get_index_store,
    get_link_identity_handler,
    get_list_sessions_handler,
    get_login_user_handler,
    get_manage_roles_handler,
    get_register_user_handler,
    get_session_manager,
    get_token_service,
)
from src.core.enums import ErrorCode
from src.core.result import Failure, Success
from src.domain.enums import TokenFailureReason
from src.domain.errors import IdentityVerifierUnavailableError
from tests.utils.utils import (
    DEFAULT_PASSWORD,
    device_fingerprint,
    issue_user_tokens,
    login,
    random_email,
    register_user,
)

ACME_SECRET = "acme-shared-secret-used-only-in-tests-0123456789"


def _assertion(sub: str = "acme-42", *, secret: str = ACME_SECRET, aud: str = "http://testserver", ttl: int = 300):
    return jwt.encode(
        {"sub": sub, "aud": aud, "exp": int(time.time()) + ttl},
        secret,
        algorithm="HS256",
    )


# =============================================================================
# Login
# =============================================================================


@pytest.mark.unit
class TestLoginUserHandler:
    async def test_login_opens_session(self):
        email = random_email()
        user_id = await register_user(email)

        result = await get_login_user_handler().handle(
            LoginUser(
                email=email,
                password=DEFAULT_PASSWORD,
                device_fingerprint=device_fingerprint(),
                device_info="Firefox on Linux",
                ip_address="10.0.0.1",
            )
        )

        assert isinstance(result, Success)
        assert result.value.user.user_id == user_id
        assert result.value.session.created is True
        session = await get_session_manager().resolve_handle(result.value.session.handle)
        assert session.id == result.value.session.session_id
        assert session.device_info == "Firefox on Linux"

    async def test_same_device_reuses_session_with_new_handle(self):
        email = random_email()
        await register_user(email)

        first = await login(email)
        second = await login(email)

        assert second.session.created is False
        assert second.session.session_id == first.session.session_id
        assert second.session.handle != first.session.handle
        assert await get_session_manager().resolve_handle(first.session.handle) is None

    async def test_other_device_gets_its_own_session(self):
        email = random_email()
        user_id = await register_user(email)

        await login(email, device="laptop")
        await login(email, device="phone")

        listed = await get_list_sessions_handler().handle(ListUserSessions(user_id=user_id))
        assert listed.value.total_count == 2

    async def test_wrong_password_opens_nothing(self):
        email = random_email()
        user_id = await register_user(email)

        result = await get_login_user_handler().handle(
            LoginUser(email=email, password="Wrong123!", device_fingerprint=device_fingerprint())
        )

        assert result.error.code == ErrorCode.INVALID_CREDENTIALS
        assert await get_session_manager().list_sessions(user_id) == []


# =============================================================================
# Change password
# =============================================================================


@pytest.mark.unit
class TestChangePasswordHandler:
    async def test_change_password_revokes_other_sessions(self):
        email = random_email()
        user_id = await register_user(email)
        current = await login(email, device="laptop")
        other = await login(email, device="phone")

        result = await get_change_password_handler().handle(
            ChangePassword(
                user_id=user_id,
                old_password=DEFAULT_PASSWORD,
                new_password="NewSecure456!",
                current_session_id=current.session.session_id,
            )
        )

        assert result == Success(value=None)
        remaining = await get_session_manager().list_sessions(user_id)
        assert [session.id for session in remaining] == [current.session.session_id]
        revoked = await get_session_manager().get(other.session.session_id)
        assert revoked.revoked_reason == "password_changed"

    async def test_new_password_works_and_old_does_not(self):
        email = random_email()
        user_id = await register_user(email)

        await get_change_password_handler().handle(
            ChangePassword(user_id=user_id, old_password=DEFAULT_PASSWORD, new_password="NewSecure456!")
        )

        handler = get_login_user_handler()
        old = await handler.handle(
            LoginUser(email=email, password=DEFAULT_PASSWORD, device_fingerprint=device_fingerprint())
        )
        new = await handler.handle(
            LoginUser(email=email, password="NewSecure456!", device_fingerprint=device_fingerprint())
        )
        assert isinstance(old, Failure)
        assert isinstance(new, Success)

    async def test_wrong_old_password(self):
        user_id = await register_user()

        result = await get_change_password_handler().handle(
            ChangePassword(user_id=user_id, old_password="Wrong123!", new_password="NewSecure456!")
        )

        assert result.error.code == ErrorCode.INVALID_CREDENTIALS

    async def test_weak_new_password(self):
        user_id = await register_user()

        result = await get_change_password_handler().handle(
            ChangePassword(user_id=user_id, old_password=DEFAULT_PASSWORD, new_password="short")
        )

        assert result.error.code == ErrorCode.PASSWORD_TOO_WEAK

    async def test_unknown_user(self):
        result = await get_change_password_handler().handle(
            ChangePassword(user_id=uuid4(), old_password=DEFAULT_PASSWORD, new_password="NewSecure456!")
        )

        assert result.error.code == ErrorCode.USER_NOT_FOUND


# =============================================================================
# Link identity
# =============================================================================


@pytest.mark.unit
class TestLinkIdentityHandler:
    async def test_link_identity(self):
        user_id = await register_user()

        result = await get_link_identity_handler().handle(
            LinkIdentity(user_id=user_id, provider="acme", assertion=_assertion())
        )

        assert isinstance(result, Success)
        profile = await get_get_user_handler().handle(GetUser(user_id=user_id))
        assert profile.value.linked_identities == ["acme:acme-42"]

    async def test_relinking_is_idempotent(self):
        user_id = await register_user()
        handler = get_link_identity_handler()

        await handler.handle(LinkIdentity(user_id=user_id, provider="acme", assertion=_assertion()))
        again = await handler.handle(LinkIdentity(user_id=user_id, provider="acme", assertion=_assertion()))

        assert isinstance(again, Success)

    async def test_external_account_links_to_one_user(self):
        first = await register_user()
        second = await register_user()
        handler = get_link_identity_handler()
        await handler.handle(LinkIdentity(user_id=first, provider="acme", assertion=_assertion()))

        result = await handler.handle(LinkIdentity(user_id=second, provider="acme", assertion=_assertion()))

        assert result.error.code == ErrorCode.IDENTITY_ALREADY_LINKED

    @pytest.mark.parametrize(
        "provider,assertion",
        [
            ("acme", _assertion(secret="another-secret-of-sufficient-length-000000")),
            ("acme", _assertion(aud="https://elsewhere.example.com")),
            ("acme", _assertion(ttl=-60)),
            ("unknown", _assertion()),
            ("acme", "not-a-jwt"),
        ],
    )
    async def test_invalid_assertions(self, provider, assertion):
        user_id = await register_user()

        result = await get_link_identity_handler().handle(
            LinkIdentity(user_id=user_id, provider=provider, assertion=assertion)
        )

        assert result.error.code == ErrorCode.EXTERNAL_ASSERTION_INVALID

    async def test_claim_released_when_user_missing(self):
        handler = get_link_identity_handler()

        missing = await handler.handle(LinkIdentity(user_id=uuid4(), provider="acme", assertion=_assertion()))
        user_id = await register_user()
        linked = await handler.handle(LinkIdentity(user_id=user_id, provider="acme", assertion=_assertion()))

        assert missing.error.code == ErrorCode.USER_NOT_FOUND
        assert isinstance(linked, Success)

    async def test_slow_provider_is_an_outage(self):
        class SlowVerifier:
            async def verify(self, provider, assertion):
                await asyncio.sleep(1)
                return Success(value="acme-42")

        handler = LinkIdentityHandler(
            identities=get_identity_repository(),
            index=get_index_store(),
            verifier=SlowVerifier(),
            clock=get_clock(),
            verifier_timeout_seconds=0.01,
        )
        user_id = await register_user()

        with pytest.raises(IdentityVerifierUnavailableError):
            await handler.handle(LinkIdentity(user_id=user_id, provider="acme", assertion=_assertion()))


# =============================================================================
# Roles
# =============================================================================


@pytest.mark.unit
class TestManageRolesHandler:
    async def test_assign_and_revoke(self):
        user_id = await register_user()
        handler = get_manage_roles_handler()

        assigned = await handler.assign(AssignRole(user_id=user_id, role=" Auditor "))
        revoked = await handler.revoke(RevokeRole(user_id=user_id, role="auditor"))

        assert assigned == Success(value=frozenset({"user", "auditor"}))
        assert revoked == Success(value=frozenset({"user"}))

    async def test_assign_twice_is_noop(self):
        user_id = await register_user()
        handler = get_manage_roles_handler()

        await handler.assign(AssignRole(user_id=user_id, role="admin"))
        again = await handler.assign(AssignRole(user_id=user_id, role="admin"))

        assert again == Success(value=frozenset({"user", "admin"}))

    async def test_empty_role(self):
        user_id = await register_user()

        result = await get_manage_roles_handler().assign(AssignRole(user_id=user_id, role="  "))

        assert result.error.code == ErrorCode.VALIDATION_FAILED

    async def test_unknown_user(self):
        result = await get_manage_roles_handler().revoke(RevokeRole(user_id=uuid4(), role="admin"))

        assert result.error.code == ErrorCode.USER_NOT_FOUND


# =============================================================================
# Deactivation
# =============================================================================


@pytest.mark.unit
class TestDeactivateUserHandler:
    async def test_deactivation_revokes_sessions_and_tokens(self, clock):
        email = random_email()
        _, tokens = await issue_user_tokens(email)
        user_id = (await get_token_service().verify(tokens.access_token)).value["sub"]

        result = await get_deactivate_user_handler().handle(DeactivateUser(user_id=UUID(user_id)))

        assert result == Success(value=None)
        verified = await get_token_service().verify(tokens.access_token)
        assert verified.error.reason == TokenFailureReason.REVOKED
        assert await get_session_manager().list_sessions(UUID(user_id)) == []

    async def test_email_becomes_registrable_again(self):
        email = random_email()
        user_id = await register_user(email)

        await get_deactivate_user_handler().handle(DeactivateUser(user_id=user_id))
        again = await get_register_user_handler().handle(RegisterUser(email=email, password=DEFAULT_PASSWORD))

        assert isinstance(again, Success)
        assert again.value != user_id

    async def test_deactivating_twice_is_noop(self):
        user_id = await register_user()
        handler = get_deactivate_user_handler()

        await handler.handle(DeactivateUser(user_id=user_id))
        again = await handler.handle(DeactivateUser(user_id=user_id))

        assert again == Success(value=None)
        profile = await get_get_user_handler().handle(GetUser(user_id=user_id))
        assert profile.value.active is False


@pytest.mark.unit
class TestGetUserHandler:
    async def test_profile(self):
        email = random_email()
        user_id = await register_user(email)

        result = await get_get_user_handler().handle(GetUser(user_id=user_id))

        assert result.value.email == email
        assert result.value.roles == ["user"]
        assert result.value.active is True
        assert not hasattr(result.value, "password_hash")

    async def test_unknown_user(self):
        result = await get_get_user_handler().handle(GetUser(user_id=uuid4()))

        assert result.error.code == ErrorCode.USER_NOT_FOUND
