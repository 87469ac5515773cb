"""Utility functions for testing.

Provides a controllable clock, random test data, and builders that drive
the real (in-memory) container to put users, clients and tokens in place.
"""

import base64
import random
import secrets
import string
from datetime import UTC, datetime, timedelta
from urllib.parse import parse_qs, urlsplit
from uuid import UUID

from fastapi.testclient import TestClient

from src.application.commands import (
    ApproveAuthorization,
    ExchangeAuthorizationCode,
    LoginUser,
    RegisterClient,
    RegisterUser,
    StartAuthorization,
)
from src.application.dtos import IssuedTokens, RegisteredClient, UserLogin
from src.core.container import (
    get_approve_authorization_handler,
    get_client_repository,
    get_exchange_authorization_code_handler,
    get_login_user_handler,
    get_register_client_handler,
    get_register_user_handler,
    get_start_authorization_handler,
)
from src.core.result import Success
from src.domain.aggregates import Client
from src.domain.enums import GrantType
from src.domain.value_objects.pkce import compute_s256_challenge

DEFAULT_PASSWORD = "SecurePass123!"
REDIRECT_URI = "https://app.example.com/callback"


class FrozenClock:
    """Clock that only moves when told to."""

    def __init__(self, now: datetime | None = None) -> None:
        self._now = now or datetime(2026, 1, 15, 12, 0, tzinfo=UTC)

    def now(self) -> datetime:
        return self._now

    def advance(self, **delta: float) -> datetime:
        """Move forward by a timedelta (e.g. `advance(minutes=11)`)."""
        self._now += timedelta(**delta)
        return self._now


def random_lower_string(length: int = 32) -> str:
    """Generate a random lowercase string."""
    return "".join(random.choices(string.ascii_lowercase, k=length))


def random_email() -> str:
    """Generate a random email address for testing."""
    return f"{random_lower_string(10)}@example.com"


def make_pkce_pair() -> tuple[str, str]:
    """Return (code_verifier, S256 code_challenge)."""
    verifier = secrets.token_urlsafe(48)
    return verifier, compute_s256_challenge(verifier)


def device_fingerprint(label: str = "laptop") -> str:
    return f"fp-{label}".ljust(64, "0")


async def register_user(email: str | None = None, password: str = DEFAULT_PASSWORD) -> UUID:
    """Register a user through the container's handler."""
    result = await get_register_user_handler().handle(
        RegisterUser(email=email or random_email(), password=password)
    )
    assert isinstance(result, Success), result
    return result.value


async def register_client(
    *,
    confidential: bool = True,
    grant_types: frozenset[GrantType] = frozenset(
        {GrantType.AUTHORIZATION_CODE, GrantType.REFRESH_TOKEN}
    ),
    redirect_uris: frozenset[str] = frozenset({REDIRECT_URI}),
    allowed_scopes: frozenset[str] = frozenset({"openid", "email", "profile"}),
    pkce_required: bool = True,
    public_key_pem: str | None = None,
    access_token_ttl_seconds: int | None = None,
    refresh_token_ttl_seconds: int | None = None,
) -> RegisteredClient:
    """Register a client through the container's handler."""
    result = await get_register_client_handler().handle(
        RegisterClient(
            name="Test App",
            redirect_uris=redirect_uris,
            grant_types=grant_types,
            confidential=confidential,
            pkce_required=pkce_required,
            allowed_scopes=allowed_scopes,
            public_key_pem=public_key_pem,
            access_token_ttl_seconds=access_token_ttl_seconds,
            refresh_token_ttl_seconds=refresh_token_ttl_seconds,
        )
    )
    assert isinstance(result, Success), result
    return result.value


async def load_client(client_id: str) -> Client:
    loaded = await get_client_repository().load(client_id)
    assert loaded is not None
    return loaded.state


async def login(email: str, password: str = DEFAULT_PASSWORD, device: str = "laptop") -> UserLogin:
    """Authenticate and open a device session."""
    result = await get_login_user_handler().handle(
        LoginUser(email=email, password=password, device_fingerprint=device_fingerprint(device))
    )
    assert isinstance(result, Success), result
    return result.value


async def issue_code(
    client_id: str,
    user_login: UserLogin,
    *,
    scope: str | None = "openid email",
    code_challenge: str | None = None,
    nonce: str | None = None,
) -> str:
    """Run /authorize validation and approval; return the plain code."""
    started = await get_start_authorization_handler().handle(
        StartAuthorization(
            client_id=client_id,
            redirect_uri=REDIRECT_URI,
            response_type="code",
            scope=scope,
            state="xyz",
            nonce=nonce,
            code_challenge=code_challenge,
            code_challenge_method="S256" if code_challenge else None,
        )
    )
    assert isinstance(started, Success), started
    approved = await get_approve_authorization_handler().handle(
        ApproveAuthorization(
            request_id=started.value.request_id,
            user_id=user_login.user.user_id,
            session_id=user_login.session.session_id,
            auth_time=user_login.user.authenticated_at,
        )
    )
    assert isinstance(approved, Success), approved
    return approved.value.code


async def issue_user_tokens(
    email: str | None = None,
    *,
    scope: str | None = "openid email",
    client: RegisteredClient | None = None,
) -> tuple[Client, IssuedTokens]:
    """Full authorization code + PKCE flow; returns the client and tokens."""
    email = email or random_email()
    await register_user(email)
    registered = client or await register_client()
    state = await load_client(registered.client_id)
    user_login = await login(email)
    verifier, challenge = make_pkce_pair()
    code = await issue_code(state.id, user_login, scope=scope, code_challenge=challenge)

    result = await get_exchange_authorization_code_handler().handle(
        ExchangeAuthorizationCode(
            client=state,
            code=code,
            redirect_uri=REDIRECT_URI,
            code_verifier=verifier,
        )
    )
    assert isinstance(result, Success), result
    return state, result.value


# =============================================================================
# HTTP flow helpers (FastAPI TestClient)
# =============================================================================


def basic_auth(client_id: str, client_secret: str) -> dict[str, str]:
    """`Authorization: Basic` header for client authentication."""
    encoded = base64.b64encode(f"{client_id}:{client_secret}".encode()).decode("ascii")
    return {"Authorization": f"Basic {encoded}"}


def query_params(location: str) -> dict[str, str]:
    """Flatten the query string of a redirect Location header."""
    return {key: values[0] for key, values in parse_qs(urlsplit(location).query).items()}


def signup(api: TestClient, email: str, password: str = DEFAULT_PASSWORD) -> dict:
    response = api.post("/api/v1/users", json={"email": email, "password": password})
    assert response.status_code == 201, response.text
    return response.json()


def authorize_and_login(
    api: TestClient,
    client_id: str,
    email: str,
    *,
    password: str = DEFAULT_PASSWORD,
    scope: str = "openid email",
    code_challenge: str | None = None,
) -> str:
    """Drive /authorize and the login form; return the authorization code.

    Starts from a browser without a session cookie, so the login form is
    always shown.
    """
    api.cookies.clear()
    params = {
        "response_type": "code",
        "client_id": client_id,
        "redirect_uri": REDIRECT_URI,
        "scope": scope,
        "state": "xyz",
    }
    if code_challenge:
        params.update(code_challenge=code_challenge, code_challenge_method="S256")
    started = api.get("/oauth2/authorize", params=params)
    assert started.status_code == 302, started.text
    request_id = query_params(started.headers["location"])["request_id"]

    approved = api.post(
        f"/oauth2/authorize/{request_id}/login",
        data={"email": email, "password": password},
    )
    assert approved.status_code == 302, approved.text
    return query_params(approved.headers["location"])["code"]


def obtain_tokens(
    api: TestClient,
    registered: RegisteredClient,
    email: str,
    *,
    scope: str = "openid email",
) -> dict:
    """Authorization code + PKCE over HTTP; returns the token response body."""
    verifier, challenge = make_pkce_pair()
    code = authorize_and_login(api, registered.client_id, email, scope=scope, code_challenge=challenge)
    response = api.post(
        "/oauth2/token",
        data={
            "grant_type": "authorization_code",
            "code": code,
            "redirect_uri": REDIRECT_URI,
            "code_verifier": verifier,
        },
        headers=basic_auth(registered.client_id, registered.client_secret),
    )
    assert response.status_code == 200, response.text
    return response.json()


def bearer(access_token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {access_token}"}
