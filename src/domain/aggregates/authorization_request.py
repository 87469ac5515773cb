"""Authorization request aggregate (authorization-code grant + PKCE).

State machine:
    CREATED -> CONSENTED -> CODE_ISSUED -> {REDEEMED | EXPIRED | REVOKED}

    - CREATED: client exists and is active, redirect URI is registered
      (exact match), scopes are allowed, PKCE challenge present when required
    - CONSENTED: an authenticated user approved the scopes
    - CODE_ISSUED: a single-use code (only its hash is kept) with a short TTL
    - REDEEMED: exchanged once at the token endpoint
    - EXPIRED / REVOKED: terminal

Any failed redemption of a live code revokes it, so a wrong verifier cannot be
retried. Presenting a REDEEMED code again appends nothing (the request stays
REDEEMED); the caller must revoke the tokens listed in `issued_jtis`.
"""

from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta
from uuid import UUID

from src.core.enums import ErrorCode
from src.core.errors import (
    AuthenticationError,
    DomainError,
    ExpiredError,
    RevokedError,
    ValidationError,
)
from src.core.result import Failure, Result, Success
from src.domain.aggregates.base import require_new, require_state, unknown_event
from src.domain.aggregates.client import Client
from src.domain.enums import AggregateType, AuthorizationStatus, CodeChallengeMethod, GrantType
from src.domain.events.authorization_events import (
    AuthorizationCodeIssued,
    AuthorizationCodeRedeemed,
    AuthorizationConsented,
    AuthorizationEvent,
    AuthorizationExpired,
    AuthorizationRequested,
    AuthorizationRevoked,
)
from src.domain.events.base_event import DomainEvent
from src.domain.validators import validate_pkce_value
from src.domain.value_objects.pkce import verify_code_verifier
from src.domain.value_objects.scope import parse_scope

AGGREGATE_TYPE = AggregateType.AUTHORIZATION

SUPPORTED_RESPONSE_TYPE = "code"


@dataclass(frozen=True, slots=True, kw_only=True)
class AuthorizationRequest:
    """Projected authorization request state."""

    id: UUID
    client_id: str
    redirect_uri: str
    scopes: frozenset[str]
    status: AuthorizationStatus
    created_at: datetime
    state: str | None = None
    nonce: str | None = None
    code_challenge: str | None = None
    code_challenge_method: CodeChallengeMethod | None = None
    user_id: UUID | None = None
    session_id: UUID | None = None
    granted_scopes: frozenset[str] = field(default_factory=frozenset)
    auth_time: datetime | None = None
    code_hash: str | None = None
    expires_at: datetime | None = None
    issued_jtis: tuple[str, ...] = ()
    revoked_reason: str | None = None

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at is not None and now >= self.expires_at


def apply_authorization_event(
    state: AuthorizationRequest | None, event: DomainEvent
) -> AuthorizationRequest:
    """Apply one event to the projected state (pure)."""
    match event:
        case AuthorizationRequested():
            require_new(state, event, AGGREGATE_TYPE)
            return AuthorizationRequest(
                id=event.request_id,
                client_id=event.client_id,
                redirect_uri=event.redirect_uri,
                scopes=event.scopes,
                status=AuthorizationStatus.CREATED,
                created_at=event.occurred_at,
                state=event.state,
                nonce=event.nonce,
                code_challenge=event.code_challenge,
                code_challenge_method=event.code_challenge_method,
            )
        case AuthorizationConsented():
            current = require_state(state, event, AGGREGATE_TYPE)
            return replace(
                current,
                status=AuthorizationStatus.CONSENTED,
                user_id=event.user_id,
                session_id=event.session_id,
                granted_scopes=event.granted_scopes,
                auth_time=event.auth_time,
            )
        case AuthorizationCodeIssued():
            current = require_state(state, event, AGGREGATE_TYPE)
            return replace(
                current,
                status=AuthorizationStatus.CODE_ISSUED,
                code_hash=event.code_hash,
                expires_at=event.expires_at,
            )
        case AuthorizationCodeRedeemed():
            current = require_state(state, event, AGGREGATE_TYPE)
            return replace(
                current,
                status=AuthorizationStatus.REDEEMED,
                issued_jtis=event.issued_jtis,
            )
        case AuthorizationExpired():
            current = require_state(state, event, AGGREGATE_TYPE)
            return replace(current, status=AuthorizationStatus.EXPIRED)
        case AuthorizationRevoked():
            current = require_state(state, event, AGGREGATE_TYPE)
            return replace(
                current,
                status=AuthorizationStatus.REVOKED,
                revoked_reason=event.reason,
            )
        case _:
            raise unknown_event(event, AGGREGATE_TYPE)


def _invalid(code: ErrorCode, message: str, field: str) -> Failure[ValidationError]:
    return Failure(error=ValidationError(code=code, message=message, field=field))


def _wrong_state(state: AuthorizationRequest, expected: AuthorizationStatus) -> Failure[ValidationError]:
    return _invalid(
        ErrorCode.INVALID_STATE_TRANSITION,
        f"Authorization request is {state.status.value}, expected {expected.value}",
        "request_id",
    )


# =========================================================================
# Decisions
# =========================================================================


def request_authorization(
    *,
    request_id: UUID,
    client: Client,
    redirect_uri: str | None,
    response_type: str | None,
    scope: str | None,
    occurred_at: datetime,
    state: str | None = None,
    nonce: str | None = None,
    code_challenge: str | None = None,
    code_challenge_method: str | None = None,
) -> Result[list[AuthorizationEvent], DomainError]:
    """Validate an authorization request and open its stream (CREATED).

    Errors about the client or the redirect URI come first: the HTTP layer
    must not redirect them. Everything after is redirected to the client.

    Args:
        scope: Raw space-delimited `scope`; absent or blank means "the
            client's allowed scopes". Parsed only after the redirect URI is
            known to be registered, so a bad scope is redirectable.
        code_challenge_method: Raw method; defaults to `plain` when a
            challenge is given without one.
    """
    if not client.active:
        return Failure(
            error=AuthenticationError(
                code=ErrorCode.CLIENT_INACTIVE, message="Client is deactivated"
            )
        )
    if redirect_uri is None:
        return _invalid(ErrorCode.INVALID_REDIRECT_URI, "redirect_uri is required", "redirect_uri")
    if redirect_uri not in client.redirect_uris:
        return _invalid(
            ErrorCode.INVALID_REDIRECT_URI,
            "redirect_uri does not match a registered redirect URI",
            "redirect_uri",
        )

    if response_type != SUPPORTED_RESPONSE_TYPE:
        return _invalid(
            ErrorCode.UNSUPPORTED_RESPONSE_TYPE,
            "Only response_type=code is supported",
            "response_type",
        )
    if not client.supports_grant(GrantType.AUTHORIZATION_CODE):
        return _invalid(
            ErrorCode.UNAUTHORIZED_CLIENT,
            "Client may not use the authorization_code grant",
            "client_id",
        )

    parsed_scope = parse_scope(scope)
    if isinstance(parsed_scope, Failure):
        return parsed_scope
    scopes = parsed_scope.value or client.allowed_scopes
    if not scopes <= client.allowed_scopes:
        return _invalid(
            ErrorCode.INVALID_SCOPE,
            "Requested scope exceeds the client's allowed scopes",
            "scope",
        )

    method: CodeChallengeMethod | None = None
    if code_challenge is None:
        if code_challenge_method is not None:
            return _invalid(
                ErrorCode.INVALID_CODE_CHALLENGE,
                "code_challenge_method given without code_challenge",
                "code_challenge",
            )
        if client.pkce_required:
            return _invalid(
                ErrorCode.PKCE_REQUIRED,
                "code_challenge is required for this client",
                "code_challenge",
            )
    else:
        try:
            method = CodeChallengeMethod(code_challenge_method or CodeChallengeMethod.PLAIN.value)
            validate_pkce_value(code_challenge)
        except ValueError as e:
            return _invalid(ErrorCode.INVALID_CODE_CHALLENGE, str(e), "code_challenge")

    return Success(
        value=[
            AuthorizationRequested(
                request_id=request_id,
                client_id=client.id,
                redirect_uri=redirect_uri,
                scopes=scopes,
                state=state,
                nonce=nonce,
                code_challenge=code_challenge,
                code_challenge_method=method,
                occurred_at=occurred_at,
            )
        ]
    )


def consent(
    state: AuthorizationRequest,
    *,
    user_id: UUID,
    session_id: UUID | None,
    auth_time: datetime,
    occurred_at: datetime,
) -> Result[list[AuthorizationEvent], DomainError]:
    """Bind the authenticated user and approve the requested scopes."""
    if state.status is not AuthorizationStatus.CREATED:
        return _wrong_state(state, AuthorizationStatus.CREATED)
    return Success(
        value=[
            AuthorizationConsented(
                request_id=state.id,
                user_id=user_id,
                session_id=session_id,
                granted_scopes=state.scopes,
                auth_time=auth_time,
                occurred_at=occurred_at,
            )
        ]
    )


def issue_code(
    state: AuthorizationRequest,
    *,
    code_hash: str,
    expires_at: datetime,
    occurred_at: datetime,
) -> Result[list[AuthorizationEvent], DomainError]:
    """Bind a freshly generated code (by hash) to a consented request."""
    if state.status is not AuthorizationStatus.CONSENTED:
        return _wrong_state(state, AuthorizationStatus.CONSENTED)
    return Success(
        value=[
            AuthorizationCodeIssued(
                request_id=state.id,
                code_hash=code_hash,
                expires_at=expires_at,
                occurred_at=occurred_at,
            )
        ]
    )


@dataclass(frozen=True, slots=True, kw_only=True)
class Redemption:
    """Outcome of a redemption attempt.

    `events` are appended whether or not the attempt succeeded (a failed
    attempt revokes or expires the code). `error` is None on success.
    `replayed` marks a second presentation of an already redeemed code.
    """

    events: list[AuthorizationEvent]
    error: DomainError | None = None
    replayed: bool = False


def redeem(
    state: AuthorizationRequest,
    *,
    client_id: str,
    redirect_uri: str | None,
    code_verifier: str | None,
    issued_jtis: tuple[str, ...],
    now: datetime,
) -> Redemption:
    """Decide a token-endpoint exchange of the code.

    Checks, in order: status, expiry, client, redirect URI, PKCE verifier.
    """
    match state.status:
        case AuthorizationStatus.REDEEMED:
            return Redemption(
                events=[],
                error=RevokedError(
                    code=ErrorCode.CODE_ALREADY_REDEEMED,
                    message="Authorization code has already been used",
                ),
                replayed=True,
            )
        case AuthorizationStatus.REVOKED:
            return Redemption(
                events=[],
                error=RevokedError(
                    code=ErrorCode.CODE_REVOKED, message="Authorization code was revoked"
                ),
            )
        case AuthorizationStatus.EXPIRED:
            return Redemption(
                events=[],
                error=ExpiredError(
                    code=ErrorCode.CODE_EXPIRED, message="Authorization code has expired"
                ),
            )
        case AuthorizationStatus.CREATED | AuthorizationStatus.CONSENTED:
            return Redemption(
                events=[],
                error=RevokedError(
                    code=ErrorCode.CODE_REVOKED, message="Authorization code is not valid"
                ),
            )

    if state.is_expired(now):
        return Redemption(
            events=[AuthorizationExpired(request_id=state.id, occurred_at=now)],
            error=ExpiredError(
                code=ErrorCode.CODE_EXPIRED, message="Authorization code has expired"
            ),
        )

    def _revoke(reason: str, code: ErrorCode, message: str) -> Redemption:
        return Redemption(
            events=[AuthorizationRevoked(request_id=state.id, reason=reason, occurred_at=now)],
            error=AuthenticationError(code=code, message=message),
        )

    if client_id != state.client_id:
        return _revoke(
            "client_mismatch",
            ErrorCode.CODE_CLIENT_MISMATCH,
            "Authorization code was issued to another client",
        )
    if redirect_uri != state.redirect_uri:
        return _revoke(
            "redirect_uri_mismatch",
            ErrorCode.REDIRECT_URI_MISMATCH,
            "redirect_uri does not match the authorization request",
        )
    if state.code_challenge is None:
        if code_verifier is not None:
            return _revoke(
                "unexpected_code_verifier",
                ErrorCode.PKCE_VERIFICATION_FAILED,
                "code_verifier sent for a request without code_challenge",
            )
    elif code_verifier is None or not verify_code_verifier(
        code_verifier,
        state.code_challenge,
        state.code_challenge_method or CodeChallengeMethod.PLAIN,
    ):
        return _revoke(
            "pkce_verification_failed",
            ErrorCode.PKCE_VERIFICATION_FAILED,
            "code_verifier does not match code_challenge",
        )

    return Redemption(
        events=[
            AuthorizationCodeRedeemed(request_id=state.id, issued_jtis=issued_jtis, occurred_at=now)
        ]
    )


def expire(
    state: AuthorizationRequest, *, now: datetime, abandon_after: timedelta
) -> list[AuthorizationEvent]:
    """Expire an unredeemed code once past its TTL (no event otherwise).

    Requests that never reached CODE_ISSUED (the user abandoned the login)
    expire `abandon_after` their creation.
    """
    if state.status is AuthorizationStatus.CODE_ISSUED and state.is_expired(now):
        return [AuthorizationExpired(request_id=state.id, occurred_at=now)]
    if (
        state.status in (AuthorizationStatus.CREATED, AuthorizationStatus.CONSENTED)
        and now >= state.created_at + abandon_after
    ):
        return [AuthorizationExpired(request_id=state.id, occurred_at=now)]
    return []


def revoke(state: AuthorizationRequest, *, reason: str, occurred_at: datetime) -> list[AuthorizationEvent]:
    """Revoke the request (no event once it reached a terminal status)."""
    if state.status in (
        AuthorizationStatus.REDEEMED,
        AuthorizationStatus.EXPIRED,
        AuthorizationStatus.REVOKED,
    ):
        return []
    return [AuthorizationRevoked(request_id=state.id, reason=reason, occurred_at=occurred_at)]
