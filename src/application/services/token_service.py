"""Token service.

Issues, verifies, introspects, rotates and revokes access, refresh and ID
tokens. Every token is a signed JWT (via SignerProtocol) AND an event-sourced
Token aggregate keyed by its `jti`; the aggregate is the revocation registry.

Verification order:
    1. Signature and format (SIGNATURE_INVALID / MALFORMED)
    2. Expiry against the injected clock (EXPIRED)
    3. `token_use` claim (MALFORMED when a different kind was expected)
    4. Token stream: unknown or revoked (REVOKED)
    5. Issuing client deactivated (REVOKED)
    6. Bound session revoked (REVOKED)
    7. Subject identity deactivated (REVOKED)

Steps 4-7 read the event store through the aggregate repositories, never an
eventually consistent projection, so a committed revocation is visible to the
next verify.

Refresh rotation:
    R0 --rotate--> R1 --rotate--> R2
    Presenting R1 after it was rotated is reuse: the family is revoked from
    its root (found by walking `parent_jti`) and RefreshTokenReuseDetected is
    appended for audit.

Issuance order:
    open streams (TokenIssued per jti) -> commit the parent event
    (RefreshTokenRotated or AuthorizationCodeRedeemed) -> attach to the
    session and sign. A losing parent commit discards the opened streams.
"""

import asyncio
import base64
import hashlib
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any
from uuid import UUID

from uuid_extensions import uuid7

from src.application.commands.token_commands import IssueClientCredentials, RefreshTokens
from src.application.dtos import IssuedTokens
from src.application.event_sourcing import AggregateRepository, retry_on_conflict
from src.application.services.session_manager import SessionManager
from src.application.services.token_revoker import TokenRevoker
from src.core.enums import ErrorCode
from src.core.errors import (
    AuthenticationError,
    DomainError,
    ExpiredError,
    RevokedError,
    ValidationError,
)
from src.core.result import Failure, Result, Success
from src.domain.aggregates import AuthorizationRequest, Client, Identity, Session, Token
from src.domain.aggregates.token import detect_reuse, issue_token, rotate_refresh_token
from src.domain.enums import GrantType, TokenFailureReason, TokenUse
from src.domain.errors import SignerUnavailableError, TokenVerificationError
from src.domain.protocols import (
    ClockProtocol,
    ExpiryKey,
    IndexNamespace,
    IndexStoreProtocol,
    LoggerProtocol,
    SignerProtocol,
)
from src.domain.value_objects.scope import EMAIL_SCOPE, format_scope, parse_scope

REFRESH_REUSE_REASON = "refresh_token_reuse"
CLIENT_REVOCATION_REASON = "revoked_by_client"
GRANT_NOT_COMMITTED_REASON = "grant_not_committed"

_AT_HASH_ALGORITHMS = {
    "256": hashlib.sha256,
    "384": hashlib.sha384,
    "512": hashlib.sha512,
}


def compute_at_hash(access_token: str, algorithm: str) -> str:
    """OIDC `at_hash`: left half of the access token digest, base64url.

    The digest matches the signing algorithm's hash size (RS256 -> SHA-256).
    """
    digest = _AT_HASH_ALGORITHMS.get(algorithm[-3:], hashlib.sha256)(
        access_token.encode("ascii")
    ).digest()
    return base64.urlsafe_b64encode(digest[: len(digest) // 2]).rstrip(b"=").decode("ascii")


def _token_error(reason: TokenFailureReason, message: str) -> Failure[TokenVerificationError]:
    code = {
        TokenFailureReason.EXPIRED: ErrorCode.TOKEN_EXPIRED,
        TokenFailureReason.REVOKED: ErrorCode.TOKEN_REVOKED,
    }.get(reason, ErrorCode.TOKEN_INVALID)
    return Failure(error=TokenVerificationError(code=code, message=message, reason=reason))


def _invalid_scope(message: str) -> Failure[ValidationError]:
    return Failure(error=ValidationError(code=ErrorCode.INVALID_SCOPE, message=message, field="scope"))


def _unauthorized_client(message: str) -> Failure[ValidationError]:
    return Failure(
        error=ValidationError(code=ErrorCode.UNAUTHORIZED_CLIENT, message=message, field="grant_type")
    )


@dataclass(frozen=True, slots=True, kw_only=True)
class TokenPolicy:
    """Issuer and default lifetimes (clients may override access/refresh)."""

    issuer: str
    access_token_ttl_seconds: int
    refresh_token_ttl_seconds: int
    id_token_ttl_seconds: int
    signer_timeout_seconds: float = 5.0


@dataclass(frozen=True, slots=True, kw_only=True)
class PlannedJtis:
    """Token ids reserved before a grant is committed.

    The authorization code redemption records these ids, so a replayed code
    can revoke exactly the tokens of the first redemption.
    """

    access: str
    refresh: str | None = None
    id: str | None = None

    @property
    def all(self) -> tuple[str, ...]:
        return tuple(jti for jti in (self.access, self.refresh, self.id) if jti is not None)

    def uses(self) -> list[tuple[str, TokenUse]]:
        planned = (
            (self.access, TokenUse.ACCESS),
            (self.refresh, TokenUse.REFRESH),
            (self.id, TokenUse.ID),
        )
        return [(jti, use) for jti, use in planned if jti is not None]


@dataclass(frozen=True, slots=True, kw_only=True)
class PendingGrant:
    """Token streams opened for a grant whose parent event is not committed yet.

    TokenIssued is appended for every planned jti BEFORE the event that
    records those jtis (RefreshTokenRotated, AuthorizationCodeRedeemed). A
    cascade started by refresh reuse or code replay therefore always finds
    every child stream. When the parent commit loses, the grant is discarded
    (its tokens are revoked and never signed).
    """

    client: Client
    subject: str
    scopes: frozenset[str]
    jtis: PlannedJtis
    issued_at: datetime
    access_ttl: int
    refresh_ttl: int
    id_ttl: int
    session_id: UUID | None = None
    parent_jti: str | None = None
    nonce: str | None = None
    auth_time: datetime | None = None
    email: str | None = None

    def lifetime(self, use: TokenUse) -> int:
        return {
            TokenUse.ACCESS: self.access_ttl,
            TokenUse.REFRESH: self.refresh_ttl,
            TokenUse.ID: self.id_ttl,
        }[use]


class TokenService:
    """Token lifecycle over the Token aggregate and the signer.

    Attributes:
        _tokens: Token aggregate repository (revocation registry).
        _clients: Client repository (verify-time deactivation check).
        _sessions: Session repository (verify-time revocation check).
        _identities: Identity repository (deactivation check, email claim).
        _session_manager: Attaches issued tokens to their session.
        _revoker: Cascading revocation.
        _signer: JWS signer.
        _index: Index store (expiry tracking for the retention sweeper).
        _clock: Injected clock.
        _policy: Issuer and lifetimes.
    """

    def __init__(
        self,
        *,
        tokens: AggregateRepository[Token],
        clients: AggregateRepository[Client],
        sessions: AggregateRepository[Session],
        identities: AggregateRepository[Identity],
        session_manager: SessionManager,
        revoker: TokenRevoker,
        signer: SignerProtocol,
        index: IndexStoreProtocol,
        clock: ClockProtocol,
        policy: TokenPolicy,
        logger: LoggerProtocol,
        retry_attempts: int = 3,
    ) -> None:
        self._tokens = tokens
        self._clients = clients
        self._sessions = sessions
        self._identities = identities
        self._session_manager = session_manager
        self._revoker = revoker
        self._signer = signer
        self._index = index
        self._clock = clock
        self._policy = policy
        self._logger = logger
        self._attempts = retry_attempts

    # =========================================================================
    # Issuance
    # =========================================================================

    def plan_jtis(self, *, refresh: bool, id_token: bool) -> PlannedJtis:
        return PlannedJtis(
            access=str(uuid7()),
            refresh=str(uuid7()) if refresh else None,
            id=str(uuid7()) if id_token else None,
        )

    async def open_authorization_grant(
        self,
        client: Client,
        request: AuthorizationRequest,
        jtis: PlannedJtis,
    ) -> Result[PendingGrant, DomainError]:
        """Open the token streams of an authorization request about to be redeemed.

        The caller commits AuthorizationCodeRedeemed next and then calls
        `complete` (or `discard` when the redemption did not commit).
        """
        if request.user_id is None:
            return Failure(
                error=ValidationError(
                    code=ErrorCode.INVALID_STATE_TRANSITION,
                    message="Authorization request has no consenting user",
                )
            )
        loaded = await self._identities.load(str(request.user_id))
        if loaded is None or not loaded.state.active:
            return Failure(
                error=AuthenticationError(code=ErrorCode.USER_INACTIVE, message="User is not active")
            )

        return await self._open(
            client=client,
            subject=str(request.user_id),
            scopes=request.granted_scopes,
            jtis=jtis,
            session_id=request.session_id,
            request_id=request.id,
            nonce=request.nonce,
            auth_time=request.auth_time,
            email=loaded.state.email if EMAIL_SCOPE in request.granted_scopes else None,
        )

    async def issue_client_credentials(
        self, cmd: IssueClientCredentials
    ) -> Result[IssuedTokens, DomainError]:
        """`client_credentials` grant: access token only, `sub` is the client."""
        client = cmd.client
        if not client.confidential or not client.supports_grant(GrantType.CLIENT_CREDENTIALS):
            return _unauthorized_client("Client may not use the client_credentials grant")

        parsed = parse_scope(cmd.scope)
        if isinstance(parsed, Failure):
            return parsed
        scopes = parsed.value or client.allowed_scopes
        if not scopes <= client.allowed_scopes:
            return _invalid_scope("Requested scope exceeds the client's allowed scopes")

        opened = await self._open(
            client=client,
            subject=client.id,
            scopes=scopes,
            jtis=self.plan_jtis(refresh=False, id_token=False),
        )
        if isinstance(opened, Failure):
            return opened
        return await self.complete(opened.value)

    async def rotate_refresh(self, cmd: RefreshTokens) -> Result[IssuedTokens, DomainError]:
        """`refresh_token` grant with rotation and reuse detection."""
        client = cmd.client
        if not client.supports_grant(GrantType.REFRESH_TOKEN):
            return _unauthorized_client("Client may not use the refresh_token grant")

        signed = await self._verify_signature(cmd.refresh_token)
        if isinstance(signed, Failure):
            return signed
        claims = signed.value
        if claims.get("token_use") != TokenUse.REFRESH.value or not isinstance(claims.get("jti"), str):
            return _token_error(TokenFailureReason.MALFORMED, "Not a refresh token")
        if claims.get("client_id") != client.id:
            return Failure(
                error=AuthenticationError(
                    code=ErrorCode.TOKEN_INVALID,
                    message="Refresh token was issued to another client",
                )
            )
        jti: str = claims["jti"]

        requested = parse_scope(cmd.scope)
        if isinstance(requested, Failure):
            return requested

        async def operation() -> Result[PendingGrant, DomainError]:
            now = self._clock.now()
            loaded = await self._tokens.load(jti)
            if loaded is None:
                return Failure(
                    error=RevokedError(code=ErrorCode.TOKEN_REVOKED, message="Refresh token is not valid")
                )
            state = loaded.state

            if state.revoked:
                return await self._handle_reuse(state, now)
            if state.is_expired(now):
                return Failure(
                    error=ExpiredError(code=ErrorCode.TOKEN_EXPIRED, message="Refresh token has expired")
                )
            if await self._binding_revoked(state):
                return Failure(
                    error=RevokedError(code=ErrorCode.TOKEN_REVOKED, message="Refresh token is not valid")
                )

            scopes = requested.value or state.scopes
            if not scopes <= state.scopes:
                return _invalid_scope("Requested scope exceeds the original grant")

            jtis = self.plan_jtis(refresh=True, id_token=False)
            decision = rotate_refresh_token(state, child_jtis=jtis.all, now=now)
            if isinstance(decision, Failure):
                return decision

            opened = await self._open(
                client=client,
                subject=state.subject,
                scopes=scopes,
                jtis=jtis,
                session_id=state.session_id,
                request_id=state.request_id,
                parent_jti=state.jti,
            )
            if isinstance(opened, Failure):
                return opened
            saved = await self._tokens.save(jti, loaded.version, decision.value)
            if isinstance(saved, Failure):
                await self.discard(opened.value)
                return saved
            return opened

        result = await retry_on_conflict(operation, attempts=self._attempts)
        if isinstance(result, Failure):
            return result
        return await self.complete(result.value)

    async def _handle_reuse(self, state: Token, now: datetime) -> Result[Any, DomainError]:
        root = await self._family_root(state)
        revoked = await self._revoker.revoke(root, reason=REFRESH_REUSE_REASON, cascade=True)
        if isinstance(revoked, Failure):
            return revoked

        current = await self._tokens.load(state.jti)
        if current is not None and not current.state.reuse_detected:
            saved = await self._tokens.save(
                state.jti,
                current.version,
                detect_reuse(current.state, family_root_jti=root, occurred_at=now),
            )
            if isinstance(saved, Failure):
                return saved

        return Failure(
            error=RevokedError(
                code=ErrorCode.REFRESH_TOKEN_REUSED,
                message="Refresh token was already used",
            )
        )

    async def _family_root(self, state: Token) -> str:
        current = state
        seen = {current.jti}
        while current.parent_jti and current.parent_jti not in seen:
            parent = await self._tokens.load(current.parent_jti)
            if parent is None:
                break
            current = parent.state
            seen.add(current.jti)
        return current.jti

    async def _open(
        self,
        *,
        client: Client,
        subject: str,
        scopes: frozenset[str],
        jtis: PlannedJtis,
        session_id: UUID | None = None,
        request_id: UUID | None = None,
        parent_jti: str | None = None,
        nonce: str | None = None,
        auth_time: datetime | None = None,
        email: str | None = None,
    ) -> Result[PendingGrant, DomainError]:
        grant = PendingGrant(
            client=client,
            subject=subject,
            scopes=scopes,
            jtis=jtis,
            issued_at=self._clock.now(),
            access_ttl=client.access_token_ttl_seconds or self._policy.access_token_ttl_seconds,
            refresh_ttl=client.refresh_token_ttl_seconds or self._policy.refresh_token_ttl_seconds,
            id_ttl=self._policy.id_token_ttl_seconds,
            session_id=session_id,
            parent_jti=parent_jti,
            nonce=nonce,
            auth_time=auth_time,
            email=email,
        )

        for jti, use in jtis.uses():
            events = issue_token(
                jti=jti,
                token_use=use,
                subject=subject,
                client_id=client.id,
                scopes=scopes,
                expires_at=grant.issued_at + timedelta(seconds=grant.lifetime(use)),
                occurred_at=grant.issued_at,
                parent_jti=parent_jti,
                session_id=session_id,
                request_id=request_id,
            )
            saved = await self._tokens.save(jti, 0, events)
            if isinstance(saved, Failure):
                await self.discard(grant)
                return saved
            await self._index.add_member(IndexNamespace.EXPIRING, ExpiryKey.TOKEN, jti)
        return Success(value=grant)

    async def discard(self, grant: PendingGrant) -> None:
        """Revoke the streams of a grant whose parent event never committed."""
        result = await self._revoker.revoke_many(
            grant.jtis.all, reason=GRANT_NOT_COMMITTED_REASON, cascade=False
        )
        if isinstance(result, Failure):
            self._logger.warning(
                "grant_discard_incomplete",
                jtis=list(grant.jtis.all),
                error_code=result.error.code.value,
            )

    async def complete(self, grant: PendingGrant) -> Result[IssuedTokens, DomainError]:
        """Attach a committed grant to its session and sign its tokens.

        Tokens revoked in the meantime (refresh reuse, code replay) are still
        signed and returned; they fail every later `verify`.
        """
        jtis = grant.jtis
        if grant.session_id is not None:
            for jti in jtis.all:
                attached = await self._session_manager.attach_token(grant.session_id, jti)
                if isinstance(attached, Failure):
                    await self._revoker.revoke_many(jtis.all, reason="session_revoked")
                    return attached

        base_claims: dict[str, Any] = {
            "iss": self._policy.issuer,
            "sub": grant.subject,
            "aud": grant.client.id,
            "client_id": grant.client.id,
            "iat": int(grant.issued_at.timestamp()),
        }
        if grant.session_id is not None:
            base_claims["sid"] = str(grant.session_id)
        if grant.parent_jti is not None:
            base_claims["parent_jti"] = grant.parent_jti

        def claims_for(jti: str, use: TokenUse) -> dict[str, Any]:
            return {
                **base_claims,
                "exp": int((grant.issued_at + timedelta(seconds=grant.lifetime(use))).timestamp()),
                "jti": jti,
                "token_use": use.value,
            }

        scope = format_scope(grant.scopes)
        access_token = await self._sign({**claims_for(jtis.access, TokenUse.ACCESS), "scope": scope})
        refresh_token = None
        if jtis.refresh is not None:
            refresh_token = await self._sign(
                {**claims_for(jtis.refresh, TokenUse.REFRESH), "scope": scope}
            )
        id_token = None
        if jtis.id is not None:
            id_claims = claims_for(jtis.id, TokenUse.ID)
            id_claims["at_hash"] = compute_at_hash(access_token, self._signer.algorithm)
            if grant.nonce is not None:
                id_claims["nonce"] = grant.nonce
            if grant.auth_time is not None:
                id_claims["auth_time"] = int(grant.auth_time.timestamp())
            if grant.email is not None:
                id_claims["email"] = grant.email
            id_token = await self._sign(id_claims)

        return Success(
            value=IssuedTokens(
                access_token=access_token,
                expires_in=grant.access_ttl,
                scope=scope,
                refresh_token=refresh_token,
                id_token=id_token,
                jtis=jtis.all,
            )
        )

    # =========================================================================
    # Verification
    # =========================================================================

    async def verify(
        self, token: str, expected_use: TokenUse | None = None
    ) -> Result[dict[str, Any], TokenVerificationError]:
        """Verify a token and return its claims.

        Returns:
            Success(claims) or Failure(TokenVerificationError) with reason
            SIGNATURE_INVALID, MALFORMED, EXPIRED or REVOKED.
        """
        signed = await self._verify_signature(token)
        if isinstance(signed, Failure):
            return signed
        claims = signed.value

        jti = claims.get("jti")
        exp = claims.get("exp")
        if not isinstance(jti, str) or not isinstance(exp, int | float):
            return _token_error(TokenFailureReason.MALFORMED, "Token lacks jti or exp")
        if self._clock.now().timestamp() >= exp:
            return _token_error(TokenFailureReason.EXPIRED, "Token has expired")
        if expected_use is not None and claims.get("token_use") != expected_use.value:
            return _token_error(TokenFailureReason.MALFORMED, "Unexpected token use")

        loaded = await self._tokens.load(jti)
        if loaded is None or loaded.state.revoked:
            return _token_error(TokenFailureReason.REVOKED, "Token has been revoked")
        if await self._binding_revoked(loaded.state):
            return _token_error(TokenFailureReason.REVOKED, "Token has been revoked")
        return Success(value=claims)

    async def _binding_revoked(self, state: Token) -> bool:
        client = await self._clients.load(state.client_id)
        if client is None or not client.state.active:
            return True

        if state.session_id is not None:
            session = await self._sessions.load(str(state.session_id))
            if session is None or session.state.revoked:
                return True

        if state.subject != state.client_id:
            try:
                user_id = UUID(state.subject)
            except ValueError:
                return True
            identity = await self._identities.load(str(user_id))
            if identity is None or not identity.state.active:
                return True
        return False

    async def _verify_signature(self, token: str) -> Result[dict[str, Any], TokenVerificationError]:
        async with asyncio.timeout(self._policy.signer_timeout_seconds):
            return await self._signer.verify(token)

    async def _sign(self, claims: dict[str, Any]) -> str:
        try:
            async with asyncio.timeout(self._policy.signer_timeout_seconds):
                return await self._signer.sign(claims)
        except TimeoutError as exc:
            raise SignerUnavailableError("Signer did not answer within the deadline") from exc

    # =========================================================================
    # Introspection and revocation (RFC 7662 / RFC 7009)
    # =========================================================================

    async def introspect(self, token: str, client: Client) -> dict[str, Any]:
        """RFC 7662 response; `{"active": False}` for anything that fails."""
        result = await self.verify(token)
        if isinstance(result, Failure):
            return {"active": False}
        claims = result.value
        if claims.get("client_id") != client.id:
            return {"active": False}

        token_use = claims.get("token_use")
        response: dict[str, Any] = {
            "active": True,
            "client_id": claims["client_id"],
            "sub": claims.get("sub"),
            "exp": claims.get("exp"),
            "iat": claims.get("iat"),
            "jti": claims.get("jti"),
            "token_type": "Bearer" if token_use == TokenUse.ACCESS.value else f"{token_use}_token",
        }
        if "scope" in claims:
            response["scope"] = claims["scope"]
        return response

    async def revoke(self, token: str, client: Client) -> None:
        """RFC 7009 revocation; silent for unknown or foreign tokens.

        Revoking a refresh token also revokes every token rotated from it. A
        revocation that keeps losing concurrency races is logged, not raised.
        """
        signed = await self._verify_signature(token)
        if isinstance(signed, Failure):
            return
        claims = signed.value
        jti = claims.get("jti")
        if not isinstance(jti, str) or claims.get("client_id") != client.id:
            return

        result = await self._revoker.revoke(jti, reason=CLIENT_REVOCATION_REASON, cascade=True)
        if isinstance(result, Failure):
            self._logger.warning(
                "token_revocation_incomplete",
                jti=jti,
                client_id=client.id,
                error_code=result.error.code.value,
            )

    async def revoke_jtis(self, jtis: tuple[str, ...], *, reason: str) -> Result[list[str], DomainError]:
        """Revoke known token ids (code replay)."""
        return await self._revoker.revoke_many(jtis, reason=reason, cascade=True)
