"""Session manager.

Owns the Session aggregate lifecycle: opening (or refreshing) a session at
login, resolving browser handles, attaching issued tokens, listing and
revoking sessions.

Indexes:
    - device_session: "<user_id>:<fingerprint>" -> session id (one session per
      user and device)
    - user_sessions: user id -> set of session ids
    - session_handle: SHA-256 of the browser handle -> session id

Revocation order:
    SessionRevoked is appended first. Token verification checks the session
    stream, so every attached token stops verifying from that moment; the
    TokenRevoked events appended afterwards make the revocation explicit in
    each token's own stream.
"""

import asyncio
from dataclasses import dataclass
from uuid import UUID

from uuid_extensions import uuid7

from src.application.dtos import SessionLogin
from src.application.event_sourcing import AggregateRepository, retry_on_conflict
from src.application.services.token_revoker import TokenRevoker
from src.core.enums import ErrorCode
from src.core.errors import DomainError, NotFoundError
from src.core.result import Failure, Result, Success
from src.domain.aggregates import Session
from src.domain.aggregates.session import (
    attach_token,
    open_session,
    record_activity,
    revoke_session,
)
from src.domain.protocols import (
    ClockProtocol,
    IndexNamespace,
    IndexStoreProtocol,
    SecretGeneratorProtocol,
)

SESSION_TOKENS_REVOKED_REASON = "session_revoked"


def device_key(user_id: UUID, device_fingerprint: str) -> str:
    return f"{user_id}:{device_fingerprint}"


def _session_not_found(session_id: UUID) -> NotFoundError:
    return NotFoundError(
        code=ErrorCode.SESSION_NOT_FOUND,
        message="Session not found",
        resource_type="Session",
        resource_id=str(session_id),
    )


@dataclass(frozen=True, slots=True, kw_only=True)
class DeviceLogin:
    """Device details recorded with a login."""

    device_fingerprint: str
    device_info: str | None = None
    ip_address: str | None = None


class SessionManager:
    """Session lifecycle service.

    Attributes:
        _sessions: Session aggregate repository.
        _index: Index store.
        _revoker: Token revoker for attached tokens.
        _secrets: Handle generator.
        _clock: Injected clock.
        _attempts: Conflict retry attempts.
    """

    def __init__(
        self,
        *,
        sessions: AggregateRepository[Session],
        index: IndexStoreProtocol,
        revoker: TokenRevoker,
        secrets: SecretGeneratorProtocol,
        clock: ClockProtocol,
        retry_attempts: int = 3,
    ) -> None:
        self._sessions = sessions
        self._index = index
        self._revoker = revoker
        self._secrets = secrets
        self._clock = clock
        self._attempts = retry_attempts

    # =========================================================================
    # Login
    # =========================================================================

    async def login(self, user_id: UUID, device: DeviceLogin) -> Result[SessionLogin, DomainError]:
        """Open a session for the device, or refresh the existing one.

        A fresh browser handle is generated either way; the previous handle of
        a refreshed session stops resolving.

        Returns:
            Success(SessionLogin) with the plain handle (returned once).
        """
        handle, handle_hash = self._secrets.generate_session_handle()
        key = device_key(user_id, device.device_fingerprint)

        async def operation() -> Result[SessionLogin, DomainError]:
            existing_id = await self._index.get(IndexNamespace.DEVICE_SESSION, key)
            if existing_id is not None:
                loaded = await self._sessions.load(existing_id)
                if loaded is not None and not loaded.state.revoked:
                    return await self._refresh(loaded.state, loaded.version, device, handle, handle_hash)

            session_id = uuid7()
            if existing_id is None:
                claimed = await self._index.claim(IndexNamespace.DEVICE_SESSION, key, str(session_id))
                if isinstance(claimed, Failure):
                    # Lost a race with a concurrent login from the same device.
                    return claimed
            else:
                await self._index.set(IndexNamespace.DEVICE_SESSION, key, str(session_id))

            events = open_session(
                session_id=session_id,
                user_id=user_id,
                device_fingerprint=device.device_fingerprint,
                device_info=device.device_info,
                ip_address=device.ip_address,
                handle_hash=handle_hash,
                occurred_at=self._clock.now(),
            )
            saved = await self._sessions.save(str(session_id), 0, events)
            if isinstance(saved, Failure):
                return saved

            await self._index.add_member(IndexNamespace.USER_SESSIONS, str(user_id), str(session_id))
            await self._index.set(IndexNamespace.SESSION_HANDLE, handle_hash, str(session_id))
            return Success(value=SessionLogin(session_id=session_id, handle=handle, created=True))

        return await retry_on_conflict(operation, attempts=self._attempts)

    async def _refresh(
        self,
        state: Session,
        version: int,
        device: DeviceLogin,
        handle: str,
        handle_hash: str,
    ) -> Result[SessionLogin, DomainError]:
        decision = record_activity(
            state,
            ip_address=device.ip_address,
            handle_hash=handle_hash,
            occurred_at=self._clock.now(),
        )
        if isinstance(decision, Failure):
            return decision
        saved = await self._sessions.save(str(state.id), version, decision.value)
        if isinstance(saved, Failure):
            return saved

        if state.handle_hash:
            await self._index.release(IndexNamespace.SESSION_HANDLE, state.handle_hash)
        await self._index.set(IndexNamespace.SESSION_HANDLE, handle_hash, str(state.id))
        return Success(value=SessionLogin(session_id=state.id, handle=handle, created=False))

    # =========================================================================
    # Lookup
    # =========================================================================

    async def get(self, session_id: UUID) -> Session | None:
        loaded = await self._sessions.load(str(session_id))
        return loaded.state if loaded else None

    async def resolve_handle(self, handle: str) -> Session | None:
        """Live session for a browser handle, or None."""
        handle_hash = self._secrets.digest(handle)
        session_id = await self._index.get(IndexNamespace.SESSION_HANDLE, handle_hash)
        if session_id is None:
            return None
        loaded = await self._sessions.load(session_id)
        if loaded is None or loaded.state.revoked or loaded.state.handle_hash != handle_hash:
            return None
        return loaded.state

    async def list_sessions(self, user_id: UUID) -> list[Session]:
        """Live sessions of a user, most recently seen first."""
        session_ids = await self._index.members(IndexNamespace.USER_SESSIONS, str(user_id))
        loaded = await asyncio.gather(*(self._sessions.load(sid) for sid in session_ids))
        sessions = [
            item.state
            for item in loaded
            if item is not None and not item.state.revoked and item.state.user_id == user_id
        ]
        return sorted(sessions, key=lambda session: session.last_seen_at, reverse=True)

    # =========================================================================
    # Tokens
    # =========================================================================

    async def attach_token(self, session_id: UUID, jti: str) -> Result[None, DomainError]:
        """Record a token issued within the session.

        Fails with SESSION_REVOKED when the session has been revoked, so no
        token is handed out for a dead session.
        """

        async def operation() -> Result[None, DomainError]:
            loaded = await self._sessions.load(str(session_id))
            if loaded is None:
                return Failure(error=_session_not_found(session_id))
            decision = attach_token(loaded.state, jti=jti, occurred_at=self._clock.now())
            if isinstance(decision, Failure):
                return decision
            saved = await self._sessions.save(str(session_id), loaded.version, decision.value)
            if isinstance(saved, Failure):
                return saved
            return Success(value=None)

        return await retry_on_conflict(operation, attempts=self._attempts)

    # =========================================================================
    # Revocation
    # =========================================================================

    async def revoke(
        self, session_id: UUID, *, user_id: UUID, reason: str
    ) -> Result[None, DomainError]:
        """Revoke a session owned by `user_id` and every attached token.

        Sessions of other users are reported as not found.
        """

        async def operation() -> Result[Session, DomainError]:
            loaded = await self._sessions.load(str(session_id))
            if loaded is None or loaded.state.user_id != user_id:
                return Failure(error=_session_not_found(session_id))
            events = revoke_session(loaded.state, reason=reason, occurred_at=self._clock.now())
            saved = await self._sessions.save(str(session_id), loaded.version, events)
            if isinstance(saved, Failure):
                return saved
            return Success(value=loaded.state)

        result = await retry_on_conflict(operation, attempts=self._attempts)
        if isinstance(result, Failure):
            return result
        state = result.value

        revoked = await self._revoker.revoke_many(
            sorted(state.active_token_jtis), reason=SESSION_TOKENS_REVOKED_REASON
        )
        if isinstance(revoked, Failure):
            return revoked

        if state.handle_hash:
            await self._index.release(IndexNamespace.SESSION_HANDLE, state.handle_hash)
        await self._index.remove_member(IndexNamespace.USER_SESSIONS, str(user_id), str(session_id))
        return Success(value=None)

    async def revoke_all(
        self,
        user_id: UUID,
        *,
        reason: str,
        except_session_id: UUID | None = None,
    ) -> Result[int, DomainError]:
        """Revoke every session of a user, optionally keeping one.

        Returns:
            Success(number of sessions revoked).
        """
        session_ids = await self._index.members(IndexNamespace.USER_SESSIONS, str(user_id))
        count = 0
        for raw_id in sorted(session_ids):
            session_id = UUID(raw_id)
            if session_id == except_session_id:
                continue
            result = await self.revoke(session_id, user_id=user_id, reason=reason)
            if isinstance(result, Failure):
                if isinstance(result.error, NotFoundError):
                    continue
                return result
            count += 1
        return Success(value=count)
