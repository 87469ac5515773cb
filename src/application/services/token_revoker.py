"""Token revocation with cascade to rotated descendants.

Shared by the token service (revocation endpoint, refresh reuse, code replay)
and the session manager (session and logout-all revocation).

Cascade:
    Revoking a refresh token walks `children` (recorded by
    RefreshTokenRotated) breadth-first, so every token minted from it is
    revoked too. Rotated tokens are already revoked but are still walked.
"""

from collections import deque
from collections.abc import Iterable

from src.application.event_sourcing import AggregateRepository, retry_on_conflict
from src.core.errors import DomainError
from src.core.result import Failure, Result, Success
from src.domain.aggregates import Token
from src.domain.aggregates.token import revoke_token
from src.domain.protocols.clock_protocol import ClockProtocol


class TokenRevoker:
    """Appends TokenRevoked to token streams.

    Attributes:
        _tokens: Token aggregate repository.
        _clock: Injected clock.
        _attempts: Conflict retry attempts per stream.
    """

    def __init__(
        self,
        tokens: AggregateRepository[Token],
        clock: ClockProtocol,
        retry_attempts: int = 3,
    ) -> None:
        self._tokens = tokens
        self._clock = clock
        self._attempts = retry_attempts

    async def revoke(
        self, jti: str, *, reason: str, cascade: bool = True
    ) -> Result[list[str], DomainError]:
        """Revoke one token (and its descendants when `cascade`).

        Unknown jtis are skipped. Already revoked tokens append nothing.

        Returns:
            Success(jtis newly revoked by this call) or the first Failure
            (a conflict that survived every retry).
        """
        return await self.revoke_many([jti], reason=reason, cascade=cascade)

    async def revoke_many(
        self, jtis: Iterable[str], *, reason: str, cascade: bool = True
    ) -> Result[list[str], DomainError]:
        queue = deque(jtis)
        seen: set[str] = set()
        revoked: list[str] = []

        while queue:
            jti = queue.popleft()
            if jti in seen:
                continue
            seen.add(jti)

            result = await retry_on_conflict(
                lambda jti=jti: self._revoke_one(jti, reason),
                attempts=self._attempts,
            )
            if isinstance(result, Failure):
                return result

            state, appended = result.value
            if appended:
                revoked.append(jti)
            if cascade and state is not None:
                queue.extend(state.children)

        return Success(value=revoked)

    async def _revoke_one(
        self, jti: str, reason: str
    ) -> Result[tuple[Token | None, bool], DomainError]:
        loaded = await self._tokens.load(jti)
        if loaded is None:
            return Success(value=(None, False))

        events = revoke_token(loaded.state, reason=reason, occurred_at=self._clock.now())
        saved = await self._tokens.save(jti, loaded.version, events)
        if isinstance(saved, Failure):
            return saved
        return Success(value=(loaded.state, bool(events)))
