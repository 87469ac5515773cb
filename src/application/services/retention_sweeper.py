"""Retention sweeper for short-lived streams.

AuthorizationRequest and Token streams are garbage once past `expires_at`
plus the retention window (kept that long for audit). Identity, Client and
Session streams are never purged.

Each sweep:
    1. Appends AuthorizationExpired to requests past their code TTL (or
       abandoned before a code was issued)
    2. Purges terminal requests past expiry + retention, releasing their code
       index entry
    3. Purges tokens past expiry + retention

Streams to visit are tracked in the `expiring` index namespace when they are
created, so a sweep never scans the whole log.
"""

import asyncio
from dataclasses import dataclass
from datetime import datetime, timedelta

from src.application.event_sourcing import AggregateRepository
from src.core.result import Failure
from src.domain.aggregates import AuthorizationRequest, Token
from src.domain.aggregates.authorization_request import expire
from src.domain.protocols import (
    ClockProtocol,
    ExpiryKey,
    IndexNamespace,
    IndexStoreProtocol,
    LoggerProtocol,
)


@dataclass(frozen=True, slots=True)
class SweepReport:
    """Counts from one sweep."""

    expired_requests: int = 0
    purged_requests: int = 0
    purged_tokens: int = 0


class RetentionSweeper:
    """Expires and purges authorization requests and tokens.

    Attributes:
        _authorizations: AuthorizationRequest repository.
        _tokens: Token repository.
        _index: Index store (expiring sets, code index).
        _clock: Injected clock.
        _retention: Audit retention after expiry.
        _abandon_after: Age at which an unfinished request expires.
        _logger: Logger for sweep results.
    """

    def __init__(
        self,
        *,
        authorizations: AggregateRepository[AuthorizationRequest],
        tokens: AggregateRepository[Token],
        index: IndexStoreProtocol,
        clock: ClockProtocol,
        retention_window: timedelta,
        abandon_after: timedelta,
        logger: LoggerProtocol,
    ) -> None:
        self._authorizations = authorizations
        self._tokens = tokens
        self._index = index
        self._clock = clock
        self._retention = retention_window
        self._abandon_after = abandon_after
        self._logger = logger

    async def sweep(self, now: datetime | None = None) -> SweepReport:
        """Run one sweep at `now` (defaults to the clock)."""
        now = now or self._clock.now()
        expired, purged_requests = await self._sweep_requests(now)
        purged_tokens = await self._sweep_tokens(now)

        report = SweepReport(
            expired_requests=expired,
            purged_requests=purged_requests,
            purged_tokens=purged_tokens,
        )
        self._logger.info(
            "retention_sweep_completed",
            expired_requests=report.expired_requests,
            purged_requests=report.purged_requests,
            purged_tokens=report.purged_tokens,
        )
        return report

    async def run_forever(self, interval_seconds: float) -> None:
        """Sweep every `interval_seconds` until cancelled."""
        while True:
            await asyncio.sleep(interval_seconds)
            try:
                await self.sweep()
            except Exception as e:
                # Retried on the next interval.
                self._logger.error("retention_sweep_failed", error=e)

    def _request_purge_at(self, state: AuthorizationRequest) -> datetime:
        base = state.expires_at or state.created_at + self._abandon_after
        return base + self._retention

    async def _sweep_requests(self, now: datetime) -> tuple[int, int]:
        expired = purged = 0
        request_ids = await self._index.members(IndexNamespace.EXPIRING, ExpiryKey.AUTHORIZATION)

        for request_id in sorted(request_ids):
            loaded = await self._authorizations.load(request_id)
            if loaded is None:
                await self._index.remove_member(IndexNamespace.EXPIRING, ExpiryKey.AUTHORIZATION, request_id)
                continue

            events = expire(loaded.state, now=now, abandon_after=self._abandon_after)
            if events:
                saved = await self._authorizations.save(request_id, loaded.version, events)
                if isinstance(saved, Failure):
                    continue
                expired += 1
                loaded = await self._authorizations.load(request_id)
                if loaded is None:
                    continue

            state = loaded.state
            if not state.status.is_terminal or now < self._request_purge_at(state):
                continue

            if state.code_hash:
                await self._index.release(IndexNamespace.AUTHORIZATION_CODE, state.code_hash)
            await self._authorizations.purge(request_id)
            await self._index.remove_member(IndexNamespace.EXPIRING, ExpiryKey.AUTHORIZATION, request_id)
            purged += 1

        return expired, purged

    async def _sweep_tokens(self, now: datetime) -> int:
        purged = 0
        jtis = await self._index.members(IndexNamespace.EXPIRING, ExpiryKey.TOKEN)

        for jti in sorted(jtis):
            loaded = await self._tokens.load(jti)
            if loaded is not None and now < loaded.state.expires_at + self._retention:
                continue
            if loaded is not None:
                await self._tokens.purge(jti)
                purged += 1
            await self._index.remove_member(IndexNamespace.EXPIRING, ExpiryKey.TOKEN, jti)

        return purged
