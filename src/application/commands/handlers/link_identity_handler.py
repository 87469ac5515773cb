"""Link external identity handler.

Flow:
1. Verify the provider assertion (ExternalIdentityVerifier, under the
   configured deadline) -> external_id
2. Claim `linked_identity/<provider>:<external_id>` for this user
   (ConflictError IDENTITY_ALREADY_LINKED when another user holds it)
3. Append IdentityLinked (no event when this user already has the link)
4. On failure the claim is released unless the link is already recorded
"""

import asyncio

from src.application.commands.identity_commands import LinkIdentity
from src.application.event_sourcing import AggregateRepository, retry_on_conflict
from src.core.enums import ErrorCode
from src.core.errors import DomainError, NotFoundError
from src.core.result import Failure, Result, Success
from src.domain.aggregates import Identity, LinkedIdentity
from src.domain.aggregates.identity import link_identity
from src.domain.errors import IdentityVerifierUnavailableError
from src.domain.protocols import (
    ClockProtocol,
    ExternalIdentityVerifierProtocol,
    IndexNamespace,
    IndexStoreProtocol,
)


class LinkIdentityHandler:
    """Handler for external identity linking."""

    def __init__(
        self,
        identities: AggregateRepository[Identity],
        index: IndexStoreProtocol,
        verifier: ExternalIdentityVerifierProtocol,
        clock: ClockProtocol,
        verifier_timeout_seconds: float = 5.0,
        retry_attempts: int = 3,
    ) -> None:
        self._identities = identities
        self._index = index
        self._verifier = verifier
        self._clock = clock
        self._verifier_timeout = verifier_timeout_seconds
        self._attempts = retry_attempts

    async def handle(self, cmd: LinkIdentity) -> Result[LinkedIdentity, DomainError]:
        """Handle identity linking.

        Returns:
            Success(LinkedIdentity), or Failure with EXTERNAL_ASSERTION_INVALID,
            IDENTITY_ALREADY_LINKED, USER_NOT_FOUND or USER_INACTIVE.

        Raises:
            IdentityVerifierUnavailableError: Provider unreachable or did not
                answer within the deadline.
        """
        try:
            async with asyncio.timeout(self._verifier_timeout):
                verified = await self._verifier.verify(cmd.provider, cmd.assertion)
        except TimeoutError as exc:
            msg = f"Identity provider {cmd.provider} did not answer within the deadline"
            raise IdentityVerifierUnavailableError(msg) from exc
        if isinstance(verified, Failure):
            return verified
        link = LinkedIdentity(provider=cmd.provider, external_id=verified.value)

        claimed = await self._index.claim(IndexNamespace.LINKED_IDENTITY, link.index_key, str(cmd.user_id))
        if isinstance(claimed, Failure):
            return claimed

        async def operation() -> Result[Identity, DomainError]:
            loaded = await self._identities.load(str(cmd.user_id))
            if loaded is None:
                return Failure(
                    error=NotFoundError(
                        code=ErrorCode.USER_NOT_FOUND,
                        message="User not found",
                        resource_type="User",
                        resource_id=str(cmd.user_id),
                    )
                )
            decision = link_identity(
                loaded.state,
                provider=link.provider,
                external_id=link.external_id,
                occurred_at=self._clock.now(),
            )
            if isinstance(decision, Failure):
                return decision
            saved = await self._identities.save(str(cmd.user_id), loaded.version, decision.value)
            if isinstance(saved, Failure):
                return saved
            return Success(value=loaded.state)

        result = await retry_on_conflict(operation, attempts=self._attempts)
        if isinstance(result, Failure):
            current = await self._identities.load(str(cmd.user_id))
            if current is None or link not in current.state.linked_identities:
                await self._index.release(IndexNamespace.LINKED_IDENTITY, link.index_key)
            return result
        return Success(value=link)
