"""Approve authorization handler (consent + code issuance).

Flow:
1. Generate the code (32 random bytes) and its SHA-256 digest
2. Index digest -> request id (before the append, so the code is resolvable
   the moment the client receives it)
3. Append AuthorizationConsented + AuthorizationCodeIssued in one append
   (retried on concurrency conflicts)
4. Return Success(IssuedCode) with the plain code for the redirect

The code TTL (`authorization_code_ttl_seconds`) is independent of token TTLs.
"""

from datetime import timedelta
from uuid import UUID

from src.application.commands.authorization_commands import ApproveAuthorization
from src.application.dtos import IssuedCode
from src.application.event_sourcing import AggregateRepository, retry_on_conflict
from src.core.enums import ErrorCode
from src.core.errors import DomainError, NotFoundError
from src.core.result import Failure, Result, Success
from src.domain.aggregates import AuthorizationRequest, apply_authorization_event, rehydrate
from src.domain.aggregates.authorization_request import consent, issue_code
from src.domain.protocols import (
    ClockProtocol,
    IndexNamespace,
    IndexStoreProtocol,
    SecretGeneratorProtocol,
)


def authorization_request_not_found(request_id: UUID | str) -> NotFoundError:
    return NotFoundError(
        code=ErrorCode.AUTHORIZATION_REQUEST_NOT_FOUND,
        message="Authorization request not found",
        resource_type="AuthorizationRequest",
        resource_id=str(request_id),
    )


class ApproveAuthorizationHandler:
    """Handler for consent and code issuance."""

    def __init__(
        self,
        authorizations: AggregateRepository[AuthorizationRequest],
        index: IndexStoreProtocol,
        secrets: SecretGeneratorProtocol,
        clock: ClockProtocol,
        code_ttl_seconds: int = 600,
        retry_attempts: int = 3,
    ) -> None:
        self._authorizations = authorizations
        self._index = index
        self._secrets = secrets
        self._clock = clock
        self._code_ttl = timedelta(seconds=code_ttl_seconds)
        self._attempts = retry_attempts

    async def handle(self, cmd: ApproveAuthorization) -> Result[IssuedCode, DomainError]:
        code, code_hash = self._secrets.generate_code()
        request_id = str(cmd.request_id)
        await self._index.set(IndexNamespace.AUTHORIZATION_CODE, code_hash, request_id)

        async def operation() -> Result[IssuedCode, DomainError]:
            loaded = await self._authorizations.load(request_id)
            if loaded is None:
                return Failure(error=authorization_request_not_found(cmd.request_id))

            now = self._clock.now()
            consented = consent(
                loaded.state,
                user_id=cmd.user_id,
                session_id=cmd.session_id,
                auth_time=cmd.auth_time,
                occurred_at=now,
            )
            if isinstance(consented, Failure):
                return consented
            issued = issue_code(
                rehydrate(apply_authorization_event, consented.value, loaded.state),
                code_hash=code_hash,
                expires_at=now + self._code_ttl,
                occurred_at=now,
            )
            if isinstance(issued, Failure):
                return issued

            saved = await self._authorizations.save(
                request_id, loaded.version, [*consented.value, *issued.value]
            )
            if isinstance(saved, Failure):
                return saved
            return Success(
                value=IssuedCode(
                    code=code,
                    redirect_uri=loaded.state.redirect_uri,
                    state=loaded.state.state,
                )
            )

        try:
            result = await retry_on_conflict(operation, attempts=self._attempts)
        except BaseException:
            await self._index.release(IndexNamespace.AUTHORIZATION_CODE, code_hash)
            raise
        if isinstance(result, Failure):
            await self._index.release(IndexNamespace.AUTHORIZATION_CODE, code_hash)
        return result
