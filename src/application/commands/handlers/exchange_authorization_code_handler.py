"""Exchange authorization code handler (`grant_type=authorization_code`).

Flow:
1. Resolve the code by its SHA-256 digest (unknown -> NotFoundError)
2. Reserve the token ids (access, refresh when the client may refresh, ID
   when `openid` was granted)
3. Decide the redemption (status, expiry, client, redirect URI, PKCE)
4. On success open the token streams, then append AuthorizationCodeRedeemed
   (a lost append discards the opened streams); failures revoke or expire
   the request instead
5. A replayed code revokes every token of the first redemption and publishes
   AuthorizationCodeReplayDetected
6. Attach and sign the tokens of the committed redemption
"""

from src.application.commands.handlers.approve_authorization_handler import (
    authorization_request_not_found,
)
from src.application.commands.token_commands import ExchangeAuthorizationCode
from src.application.dtos import IssuedTokens
from src.application.event_sourcing import AggregateRepository, retry_on_conflict
from src.application.services.token_service import PendingGrant, TokenService
from src.core.errors import DomainError
from src.core.result import Failure, Result, Success
from src.domain.aggregates import AuthorizationRequest
from src.domain.aggregates.authorization_request import redeem, revoke
from src.domain.enums import GrantType
from src.domain.events import AuthorizationCodeReplayDetected
from src.domain.protocols import (
    ClockProtocol,
    EventBusProtocol,
    IndexNamespace,
    IndexStoreProtocol,
    LoggerProtocol,
    SecretGeneratorProtocol,
)
from src.domain.value_objects.scope import OPENID_SCOPE

CODE_REPLAY_REASON = "code_replayed"
GRANT_REFUSED_REASON = "grant_refused"


class ExchangeAuthorizationCodeHandler:
    """Handler for the authorization code grant."""

    def __init__(
        self,
        authorizations: AggregateRepository[AuthorizationRequest],
        index: IndexStoreProtocol,
        secrets: SecretGeneratorProtocol,
        token_service: TokenService,
        event_bus: EventBusProtocol,
        clock: ClockProtocol,
        logger: LoggerProtocol,
        retry_attempts: int = 3,
    ) -> None:
        self._authorizations = authorizations
        self._index = index
        self._secrets = secrets
        self._token_service = token_service
        self._event_bus = event_bus
        self._clock = clock
        self._logger = logger
        self._attempts = retry_attempts

    async def handle(self, cmd: ExchangeAuthorizationCode) -> Result[IssuedTokens, DomainError]:
        code_hash = self._secrets.digest(cmd.code)
        request_id = await self._index.get(IndexNamespace.AUTHORIZATION_CODE, code_hash)
        if request_id is None:
            return Failure(error=authorization_request_not_found("code"))

        async def operation() -> Result[
            tuple[AuthorizationRequest, bool, Result[PendingGrant, DomainError]], DomainError
        ]:
            loaded = await self._authorizations.load(request_id)
            if loaded is None or loaded.state.code_hash != code_hash:
                return Failure(error=authorization_request_not_found(request_id))

            state = loaded.state
            now = self._clock.now()
            jtis = self._token_service.plan_jtis(
                refresh=cmd.client.supports_grant(GrantType.REFRESH_TOKEN),
                id_token=OPENID_SCOPE in state.granted_scopes,
            )
            redemption = redeem(
                state,
                client_id=cmd.client.id,
                redirect_uri=cmd.redirect_uri,
                code_verifier=cmd.code_verifier,
                issued_jtis=jtis.all,
                now=now,
            )

            events = redemption.events
            outcome: Result[PendingGrant, DomainError]
            if redemption.error is not None:
                outcome = Failure(error=redemption.error)
            else:
                outcome = await self._token_service.open_authorization_grant(cmd.client, state, jtis)
                if isinstance(outcome, Failure):
                    events = revoke(state, reason=GRANT_REFUSED_REASON, occurred_at=now)

            saved = await self._authorizations.save(request_id, loaded.version, events)
            if isinstance(saved, Failure):
                if isinstance(outcome, Success):
                    await self._token_service.discard(outcome.value)
                return saved
            return Success(value=(state, redemption.replayed, outcome))

        result = await retry_on_conflict(operation, attempts=self._attempts)
        if isinstance(result, Failure):
            return result
        state, replayed, outcome = result.value

        if replayed:
            await self._revoke_first_redemption(state, cmd)
        if isinstance(outcome, Failure):
            return outcome
        return await self._token_service.complete(outcome.value)

    async def _revoke_first_redemption(
        self, state: AuthorizationRequest, cmd: ExchangeAuthorizationCode
    ) -> None:
        revoked = await self._token_service.revoke_jtis(state.issued_jtis, reason=CODE_REPLAY_REASON)
        if isinstance(revoked, Failure):
            self._logger.warning(
                "code_replay_revocation_incomplete",
                request_id=str(state.id),
                error_code=revoked.error.code.value,
            )
        await self._event_bus.publish(
            AuthorizationCodeReplayDetected(
                request_id=state.id,
                client_id=cmd.client.id,
                revoked_jtis=state.issued_jtis,
                occurred_at=self._clock.now(),
            )
        )
