"""Client authentication at the token, introspection and revocation endpoints.

Supported methods:
    - client_secret_basic / client_secret_post: bcrypt check against the
      current secret hash (and the previous one while its grace lasts)
    - private_key_jwt: RS256 assertion verified with the client's registered
      public key (`client_id` must be sent alongside the assertion)
    - none: public clients identify themselves by `client_id` only

Every failure is the same AuthenticationError (CLIENT_AUTHENTICATION_FAILED)
so callers cannot discover which client ids exist. An unknown client still pays
for one bcrypt verification when a secret was presented.
"""

from src.application.commands.client_commands import AuthenticateClient
from src.application.event_sourcing import AggregateRepository
from src.core.enums import ErrorCode
from src.core.errors import AuthenticationError
from src.core.result import Failure, Result, Success
from src.domain.aggregates import Client
from src.domain.protocols import (
    ClientAssertionVerifierProtocol,
    ClockProtocol,
    PasswordHashingProtocol,
)

JWT_BEARER_ASSERTION_TYPE = "urn:ietf:params:oauth:client-assertion-type:jwt-bearer"


def _failed() -> Failure[AuthenticationError]:
    return Failure(
        error=AuthenticationError(
            code=ErrorCode.CLIENT_AUTHENTICATION_FAILED,
            message="Client authentication failed",
        )
    )


class ClientAuthenticator:
    """Resolves presented client credentials to an active Client.

    Attributes:
        _clients: Client aggregate repository.
        _password_service: bcrypt verification of client secrets.
        _assertion_verifier: private_key_jwt verification.
        _clock: Injected clock (secret grace window).
    """

    def __init__(
        self,
        *,
        clients: AggregateRepository[Client],
        password_service: PasswordHashingProtocol,
        assertion_verifier: ClientAssertionVerifierProtocol,
        clock: ClockProtocol,
    ) -> None:
        self._clients = clients
        self._password_service = password_service
        self._assertion_verifier = assertion_verifier
        self._clock = clock

    async def authenticate(self, cmd: AuthenticateClient) -> Result[Client, AuthenticationError]:
        """Authenticate a client.

        Returns:
            Success(Client) or Failure(AuthenticationError).
        """
        if cmd.client_assertion is not None or cmd.client_assertion_type is not None:
            return await self._authenticate_assertion(cmd)
        if not cmd.client_id:
            return _failed()

        loaded = await self._clients.load(cmd.client_id)
        if cmd.client_secret is not None:
            return self._authenticate_secret(loaded.state if loaded else None, cmd.client_secret)

        if loaded is None or not loaded.state.active or loaded.state.confidential:
            return _failed()
        return Success(value=loaded.state)

    def _authenticate_secret(self, client: Client | None, secret: str) -> Result[Client, AuthenticationError]:
        if client is None or not client.active or not client.confidential:
            self._password_service.dummy_verify(secret)
            return _failed()

        hashes = client.acceptable_secret_hashes(self._clock.now())
        if not hashes:
            self._password_service.dummy_verify(secret)
            return _failed()

        matches = [self._password_service.verify_password(secret, secret_hash) for secret_hash in hashes]
        if not any(matches):
            return _failed()
        return Success(value=client)

    async def _authenticate_assertion(self, cmd: AuthenticateClient) -> Result[Client, AuthenticationError]:
        if (
            cmd.client_assertion_type != JWT_BEARER_ASSERTION_TYPE
            or not cmd.client_assertion
            or not cmd.client_id
            or cmd.client_secret is not None
        ):
            return _failed()

        loaded = await self._clients.load(cmd.client_id)
        if loaded is None or not loaded.state.active or not loaded.state.public_key_pem:
            return _failed()

        verified = await self._assertion_verifier.verify(
            cmd.client_assertion,
            client_id=loaded.state.id,
            public_key_pem=loaded.state.public_key_pem,
        )
        if isinstance(verified, Failure):
            return _failed()
        return Success(value=loaded.state)
