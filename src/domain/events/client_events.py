"""Client aggregate events.

Closed `ClientEvent` union for registered OAuth2/OIDC clients.
"""

from dataclasses import dataclass
from datetime import datetime

from src.domain.enums import GrantType
from src.domain.events.base_event import DomainEvent


@dataclass(frozen=True, kw_only=True, slots=True)
class ClientRegistered(DomainEvent):
    """A client was registered.

    Attributes:
        client_id: Public client identifier.
        name: Display name.
        redirect_uris: Exact-match redirect URI whitelist.
        grant_types: Grants the client may use.
        confidential: Whether the client can keep a secret.
        pkce_required: Whether authorization requests must carry a challenge.
        allowed_scopes: Upper bound for requested scopes.
        secret_hash: bcrypt hash of the client secret (confidential clients
            authenticating with a secret).
        public_key_pem: PEM public key for private_key_jwt authentication.
        access_token_ttl_seconds: Per-client override, None for the default.
        refresh_token_ttl_seconds: Per-client override, None for the default.
    """

    client_id: str
    name: str
    redirect_uris: frozenset[str]
    grant_types: frozenset[GrantType]
    confidential: bool
    pkce_required: bool
    allowed_scopes: frozenset[str]
    secret_hash: str | None = None
    public_key_pem: str | None = None
    access_token_ttl_seconds: int | None = None
    refresh_token_ttl_seconds: int | None = None


@dataclass(frozen=True, kw_only=True, slots=True)
class ClientSecretRotated(DomainEvent):
    """The client secret was replaced.

    Attributes:
        client_id: Client identifier.
        secret_hash: bcrypt hash of the new secret.
        previous_valid_until: Until when the old secret is still accepted;
            None means it stopped working at `occurred_at`.
    """

    client_id: str
    secret_hash: str
    previous_valid_until: datetime | None = None


@dataclass(frozen=True, kw_only=True, slots=True)
class ClientDeactivated(DomainEvent):
    """The client was deactivated (terminal)."""

    client_id: str
    reason: str


type ClientEvent = ClientRegistered | ClientSecretRotated | ClientDeactivated

CLIENT_EVENTS: tuple[type[DomainEvent], ...] = (
    ClientRegistered,
    ClientSecretRotated,
    ClientDeactivated,
)
