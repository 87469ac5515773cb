"""Client aggregate (OAuth2/OIDC client registration).

Business Rules:
    - Redirect URIs are an exact-match whitelist, validated at registration
    - Public clients must require PKCE and cannot use client_credentials
    - A rotated secret stops working immediately unless a grace period is
      configured
    - Deactivation is terminal; tokens issued to a deactivated client stop
      verifying (checked against this state at verify time)
"""

from dataclasses import dataclass, replace
from datetime import datetime, timedelta

from src.core.enums import ErrorCode
from src.core.errors import AuthenticationError, DomainError, ValidationError
from src.core.result import Failure, Result, Success
from src.domain.aggregates.base import require_new, require_state, unknown_event
from src.domain.enums import AggregateType, ClientAuthMethod, GrantType
from src.domain.events.base_event import DomainEvent
from src.domain.events.client_events import (
    ClientDeactivated,
    ClientEvent,
    ClientRegistered,
    ClientSecretRotated,
)
from src.domain.validators import validate_redirect_uri, validate_scope_token

AGGREGATE_TYPE = AggregateType.CLIENT


@dataclass(frozen=True, slots=True, kw_only=True)
class Client:
    """Projected client state."""

    id: str
    name: str
    redirect_uris: frozenset[str]
    grant_types: frozenset[GrantType]
    confidential: bool
    pkce_required: bool
    allowed_scopes: frozenset[str]
    active: bool
    created_at: datetime
    secret_hash: str | None = None
    previous_secret_hash: str | None = None
    previous_secret_valid_until: datetime | None = None
    public_key_pem: str | None = None
    access_token_ttl_seconds: int | None = None
    refresh_token_ttl_seconds: int | None = None

    @property
    def auth_method(self) -> ClientAuthMethod:
        """Registered token endpoint authentication method."""
        if not self.confidential:
            return ClientAuthMethod.NONE
        if self.public_key_pem and not self.secret_hash:
            return ClientAuthMethod.PRIVATE_KEY_JWT
        return ClientAuthMethod.CLIENT_SECRET_BASIC

    def supports_grant(self, grant_type: GrantType) -> bool:
        return grant_type in self.grant_types

    def acceptable_secret_hashes(self, now: datetime) -> list[str]:
        """Secret hashes accepted at `now` (current, plus the previous one in grace)."""
        hashes = [self.secret_hash] if self.secret_hash else []
        if (
            self.previous_secret_hash
            and self.previous_secret_valid_until
            and now < self.previous_secret_valid_until
        ):
            hashes.append(self.previous_secret_hash)
        return hashes


def apply_client_event(state: Client | None, event: DomainEvent) -> Client:
    """Apply one event to the projected state (pure)."""
    match event:
        case ClientRegistered():
            require_new(state, event, AGGREGATE_TYPE)
            return Client(
                id=event.client_id,
                name=event.name,
                redirect_uris=event.redirect_uris,
                grant_types=event.grant_types,
                confidential=event.confidential,
                pkce_required=event.pkce_required,
                allowed_scopes=event.allowed_scopes,
                active=True,
                created_at=event.occurred_at,
                secret_hash=event.secret_hash,
                public_key_pem=event.public_key_pem,
                access_token_ttl_seconds=event.access_token_ttl_seconds,
                refresh_token_ttl_seconds=event.refresh_token_ttl_seconds,
            )
        case ClientSecretRotated():
            current = require_state(state, event, AGGREGATE_TYPE)
            return replace(
                current,
                secret_hash=event.secret_hash,
                previous_secret_hash=current.secret_hash,
                previous_secret_valid_until=event.previous_valid_until,
            )
        case ClientDeactivated():
            current = require_state(state, event, AGGREGATE_TYPE)
            return replace(current, active=False)
        case _:
            raise unknown_event(event, AGGREGATE_TYPE)


def _invalid(code: ErrorCode, message: str, field: str) -> Failure[ValidationError]:
    return Failure(error=ValidationError(code=code, message=message, field=field))


def validate_registration(
    *,
    name: str,
    redirect_uris: frozenset[str],
    grant_types: frozenset[GrantType],
    confidential: bool,
    pkce_required: bool,
    allowed_scopes: frozenset[str],
    public_key_pem: str | None,
    access_token_ttl_seconds: int | None,
    refresh_token_ttl_seconds: int | None,
) -> Result[None, ValidationError]:
    """Check every registration rule before anything is appended."""
    if not name.strip():
        return _invalid(ErrorCode.VALIDATION_FAILED, "Client name is required", "name")
    if not grant_types:
        return _invalid(
            ErrorCode.INVALID_GRANT_TYPES, "At least one grant type is required", "grant_types"
        )
    if GrantType.AUTHORIZATION_CODE in grant_types and not redirect_uris:
        return _invalid(
            ErrorCode.INVALID_REDIRECT_URI,
            "authorization_code clients need at least one redirect URI",
            "redirect_uris",
        )
    if GrantType.REFRESH_TOKEN in grant_types and GrantType.AUTHORIZATION_CODE not in grant_types:
        return _invalid(
            ErrorCode.INVALID_GRANT_TYPES,
            "refresh_token requires authorization_code",
            "grant_types",
        )
    for uri in redirect_uris:
        try:
            validate_redirect_uri(uri)
        except ValueError as e:
            return _invalid(ErrorCode.INVALID_REDIRECT_URI, str(e), "redirect_uris")
    for scope in allowed_scopes:
        try:
            validate_scope_token(scope)
        except ValueError as e:
            return _invalid(ErrorCode.INVALID_SCOPE, str(e), "allowed_scopes")
    if not confidential:
        if GrantType.CLIENT_CREDENTIALS in grant_types:
            return _invalid(
                ErrorCode.INVALID_GRANT_TYPES,
                "client_credentials is only available to confidential clients",
                "grant_types",
            )
        if not pkce_required:
            return _invalid(
                ErrorCode.PKCE_REQUIRED, "Public clients must require PKCE", "pkce_required"
            )
        if public_key_pem:
            return _invalid(
                ErrorCode.VALIDATION_FAILED,
                "Public clients cannot register a public key",
                "public_key_pem",
            )
    for field, ttl in (
        ("access_token_ttl_seconds", access_token_ttl_seconds),
        ("refresh_token_ttl_seconds", refresh_token_ttl_seconds),
    ):
        if ttl is not None and ttl <= 0:
            return _invalid(ErrorCode.VALIDATION_FAILED, "Token lifetime must be positive", field)
    return Success(value=None)


def register_client(
    *,
    client_id: str,
    name: str,
    redirect_uris: frozenset[str],
    grant_types: frozenset[GrantType],
    confidential: bool,
    pkce_required: bool,
    allowed_scopes: frozenset[str],
    occurred_at: datetime,
    secret_hash: str | None = None,
    public_key_pem: str | None = None,
    access_token_ttl_seconds: int | None = None,
    refresh_token_ttl_seconds: int | None = None,
) -> Result[list[ClientEvent], ValidationError]:
    """Validate and build the ClientRegistered event."""
    validation = validate_registration(
        name=name,
        redirect_uris=redirect_uris,
        grant_types=grant_types,
        confidential=confidential,
        pkce_required=pkce_required,
        allowed_scopes=allowed_scopes,
        public_key_pem=public_key_pem,
        access_token_ttl_seconds=access_token_ttl_seconds,
        refresh_token_ttl_seconds=refresh_token_ttl_seconds,
    )
    if isinstance(validation, Failure):
        return validation

    if confidential and not (secret_hash or public_key_pem):
        return _invalid(
            ErrorCode.VALIDATION_FAILED,
            "Confidential clients need a secret or a public key",
            "confidential",
        )

    return Success(
        value=[
            ClientRegistered(
                client_id=client_id,
                name=name.strip(),
                redirect_uris=redirect_uris,
                grant_types=grant_types,
                confidential=confidential,
                pkce_required=pkce_required,
                allowed_scopes=allowed_scopes,
                secret_hash=secret_hash if confidential else None,
                public_key_pem=public_key_pem,
                access_token_ttl_seconds=access_token_ttl_seconds,
                refresh_token_ttl_seconds=refresh_token_ttl_seconds,
                occurred_at=occurred_at,
            )
        ]
    )


def rotate_secret(
    state: Client,
    *,
    secret_hash: str,
    grace_seconds: int,
    occurred_at: datetime,
) -> Result[list[ClientEvent], DomainError]:
    """Replace the client secret.

    With `grace_seconds == 0` the previous secret is invalid from
    `occurred_at` on.
    """
    if not state.active:
        return Failure(
            error=AuthenticationError(
                code=ErrorCode.CLIENT_INACTIVE, message="Client is deactivated"
            )
        )
    if not state.confidential:
        return _invalid(
            ErrorCode.UNAUTHORIZED_CLIENT, "Public clients have no secret", "client_id"
        )
    previous_valid_until = (
        occurred_at + timedelta(seconds=grace_seconds) if grace_seconds > 0 else None
    )
    return Success(
        value=[
            ClientSecretRotated(
                client_id=state.id,
                secret_hash=secret_hash,
                previous_valid_until=previous_valid_until,
                occurred_at=occurred_at,
            )
        ]
    )


def deactivate_client(state: Client, *, reason: str, occurred_at: datetime) -> list[ClientEvent]:
    """Deactivate (no event when already inactive)."""
    if not state.active:
        return []
    return [ClientDeactivated(client_id=state.id, reason=reason, occurred_at=occurred_at)]
