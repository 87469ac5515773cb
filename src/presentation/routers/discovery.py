"""OpenID Connect discovery router.

Endpoints:
    GET /.well-known/openid_configuration   - Provider metadata
    GET /.well-known/openid-configuration   - Same document (OIDC standard path)
    GET /jwks                               - JSON Web Key Set

Both documents are public and change only on configuration or key rotation.
"""

from typing import Any

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from src.core.config import get_settings
from src.core.container import get_signer
from src.domain.enums import ClientAuthMethod, CodeChallengeMethod, GrantType
from src.domain.value_objects.scope import EMAIL_SCOPE, OPENID_SCOPE
from src.infrastructure.security.jwt_signer import JWTSigner
from src.schemas.oauth_schemas import DiscoveryDocument

discovery_router = APIRouter(tags=["Discovery"])

_CACHE_HEADERS = {"Cache-Control": "public, max-age=300"}


@discovery_router.get(
    "/.well-known/openid_configuration",
    response_model=DiscoveryDocument,
    summary="OpenID Provider metadata",
)
@discovery_router.get(
    "/.well-known/openid-configuration",
    response_model=DiscoveryDocument,
    include_in_schema=False,
)
async def openid_configuration(
    signer: JWTSigner = Depends(get_signer),
) -> DiscoveryDocument:
    """Discovery document; every endpoint is absolute under the issuer."""
    issuer = get_settings().issuer
    return DiscoveryDocument(
        issuer=issuer,
        authorization_endpoint=f"{issuer}/oauth2/authorize",
        token_endpoint=f"{issuer}/oauth2/token",
        introspection_endpoint=f"{issuer}/oauth2/introspect",
        revocation_endpoint=f"{issuer}/oauth2/revoke",
        jwks_uri=f"{issuer}/jwks",
        response_types_supported=["code"],
        grant_types_supported=[grant.value for grant in GrantType],
        subject_types_supported=["public"],
        id_token_signing_alg_values_supported=[signer.algorithm],
        scopes_supported=[OPENID_SCOPE, EMAIL_SCOPE],
        token_endpoint_auth_methods_supported=[method.value for method in ClientAuthMethod],
        code_challenge_methods_supported=[method.value for method in CodeChallengeMethod],
        claims_supported=["iss", "sub", "aud", "exp", "iat", "auth_time", "nonce", "at_hash", "sid", "email"],
    )


@discovery_router.get("/jwks", summary="JSON Web Key Set")
async def jwks(signer: JWTSigner = Depends(get_signer)) -> JSONResponse:
    """Public signing keys; the active key is listed first.

    Returns:
        JSONResponse: `{"keys": [...]}` with one RSA JWK per `kid`.
    """
    keys: dict[str, Any] = signer.jwks()
    return JSONResponse(content=keys, headers=_CACHE_HEADERS)
