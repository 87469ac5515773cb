"""Client authentication methods at the token endpoint."""

from enum import Enum


class ClientAuthMethod(str, Enum):
    """How a client proves its identity (OIDC Core section 9)."""

    CLIENT_SECRET_BASIC = "client_secret_basic"
    CLIENT_SECRET_POST = "client_secret_post"
    PRIVATE_KEY_JWT = "private_key_jwt"
    NONE = "none"
