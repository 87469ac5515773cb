"""OAuth2 grant types supported by the token endpoint."""

from enum import Enum


class GrantType(str, Enum):
    """OAuth2 grant types (RFC 6749).

    String Enum:
        Values are the exact `grant_type` strings used on the wire.
    """

    AUTHORIZATION_CODE = "authorization_code"
    REFRESH_TOKEN = "refresh_token"
    CLIENT_CREDENTIALS = "client_credentials"

    @classmethod
    def values(cls) -> list[str]:
        """Get all grant type values as strings."""
        return [grant.value for grant in cls]
