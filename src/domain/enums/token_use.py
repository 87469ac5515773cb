"""Token kinds issued by the token service."""

from enum import Enum


class TokenUse(str, Enum):
    """Kind of an issued token.

    Carried in the `token_use` claim so a refresh token can never be
    presented where an access token is expected (and vice versa).
    """

    ACCESS = "access"
    REFRESH = "refresh"
    ID = "id"
