"""Authorization request lifecycle states."""

from enum import Enum


class AuthorizationStatus(str, Enum):
    """State of an authorization-code grant.

    Lifecycle:
        CREATED -> CONSENTED -> CODE_ISSUED -> {REDEEMED | EXPIRED | REVOKED}

    REDEEMED, EXPIRED and REVOKED are terminal. A REDEEMED request can still
    be marked REVOKED when its code is replayed, so the tokens issued from it
    are withdrawn.
    """

    CREATED = "created"
    CONSENTED = "consented"
    CODE_ISSUED = "code_issued"
    REDEEMED = "redeemed"
    EXPIRED = "expired"
    REVOKED = "revoked"

    @property
    def is_terminal(self) -> bool:
        """Whether no further forward transition is possible."""
        return self in (
            AuthorizationStatus.REDEEMED,
            AuthorizationStatus.EXPIRED,
            AuthorizationStatus.REVOKED,
        )
