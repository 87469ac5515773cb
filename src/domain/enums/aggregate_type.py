"""Event stream kinds."""

from enum import Enum


class AggregateType(str, Enum):
    """Aggregate type recorded on every stored event.

    Identity, client and session streams live forever. Authorization and
    token streams may be purged once past expiry plus the retention window.
    """

    IDENTITY = "identity"
    CLIENT = "client"
    AUTHORIZATION = "authorization"
    TOKEN = "token"
    SESSION = "session"

    @property
    def is_purgeable(self) -> bool:
        """Whether the retention sweeper may purge streams of this type."""
        return self in (AggregateType.AUTHORIZATION, AggregateType.TOKEN)
