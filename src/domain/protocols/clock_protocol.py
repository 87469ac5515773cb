"""Clock protocol (port).

Injected wherever time matters (expiry, events) so tests are deterministic.
"""

from datetime import datetime
from typing import Protocol


class ClockProtocol(Protocol):
    """Source of the current time."""

    def now(self) -> datetime:
        """Current time, timezone-aware UTC."""
        ...
