"""Secret generator protocol (port).

Opaque, high-entropy values the service hands out: authorization codes,
browser session handles, client ids and client secrets. Codes and handles
are stored and looked up by digest only.
"""

from typing import Protocol


class SecretGeneratorProtocol(Protocol):
    """Generates opaque secrets and their lookup digests."""

    def generate_code(self) -> tuple[str, str]:
        """Authorization code and its digest."""
        ...

    def generate_session_handle(self) -> tuple[str, str]:
        """Browser session handle (cookie value) and its digest."""
        ...

    def generate_client_id(self) -> str: ...

    def generate_client_secret(self) -> str: ...

    def digest(self, value: str) -> str:
        """Lookup digest of a presented code or handle."""
        ...
