"""External-facing routers (non-versioned endpoints).

Routes that are external-facing but not part of the versioned API contract:
the OAuth2 protocol endpoints, OpenID discovery, and system endpoints.

Protocol paths are dictated by the OAuth2 and OpenID Connect standards,
not by our API versioning strategy.
"""

from src.presentation.routers.discovery import discovery_router
from src.presentation.routers.oauth2 import oauth2_router
from src.presentation.routers.system import system_router

__all__ = ["discovery_router", "oauth2_router", "system_router"]
