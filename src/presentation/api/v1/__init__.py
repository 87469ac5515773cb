"""API v1 routers.

RESTful resource-based endpoints following strict REST compliance.
All endpoints use resource nouns, not action verbs. Every route is
authenticated with a Bearer access token except user registration.

Resources:
    /api/v1/users      - Registration, profile, password, linked identities
    /api/v1/sessions   - Device sessions (list, revoke)

Admin Resources:
    /api/v1/users/{id}/roles/{role}   - Role assignment
    /api/v1/users/{id}                - User deactivation
    /api/v1/clients                   - OAuth client registration
"""

from fastapi import APIRouter

from src.presentation.api.v1.clients import router as clients_router
from src.presentation.api.v1.sessions import router as sessions_router
from src.presentation.api.v1.users import router as users_router

# Create combined v1 router
v1_router = APIRouter(prefix="/api/v1")

# Include all resource routers
v1_router.include_router(users_router)
v1_router.include_router(sessions_router)
v1_router.include_router(clients_router)

# Export individual routers for testing
__all__ = [
    "v1_router",
    "users_router",
    "sessions_router",
    "clients_router",
]
