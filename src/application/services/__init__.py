"""Application services shared by several command handlers and routers."""

from src.application.services.client_authenticator import (
    JWT_BEARER_ASSERTION_TYPE,
    ClientAuthenticator,
)
from src.application.services.retention_sweeper import RetentionSweeper, SweepReport
from src.application.services.session_manager import DeviceLogin, SessionManager
from src.application.services.token_revoker import TokenRevoker
from src.application.services.token_service import (
    PendingGrant,
    PlannedJtis,
    TokenPolicy,
    TokenService,
    compute_at_hash,
)

__all__ = [
    "JWT_BEARER_ASSERTION_TYPE",
    "ClientAuthenticator",
    "DeviceLogin",
    "PendingGrant",
    "PlannedJtis",
    "RetentionSweeper",
    "SessionManager",
    "SweepReport",
    "TokenPolicy",
    "TokenRevoker",
    "TokenService",
    "compute_at_hash",
]
