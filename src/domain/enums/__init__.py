"""Domain enums for business logic.

This package contains enumerations used throughout the domain layer.
Enums are centralized here for discoverability.

Available Enums:
    - AggregateType: Event stream kinds
    - AuditAction: Audit trail action types
    - AuthorizationStatus: Authorization-code grant lifecycle states
    - ClientAuthMethod: Client authentication methods
    - CodeChallengeMethod: PKCE challenge methods (S256, plain)
    - GrantType: OAuth2 grant types
    - TokenFailureReason: Typed token verification failures
    - TokenUse: Access, refresh and ID tokens
    - UserRole: Roles the service checks (admin, user)
"""

from src.domain.enums.aggregate_type import AggregateType
from src.domain.enums.audit_action import AuditAction
from src.domain.enums.authorization_status import AuthorizationStatus
from src.domain.enums.client_auth_method import ClientAuthMethod
from src.domain.enums.code_challenge_method import CodeChallengeMethod
from src.domain.enums.grant_type import GrantType
from src.domain.enums.token_failure_reason import TokenFailureReason
from src.domain.enums.token_use import TokenUse
from src.domain.enums.user_role import UserRole

__all__ = [
    "AggregateType",
    "AuditAction",
    "AuthorizationStatus",
    "ClientAuthMethod",
    "CodeChallengeMethod",
    "GrantType",
    "TokenFailureReason",
    "TokenUse",
    "UserRole",
]
