"""Data Transfer Objects (DTOs) for application layer.

DTOs are response/result dataclasses returned by command handlers and
services. They transfer data from the application layer to the presentation
layer.

Usage:
    from src.application.dtos import AuthenticatedUser, IssuedTokens

Note:
    DTOs are NOT the same as:
    - Domain events (facts stored in the event log)
    - API schemas (Pydantic models in the schemas package)
"""

from src.application.dtos.auth_dtos import (
    AuthenticatedUser,
    AuthorizationStarted,
    IssuedCode,
    IssuedTokens,
    RegisteredClient,
    SessionLogin,
    UserLogin,
)

__all__ = [
    "AuthenticatedUser",
    "AuthorizationStarted",
    "IssuedCode",
    "IssuedTokens",
    "RegisteredClient",
    "SessionLogin",
    "UserLogin",
]
