"""Commands - Write operations that change state.

Commands represent user or client intent to perform an action. They are
immutable dataclasses with imperative names (RegisterUser, RotateClientSecret).

Each command has a corresponding handler (or service method) that loads the
affected aggregate, decides, and appends the resulting events.
"""

from src.application.commands.authorization_commands import (
    ApproveAuthorization,
    StartAuthorization,
)
from src.application.commands.client_commands import (
    AuthenticateClient,
    DeactivateClient,
    RegisterClient,
    RotateClientSecret,
)
from src.application.commands.identity_commands import (
    AssignRole,
    AuthenticateUser,
    ChangePassword,
    DeactivateUser,
    LinkIdentity,
    RegisterUser,
    RevokeRole,
)
from src.application.commands.session_commands import (
    LoginUser,
    RevokeAllSessions,
    RevokeSession,
)
from src.application.commands.token_commands import (
    ExchangeAuthorizationCode,
    IssueClientCredentials,
    RefreshTokens,
)

__all__ = [
    # Identity commands
    "AssignRole",
    "AuthenticateUser",
    "ChangePassword",
    "DeactivateUser",
    "LinkIdentity",
    "RegisterUser",
    "RevokeRole",
    # Client commands
    "AuthenticateClient",
    "DeactivateClient",
    "RegisterClient",
    "RotateClientSecret",
    # Authorization commands
    "ApproveAuthorization",
    "StartAuthorization",
    # Token commands
    "ExchangeAuthorizationCode",
    "IssueClientCredentials",
    "RefreshTokens",
    # Session commands
    "LoginUser",
    "RevokeAllSessions",
    "RevokeSession",
]
