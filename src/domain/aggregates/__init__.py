"""Event-sourced aggregates.

Each module holds a frozen state dataclass, an `apply_*_event` fold over the
aggregate's closed event union, and pure decision functions that return the
events to append.
"""

from src.domain.aggregates.authorization_request import (
    AuthorizationRequest,
    Redemption,
    apply_authorization_event,
)
from src.domain.aggregates.base import Fold, rehydrate
from src.domain.aggregates.client import Client, apply_client_event
from src.domain.aggregates.identity import Identity, LinkedIdentity, apply_identity_event
from src.domain.aggregates.session import Session, apply_session_event
from src.domain.aggregates.token import Token, apply_token_event

__all__ = [
    "AuthorizationRequest",
    "Client",
    "Fold",
    "Identity",
    "LinkedIdentity",
    "Redemption",
    "Session",
    "Token",
    "apply_authorization_event",
    "apply_client_event",
    "apply_identity_event",
    "apply_session_event",
    "apply_token_event",
    "rehydrate",
]
