"""Queries - Read operations that fetch data.

Queries represent a request for information. They are immutable dataclasses
with question-like names (GetUser, ListUserSessions).

Each query has a corresponding handler that folds the relevant aggregate
stream and returns the requested data. Queries NEVER change state.
"""

from src.application.queries.authorization_queries import GetAuthorizationRequest
from src.application.queries.identity_queries import GetUser
from src.application.queries.session_queries import ListUserSessions

__all__ = [
    "GetAuthorizationRequest",
    "GetUser",
    "ListUserSessions",
]
