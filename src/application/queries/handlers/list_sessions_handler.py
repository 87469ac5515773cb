"""List sessions query handler.

Retrieves the live sessions of a user (revoked sessions are not listed).
"""

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from src.application.queries.session_queries import ListUserSessions
from src.application.services.session_manager import SessionManager
from src.core.errors import DomainError
from src.core.result import Result, Success


@dataclass
class SessionListItem:
    """Individual session in list result."""

    id: UUID
    device_info: str | None
    ip_address: str | None
    created_at: datetime
    last_seen_at: datetime
    active_token_count: int
    is_current: bool


@dataclass
class SessionListResult:
    """Session list query result."""

    sessions: list[SessionListItem]
    total_count: int


class ListSessionsHandler:
    """Handler for listing user sessions.

    Folds every session stream in the user's session index (no projection).
    """

    def __init__(self, session_manager: SessionManager) -> None:
        self._session_manager = session_manager

    async def handle(self, query: ListUserSessions) -> Result[SessionListResult, DomainError]:
        """Handle list sessions query.

        Args:
            query: ListUserSessions query with user_id and current session.

        Returns:
            Success(SessionListResult), most recently seen first.
        """
        sessions = await self._session_manager.list_sessions(query.user_id)

        items = [
            SessionListItem(
                id=session.id,
                device_info=session.device_info,
                ip_address=session.ip_address,
                created_at=session.created_at,
                last_seen_at=session.last_seen_at,
                active_token_count=len(session.active_token_jtis),
                is_current=session.id == query.current_session_id,
            )
            for session in sessions
        ]

        return Success(value=SessionListResult(sessions=items, total_count=len(items)))
