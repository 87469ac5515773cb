"""Revoke all sessions handler ("log out from all devices").

Leaves zero live sessions for the user (except `except_session_id`, when
given) and zero verifiable tokens bound to the revoked sessions.
"""

from src.application.commands.session_commands import RevokeAllSessions
from src.application.services.session_manager import SessionManager
from src.core.errors import DomainError
from src.core.result import Result


class RevokeAllSessionsHandler:
    """Handler for revoking every session of a user."""

    def __init__(self, session_manager: SessionManager) -> None:
        self._session_manager = session_manager

    async def handle(self, cmd: RevokeAllSessions) -> Result[int, DomainError]:
        """Returns Success(number of sessions revoked)."""
        return await self._session_manager.revoke_all(
            cmd.user_id,
            reason=cmd.reason,
            except_session_id=cmd.except_session_id,
        )
