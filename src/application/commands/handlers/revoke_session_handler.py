"""Revoke session handler.

Flow:
1. Load the session and verify ownership (another user's session is
   reported as not found)
2. Append SessionRevoked (the session's tokens stop verifying now)
3. Revoke every token attached to the session
4. Release the browser handle
"""

from src.application.commands.session_commands import RevokeSession
from src.application.services.session_manager import SessionManager
from src.core.errors import DomainError
from src.core.result import Result


class RevokeSessionHandler:
    """Handler for session revocation command.

    Handles single session revocation (logout, manual revoke).
    """

    def __init__(self, session_manager: SessionManager) -> None:
        self._session_manager = session_manager

    async def handle(self, cmd: RevokeSession) -> Result[None, DomainError]:
        return await self._session_manager.revoke(
            cmd.session_id,
            user_id=cmd.user_id,
            reason=cmd.reason,
        )
