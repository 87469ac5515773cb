"""Login user handler.

Orchestrates credential check and device session:

Flow:
1. AuthenticateUserHandler verifies credentials (records the outcome)
2. SessionManager opens a session for the device fingerprint, or refreshes
   the existing one (new handle, updated last_seen_at)
3. Return Success(UserLogin) with the plain session handle for the cookie
"""

from src.application.commands.handlers.authenticate_user_handler import (
    AuthenticateUserHandler,
)
from src.application.commands.identity_commands import AuthenticateUser
from src.application.commands.session_commands import LoginUser
from src.application.dtos import UserLogin
from src.application.services.session_manager import DeviceLogin, SessionManager
from src.core.errors import DomainError
from src.core.result import Failure, Result, Success


class LoginUserHandler:
    """Handler for browser login (credential check + device session)."""

    def __init__(
        self,
        authenticate_handler: AuthenticateUserHandler,
        session_manager: SessionManager,
    ) -> None:
        self._authenticate = authenticate_handler
        self._session_manager = session_manager

    async def handle(self, cmd: LoginUser) -> Result[UserLogin, DomainError]:
        authenticated = await self._authenticate.handle(
            AuthenticateUser(
                email=cmd.email,
                password=cmd.password,
                ip_address=cmd.ip_address,
                user_agent=cmd.user_agent,
            )
        )
        if isinstance(authenticated, Failure):
            return authenticated

        session = await self._session_manager.login(
            authenticated.value.user_id,
            DeviceLogin(
                device_fingerprint=cmd.device_fingerprint,
                device_info=cmd.device_info,
                ip_address=cmd.ip_address,
            ),
        )
        if isinstance(session, Failure):
            return session
        return Success(value=UserLogin(user=authenticated.value, session=session.value))
