"""Login/logout flows around the session controller."""

import logging

from medicore_admin.clients.medicore_api_client import MediCoreAPIClient, MediCoreAPIError
from medicore_admin.core.notifications import NoticeBoard
from medicore_admin.core.session import SessionController

from .base import WriteResult, WriteService

logger = logging.getLogger(__name__)


class AuthService(WriteService):
    """
    Runs the remote login exchange and hands the resulting principal to the
    session controller, which stays unaware of the login form's fields.
    """

    ADMIN_ROLE = "Admin"

    def __init__(self, api_client: MediCoreAPIClient, controller: SessionController, notices: NoticeBoard) -> None:
        super().__init__(notices)
        self._api = api_client
        self._controller = controller

    async def sign_in(self, email: str, password: str) -> WriteResult:
        try:
            result = await self._api.login(email, password, role=self.ADMIN_ROLE)
        except MediCoreAPIError as e:
            logger.info(f"Login rejected for {email}: {e.error_code}")
            return self._failed(e, "Login failed")

        outcome = self._succeeded(result.message, "Logged in")
        self._controller.login(result.principal)
        return outcome

    async def sign_out(self) -> WriteResult:
        # logout() never raises; remote failures are only logged
        await self._controller.logout()
        return self._succeeded("Logged out successfully!", "Logged out successfully!")
