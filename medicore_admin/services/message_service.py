"""Message actions."""

import logging

from medicore_admin.clients.medicore_api_client import MediCoreAPIClient, MediCoreAPIError
from medicore_admin.core.domain.events import EntityKind
from medicore_admin.core.domain.exceptions import InvalidOperationException
from medicore_admin.core.events import InvalidationBus
from medicore_admin.core.notifications import NoticeBoard

from .base import WriteResult, WriteService

logger = logging.getLogger(__name__)

DEMO_DELETE_DISABLED = "Delete is disabled in demo mode. Messages cannot be deleted."


class MessageService(WriteService):
    def __init__(
        self,
        api_client: MediCoreAPIClient,
        bus: InvalidationBus,
        notices: NoticeBoard,
        demo_mode: bool = True,
    ) -> None:
        super().__init__(notices)
        self._api = api_client
        self._bus = bus
        self.demo_mode = demo_mode

    async def delete_message(self, message_id: str) -> WriteResult:
        if self.demo_mode:
            error = InvalidOperationException("delete_message", "demo", DEMO_DELETE_DISABLED)
            self._notices.info(error.message)
            return WriteResult.failure(error.message, error.code)

        try:
            message = await self._api.delete_message(message_id)
        except MediCoreAPIError as e:
            logger.warning(f"Delete of message {message_id} failed: {e}")
            return self._failed(e, "Failed to delete message")

        result = self._succeeded(message, "Message deleted successfully!")
        self._bus.publish(EntityKind.MESSAGES)
        return result
