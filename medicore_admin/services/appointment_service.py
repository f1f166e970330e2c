"""Appointment status updates with an optimistic local patch."""

import logging

from medicore_admin.clients.medicore_api_client import MediCoreAPIClient, MediCoreAPIError
from medicore_admin.core.cache import EntityCacheStore
from medicore_admin.core.notifications import NoticeBoard
from medicore_admin.models import Appointment, AppointmentStatus

from .base import WriteResult, WriteService

logger = logging.getLogger(__name__)


class AppointmentService(WriteService):
    def __init__(
        self,
        api_client: MediCoreAPIClient,
        appointments: EntityCacheStore[Appointment],
        notices: NoticeBoard,
    ) -> None:
        super().__init__(notices)
        self._api = api_client
        self._appointments = appointments

    async def update_status(self, appointment_id: str, status: AppointmentStatus | str) -> WriteResult:
        """
        Change an appointment's status.

        On success the cached appointment is patched in place so the table
        shows the new status before the next full refresh.
        """
        new_status = AppointmentStatus(status)
        try:
            message = await self._api.update_appointment_status(appointment_id, new_status)
        except MediCoreAPIError as e:
            logger.warning(f"Status update for appointment {appointment_id} failed: {e}")
            return self._failed(e, "Failed to update status")

        patched = self._appointments.apply_local_patch(
            lambda appointment: appointment.id == appointment_id,
            lambda appointment: appointment.model_copy(update={"status": new_status}),
        )
        if not patched:
            logger.debug(f"Appointment {appointment_id} not in cache; nothing patched")
        return self._succeeded(message, "Status updated")
