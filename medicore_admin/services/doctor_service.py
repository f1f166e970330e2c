"""Doctor and admin registration flows."""

import logging
from collections.abc import Mapping
from typing import Any

from medicore_admin.clients.medicore_api_client import MediCoreAPIClient, MediCoreAPIError
from medicore_admin.core.domain.events import EntityKind
from medicore_admin.core.events import InvalidationBus
from medicore_admin.core.notifications import NoticeBoard

from .base import WriteResult, WriteService

logger = logging.getLogger(__name__)

DEPARTMENTS = (
    "Pediatrics",
    "Orthopedics",
    "Cardiology",
    "Neurology",
    "Oncology",
    "Radiology",
    "Physical Therapy",
    "Dermatology",
    "ENT",
)


class DoctorService(WriteService):
    def __init__(self, api_client: MediCoreAPIClient, bus: InvalidationBus, notices: NoticeBoard) -> None:
        super().__init__(notices)
        self._api = api_client
        self._bus = bus

    async def add_doctor(
        self,
        form: Mapping[str, Any],
        avatar: tuple[str, bytes, str] | None = None,
    ) -> WriteResult:
        """
        Register a doctor and invalidate every doctors view on success.

        Args:
            form: Doctor fields (firstName, lastName, email, phone, nic, dob,
                gender, password, doctorDepartment)
            avatar: Optional (filename, content, content_type)
        """
        try:
            message = await self._api.add_doctor(form, avatar=avatar)
        except MediCoreAPIError as e:
            logger.warning(f"Add doctor failed: {e}")
            return self._failed(e)

        result = self._succeeded(message, "Doctor added")
        self._bus.publish(EntityKind.DOCTORS)
        return result


class AdminService(WriteService):
    """Admins are not cached, so registering one invalidates nothing."""

    def __init__(self, api_client: MediCoreAPIClient, notices: NoticeBoard) -> None:
        super().__init__(notices)
        self._api = api_client

    async def add_admin(self, form: Mapping[str, Any]) -> WriteResult:
        try:
            message = await self._api.add_admin(form)
        except MediCoreAPIError as e:
            logger.warning(f"Add admin failed: {e}")
            return self._failed(e)
        return self._succeeded(message, "Admin added")
