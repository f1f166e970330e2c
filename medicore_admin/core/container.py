"""
Console Container

Builds and owns the process-wide singletons of the console core (API client,
session controller, invalidation bus, one cache store per entity kind,
routing and write services) and runs their startup/shutdown.

Tests construct their own container (or the pieces directly) instead of
sharing hidden module globals.
"""

import logging

from medicore_admin.clients.medicore_api_client import MediCoreAPIClient
from medicore_admin.config.settings import Settings, get_settings
from medicore_admin.core.cache import (
    EntityCacheStore,
    FileSnapshotStore,
    MemorySnapshotStore,
    RedisSnapshotStore,
    SnapshotStore,
)
from medicore_admin.core.domain.events import EntityKind
from medicore_admin.core.domain.exceptions import ConfigurationException
from medicore_admin.core.events import InvalidationBus
from medicore_admin.core.notifications import NoticeBoard
from medicore_admin.core.routing import ConsoleRouter, RouteGuard
from medicore_admin.core.session import Session, SessionController
from medicore_admin.core.shared.logger import configure_logging, session_context
from medicore_admin.models import Appointment, Doctor, Message
from medicore_admin.services import (
    AdminService,
    AppointmentService,
    AuthService,
    DoctorService,
    MessageService,
)

logger = logging.getLogger(__name__)


class ConsoleContainer:
    """
    Dependency container and lifecycle for the console core.

    Example:
        ```python
        async with ConsoleContainer() as console:
            resolution = console.router.resolve("/doctors")
            if resolution and resolution.decision.allowed:
                await console.doctors.ensure_fresh()
        ```
    """

    def __init__(
        self,
        settings: Settings | None = None,
        api_client: MediCoreAPIClient | None = None,
        snapshot_store: SnapshotStore | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.api = api_client or MediCoreAPIClient(
            base_url=self.settings.API_BASE_URL,
            timeout_seconds=self.settings.API_TIMEOUT,
        )
        self.snapshot_store = snapshot_store or self._create_snapshot_store()

        self.notices = NoticeBoard(auto_close_seconds=self.settings.NOTICE_AUTO_CLOSE_SECONDS)
        self.bus = InvalidationBus()
        self.session_controller = SessionController(self.api)

        self.doctors: EntityCacheStore[Doctor] = EntityCacheStore(
            EntityKind.DOCTORS, self.api.list_doctors, self.snapshot_store, self.notices, Doctor
        )
        self.messages: EntityCacheStore[Message] = EntityCacheStore(
            EntityKind.MESSAGES, self.api.list_messages, self.snapshot_store, self.notices, Message
        )
        self.appointments: EntityCacheStore[Appointment] = EntityCacheStore(
            EntityKind.APPOINTMENTS, self.api.list_appointments, self.snapshot_store, self.notices, Appointment
        )

        self.guard = RouteGuard(self.session_controller, login_path=self.settings.LOGIN_PATH)
        self.router = ConsoleRouter(self.guard, home_path=self.settings.HOME_PATH)

        self.auth_service = AuthService(self.api, self.session_controller, self.notices)
        self.doctor_service = DoctorService(self.api, self.bus, self.notices)
        self.admin_service = AdminService(self.api, self.notices)
        self.appointment_service = AppointmentService(self.api, self.appointments, self.notices)
        self.message_service = MessageService(
            self.api, self.bus, self.notices, demo_mode=self.settings.DEMO_MODE
        )

        self._started = False

    def _create_snapshot_store(self) -> SnapshotStore:
        backend = self.settings.SNAPSHOT_BACKEND
        if backend == "memory":
            return MemorySnapshotStore()
        if backend == "file":
            return FileSnapshotStore(self.settings.SNAPSHOT_DIR)
        if backend == "redis":
            return RedisSnapshotStore.from_url(self.settings.REDIS_URL, key_prefix=self.settings.REDIS_KEY_PREFIX)
        raise ConfigurationException("SNAPSHOT_BACKEND", f"Unsupported snapshot backend: {backend}")

    def store(self, kind: EntityKind | str) -> EntityCacheStore:
        """Return the cache store for ``kind``."""
        return self.stores[EntityKind.parse(kind)]

    @property
    def stores(self) -> dict[EntityKind, EntityCacheStore]:
        return {
            EntityKind.DOCTORS: self.doctors,
            EntityKind.MESSAGES: self.messages,
            EntityKind.APPOINTMENTS: self.appointments,
        }

    @property
    def session(self) -> Session:
        return self.session_controller.session

    # ------------------------------------------------------------------ #
    #  Lifecycle                                                          #
    # ------------------------------------------------------------------ #
    async def start(self, configure_logs: bool = False) -> Session:
        """
        Open the API client, seed stores from snapshots, resolve the session.

        Args:
            configure_logs: Install log handlers from settings first
        """
        if self._started:
            logger.warning("Console already started, skipping startup")
            return self.session

        if configure_logs:
            configure_logging(self.settings.LOG_LEVEL, self.settings.LOG_FORMAT, self.settings.LOG_FILE)

        logger.info("Starting console core...")
        await self.api.open()

        for store in self.stores.values():
            await store.load_snapshot()

        session = await self.session_controller.bootstrap()
        self._started = True
        logger.info("Console core started", extra=session_context(session))
        return session

    async def close(self) -> None:
        if not self._started:
            logger.debug("Console not started, nothing to close")
        for store in self.stores.values():
            await store.flush()
        await self.api.close()
        if isinstance(self.snapshot_store, RedisSnapshotStore):
            await self.snapshot_store.close()
        self._started = False
        logger.info("Console core stopped")

    async def __aenter__(self) -> "ConsoleContainer":
        await self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()
