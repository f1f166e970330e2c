"""
Collection bindings: the mount/unmount lifecycle a view goes through.

    binding = CollectionBinding(doctors_store, bus)
    await binding.mount()     # subscribe + ensure_fresh
    binding.snapshot.items    # render
    binding.unmount()         # drop exactly this subscription

While mounted, an invalidation of the store's kind schedules
``store.refresh()`` as a task. Unmounting does not cancel a refresh already
in flight; its result still lands in the store.
"""

import asyncio
import logging
from typing import Generic, TypeVar

from pydantic import BaseModel

from medicore_admin.core.cache import CacheSnapshot, EntityCacheStore
from medicore_admin.core.domain.events import InvalidationEvent
from medicore_admin.core.events import InvalidationBus, Subscription

logger = logging.getLogger(__name__)

K = TypeVar("K", bound=BaseModel)


class CollectionBinding(Generic[K]):
    def __init__(self, store: EntityCacheStore[K], bus: InvalidationBus) -> None:
        self.store = store
        self._bus = bus
        self._subscription: Subscription[InvalidationEvent] | None = None
        self._pending: set[asyncio.Task[CacheSnapshot[K]]] = set()

    @property
    def mounted(self) -> bool:
        return self._subscription is not None

    @property
    def snapshot(self) -> CacheSnapshot[K]:
        return self.store.get()

    async def mount(self) -> CacheSnapshot[K]:
        """Subscribe to invalidations and make sure the store is populated."""
        if self._subscription is None:
            self._subscription = self._bus.subscribe(self.store.kind, self._on_invalidated)
        return await self.store.ensure_fresh()

    def unmount(self) -> None:
        if self._subscription is not None:
            self._bus.unsubscribe(self._subscription)
            self._subscription = None

    def _on_invalidated(self, event: InvalidationEvent) -> None:
        logger.debug(f"{event.entity_kind.value} invalidated; refreshing")
        task = asyncio.get_running_loop().create_task(self.store.refresh())
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def settle(self) -> CacheSnapshot[K]:
        """Wait for refreshes scheduled by invalidations."""
        while self._pending:
            await asyncio.gather(*list(self._pending))
        return self.store.get()

    async def __aenter__(self) -> "CollectionBinding[K]":
        await self.mount()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        self.unmount()
