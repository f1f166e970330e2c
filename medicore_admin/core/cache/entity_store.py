# ============================================================================
# SCOPE: GLOBAL
# Description: Per-entity-kind collection cache shared by every view.
#              One instance per kind for the whole process.
# ============================================================================
"""
Entity Cache Store - last known server collection for one entity kind.

Rules:
- ``ensure_fresh()`` fetches at most once per process unless ``refresh()``
  is called; concurrent callers share the in-flight fetch (single-flight).
- ``refresh()`` always fetches. Racing refreshes are not sequenced: the
  response that lands last wins.
- A failed fetch keeps the previous items and phase and raises an error
  notice; nothing propagates to the caller.
- Every successful fetch is persisted to the snapshot store; the persisted
  copy seeds display data on the next start but never counts as populated.

Usage:
    store = EntityCacheStore(EntityKind.DOCTORS, api.list_doctors, snapshots, notices, Doctor)
    await store.load_snapshot()       # once, at startup
    snapshot = await store.ensure_fresh()
    for doctor in snapshot.items:
        ...
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, ValidationError

from medicore_admin.core.domain.events import EntityKind
from medicore_admin.core.events.subscription import ListenerRegistry, Subscription
from medicore_admin.core.notifications import NoticeBoard
from medicore_admin.core.shared.logger import store_context

from .snapshot_store import SnapshotItems, SnapshotStore

logger = logging.getLogger(__name__)

K = TypeVar("K", bound=BaseModel)


class CachePhase(str, Enum):
    UNPOPULATED = "unpopulated"  # never fetched successfully in this process
    POPULATING = "populating"  # first fetch in flight
    POPULATED = "populated"


@dataclass(frozen=True)
class CacheSnapshot(Generic[K]):
    """Immutable view of a store's state handed to readers."""

    kind: EntityKind
    items: tuple[K, ...] = ()
    phase: CachePhase = CachePhase.UNPOPULATED
    seeded: bool = False  # items came from the snapshot store, not yet confirmed by a fetch
    fetched_at: datetime | None = None

    @property
    def populated(self) -> bool:
        return self.phase is CachePhase.POPULATED

    @property
    def loading(self) -> bool:
        return self.phase is CachePhase.POPULATING

    def __len__(self) -> int:
        return len(self.items)


@dataclass
class StoreStats:
    fetches: int = 0
    failures: int = 0
    patches: int = 0
    last_error: str | None = field(default=None)


Fetcher = Callable[[], Awaitable[list[K]]]
StoreListener = Callable[[CacheSnapshot[K]], Any]


class EntityCacheStore(Generic[K]):
    """
    Cache for one server collection.

    Args:
        kind: Entity kind this store holds
        fetcher: Coroutine function returning the full collection
        snapshot_store: Durable store for warm starts
        notices: Board receiving fetch-failure notices
        item_model: Model used to rebuild items from persisted snapshots
    """

    def __init__(
        self,
        kind: EntityKind,
        fetcher: Fetcher[K],
        snapshot_store: SnapshotStore,
        notices: NoticeBoard,
        item_model: type[K] | None = None,
    ) -> None:
        self.kind = EntityKind.parse(kind)
        self._fetcher = fetcher
        self._snapshot_store = snapshot_store
        self._notices = notices
        self._item_model = item_model

        self._state: CacheSnapshot[K] = CacheSnapshot(kind=self.kind)
        self._inflight: asyncio.Task[CacheSnapshot[K]] | None = None
        self._snapshot_loaded = False
        self._pending_writes: set[asyncio.Task[None]] = set()
        self._listeners: ListenerRegistry[CacheSnapshot[K]] = ListenerRegistry(f"{self.kind.value} store")
        self.stats = StoreStats()
        self._log_context = store_context(self.kind)

    # ------------------------------------------------------------------ #
    #  Reads                                                              #
    # ------------------------------------------------------------------ #
    def get(self) -> CacheSnapshot[K]:
        """Current snapshot; never blocks, may be unpopulated."""
        return self._state

    @property
    def items(self) -> tuple[K, ...]:
        return self._state.items

    @property
    def populated(self) -> bool:
        return self._state.populated

    # ------------------------------------------------------------------ #
    #  Fetching                                                           #
    # ------------------------------------------------------------------ #
    async def ensure_fresh(self) -> CacheSnapshot[K]:
        """
        Populate the cache once.

        No-op when already populated. While a first fetch is in flight, every
        caller awaits that same fetch instead of issuing its own.
        """
        if self._state.populated:
            return self._state

        if self._inflight is None:
            self._inflight = asyncio.ensure_future(self._populate())
        # Shielded: one caller being cancelled must not cancel the shared fetch
        return await asyncio.shield(self._inflight)

    async def _populate(self) -> CacheSnapshot[K]:
        try:
            self._set_state(self._replace(phase=CachePhase.POPULATING))
            return await self._fetch(previous_phase=CachePhase.UNPOPULATED, settles_population=True)
        finally:
            self._inflight = None

    async def refresh(self) -> CacheSnapshot[K]:
        """Re-fetch unconditionally and replace the items."""
        return await self._fetch(previous_phase=self._state.phase)

    async def _fetch(self, previous_phase: CachePhase, settles_population: bool = False) -> CacheSnapshot[K]:
        self.stats.fetches += 1
        logger.debug(f"Fetching {self.kind.value}", extra=self._log_context)
        try:
            items = tuple(await self._fetcher())
        except Exception as e:
            self._on_fetch_failed(e, previous_phase, settles_population)
            return self._state

        self._set_state(
            CacheSnapshot(
                kind=self.kind,
                items=items,
                phase=CachePhase.POPULATED,
                seeded=False,
                fetched_at=datetime.now(UTC),
            )
        )
        logger.info(f"{self.kind.value} cache refreshed: {len(items)} item(s)", extra=self._log_context)
        await self._persist()
        return self._state

    def _on_fetch_failed(self, error: Exception, previous_phase: CachePhase, settles_population: bool) -> None:
        self.stats.failures += 1
        self.stats.last_error = str(error)
        logger.error(f"Error fetching {self.kind.value}: {error}", extra=self._log_context)

        # A fetch that raced ahead and populated the cache keeps it populated;
        # POPULATING is left to the first fetch while that one is still in flight
        phase = self._state.phase
        if phase is CachePhase.POPULATING and (settles_population or self._inflight is None):
            phase = previous_phase if previous_phase is not CachePhase.POPULATING else CachePhase.UNPOPULATED
        self._set_state(self._replace(phase=phase))

        self._notices.error(self._failure_message(error))

    def _failure_message(self, error: Exception) -> str:
        server_message = getattr(error, "error_message", None)
        if getattr(error, "from_server", False) and server_message:
            return server_message
        return f"Failed to fetch {self.kind.value}"

    # ------------------------------------------------------------------ #
    #  Optimistic local projection                                        #
    # ------------------------------------------------------------------ #
    def apply_local_patch(self, predicate: Callable[[K], bool], transform: Callable[[K], K]) -> int:
        """
        Replace matching items with ``transform(item)`` without a round-trip.

        Used right after a successful targeted write. A later refresh
        overwrites the projection.

        Returns:
            Number of items patched
        """
        patched = 0
        new_items: list[K] = []
        for item in self._state.items:
            if predicate(item):
                new_items.append(transform(item))
                patched += 1
            else:
                new_items.append(item)

        if patched:
            self.stats.patches += 1
            self._set_state(self._replace(items=tuple(new_items)))
            logger.debug(f"Patched {patched} {self.kind.value} item(s) locally", extra=self._log_context)
            self._schedule_persist()
        return patched

    # ------------------------------------------------------------------ #
    #  Durable snapshot                                                   #
    # ------------------------------------------------------------------ #
    async def load_snapshot(self) -> bool:
        """
        Seed display items from the durable store (once per store).

        The phase stays UNPOPULATED, so ``ensure_fresh`` still fetches.

        Returns:
            True if a usable snapshot was loaded
        """
        if self._snapshot_loaded:
            return False
        self._snapshot_loaded = True

        try:
            raw = await self._snapshot_store.load(self.kind)
        except Exception as e:
            logger.warning(f"Could not load {self.kind.value} snapshot: {e}", extra=self._log_context)
            return False

        items = self._deserialize(raw)
        if items is None:
            return False
        # Never clobber data that an early fetch already produced
        if self._state.populated or self._state.items:
            return False

        self._set_state(self._replace(items=items, seeded=True))
        logger.info(f"Seeded {len(items)} {self.kind.value} item(s) from snapshot", extra=self._log_context)
        return True

    def _deserialize(self, raw: SnapshotItems | None) -> tuple[K, ...] | None:
        if raw is None:
            return None
        if self._item_model is None:
            return tuple(raw)  # type: ignore[arg-type]
        try:
            return tuple(self._item_model.model_validate(entry) for entry in raw)
        except ValidationError as e:
            logger.warning(
                f"Ignoring incompatible {self.kind.value} snapshot: {e.error_count()} error(s)",
                extra=self._log_context,
            )
            return None

    def _serialize(self, items: Iterable[K]) -> SnapshotItems:
        return [
            item.model_dump(by_alias=True, mode="json") if isinstance(item, BaseModel) else dict(item)
            for item in items
        ]

    async def _persist(self) -> None:
        try:
            await self._snapshot_store.save(self.kind, self._serialize(self._state.items))
        except Exception as e:
            logger.warning(f"Could not persist {self.kind.value} snapshot: {e}", extra=self._log_context)

    def _schedule_persist(self) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug(f"No running loop; {self.kind.value} patch not persisted", extra=self._log_context)
            return
        task = loop.create_task(self._persist())
        self._pending_writes.add(task)
        task.add_done_callback(self._pending_writes.discard)

    async def flush(self) -> None:
        """Wait for snapshot writes scheduled by local patches."""
        if self._pending_writes:
            await asyncio.gather(*self._pending_writes)

    # ------------------------------------------------------------------ #
    #  Observers                                                          #
    # ------------------------------------------------------------------ #
    def subscribe(self, listener: StoreListener[K]) -> Subscription[CacheSnapshot[K]]:
        """Listeners receive the new snapshot after every state change."""
        return self._listeners.add(listener)

    def unsubscribe(self, subscription: Subscription[CacheSnapshot[K]]) -> bool:
        return self._listeners.remove(subscription)

    def _replace(self, **changes: Any) -> CacheSnapshot[K]:
        current = self._state
        return CacheSnapshot(
            kind=self.kind,
            items=changes.get("items", current.items),
            phase=changes.get("phase", current.phase),
            seeded=changes.get("seeded", current.seeded),
            fetched_at=changes.get("fetched_at", current.fetched_at),
        )

    def _set_state(self, state: CacheSnapshot[K]) -> None:
        if state == self._state:
            return
        self._state = state
        self._listeners.deliver(state)

    def __repr__(self) -> str:
        return f"EntityCacheStore(kind={self.kind.value}, phase={self._state.phase.value}, items={len(self._state.items)})"
