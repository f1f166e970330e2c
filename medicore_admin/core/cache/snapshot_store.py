# ============================================================================
# SCOPE: GLOBAL
# Description: Durable key-value store for last-known collection snapshots.
#              One entry per entity kind. Advisory warm-start data only.
# ============================================================================
"""
Snapshot Stores

Persist the last successfully fetched collection per entity kind so that a
restarted console can show last-known data immediately while it re-fetches.

Backends:
- MemorySnapshotStore: process-local dict (tests, ephemeral runs)
- FileSnapshotStore: one JSON file per kind in a directory
- RedisSnapshotStore: one redis string per kind

Entries are plain JSON lists of objects. Anything else read back (corrupt
JSON, a dict, a list of scalars) loads as ``None`` and is treated as absent.
"""

import asyncio
import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from medicore_admin.core.domain.events import EntityKind

if TYPE_CHECKING:
    from redis.asyncio import Redis

logger = logging.getLogger(__name__)

SnapshotItems = list[dict[str, Any]]


@runtime_checkable
class SnapshotStore(Protocol):
    """Durable snapshot storage keyed by entity kind."""

    async def load(self, kind: EntityKind) -> SnapshotItems | None:
        """Return the stored collection, or None if absent or unreadable."""
        ...

    async def save(self, kind: EntityKind, items: SnapshotItems) -> None:
        """Replace the stored collection for ``kind``."""
        ...

    async def delete(self, kind: EntityKind) -> bool:
        """Remove the stored collection; returns False if there was none."""
        ...


def _coerce_items(raw: Any) -> SnapshotItems | None:
    """Accept only a list of JSON objects."""
    if not isinstance(raw, list):
        return None
    if not all(isinstance(item, dict) for item in raw):
        return None
    return raw


def _decode(kind: EntityKind, payload: str | bytes | None) -> SnapshotItems | None:
    if payload is None:
        return None
    try:
        raw = json.loads(payload)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        logger.warning(f"Discarding unreadable {kind.value} snapshot: {e}")
        return None
    items = _coerce_items(raw)
    if items is None:
        logger.warning(f"Discarding {kind.value} snapshot with unexpected shape ({type(raw).__name__})")
    return items


class MemorySnapshotStore:
    """In-memory snapshot store."""

    def __init__(self, initial: dict[EntityKind, SnapshotItems] | None = None) -> None:
        self._entries: dict[EntityKind, str] = {}
        for kind, items in (initial or {}).items():
            self._entries[kind] = json.dumps(items)

    async def load(self, kind: EntityKind) -> SnapshotItems | None:
        return _decode(kind, self._entries.get(kind))

    async def save(self, kind: EntityKind, items: SnapshotItems) -> None:
        # Stored serialized so callers never share the list with the store
        self._entries[kind] = json.dumps(items, default=str)

    async def delete(self, kind: EntityKind) -> bool:
        return self._entries.pop(kind, None) is not None

    def put_raw(self, kind: EntityKind, payload: str) -> None:
        """Store an arbitrary payload (lets tests simulate incompatible data)."""
        self._entries[kind] = payload


class FileSnapshotStore:
    """
    JSON-file snapshot store.

    Writes go to a temporary file that is then renamed over the target, so a
    crash mid-write leaves the previous snapshot intact. Disk access runs in
    a worker thread (``asyncio.to_thread``).
    """

    def __init__(self, directory: Path | str) -> None:
        self.directory = Path(directory)

    def _path(self, kind: EntityKind) -> Path:
        return self.directory / f"{kind.value}.json"

    async def load(self, kind: EntityKind) -> SnapshotItems | None:
        path = self._path(kind)
        try:
            payload = await asyncio.to_thread(path.read_text, encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as e:
            logger.warning(f"Could not read snapshot {path}: {e}")
            return None
        return _decode(kind, payload)

    async def save(self, kind: EntityKind, items: SnapshotItems) -> None:
        payload = json.dumps(items, default=str)
        await asyncio.to_thread(self._write_atomic, self._path(kind), payload)

    def _write_atomic(self, path: Path, payload: str) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        tmp_path = path.with_suffix(".json.tmp")
        tmp_path.write_text(payload, encoding="utf-8")
        tmp_path.replace(path)

    async def delete(self, kind: EntityKind) -> bool:
        try:
            await asyncio.to_thread(self._path(kind).unlink)
        except FileNotFoundError:
            return False
        return True


class RedisSnapshotStore:
    """Redis snapshot store (``redis.asyncio``)."""

    def __init__(self, client: "Redis", key_prefix: str = "medicore:snapshot:") -> None:
        self._client = client
        self._key_prefix = key_prefix

    @classmethod
    def from_url(cls, url: str, key_prefix: str = "medicore:snapshot:") -> "RedisSnapshotStore":
        from redis.asyncio import Redis

        return cls(Redis.from_url(url, decode_responses=True), key_prefix=key_prefix)

    def _key(self, kind: EntityKind) -> str:
        return f"{self._key_prefix}{kind.value}"

    async def load(self, kind: EntityKind) -> SnapshotItems | None:
        return _decode(kind, await self._client.get(self._key(kind)))

    async def save(self, kind: EntityKind, items: SnapshotItems) -> None:
        await self._client.set(self._key(kind), json.dumps(items, default=str))

    async def delete(self, kind: EntityKind) -> bool:
        return bool(await self._client.delete(self._key(kind)))

    async def close(self) -> None:
        await self._client.aclose()
