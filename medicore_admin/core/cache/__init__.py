from .entity_store import CachePhase, CacheSnapshot, EntityCacheStore, StoreStats
from .snapshot_store import FileSnapshotStore, MemorySnapshotStore, RedisSnapshotStore, SnapshotStore

__all__ = [
    "EntityCacheStore",
    "CacheSnapshot",
    "CachePhase",
    "StoreStats",
    "SnapshotStore",
    "MemorySnapshotStore",
    "FileSnapshotStore",
    "RedisSnapshotStore",
]
