"""Sync state persistence."""

from roomfolks.storage.sync_store import (
    MemoryStorage,
    MemorySyncStore,
    SqlStorage,
    SQLiteSyncStore,
    StorageBackend,
    SyncStore,
    open_sync_store,
)

__all__ = [
    "SyncStore",
    "MemorySyncStore",
    "SQLiteSyncStore",
    "MemoryStorage",
    "SqlStorage",
    "StorageBackend",
    "open_sync_store",
]
