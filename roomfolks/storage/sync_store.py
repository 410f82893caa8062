"""Persistence for sync cursors and filter IDs.

Both values are keyed by user ID. The SQLite store keeps them in two
key-value tables, ``filter_ids`` and ``next_batch``.
"""

from __future__ import annotations

import sqlite3
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional, Union

from loguru import logger


class SyncStore(ABC):
    """Save/load interface for sync state."""

    @abstractmethod
    def save_filter_id(self, user_id: str, filter_id: str) -> None:
        pass

    @abstractmethod
    def load_filter_id(self, user_id: str) -> str:
        """Return the stored filter ID, or an empty string."""
        pass

    @abstractmethod
    def save_next_batch(self, user_id: str, next_batch: str) -> None:
        pass

    @abstractmethod
    def load_next_batch(self, user_id: str) -> str:
        """Return the stored sync cursor, or an empty string."""
        pass

    def close(self) -> None:
        pass


class MemorySyncStore(SyncStore):
    """Process-local store; state is lost on exit."""

    def __init__(self):
        self._filter_ids: Dict[str, str] = {}
        self._next_batch: Dict[str, str] = {}

    def save_filter_id(self, user_id: str, filter_id: str) -> None:
        self._filter_ids[user_id] = filter_id

    def load_filter_id(self, user_id: str) -> str:
        return self._filter_ids.get(user_id, "")

    def save_next_batch(self, user_id: str, next_batch: str) -> None:
        self._next_batch[user_id] = next_batch

    def load_next_batch(self, user_id: str) -> str:
        return self._next_batch.get(user_id, "")


class SQLiteSyncStore(SyncStore):
    """
    SQLite-backed store.

    Saves are upserts, so the latest cursor always wins. The connection is
    opened lazily and tables are created on first use.
    """

    def __init__(self, dsn: Union[str, Path]):
        """
        Args:
            dsn: Database file path, or ``:memory:``.
        """
        self.dsn = str(dsn)
        self._conn: Optional[sqlite3.Connection] = None

    def _get_connection(self) -> sqlite3.Connection:
        if self._conn is None:
            if self.dsn != ":memory:":
                Path(self.dsn).parent.mkdir(parents=True, exist_ok=True)
            self._conn = sqlite3.connect(self.dsn, check_same_thread=False)
            self._init_tables()
            logger.debug(f"Sync store opened: {self.dsn}")
        return self._conn

    def _init_tables(self) -> None:
        conn = self._conn
        conn.execute("""
            CREATE TABLE IF NOT EXISTS filter_ids (
                user_id TEXT NOT NULL PRIMARY KEY,
                filter_id TEXT NOT NULL
            )
        """)
        conn.execute("""
            CREATE TABLE IF NOT EXISTS next_batch (
                user_id TEXT NOT NULL PRIMARY KEY,
                next_batch TEXT NOT NULL
            )
        """)
        conn.commit()

    def save_filter_id(self, user_id: str, filter_id: str) -> None:
        conn = self._get_connection()
        conn.execute(
            "INSERT INTO filter_ids (user_id, filter_id) VALUES (?, ?) "
            "ON CONFLICT(user_id) DO UPDATE SET filter_id = excluded.filter_id",
            (user_id, filter_id),
        )
        conn.commit()

    def load_filter_id(self, user_id: str) -> str:
        row = self._get_connection().execute(
            "SELECT filter_id FROM filter_ids WHERE user_id = ?", (user_id,)
        ).fetchone()
        return row[0] if row else ""

    def save_next_batch(self, user_id: str, next_batch: str) -> None:
        conn = self._get_connection()
        conn.execute(
            "INSERT INTO next_batch (user_id, next_batch) VALUES (?, ?) "
            "ON CONFLICT(user_id) DO UPDATE SET next_batch = excluded.next_batch",
            (user_id, next_batch),
        )
        conn.commit()

    def load_next_batch(self, user_id: str) -> str:
        row = self._get_connection().execute(
            "SELECT next_batch FROM next_batch WHERE user_id = ?", (user_id,)
        ).fetchone()
        return row[0] if row else ""

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None


@dataclass(frozen=True)
class MemoryStorage:
    """Keep sync state in memory."""


@dataclass(frozen=True)
class SqlStorage:
    """Keep sync state in an SQLite database."""
    dsn: str


StorageBackend = Union[MemoryStorage, SqlStorage]


def open_sync_store(backend: StorageBackend) -> SyncStore:
    """Create the store selected by ``backend``."""
    if isinstance(backend, SqlStorage):
        return SQLiteSyncStore(backend.dsn)
    if isinstance(backend, MemoryStorage):
        return MemorySyncStore()
    raise TypeError(f"unknown storage backend: {backend!r}")


__all__ = [
    "SyncStore",
    "MemorySyncStore",
    "SQLiteSyncStore",
    "MemoryStorage",
    "SqlStorage",
    "StorageBackend",
    "open_sync_store",
]
