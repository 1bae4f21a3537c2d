"""Key-value stores backing the ledger, preferences and app lock."""

import asyncio
import logging
import sqlite3
from contextlib import closing
from pathlib import Path
from typing import Protocol

from moola.errors import PersistenceError
from moola.store.schema import init_database

logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    """Async string key-value store."""

    async def get(self, key: str) -> str | None: ...

    async def set(self, key: str, value: str) -> None: ...

    async def remove(self, keys: list[str]) -> None: ...


class SqliteKeyValueStore:
    """KeyValueStore backed by a single SQLite file.

    Blocking sqlite calls run in a worker thread. Every sqlite or filesystem
    failure is re-raised as PersistenceError.

    Args:
        db_path: Path to the database file. Created on first use.
        secure: Restrict the file to the owner (used for the secure store).
    """

    def __init__(self, db_path: Path, secure: bool = False) -> None:
        self.db_path = db_path
        self.secure = secure
        self._ready = False

    def _connect(self) -> sqlite3.Connection:
        if not self._ready:
            init_database(self.db_path, secure=self.secure)
            self._ready = True
        return sqlite3.connect(self.db_path)

    def _get(self, key: str) -> str | None:
        with closing(self._connect()) as conn:
            row = conn.execute("SELECT value FROM kv WHERE key = ?", (key,)).fetchone()
            return row[0] if row else None

    def _set(self, key: str, value: str) -> None:
        with closing(self._connect()) as conn:
            try:
                conn.execute(
                    "INSERT OR REPLACE INTO kv (key, value, updated_at) VALUES (?, ?, datetime('now'))",
                    (key, value),
                )
                conn.commit()
            except sqlite3.Error:
                conn.rollback()
                raise

    def _remove(self, keys: list[str]) -> None:
        with closing(self._connect()) as conn:
            try:
                conn.executemany("DELETE FROM kv WHERE key = ?", [(key,) for key in keys])
                conn.commit()
            except sqlite3.Error:
                conn.rollback()
                raise

    async def _run(self, func, *args):
        try:
            return await asyncio.to_thread(func, *args)
        except (sqlite3.Error, OSError) as e:
            logger.error("Store %s failed: %s", self.db_path.name, e, exc_info=True)
            raise PersistenceError(f"{self.db_path.name}: {e}") from e

    async def get(self, key: str) -> str | None:
        return await self._run(self._get, key)

    async def set(self, key: str, value: str) -> None:
        await self._run(self._set, key, value)

    async def remove(self, keys: list[str]) -> None:
        """Remove several keys in one transaction."""
        await self._run(self._remove, list(keys))
