"""Tests for the SQLite-backed key-value store."""

import asyncio
import stat
from pathlib import Path

import pytest

from moola.engine import LedgerEngine
from moola.domain.ledger import ExpenseInput
from moola.errors import PersistenceError
from moola.store import SqliteKeyValueStore
from moola.store.schema import database_exists, get_data_dir, get_db_path, get_secure_db_path


class TestSqliteKeyValueStore:
    """Tests for SqliteKeyValueStore."""

    def test_get_missing(self, tmp_path: Path) -> None:
        store = SqliteKeyValueStore(tmp_path / "moola.db")
        assert asyncio.run(store.get("nope")) is None

    def test_set_overwrites(self, tmp_path: Path) -> None:
        store = SqliteKeyValueStore(tmp_path / "moola.db")

        asyncio.run(store.set("k", "one"))
        asyncio.run(store.set("k", "two"))

        assert asyncio.run(store.get("k")) == "two"

    def test_remove_many(self, tmp_path: Path) -> None:
        """Should drop every listed key and ignore missing ones."""
        store = SqliteKeyValueStore(tmp_path / "moola.db")
        asyncio.run(store.set("a", "1"))
        asyncio.run(store.set("b", "2"))
        asyncio.run(store.set("c", "3"))

        asyncio.run(store.remove(["a", "b", "zzz"]))

        assert asyncio.run(store.get("a")) is None
        assert asyncio.run(store.get("b")) is None
        assert asyncio.run(store.get("c")) == "3"

    def test_values_survive_reopen(self, tmp_path: Path) -> None:
        path = tmp_path / "moola.db"
        asyncio.run(SqliteKeyValueStore(path).set("k", "v"))

        assert asyncio.run(SqliteKeyValueStore(path).get("k")) == "v"

    def test_secure_store_is_private(self, tmp_path: Path) -> None:
        path = tmp_path / "secure.db"

        asyncio.run(SqliteKeyValueStore(path, secure=True).set("moola_pin", "x"))

        assert stat.S_IMODE(path.stat().st_mode) == 0o600

    def test_failure_becomes_persistence_error(self, tmp_path: Path) -> None:
        """Should wrap filesystem errors in PersistenceError."""
        blocker = tmp_path / "file"
        blocker.write_text("")
        store = SqliteKeyValueStore(blocker / "moola.db")

        with pytest.raises(PersistenceError):
            asyncio.run(store.get("k"))

    def test_ledger_round_trip(self, tmp_path: Path) -> None:
        """Should reload the ledger written through a real database."""
        store = SqliteKeyValueStore(tmp_path / "moola.db")
        engine = LedgerEngine(store)
        asyncio.run(engine.add(ExpenseInput(amount="4.20", date="2025-05-01", note="tea")))

        reloaded = LedgerEngine(SqliteKeyValueStore(tmp_path / "moola.db"))
        asyncio.run(reloaded.load())

        assert reloaded.records == engine.records


class TestSchemaPaths:
    """Tests for data directory resolution."""

    def test_override(self, tmp_path: Path) -> None:
        assert get_data_dir(str(tmp_path)) == tmp_path

    def test_xdg_data_home(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("XDG_DATA_HOME", str(tmp_path))

        assert get_db_path() == tmp_path / "moola" / "moola.db"
        assert get_secure_db_path() == tmp_path / "moola" / "secure.db"
        assert not database_exists()
