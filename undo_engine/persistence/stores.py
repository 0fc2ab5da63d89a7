"""Durable storage backends for history payloads."""

from __future__ import annotations

import json
import logging
import sqlite3
import threading
import time
from pathlib import Path
from typing import Any, List, Optional, Protocol

from undo_engine.common.errors import SerializationError
from undo_engine.common.ids import validate_history_key
from undo_engine.common.io import atomic_write_json, read_json
from undo_engine.common.sqlite import SQLiteExecMixin
from undo_engine.history.manager import HistoryManager
from undo_engine.operations.registry import ReceiverResolver

from .codec import HistoryCodec

logger = logging.getLogger(__name__)


class HistoryStore(Protocol):
    """Interface for history persistence backends."""

    def save(self, key: str, manager: HistoryManager) -> None:
        """Persist ``manager`` under ``key``."""

    def load(
        self,
        key: str,
        resolve_receiver: ReceiverResolver,
        manager: Optional[HistoryManager] = None,
    ) -> HistoryManager:
        """Rebuild the history stored under ``key``."""

    def delete(self, key: str) -> None:
        """Remove ``key`` if present."""

    def keys(self) -> List[str]:
        """Return stored keys in sorted order."""


class _PayloadStore:
    """Shared save/load logic on top of ``_write_payload``/``load_payload``."""

    codec: HistoryCodec

    def save(self, key: str, manager: HistoryManager) -> None:
        payload = self.codec.dump(manager)
        self._write_payload(validate_history_key(key), payload)
        logger.debug("saved history %s (%d entries)", key, len(payload["entries"]))

    def load(
        self,
        key: str,
        resolve_receiver: ReceiverResolver,
        manager: Optional[HistoryManager] = None,
    ) -> HistoryManager:
        return self.codec.load(self.load_payload(key), resolve_receiver, manager)

    def load_payload(self, key: str) -> dict:
        raise NotImplementedError

    def _write_payload(self, key: str, payload: dict) -> None:
        raise NotImplementedError


class JSONHistoryStore(_PayloadStore):
    """One JSON file per history key below ``root``."""

    def __init__(self, root: str | Path, codec: Optional[HistoryCodec] = None) -> None:
        self.root = Path(root)
        self.codec = codec or HistoryCodec()

    def path_for(self, key: str) -> Path:
        return self.root / f"{validate_history_key(key)}.json"

    def _write_payload(self, key: str, payload: dict) -> None:
        try:
            json.dumps(payload)
        except (TypeError, ValueError) as exc:
            raise SerializationError(f"history {key!r} is not JSON serializable: {exc}") from exc
        atomic_write_json(self.path_for(key), payload)

    def load_payload(self, key: str) -> dict:
        path = self.path_for(key)
        if not path.exists():
            raise KeyError(key)
        try:
            return read_json(path)
        except json.JSONDecodeError as exc:
            raise SerializationError(f"corrupt history file {path}: {exc}") from exc

    def delete(self, key: str) -> None:
        self.path_for(key).unlink(missing_ok=True)

    def keys(self) -> List[str]:
        if not self.root.exists():
            return []
        return sorted(p.stem for p in self.root.glob("*.json"))


class SQLiteHistoryStore(SQLiteExecMixin, _PayloadStore):
    """Histories stored as JSON rows in a single SQLite table."""

    def __init__(self, db_path: str = ":memory:", codec: Optional[HistoryCodec] = None) -> None:
        if db_path != ":memory:":
            Path(db_path).parent.mkdir(parents=True, exist_ok=True)
        self.conn = sqlite3.connect(db_path, check_same_thread=False)
        self._conn_lock = threading.Lock()
        self.codec = codec or HistoryCodec()
        self._exec(
            "CREATE TABLE IF NOT EXISTS histories "
            "(key TEXT PRIMARY KEY, payload TEXT, updated REAL)"
        )

    def _write_payload(self, key: str, payload: dict) -> None:
        try:
            text = json.dumps(payload)
        except (TypeError, ValueError) as exc:
            raise SerializationError(f"history {key!r} is not JSON serializable: {exc}") from exc
        self._exec(
            "INSERT OR REPLACE INTO histories(key, payload, updated) VALUES (?, ?, ?)",
            (key, text, time.time()),
        )

    def load_payload(self, key: str) -> dict:
        row: Any = self._exec(
            "SELECT payload FROM histories WHERE key=?", (validate_history_key(key),), fetch="one"
        )
        if row is None:
            raise KeyError(key)
        try:
            return json.loads(row[0])
        except json.JSONDecodeError as exc:
            raise SerializationError(f"corrupt history row {key!r}: {exc}") from exc

    def delete(self, key: str) -> None:
        self._exec("DELETE FROM histories WHERE key=?", (validate_history_key(key),))

    def keys(self) -> List[str]:
        rows = self._exec("SELECT key FROM histories ORDER BY key", fetch="all")
        return [str(r[0]) for r in rows]

    def close(self) -> None:
        self.conn.close()


__all__ = ["HistoryStore", "JSONHistoryStore", "SQLiteHistoryStore"]
