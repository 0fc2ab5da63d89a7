# Copyright (c) 2025 Arne Deutsch, itemis AG, MIT License
"""Thread-safe file helpers used by history stores and event logs."""

from __future__ import annotations

import json
import os
import tempfile
import threading
from pathlib import Path
from typing import Any, Callable

# per-path locks to guard concurrent access within a process
_locks: dict[str, threading.Lock] = {}
_locks_lock = threading.Lock()


def _get_lock(path: Path) -> threading.Lock:
    """Return a lock for ``path`` shared across threads."""

    key = str(path)
    with _locks_lock:
        lock = _locks.get(key)
        if lock is None:
            lock = threading.Lock()
            _locks[key] = lock
        return lock


def atomic_write_file(path: str | Path, writer: Callable[[Path], None]) -> None:
    """Atomically write to ``path`` using ``writer``.

    The ``writer`` callback receives a temporary path in the target directory.
    The temp file is then ``os.replace``d onto ``path`` so readers never see a
    half-written history.
    """

    target = Path(path)
    lock = _get_lock(target)
    target.parent.mkdir(parents=True, exist_ok=True)
    with lock:
        tmp = tempfile.NamedTemporaryFile(delete=False, dir=target.parent)
        tmp_path = Path(tmp.name)
        try:
            tmp.close()
            writer(tmp_path)
            os.replace(tmp_path, target)
        finally:
            if tmp_path.exists():  # pragma: no cover - cleanup safety
                tmp_path.unlink(missing_ok=True)


def atomic_write_json(path: str | Path, obj: Any) -> None:
    """Atomically write ``obj`` as JSON to ``path``."""

    def _write(tmp_path: Path) -> None:
        with open(tmp_path, "w", encoding="utf-8") as fh:
            json.dump(obj, fh, indent=2, sort_keys=True)

    atomic_write_file(path, _write)


def read_json(path: str | Path) -> Any:
    """Read a JSON file under a thread lock."""

    file = Path(path)
    lock = _get_lock(file)
    with lock:
        with open(file, "r", encoding="utf-8") as fh:
            return json.load(fh)


def append_jsonl(path: str | Path, record: Any) -> None:
    """Append ``record`` as one JSON line to ``path``."""

    file = Path(path)
    file.parent.mkdir(parents=True, exist_ok=True)
    lock = _get_lock(file)
    with lock:
        with open(file, "a", encoding="utf-8") as fh:
            fh.write(json.dumps(record) + "\n")
            fh.flush()


__all__ = [
    "atomic_write_file",
    "atomic_write_json",
    "read_json",
    "append_jsonl",
]
