# Copyright (c) 2025 Arne Deutsch, itemis AG, MIT License
"""Bounded undo/redo history.

Summary
-------
:class:`HistoryManager` keeps an ordered log of operations and a cursor. The
entries ``log[:cursor + 1]`` are applied, the entries after the cursor form
the redo branch, which the next successful :meth:`~HistoryManager.execute`
discards. The log never holds more than ``capacity`` entries; the oldest
entry is evicted first.

Thread Safety
-------------
Every state transition, including the ``apply``/``revert`` call it wraps,
runs under a re-entrant lock. Listeners are called while the lock is held and
may query the manager. Pass ``thread_safe=False`` when a single owner
serializes all calls.

Examples
--------
>>> from undo_engine.operations import set_field
>>> doc = {"title": "draft"}
>>> history = HistoryManager(capacity=10)
>>> history.execute(set_field(doc, "title", "V1")).is_ok
True
>>> history.undo().is_ok, doc["title"]
(True, 'draft')
>>> history.can_redo()
True
"""

from __future__ import annotations

import logging
import threading
from contextlib import nullcontext
from typing import Callable, ContextManager, List, Optional, Sequence, Tuple

from undo_engine.common.errors import InvariantViolation, NothingToRedoError, NothingToUndoError
from undo_engine.common.result import Result
from undo_engine.operations.base import ReversibleOperation

from .events import HistoryEvent

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 50

Listener = Callable[[HistoryEvent], None]


class HistoryManager:
    """Cursor-based undo/redo log with a capacity bound."""

    def __init__(self, capacity: int = DEFAULT_CAPACITY, *, thread_safe: bool = True) -> None:
        if int(capacity) < 1:
            raise ValueError("capacity must be at least 1")
        self._capacity = int(capacity)
        self._log: List[ReversibleOperation] = []
        self._cursor = -1
        self._lock: ContextManager = threading.RLock() if thread_safe else nullcontext()
        self._listeners: List[Listener] = []

    def __len__(self) -> int:
        with self._lock:
            return len(self._log)

    def __repr__(self) -> str:
        with self._lock:
            return (
                f"HistoryManager(size={len(self._log)}, cursor={self._cursor}, "
                f"capacity={self._capacity})"
            )

    # ------------------------------------------------------------------
    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def cursor(self) -> int:
        """Index of the most recently applied entry, ``-1`` if none."""

        with self._lock:
            return self._cursor

    def can_undo(self) -> bool:
        with self._lock:
            return self._cursor >= 0

    def can_redo(self) -> bool:
        with self._lock:
            return self._cursor < len(self._log) - 1

    # ------------------------------------------------------------------
    def execute(self, operation: ReversibleOperation) -> Result:
        """Apply ``operation`` and record it as the newest entry.

        A failed apply is returned unchanged and leaves the history as it
        was. A successful one drops the redo branch, appends ``operation`` and
        evicts the oldest entry when the log exceeds :attr:`capacity`.
        """

        with self._lock:
            result = operation.apply()
            if result.is_err:
                logger.warning("execute %s failed: %s", operation.description, result.error)
                self._emit("execute_failed", operation, result)
                return result
            dropped = len(self._log) - (self._cursor + 1)
            del self._log[self._cursor + 1 :]
            self._log.append(operation)
            self._cursor += 1
            if dropped:
                logger.debug("discarded %d redoable entries", dropped)
            evicted = None
            if len(self._log) > self._capacity:
                evicted = self._log.pop(0)
                self._cursor -= 1
                logger.debug("evicted %s from history", evicted.description)
            self._emit("execute", operation)
            if evicted is not None:
                self._emit("evict", evicted)
            return result

    def undo(self) -> Result:
        """Revert the entry at the cursor and move the cursor back."""

        with self._lock:
            if self._cursor < 0:
                return Result.fail(NothingToUndoError("nothing to undo"))
            operation = self._log[self._cursor]
            result = operation.revert()
            if result.is_err:
                logger.warning("undo %s failed: %s", operation.description, result.error)
                self._emit("undo_failed", operation, result)
                return result
            self._cursor -= 1
            self._emit("undo", operation)
            return result

    def redo(self) -> Result:
        """Re-apply the entry after the cursor and move the cursor forward."""

        with self._lock:
            if self._cursor >= len(self._log) - 1:
                return Result.fail(NothingToRedoError("nothing to redo"))
            self._cursor += 1
            operation = self._log[self._cursor]
            try:
                result = operation.apply()
            except BaseException:
                self._cursor -= 1
                raise
            if result.is_err:
                self._cursor -= 1
                logger.warning("redo %s failed: %s", operation.description, result.error)
                self._emit("redo_failed", operation, result)
                return result
            self._emit("redo", operation)
            return result

    def undo_many(self, count: int) -> List[Result]:
        """Undo up to ``count`` entries, stopping after the first failure."""

        return self._repeat(self.undo, count)

    def redo_many(self, count: int) -> List[Result]:
        """Redo up to ``count`` entries, stopping after the first failure."""

        return self._repeat(self.redo, count)

    def _repeat(self, step: Callable[[], Result], count: int) -> List[Result]:
        results: List[Result] = []
        with self._lock:
            for _ in range(count):
                result = step()
                results.append(result)
                if result.is_err:
                    break
        return results

    def clear(self) -> None:
        """Forget every entry without reverting anything."""

        with self._lock:
            self._log = []
            self._cursor = -1
            self._emit("clear", None)

    # ------------------------------------------------------------------
    def entries(self) -> Tuple[ReversibleOperation, ...]:
        with self._lock:
            return tuple(self._log)

    def snapshot(self) -> Tuple[Tuple[ReversibleOperation, ...], int]:
        """Return ``(log, cursor)`` as a consistent pair."""

        with self._lock:
            return tuple(self._log), self._cursor

    def restore(self, log: Sequence[ReversibleOperation], cursor: int) -> None:
        """Replace the history with ``log`` and ``cursor``.

        Used by persistence. Raises :class:`InvariantViolation` when the pair
        breaks the cursor or capacity invariants.
        """

        entries = list(log)
        if len(entries) > self._capacity:
            raise InvariantViolation(
                f"{len(entries)} entries exceed history capacity {self._capacity}"
            )
        if not -1 <= cursor <= len(entries) - 1:
            raise InvariantViolation(f"cursor {cursor} outside [-1, {len(entries) - 1}]")
        with self._lock:
            self._log = entries
            self._cursor = cursor
            self._emit("restore", None)

    @property
    def undo_description(self) -> Optional[str]:
        with self._lock:
            return self._log[self._cursor].description if self._cursor >= 0 else None

    @property
    def redo_description(self) -> Optional[str]:
        with self._lock:
            if self._cursor >= len(self._log) - 1:
                return None
            return self._log[self._cursor + 1].description

    def undo_stack(self) -> List[str]:
        """Descriptions of undoable entries, newest first."""

        with self._lock:
            return [op.description for op in reversed(self._log[: self._cursor + 1])]

    def redo_stack(self) -> List[str]:
        """Descriptions of redoable entries, next redo first."""

        with self._lock:
            return [op.description for op in self._log[self._cursor + 1 :]]

    # ------------------------------------------------------------------
    def add_listener(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def remove_listener(self, listener: Listener) -> None:
        self._listeners.remove(listener)

    def _emit(
        self,
        action: str,
        operation: Optional[ReversibleOperation],
        result: Optional[Result] = None,
    ) -> None:
        if not self._listeners:
            return
        error = result.error if result is not None else None
        event = HistoryEvent(
            action=action,
            description=operation.description if operation is not None else None,
            cursor=self._cursor,
            size=len(self._log),
            error=str(error) if error is not None else None,
        )
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception("history listener %r failed on %s", listener, action)


__all__ = ["DEFAULT_CAPACITY", "HistoryManager", "Listener"]
