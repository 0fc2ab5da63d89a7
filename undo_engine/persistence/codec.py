"""Convert a :class:`HistoryManager` to and from plain data."""

from __future__ import annotations

import logging
from typing import Any, Optional

from undo_engine.common.errors import InvariantViolation, SerializationError
from undo_engine.history.manager import HistoryManager
from undo_engine.operations import default_registry
from undo_engine.operations.registry import OperationRegistry, ReceiverResolver

logger = logging.getLogger(__name__)

FORMAT_VERSION = 1


class HistoryCodec:
    """Encode ``(log, cursor)`` with round-trip fidelity.

    The payload layout is::

        {"version": 1, "capacity": M, "cursor": c,
         "entries": [{"type", "ref", "description", "applied", "state"}, ...]}

    Receivers are never encoded; each entry keeps the operation's
    ``receiver_ref`` and :meth:`load` asks ``resolve_receiver`` for the live
    object.
    """

    def __init__(self, registry: Optional[OperationRegistry] = None) -> None:
        self.registry = registry or default_registry

    def dump(self, manager: HistoryManager) -> dict:
        log, cursor = manager.snapshot()
        return {
            "version": FORMAT_VERSION,
            "capacity": manager.capacity,
            "cursor": cursor,
            "entries": [self.registry.encode(op) for op in log],
        }

    def load(
        self,
        data: Any,
        resolve_receiver: ReceiverResolver,
        manager: Optional[HistoryManager] = None,
    ) -> HistoryManager:
        """Rebuild a manager from :meth:`dump` output.

        If ``manager`` is given its entries are replaced, otherwise a new
        manager with the stored capacity is created.
        """

        if not isinstance(data, dict):
            raise SerializationError("history payload must be a mapping")
        version = data.get("version")
        if version != FORMAT_VERSION:
            raise SerializationError(f"unsupported history format version {version!r}")
        try:
            cursor = int(data["cursor"])
            raw_entries = list(data["entries"])
            capacity = int(data.get("capacity", len(raw_entries) or 1))
        except (KeyError, TypeError, ValueError) as exc:
            raise SerializationError(f"malformed history payload: {exc}") from exc

        entries = [self.registry.decode(entry, resolve_receiver) for entry in raw_entries]
        for index, op in enumerate(entries):
            if op.has_backup != (index <= cursor):
                raise SerializationError(
                    f"entry {index} applied={op.has_backup} contradicts cursor {cursor}"
                )
        if manager is None:
            manager = HistoryManager(capacity=capacity)
        try:
            manager.restore(entries, cursor)
        except InvariantViolation as exc:
            raise SerializationError(str(exc)) from exc
        logger.debug("loaded history with %d entries, cursor %d", len(entries), cursor)
        return manager


__all__ = ["FORMAT_VERSION", "HistoryCodec"]
