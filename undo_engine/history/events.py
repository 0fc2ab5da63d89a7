from __future__ import annotations

import time
from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Optional

from undo_engine.common.io import append_jsonl

ACTIONS = (
    "execute",
    "undo",
    "redo",
    "evict",
    "clear",
    "restore",
    "execute_failed",
    "undo_failed",
    "redo_failed",
)


@dataclass(frozen=True)
class HistoryEvent:
    """State change reported to history listeners."""

    action: str
    description: Optional[str]
    cursor: int
    size: int
    error: Optional[str] = None

    def __post_init__(self) -> None:
        if self.action not in ACTIONS:
            raise ValueError(f"unknown history action {self.action!r}")


class HistoryEventLog:
    """Count history transitions and optionally append them to a JSONL file.

    Instances are callables so they can be passed to
    :meth:`HistoryManager.add_listener` directly.
    """

    def __init__(self, log_file: Optional[str] = None, *, keep: int = 1000) -> None:
        self.counters: Dict[str, int] = {
            "executes": 0,
            "undos": 0,
            "redos": 0,
            "evictions": 0,
            "clears": 0,
            "restores": 0,
            "failures": 0,
        }
        self._events: List[dict[str, Any]] = []
        self._keep = keep
        self._log_file = log_file

    def __call__(self, event: HistoryEvent) -> None:
        if event.action.endswith("_failed"):
            self.increment("failures")
        else:
            self.increment(_COUNTER_FOR.get(event.action, event.action))
        self.log_event(event.action, asdict(event))

    def increment(self, key: str, value: int = 1) -> None:
        self.counters[key] = self.counters.get(key, 0) + value

    def log_event(self, op: str, info: dict[str, Any]) -> None:
        event = {"ts": time.time(), **info, "op": op}
        self._events.append(event)
        if len(self._events) > self._keep:
            del self._events[0]
        if self._log_file:
            append_jsonl(self._log_file, event)

    @property
    def events(self) -> List[dict[str, Any]]:
        return list(self._events)

    def status(self) -> dict[str, Any]:
        log: dict[str, Any] = dict(self.counters)
        attempts = log["executes"] + log["undos"] + log["redos"] + log["failures"]
        log["failure_rate"] = log["failures"] / attempts if attempts else 0.0
        return log


_COUNTER_FOR = {
    "execute": "executes",
    "undo": "undos",
    "redo": "redos",
    "evict": "evictions",
    "clear": "clears",
    "restore": "restores",
}


__all__ = ["ACTIONS", "HistoryEvent", "HistoryEventLog"]
