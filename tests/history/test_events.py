from __future__ import annotations

import json

import pytest

from undo_engine.history import HistoryEvent, HistoryEventLog, HistoryManager
from undo_engine.operations import IncrementOperation, set_field


def test_listener_receives_transitions(doc) -> None:
    seen: list[HistoryEvent] = []
    history = HistoryManager(capacity=1)
    history.add_listener(seen.append)

    history.execute(set_field(doc, "title", "A"))
    history.execute(set_field(doc, "title", "B"))
    history.undo()
    history.redo()
    history.execute(set_field(doc, "missing", "x"))
    history.clear()

    assert [e.action for e in seen] == [
        "execute",
        "execute",
        "evict",
        "undo",
        "redo",
        "execute_failed",
        "clear",
    ]
    assert seen[1].size == 1 and seen[1].cursor == 0
    assert seen[5].error is not None
    assert seen[-1].description is None


def test_listener_errors_do_not_corrupt_history(doc, caplog) -> None:
    history = HistoryManager()

    def broken(event: HistoryEvent) -> None:
        raise RuntimeError("listener bug")

    history.add_listener(broken)
    with caplog.at_level("ERROR"):
        assert history.execute(IncrementOperation(doc, "views")).is_ok
    assert history.cursor == 0
    assert "listener" in caplog.text

    history.remove_listener(broken)
    assert history.undo().is_ok


def test_event_log_counts_and_writes_jsonl(tmp_path, doc) -> None:
    log_file = tmp_path / "logs" / "history.jsonl"
    events = HistoryEventLog(str(log_file))
    history = HistoryManager(capacity=2)
    history.add_listener(events)

    for _ in range(3):
        history.execute(IncrementOperation(doc, "views"))
    history.undo()
    history.undo()
    history.undo()

    status = events.status()
    assert status["executes"] == 3
    assert status["evictions"] == 1
    assert status["undos"] == 2
    assert status["failures"] == 0  # NothingToUndo is a boundary, not an event
    assert status["failure_rate"] == 0.0

    lines = log_file.read_text(encoding="utf-8").splitlines()
    records = [json.loads(line) for line in lines]
    assert [r["op"] for r in records] == ["execute", "execute", "execute", "evict", "undo", "undo"]
    assert all("ts" in r for r in records)


def test_event_log_keeps_bounded_memory(doc) -> None:
    events = HistoryEventLog(keep=3)
    history = HistoryManager()
    history.add_listener(events)
    for _ in range(5):
        history.execute(IncrementOperation(doc, "views"))
    assert len(events.events) == 3
    assert events.counters["executes"] == 5


def test_unknown_actions_are_rejected() -> None:
    assert HistoryEvent("undo_failed", "Save", 0, 1, "offline").error == "offline"
    with pytest.raises(ValueError):
        HistoryEvent("rewind", None, -1, 0)
