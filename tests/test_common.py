import json
import sqlite3
import threading

import pytest

from undo_engine.common.ids import validate_history_key
from undo_engine.common.io import append_jsonl, atomic_write_json, read_json
from undo_engine.common.sqlite import SQLiteExecMixin


class _Table(SQLiteExecMixin):
    def __init__(self) -> None:
        self.conn = sqlite3.connect(":memory:")
        self._conn_lock = threading.Lock()


def test_concurrent_atomic_writes_keep_one_payload(tmp_path) -> None:
    target = tmp_path / "nested" / "history.json"
    payloads = [{"cursor": i, "entries": [i] * i} for i in range(5)]

    threads = [threading.Thread(target=atomic_write_json, args=(target, p)) for p in payloads]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert read_json(target) in payloads
    assert [p.name for p in target.parent.iterdir()] == ["history.json"]


def test_append_jsonl_writes_whole_lines(tmp_path) -> None:
    target = tmp_path / "events.jsonl"

    def write(start: int) -> None:
        for i in range(start, start + 20):
            append_jsonl(target, {"seq": i})

    threads = [threading.Thread(target=write, args=(n * 100,)) for n in range(3)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    lines = target.read_text(encoding="utf-8").splitlines()
    assert len(lines) == 60
    assert sorted(json.loads(line)["seq"] for line in lines)[:3] == [0, 1, 2]


def test_exec_commits_and_fetches() -> None:
    table = _Table()
    table._exec("CREATE TABLE kv (k TEXT PRIMARY KEY, v TEXT)")
    table._exec("INSERT INTO kv VALUES (?, ?)", ("a", "1"))
    table._exec("INSERT OR REPLACE INTO kv VALUES (?, ?)", ("a", "2"))
    assert not table.conn.in_transaction

    assert table._exec("SELECT v FROM kv WHERE k=?", ("a",), fetch="one") == ("2",)
    assert table._exec("SELECT k FROM kv", fetch="all") == [("a",)]
    assert table._exec("SELECT k FROM kv") is None


@pytest.mark.parametrize("good", ["doc-1", "session_42", "a.b", "x" * 128])
def test_valid_history_keys(good: str) -> None:
    assert validate_history_key(good) == good


def test_non_string_key_rejected() -> None:
    with pytest.raises(TypeError):
        validate_history_key(7)  # type: ignore[arg-type]


@pytest.mark.parametrize("bad", ["", ".", "..", "a/b", "has space", "x" * 129])
def test_invalid_history_keys_rejected(bad: str) -> None:
    with pytest.raises(ValueError):
        validate_history_key(bad)
