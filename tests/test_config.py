import pytest

from undo_engine.config import (
    HistoryConfig,
    StoreConfig,
    build_manager,
    build_store,
    load_config,
)
from undo_engine.operations import IncrementOperation
from undo_engine.persistence import JSONHistoryStore, SQLiteHistoryStore


def test_default_config_matches_bundled_yaml() -> None:
    cfg = load_config()
    assert isinstance(cfg, HistoryConfig)
    assert cfg.capacity == 50
    assert cfg.thread_safe is True
    assert cfg.event_log is None
    assert cfg.store.backend == "none"


def test_yaml_file_and_overrides_are_merged(tmp_path) -> None:
    cfg_file = tmp_path / "history.yaml"
    cfg_file.write_text("capacity: 10\nstore:\n  backend: json\n  path: /tmp/h\n", encoding="utf-8")
    cfg = load_config(cfg_file, ["capacity=3", "thread_safe=false"])
    assert cfg.capacity == 3
    assert cfg.thread_safe is False
    assert cfg.store.backend == "json"
    assert cfg.store.path == "/tmp/h"


def test_missing_config_file_raises(tmp_path) -> None:
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "absent.yaml")


@pytest.mark.parametrize(
    "overrides",
    [
        ["capacity=0"],
        ["store.backend=redis"],
        ["store.backend=sqlite"],
    ],
)
def test_invalid_values_raise(overrides) -> None:
    with pytest.raises(ValueError):
        load_config(overrides=overrides)


def test_build_manager_attaches_event_log(tmp_path, doc) -> None:
    log_file = tmp_path / "events.jsonl"
    manager = build_manager(HistoryConfig(capacity=2, event_log=str(log_file)))
    assert manager.capacity == 2
    manager.execute(IncrementOperation(doc, "views"))
    assert log_file.exists()


def test_build_store_backends(tmp_path) -> None:
    assert build_store(HistoryConfig()) is None
    json_store = build_store(HistoryConfig(store=StoreConfig("json", str(tmp_path / "h"))))
    assert isinstance(json_store, JSONHistoryStore)
    sqlite_store = build_store(
        HistoryConfig(store=StoreConfig("sqlite", str(tmp_path / "h.sqlite")))
    )
    assert isinstance(sqlite_store, SQLiteHistoryStore)
