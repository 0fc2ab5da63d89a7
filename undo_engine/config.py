"""Structured configuration for history managers and stores.

Defaults live in ``configs/history/default.yaml``. Values are merged in this
order: dataclass defaults, the YAML file, then ``key=value`` dotlist
overrides such as ``capacity=100`` or ``store.backend=sqlite``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Optional

from omegaconf import OmegaConf

from undo_engine.history import HistoryEventLog, HistoryManager
from undo_engine.history.manager import DEFAULT_CAPACITY
from undo_engine.persistence import HistoryStore, JSONHistoryStore, SQLiteHistoryStore

logger = logging.getLogger(__name__)

DEFAULT_CONFIG = Path(__file__).resolve().parents[1] / "configs" / "history" / "default.yaml"
STORE_BACKENDS = ("none", "json", "sqlite")


@dataclass
class StoreConfig:
    backend: str = "none"  # {"none","json","sqlite"}
    path: Optional[str] = None


@dataclass
class HistoryConfig:
    """Settings for :func:`build_manager` and :func:`build_store`."""

    capacity: int = DEFAULT_CAPACITY
    thread_safe: bool = True
    event_log: Optional[str] = None
    store: StoreConfig = field(default_factory=StoreConfig)


def validate_config(cfg: HistoryConfig) -> HistoryConfig:
    """Raise ``ValueError`` on settings that cannot build a history."""

    if cfg.capacity < 1:
        raise ValueError("capacity must be at least 1")
    if cfg.store.backend not in STORE_BACKENDS:
        raise ValueError(f"store.backend must be one of {STORE_BACKENDS}")
    if cfg.store.backend != "none" and not cfg.store.path:
        raise ValueError(f"store.path is required for the {cfg.store.backend} backend")
    return cfg


def load_config(
    path: str | Path | None = None, overrides: Iterable[str] = ()
) -> HistoryConfig:
    """Load a :class:`HistoryConfig` from YAML plus dotlist ``overrides``.

    ``path`` defaults to the bundled ``default.yaml`` when it exists.
    """

    layers = [OmegaConf.structured(HistoryConfig)]
    cfg_path = Path(path) if path is not None else DEFAULT_CONFIG
    if cfg_path.exists():
        layers.append(OmegaConf.load(cfg_path))
    elif path is not None:
        raise FileNotFoundError(cfg_path)
    overrides = list(overrides)
    if overrides:
        layers.append(OmegaConf.from_dotlist(overrides))
    merged = OmegaConf.merge(*layers)
    cfg = OmegaConf.to_object(merged)
    return validate_config(cfg)  # type: ignore[arg-type]


def build_manager(cfg: Optional[HistoryConfig] = None) -> HistoryManager:
    """Create a manager, attaching a :class:`HistoryEventLog` if configured."""

    cfg = validate_config(cfg or HistoryConfig())
    manager = HistoryManager(capacity=cfg.capacity, thread_safe=cfg.thread_safe)
    if cfg.event_log:
        manager.add_listener(HistoryEventLog(cfg.event_log))
        logger.info("history events logged to %s", cfg.event_log)
    return manager


def build_store(cfg: Optional[HistoryConfig] = None) -> Optional[HistoryStore]:
    """Return the configured store, or ``None`` for the ``none`` backend."""

    cfg = validate_config(cfg or HistoryConfig())
    if cfg.store.backend == "json":
        return JSONHistoryStore(cfg.store.path)  # type: ignore[arg-type]
    if cfg.store.backend == "sqlite":
        return SQLiteHistoryStore(cfg.store.path)  # type: ignore[arg-type]
    return None


__all__ = [
    "HistoryConfig",
    "StoreConfig",
    "build_manager",
    "build_store",
    "load_config",
    "validate_config",
]
