# Copyright (c) 2025 Arne Deutsch, itemis AG, MIT License
"""Serialization seam for durable histories."""

from undo_engine.operations.registry import OperationRegistry, default_registry, register

from .codec import FORMAT_VERSION, HistoryCodec
from .stores import HistoryStore, JSONHistoryStore, SQLiteHistoryStore

__all__ = [
    "FORMAT_VERSION",
    "HistoryCodec",
    "HistoryStore",
    "JSONHistoryStore",
    "SQLiteHistoryStore",
    "OperationRegistry",
    "default_registry",
    "register",
]
