# Copyright (c) 2025 Arne Deutsch, itemis AG, MIT License
"""Embeddable undo/redo engine with bounded history."""

from undo_engine.common import (
    CompositeSubOperationFailed,
    NoBackupError,
    NothingToRedoError,
    NothingToUndoError,
    OperationFailed,
    Result,
    UndoEngineError,
)
from undo_engine.history import HistoryEvent, HistoryEventLog, HistoryManager
from undo_engine.operations import (
    CallbackOperation,
    CompositeOperation,
    IncrementOperation,
    ReplaceStateOperation,
    ReversibleOperation,
    SetFieldsOperation,
    SnapshotOperation,
    set_field,
)

__all__ = [
    "__version__",
    "Result",
    "UndoEngineError",
    "OperationFailed",
    "NoBackupError",
    "NothingToUndoError",
    "NothingToRedoError",
    "CompositeSubOperationFailed",
    "HistoryManager",
    "HistoryEvent",
    "HistoryEventLog",
    "ReversibleOperation",
    "CallbackOperation",
    "CompositeOperation",
    "IncrementOperation",
    "ReplaceStateOperation",
    "SetFieldsOperation",
    "SnapshotOperation",
    "set_field",
]
__version__ = "0.1.0"
