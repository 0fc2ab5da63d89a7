# Copyright (c) 2025 Arne Deutsch, itemis AG, MIT License
"""Shared results, errors and I/O helpers."""

from .errors import (
    CompositeSubOperationFailed,
    InvariantViolation,
    NoBackupError,
    NothingToRedoError,
    NothingToUndoError,
    OperationFailed,
    SerializationError,
    UndoEngineError,
    as_failure,
)
from .ids import validate_history_key
from .io import append_jsonl, atomic_write_file, atomic_write_json, read_json
from .result import Result

__all__ = [
    "Result",
    "UndoEngineError",
    "OperationFailed",
    "NoBackupError",
    "NothingToUndoError",
    "NothingToRedoError",
    "CompositeSubOperationFailed",
    "InvariantViolation",
    "SerializationError",
    "as_failure",
    "validate_history_key",
    "append_jsonl",
    "atomic_write_file",
    "atomic_write_json",
    "read_json",
]
