# Copyright (c) 2025 Arne Deutsch, itemis AG, MIT License
"""Error taxonomy for the undo engine.

Expected failures (a receiver refusing a mutation, an empty undo stack) are
carried inside a :class:`~undo_engine.common.result.Result` and never raised by
the engine itself. Only :class:`InvariantViolation` and
:class:`SerializationError` are raised directly.
"""

from __future__ import annotations

from typing import Optional


class UndoEngineError(Exception):
    """Base class for all engine errors."""


class OperationFailed(UndoEngineError):
    """The receiver mutation in ``apply`` or ``revert`` could not complete."""

    def __init__(self, message: str, cause: Optional[BaseException] = None) -> None:
        super().__init__(message)
        self.cause = cause


class NoBackupError(UndoEngineError):
    """``revert`` was called on an operation holding no backing state."""


class NothingToUndoError(UndoEngineError):
    """The history cursor is before the first entry."""


class NothingToRedoError(UndoEngineError):
    """The history cursor is already at the last entry."""


class CompositeSubOperationFailed(UndoEngineError):
    """A child of a composite operation failed.

    Parameters
    ----------
    index : int
        Position of the failing child in insertion order.
    cause : UndoEngineError
        Error returned by the child.
    rolled_back : bool
        Whether the children processed before ``index`` were restored.
    """

    def __init__(self, index: int, cause: UndoEngineError, *, rolled_back: bool = False) -> None:
        super().__init__(f"child operation {index} failed: {cause}")
        self.index = index
        self.cause = cause
        self.rolled_back = rolled_back


class InvariantViolation(UndoEngineError):
    """History state would break the ``(log, cursor)`` invariants."""


class SerializationError(UndoEngineError):
    """A history payload cannot be encoded or decoded."""


def as_failure(exc: BaseException) -> UndoEngineError:
    """Return ``exc`` unchanged if it is an engine error, else wrap it."""

    if isinstance(exc, UndoEngineError):
        return exc
    return OperationFailed(f"{type(exc).__name__}: {exc}", cause=exc)


__all__ = [
    "UndoEngineError",
    "OperationFailed",
    "NoBackupError",
    "NothingToUndoError",
    "NothingToRedoError",
    "CompositeSubOperationFailed",
    "InvariantViolation",
    "SerializationError",
    "as_failure",
]
