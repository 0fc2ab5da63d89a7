"""Explicit success/failure return values."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, Optional, TypeVar

from .errors import UndoEngineError

T = TypeVar("T")


@dataclass(frozen=True)
class Result(Generic[T]):
    """Outcome of an ``apply``/``revert``/``execute``/``undo``/``redo`` call.

    Exactly one of ``value`` or ``error`` is meaningful: a result is a failure
    iff ``error`` is set. The truth value of a result equals :attr:`is_ok`.

    Examples
    --------
    >>> Result.ok(3).unwrap()
    3
    >>> bool(Result.fail(UndoEngineError("boom")))
    False
    """

    value: Optional[T] = None
    error: Optional[UndoEngineError] = None

    @classmethod
    def ok(cls, value: Any = None) -> "Result[Any]":
        return cls(value=value)

    @classmethod
    def fail(cls, error: UndoEngineError) -> "Result[Any]":
        if error is None:
            raise TypeError("a failed result needs an error")
        return cls(error=error)

    @property
    def is_ok(self) -> bool:
        return self.error is None

    @property
    def is_err(self) -> bool:
        return self.error is not None

    def unwrap(self) -> Optional[T]:
        """Return ``value`` or raise the contained error."""

        if self.error is not None:
            raise self.error
        return self.value

    def unwrap_or(self, default: Any) -> Any:
        return default if self.error is not None else self.value

    def __bool__(self) -> bool:
        return self.is_ok


__all__ = ["Result"]
