# Copyright (c) 2025 Arne Deutsch, itemis AG, MIT License
"""Reversible operation contract.

Summary
-------
A :class:`ReversibleOperation` mutates a caller-owned *receiver* in
:meth:`~ReversibleOperation.apply` and restores it in
:meth:`~ReversibleOperation.revert`. Backing state is captured before the
forward action touches the receiver and is held by the operation itself, so
the history log only needs to keep operation instances.

Subclasses implement four hooks:

``validate``
    Precondition check; raise :class:`OperationFailed` to refuse the apply.
``capture``
    Return the backing state (snapshot, delta, or a marker for
    inverse-by-computation operations).
``forward``
    Mutate the receiver and return the success value.
``restore``
    Undo the mutation from the backing state and return the success value.

Side effects that cannot be restored from receiver state (notifications,
scheduled jobs) belong in ``forward``; an operation that can compensate for
them overrides :meth:`~ReversibleOperation.compensate`, otherwise they are
irreversible.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, ClassVar, Optional

from undo_engine.common.errors import (
    InvariantViolation,
    NoBackupError,
    OperationFailed,
    as_failure,
)
from undo_engine.common.result import Result

logger = logging.getLogger(__name__)

_NO_BACKUP = object()

ChildDecoder = Callable[[dict], "ReversibleOperation"]
ChildEncoder = Callable[["ReversibleOperation"], dict]


class ReversibleOperation(ABC):
    """One unit of reversible work against a receiver."""

    type_id: ClassVar[str] = ""

    def __init__(
        self,
        receiver: Any,
        *,
        description: Optional[str] = None,
        receiver_ref: Optional[str] = None,
    ) -> None:
        self.receiver = receiver
        self.description = description or type(self).__name__
        self.receiver_ref = receiver_ref
        self._backup: Any = _NO_BACKUP

    def __repr__(self) -> str:
        state = "applied" if self.has_backup else "unapplied"
        return f"<{type(self).__name__} {self.description!r} {state}>"

    # ------------------------------------------------------------------
    @property
    def has_backup(self) -> bool:
        """Whether backing state from a successful ``apply`` is held."""

        return self._backup is not _NO_BACKUP

    @property
    def backup(self) -> Any:
        if not self.has_backup:
            raise NoBackupError(f"{self.description} holds no backing state")
        return self._backup

    def discard_backup(self) -> None:
        """Drop captured backing state; ``revert`` fails afterwards."""

        self._backup = _NO_BACKUP

    # ------------------------------------------------------------------
    def apply(self) -> Result:
        """Capture backing state, then run the forward action.

        A failure leaves the receiver unmodified and no backing state held.
        """

        if self.has_backup:
            return Result.fail(OperationFailed(f"{self.description} is already applied"))
        try:
            self.validate()
            backup = self.capture()
        except Exception as exc:
            return Result.fail(as_failure(exc))
        try:
            value = self.forward()
        except Exception as exc:
            logger.debug("forward action of %s failed: %s", self.description, exc)
            try:
                self.recover(backup)
            except Exception as recover_exc:
                logger.error("could not recover receiver after failed %s", self.description)
                raise InvariantViolation(
                    f"{self.description} left its receiver partially modified"
                ) from recover_exc
            return Result.fail(as_failure(exc))
        self._backup = backup
        return Result.ok(value)

    def revert(self) -> Result:
        """Restore the receiver from backing state captured by ``apply``."""

        if not self.has_backup:
            return Result.fail(NoBackupError(f"{self.description} was never applied"))
        try:
            value = self.restore(self._backup)
        except Exception as exc:
            return Result.fail(as_failure(exc))
        try:
            self.compensate()
        except Exception as exc:
            # the receiver must stay applied while the backup is held
            logger.debug("compensation of %s failed: %s", self.description, exc)
            self._reapply()
            return Result.fail(as_failure(exc))
        self._backup = _NO_BACKUP
        return Result.ok(value)

    def _reapply(self) -> None:
        try:
            self.forward()
        except Exception as exc:
            logger.error("could not re-apply %s after failed compensation", self.description)
            raise InvariantViolation(
                f"{self.description} left its receiver partially reverted"
            ) from exc

    # ------------------------------------------------------------------
    def validate(self) -> None:
        """Check preconditions before anything is captured or mutated."""

    @abstractmethod
    def capture(self) -> Any:
        """Return the backing state needed by :meth:`restore`."""

    @abstractmethod
    def forward(self) -> Any:
        """Mutate the receiver."""

    @abstractmethod
    def restore(self, backup: Any) -> Any:
        """Reverse :meth:`forward` using ``backup``."""

    def recover(self, backup: Any) -> None:
        """Undo a partially completed ``forward`` call.

        Operations whose forward action is a single assignment have nothing
        to recover; state-capturing strategies restore their backup here.
        """

    def compensate(self) -> None:
        """Compensate external side effects of ``forward`` during ``revert``.

        Runs after :meth:`restore`. If it raises, ``forward`` is run again so
        the receiver is left applied and the backup stays usable.
        """

    # ------------------------------------------------------------------
    def to_state(self, *, encode: ChildEncoder) -> dict:
        """Return a JSON-compatible description of parameters and backup."""

        raise NotImplementedError(f"{type(self).__name__} is not serializable")

    @classmethod
    def from_state(
        cls, state: dict, receiver: Any, *, decode: ChildDecoder
    ) -> "ReversibleOperation":
        """Rebuild an operation from :meth:`to_state` output."""

        raise NotImplementedError(f"{cls.__name__} is not serializable")

    def _load_backup(self, state: dict) -> None:
        if "backup" in state:
            self._backup = state["backup"]


__all__ = ["ChildDecoder", "ChildEncoder", "ReversibleOperation"]
