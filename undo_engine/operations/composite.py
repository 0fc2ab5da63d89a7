# Copyright (c) 2025 Arne Deutsch, itemis AG, MIT License
"""Aggregate several operations into one history entry.

Partial failure policy
----------------------
``apply`` runs children in insertion order and ``revert`` in reverse order.
Both stop at the first failing child and return
:class:`~undo_engine.common.errors.CompositeSubOperationFailed`.

With ``rollback_on_failure=False`` (the default) children processed before
the failure keep their new state. Because children that are already applied
are skipped by ``apply`` (and unapplied ones by ``revert``), calling the same
method again resumes at the failing child.

With ``rollback_on_failure=True`` a failed ``apply`` reverts the children it
applied during that call, newest first, and a failed ``revert`` re-applies the
children it reverted, so the composite is left as it was before the call.
``rolled_back`` on the returned error tells which case occurred; it is
``False`` if the unwind itself hit a failure.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, List, Optional

from undo_engine.common.errors import CompositeSubOperationFailed, NoBackupError, OperationFailed
from undo_engine.common.result import Result

from .base import ChildDecoder, ChildEncoder, ReversibleOperation
from .registry import register

logger = logging.getLogger(__name__)


@register
class CompositeOperation(ReversibleOperation):
    """Sequence of child operations treated as one unit by the history."""

    type_id = "composite"

    def __init__(
        self,
        children: Iterable[ReversibleOperation] = (),
        *,
        rollback_on_failure: bool = False,
        receiver: Any = None,
        description: Optional[str] = None,
        receiver_ref: Optional[str] = None,
    ) -> None:
        super().__init__(receiver, description=description, receiver_ref=receiver_ref)
        self.children: List[ReversibleOperation] = list(children)
        self.rollback_on_failure = rollback_on_failure

    def __len__(self) -> int:
        return len(self.children)

    def add(self, operation: ReversibleOperation) -> "CompositeOperation":
        """Append ``operation``; returns ``self`` for chaining."""

        if self.has_backup:
            raise ValueError("cannot add children to an applied composite")
        self.children.append(operation)
        return self

    # ------------------------------------------------------------------
    def apply(self) -> Result:
        if self.has_backup:
            return Result.fail(OperationFailed(f"{self.description} is already applied"))
        applied: List[ReversibleOperation] = []
        values: List[Any] = []
        for index, child in enumerate(self.children):
            if child.has_backup:
                continue
            result = child.apply()
            if result.is_err:
                rolled_back = False
                if self.rollback_on_failure:
                    rolled_back = self._unwind(reversed(applied), "revert")
                logger.debug("composite %s stopped at child %d", self.description, index)
                return Result.fail(
                    CompositeSubOperationFailed(index, result.error, rolled_back=rolled_back)
                )
            applied.append(child)
            values.append(result.value)
        self._backup = len(self.children)
        return Result.ok(values)

    def revert(self) -> Result:
        if not self.has_backup:
            return Result.fail(NoBackupError(f"{self.description} was never applied"))
        reverted: List[ReversibleOperation] = []
        values: List[Any] = []
        for index in range(len(self.children) - 1, -1, -1):
            child = self.children[index]
            if not child.has_backup:
                continue
            result = child.revert()
            if result.is_err:
                rolled_back = False
                if self.rollback_on_failure:
                    rolled_back = self._unwind(reversed(reverted), "apply")
                logger.debug("composite %s stopped reverting at child %d", self.description, index)
                return Result.fail(
                    CompositeSubOperationFailed(index, result.error, rolled_back=rolled_back)
                )
            reverted.append(child)
            values.append(result.value)
        self.discard_backup()
        return Result.ok(values)

    def _unwind(self, children: Iterable[ReversibleOperation], method: str) -> bool:
        for child in children:
            result = getattr(child, method)()
            if result.is_err:
                logger.error(
                    "composite %s could not %s %s during rollback: %s",
                    self.description,
                    method,
                    child.description,
                    result.error,
                )
                return False
        return True

    # The hooks below are unused: apply/revert delegate to the children.
    def capture(self) -> int:
        return len(self.children)

    def forward(self) -> Any:
        raise NotImplementedError

    def restore(self, backup: Any) -> Any:
        raise NotImplementedError

    # ------------------------------------------------------------------
    def to_state(self, *, encode: ChildEncoder) -> dict:
        state: dict = {
            "rollback_on_failure": self.rollback_on_failure,
            "children": [encode(child) for child in self.children],
        }
        if self.has_backup:
            state["backup"] = self.backup
        return state

    @classmethod
    def from_state(
        cls, state: dict, receiver: Any, *, decode: ChildDecoder
    ) -> "CompositeOperation":
        children = [decode(child) for child in state["children"]]
        op = cls(children, rollback_on_failure=bool(state.get("rollback_on_failure", False)))
        op._load_backup(state)
        return op


__all__ = ["CompositeOperation"]
