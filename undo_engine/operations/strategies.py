"""Concrete operations for the three backing-state strategies.

``SnapshotOperation`` / ``ReplaceStateOperation``
    Full snapshot of every governed field, deep-copied before the mutation
    and held read-only.
``SetFieldsOperation``
    Delta: only the fields the forward action assigns are captured.
``IncrementOperation``
    Inverse by computation: nothing is stored, ``revert`` subtracts the integer
    amount that ``apply`` added.
"""

from __future__ import annotations

import copy
import numbers
from types import MappingProxyType
from typing import Any, Callable, Mapping, Optional, Sequence

from undo_engine.common.errors import OperationFailed

from .base import ChildDecoder, ChildEncoder, ReversibleOperation
from .fields import has_field, read_field, write_field
from .registry import register


class SnapshotOperation(ReversibleOperation):
    """Snapshot ``fields`` of the receiver, then run a mutator.

    Either pass ``mutator`` (called with the receiver) or override
    :meth:`mutate` in a subclass. Only the listed fields are restored on
    ``revert``; anything else the mutator touches is out of its governance.
    """

    def __init__(
        self,
        receiver: Any,
        fields: Sequence[str],
        mutator: Optional[Callable[[Any], Any]] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(receiver, **kwargs)
        self.fields = tuple(fields)
        self._mutator = mutator

    def validate(self) -> None:
        missing = [name for name in self.fields if not has_field(self.receiver, name)]
        if missing:
            raise OperationFailed(f"receiver is missing fields {missing}")

    def capture(self) -> Mapping[str, Any]:
        values = {name: copy.deepcopy(read_field(self.receiver, name)) for name in self.fields}
        return MappingProxyType(values)

    def forward(self) -> Any:
        return self.mutate()

    def mutate(self) -> Any:
        if self._mutator is None:
            raise NotImplementedError(f"{type(self).__name__} needs a mutator")
        return self._mutator(self.receiver)

    def restore(self, backup: Mapping[str, Any]) -> dict:
        for name, value in backup.items():
            # copy so the held snapshot survives later in-place edits
            write_field(self.receiver, name, copy.deepcopy(value))
        return dict(backup)

    def recover(self, backup: Mapping[str, Any]) -> None:
        self.restore(backup)


@register
class ReplaceStateOperation(SnapshotOperation):
    """Assign ``values`` after snapshotting every governed field.

    ``fields`` defaults to the keys of ``values``; pass a wider list to
    snapshot related fields that other code may derive from the new values.
    """

    type_id = "replace_state"

    def __init__(
        self,
        receiver: Any,
        values: Mapping[str, Any],
        fields: Optional[Sequence[str]] = None,
        **kwargs: Any,
    ) -> None:
        self.values = copy.deepcopy(dict(values))
        super().__init__(receiver, fields if fields is not None else list(self.values), **kwargs)

    def validate(self) -> None:
        super().validate()
        extra = sorted(set(self.values) - set(self.fields))
        if extra:
            raise OperationFailed(f"fields {extra} are assigned but not snapshotted")

    def mutate(self) -> dict:
        for name, value in self.values.items():
            write_field(self.receiver, name, copy.deepcopy(value))
        return dict(self.values)

    def to_state(self, *, encode: ChildEncoder) -> dict:
        state = {"values": dict(self.values), "fields": list(self.fields)}
        if self.has_backup:
            state["backup"] = dict(self.backup)
        return state

    @classmethod
    def from_state(
        cls, state: dict, receiver: Any, *, decode: ChildDecoder
    ) -> "ReplaceStateOperation":
        op = cls(receiver, state["values"], state["fields"])
        if "backup" in state:
            op._backup = MappingProxyType(dict(state["backup"]))
        return op


@register
class SetFieldsOperation(ReversibleOperation):
    """Assign ``values`` to the receiver, remembering only the old values."""

    type_id = "set_fields"

    def __init__(self, receiver: Any, values: Mapping[str, Any], **kwargs: Any) -> None:
        super().__init__(receiver, **kwargs)
        if not values:
            raise ValueError("SetFieldsOperation needs at least one field")
        self.values = copy.deepcopy(dict(values))

    def validate(self) -> None:
        missing = [name for name in self.values if not has_field(self.receiver, name)]
        if missing:
            raise OperationFailed(f"receiver is missing fields {missing}")

    def capture(self) -> dict:
        return {name: copy.deepcopy(read_field(self.receiver, name)) for name in self.values}

    def forward(self) -> dict:
        for name, value in self.values.items():
            # the receiver must not share objects with the recorded values
            write_field(self.receiver, name, copy.deepcopy(value))
        return dict(self.values)

    def restore(self, backup: dict) -> dict:
        for name, value in backup.items():
            write_field(self.receiver, name, copy.deepcopy(value))
        return dict(backup)

    def recover(self, backup: dict) -> None:
        self.restore(backup)

    def to_state(self, *, encode: ChildEncoder) -> dict:
        state = {"values": dict(self.values)}
        if self.has_backup:
            state["backup"] = dict(self.backup)
        return state

    @classmethod
    def from_state(
        cls, state: dict, receiver: Any, *, decode: ChildDecoder
    ) -> "SetFieldsOperation":
        op = cls(receiver, state["values"])
        op._load_backup(state)
        return op


def set_field(receiver: Any, name: str, value: Any, **kwargs: Any) -> SetFieldsOperation:
    """Return an operation assigning a single field, e.g. a title."""

    kwargs.setdefault("description", f"Set {name}")
    return SetFieldsOperation(receiver, {name: value}, **kwargs)


def _is_integer(value: Any) -> bool:
    return isinstance(value, numbers.Integral) and not isinstance(value, bool)


@register
class IncrementOperation(ReversibleOperation):
    """Add an integer ``amount`` to an integer field; ``revert`` subtracts it.

    Only integers are accepted because float addition does not invert
    exactly. ``bool`` values are refused so a flag never turns into an int.
    """

    type_id = "increment"

    def __init__(
        self, receiver: Any, field: str, amount: int = 1, **kwargs: Any
    ) -> None:
        super().__init__(receiver, **kwargs)
        if not _is_integer(amount):
            raise TypeError("amount must be an integer")
        self.field = field
        self.amount = amount

    def validate(self) -> None:
        current = read_field(self.receiver, self.field)
        if not _is_integer(current):
            raise OperationFailed(f"field {self.field!r} is not an integer")

    def capture(self) -> None:
        return None

    def forward(self) -> Any:
        value = read_field(self.receiver, self.field) + self.amount
        write_field(self.receiver, self.field, value)
        return value

    def restore(self, backup: None) -> Any:
        value = read_field(self.receiver, self.field) - self.amount
        write_field(self.receiver, self.field, value)
        return value

    def to_state(self, *, encode: ChildEncoder) -> dict:
        state: dict = {"field": self.field, "amount": self.amount}
        if self.has_backup:
            state["backup"] = None
        return state

    @classmethod
    def from_state(
        cls, state: dict, receiver: Any, *, decode: ChildDecoder
    ) -> "IncrementOperation":
        op = cls(receiver, state["field"], state["amount"])
        op._load_backup(state)
        return op


__all__ = [
    "SnapshotOperation",
    "ReplaceStateOperation",
    "SetFieldsOperation",
    "IncrementOperation",
    "set_field",
]
