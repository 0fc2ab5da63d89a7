"""Uniform field access for attribute objects and mutable mappings."""

from __future__ import annotations

from collections.abc import Mapping, MutableMapping
from typing import Any

from undo_engine.common.errors import OperationFailed


def has_field(receiver: Any, name: str) -> bool:
    if isinstance(receiver, Mapping):
        return name in receiver
    return hasattr(receiver, name)


def read_field(receiver: Any, name: str) -> Any:
    """Return ``name`` from ``receiver`` or fail with :class:`OperationFailed`."""

    try:
        if isinstance(receiver, Mapping):
            return receiver[name]
        return getattr(receiver, name)
    except (KeyError, AttributeError) as exc:
        raise OperationFailed(f"receiver has no field {name!r}", cause=exc) from exc


def write_field(receiver: Any, name: str, value: Any) -> None:
    if isinstance(receiver, MutableMapping):
        receiver[name] = value
    else:
        setattr(receiver, name, value)


__all__ = ["has_field", "read_field", "write_field"]
