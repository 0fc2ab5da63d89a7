# Copyright (c) 2025 Arne Deutsch, itemis AG, MIT License
"""Reversible operations and the strategies they use to restore state."""

from .base import ReversibleOperation
from .callback import CallbackOperation
from .composite import CompositeOperation
from .fields import has_field, read_field, write_field
from .registry import OperationRegistry, default_registry, register
from .strategies import (
    IncrementOperation,
    ReplaceStateOperation,
    SetFieldsOperation,
    SnapshotOperation,
    set_field,
)

__all__ = [
    "ReversibleOperation",
    "CallbackOperation",
    "CompositeOperation",
    "SnapshotOperation",
    "ReplaceStateOperation",
    "SetFieldsOperation",
    "IncrementOperation",
    "set_field",
    "OperationRegistry",
    "default_registry",
    "register",
    "has_field",
    "read_field",
    "write_field",
]
