"""Registry mapping operation type identifiers to classes."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable, Dict, Optional, Type, TypeVar

from undo_engine.common.errors import SerializationError

if TYPE_CHECKING:  # pragma: no cover - typing only
    from .base import ReversibleOperation

ReceiverResolver = Callable[[Optional[str]], Any]
OpT = TypeVar("OpT", bound="Type[ReversibleOperation]")


class OperationRegistry:
    """Look up operation classes by their ``type_id``.

    Summary
    -------
    Persistence stores each history entry as ``{"type": ..., "ref": ...,
    "description": ..., "applied": ..., "state": {...}}``. The registry turns
    such an entry back into an operation bound to a live receiver.
    """

    def __init__(self) -> None:
        self._types: Dict[str, Type["ReversibleOperation"]] = {}

    def register(self, cls: OpT) -> OpT:
        """Register ``cls`` under ``cls.type_id``; usable as a decorator."""

        type_id = getattr(cls, "type_id", "")
        if not type_id:
            raise ValueError(f"{cls.__name__} has no type_id")
        existing = self._types.get(type_id)
        if existing is not None and existing is not cls:
            raise ValueError(f"type_id {type_id!r} already registered by {existing.__name__}")
        self._types[type_id] = cls
        return cls

    def get(self, type_id: str) -> Type["ReversibleOperation"]:
        try:
            return self._types[type_id]
        except KeyError:
            raise SerializationError(f"unknown operation type {type_id!r}") from None

    def __contains__(self, type_id: object) -> bool:
        return type_id in self._types

    def types(self) -> list[str]:
        return sorted(self._types)

    def encode(self, op: "ReversibleOperation") -> dict:
        """Return the persisted form of ``op``."""

        if self._types.get(op.type_id) is not type(op):
            raise SerializationError(f"{type(op).__name__} is not a registered operation type")
        try:
            state = op.to_state(encode=self.encode)
        except NotImplementedError as exc:
            raise SerializationError(str(exc)) from exc
        return {
            "type": op.type_id,
            "ref": op.receiver_ref,
            "description": op.description,
            "applied": op.has_backup,
            "state": state,
        }

    def decode(self, entry: dict, resolve_receiver: ReceiverResolver) -> "ReversibleOperation":
        """Rebuild an operation from ``entry`` bound to a resolved receiver."""

        try:
            type_id = entry["type"]
            state = entry["state"]
        except (KeyError, TypeError) as exc:
            raise SerializationError(f"malformed history entry: {entry!r}") from exc
        cls = self.get(type_id)
        ref = entry.get("ref")
        receiver = resolve_receiver(ref)

        def decode_child(child: dict) -> "ReversibleOperation":
            return self.decode(child, resolve_receiver)

        try:
            op = cls.from_state(state, receiver, decode=decode_child)
        except SerializationError:
            raise
        except (KeyError, TypeError, ValueError) as exc:
            raise SerializationError(f"invalid state for {type_id!r}: {exc}") from exc
        op.receiver_ref = ref
        if entry.get("description"):
            op.description = entry["description"]
        if not entry.get("applied", False):
            op.discard_backup()
        return op


default_registry = OperationRegistry()


def register(cls: OpT) -> OpT:
    """Register ``cls`` with :data:`default_registry`."""

    return default_registry.register(cls)


__all__ = ["OperationRegistry", "ReceiverResolver", "default_registry", "register"]
