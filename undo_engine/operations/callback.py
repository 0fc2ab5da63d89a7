"""Operations built from a pair of plain callables."""

from __future__ import annotations

from typing import Any, Callable, Optional

from .base import ReversibleOperation


class CallbackOperation(ReversibleOperation):
    """Run ``forward`` on apply and ``inverse`` on revert.

    The callables own their state; nothing is captured beyond an "applied"
    marker. ``compensate`` runs after ``inverse`` and is the place to cancel
    side effects such as a queued notification; if it raises, ``forward`` runs
    again so the operation stays applied. Callback operations cannot be
    persisted.

    Examples
    --------
    >>> items = []
    >>> op = CallbackOperation(lambda: items.append(1), items.pop)
    >>> op.apply().is_ok, items
    (True, [1])
    >>> op.revert().is_ok, items
    (True, [])
    """

    def __init__(
        self,
        forward: Callable[[], Any],
        inverse: Callable[[], Any],
        *,
        compensate: Optional[Callable[[], Any]] = None,
        receiver: Any = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(receiver, **kwargs)
        self._forward = forward
        self._inverse = inverse
        self._compensate = compensate

    def capture(self) -> None:
        return None

    def forward(self) -> Any:
        return self._forward()

    def restore(self, backup: None) -> Any:
        return self._inverse()

    def compensate(self) -> None:
        if self._compensate is not None:
            self._compensate()


__all__ = ["CallbackOperation"]
