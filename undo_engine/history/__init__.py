# Copyright (c) 2025 Arne Deutsch, itemis AG, MIT License
"""Undo/redo history management."""

from .events import HistoryEvent, HistoryEventLog
from .manager import DEFAULT_CAPACITY, HistoryManager

__all__ = ["DEFAULT_CAPACITY", "HistoryEvent", "HistoryEventLog", "HistoryManager"]
