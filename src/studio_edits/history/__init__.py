"""Undo/redo history of applied edit batches."""

from studio_edits.history.actions import (
    HistoryActionRequest,
    HistoryActionResponse,
    handle_history_action,
    list_history,
)
from studio_edits.history.entries import create_history_entry
from studio_edits.history.exceptions import HistoryError, HistoryRestoreError
from studio_edits.history.manager import DEFAULT_MAX_HISTORY_SIZE, HistoryManager
from studio_edits.history.sessions import HistoryRegistry

__all__ = [
    "DEFAULT_MAX_HISTORY_SIZE",
    "HistoryActionRequest",
    "HistoryActionResponse",
    "HistoryError",
    "HistoryManager",
    "HistoryRegistry",
    "HistoryRestoreError",
    "create_history_entry",
    "handle_history_action",
    "list_history",
]
