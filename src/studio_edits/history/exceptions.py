"""Exceptions for history operations.

Undo/redo on an empty timeline is not an error; those return None.
"""


class HistoryError(Exception):
    """Base exception for all history operations."""


class HistoryRestoreError(HistoryError):
    """Raised when a serialised timeline cannot be restored."""
