"""Exceptions for patch parsing and application.

The patch engine converts these into per-edit error messages; they only
escape from the standalone helpers.
"""


class PatchError(Exception):
    """Base exception for all patching operations."""


class DiffParseError(PatchError):
    """Raised when a unified diff contains no usable hunks."""


class SearchNotFoundError(PatchError):
    """Raised when a search string does not occur in the target content."""
