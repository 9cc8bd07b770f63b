"""Exceptions for orchestrator operations."""

from studio_edits.models import PatchResult


class OrchestratorError(Exception):
    """Base exception for all orchestrator operations."""


class PatchApplicationError(OrchestratorError):
    """Raised when an edit batch cannot be accepted.

    The engine's full result is kept on `result` so callers can report
    every per-edit failure.
    """

    def __init__(self, message: str, result: PatchResult) -> None:
        super().__init__(message)
        self.result = result
