"""Orchestration of patch application and per-session history."""

from studio_edits.orchestrator.exceptions import OrchestratorError, PatchApplicationError
from studio_edits.orchestrator.session import ApplyEditsResult, PatchOrchestrator

__all__ = [
    "ApplyEditsResult",
    "OrchestratorError",
    "PatchApplicationError",
    "PatchOrchestrator",
]
