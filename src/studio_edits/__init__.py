"""Patch application engine and undo/redo history for in-memory projects."""

from studio_edits.history import HistoryManager, HistoryRegistry, create_history_entry
from studio_edits.models import (
    HistoryEntry,
    PatchResult,
    SearchReplaceEdit,
    UnifiedDiffEdit,
    validate_edit,
)
from studio_edits.orchestrator import PatchOrchestrator
from studio_edits.patching import PatchEngine, apply_edits

__version__ = "0.1.0"

__all__ = [
    "HistoryEntry",
    "HistoryManager",
    "HistoryRegistry",
    "PatchEngine",
    "PatchOrchestrator",
    "PatchResult",
    "SearchReplaceEdit",
    "UnifiedDiffEdit",
    "apply_edits",
    "create_history_entry",
    "validate_edit",
]
