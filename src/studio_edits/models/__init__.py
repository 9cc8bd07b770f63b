"""Data models for studio edits."""

from studio_edits.models.edit_models import (
    SEARCH_REPLACE,
    UNIFIED_DIFF,
    Edit,
    FileSnapshot,
    SearchReplaceEdit,
    UnifiedDiffEdit,
    normalize_path,
    validate_edit,
)
from studio_edits.models.exceptions import EditValidationError, ModelError
from studio_edits.models.history_models import (
    EntryMetadata,
    HistoryEntry,
    HistorySummary,
    HistoryTimelineData,
)
from studio_edits.models.result_models import EditOutcome, EditStatus, PatchResult

__all__ = [
    "SEARCH_REPLACE",
    "UNIFIED_DIFF",
    "Edit",
    "EditOutcome",
    "EditStatus",
    "EditValidationError",
    "EntryMetadata",
    "FileSnapshot",
    "HistoryEntry",
    "HistorySummary",
    "HistoryTimelineData",
    "ModelError",
    "PatchResult",
    "SearchReplaceEdit",
    "UnifiedDiffEdit",
    "normalize_path",
    "validate_edit",
]
