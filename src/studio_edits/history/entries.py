"""Construction of history entries."""

import time
import uuid
from typing import Any

from studio_edits.models import HistoryEntry, validate_edit


def create_history_entry(
    edits: list[Any],
    before_state: dict[str, str],
    after_state: dict[str, str],
    explanation: str | None = None,
) -> HistoryEntry:
    """Build an entry for an applied batch.

    Args:
        edits: The batch's edits, as models or wire-format dicts.
        before_state: Snapshot the batch was applied to.
        after_state: Snapshot the batch produced.
        explanation: Optional human-readable summary of the change.

    Returns:
        HistoryEntry with a fresh uuid4 id and the current epoch-ms timestamp.
        The snapshots are copied so later changes to the caller's dicts do
        not leak into history.

    Raises:
        EditValidationError: If an edit record is invalid.
    """
    return HistoryEntry(
        id=str(uuid.uuid4()),
        timestamp=int(time.time() * 1000),
        explanation=explanation,
        edits=[validate_edit(edit) for edit in edits],
        before_state=dict(before_state),
        after_state=dict(after_state),
    )
