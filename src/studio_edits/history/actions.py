"""Request/response protocol for history actions.

A thin route layer passes the decoded request body to
handle_history_action() and serialises the response with to_payload(),
using status_code as the HTTP status.
"""

import logging
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from studio_edits.history.manager import HistoryManager
from studio_edits.models import EntryMetadata, HistoryEntry, HistorySummary

logger = logging.getLogger(__name__)

HistoryAction = Literal["undo", "redo", "get", "clear", "summary"]

NOTHING_TO_UNDO = "Nothing to undo"
NOTHING_TO_REDO = "Nothing to redo"
ENTRY_NOT_FOUND = "Entry not found"
ENTRY_ID_REQUIRED = "entryId required for get action"
INVALID_REQUEST = "Invalid request body"


class HistoryActionRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    action: HistoryAction
    entry_id: str | None = Field(default=None, alias="entryId")


class HistoryActionResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = False
    status_code: int = Field(default=200, exclude=True)
    action: str | None = None
    files: dict[str, str] | None = None        # Snapshot to display after undo/redo
    entry: HistoryEntry | EntryMetadata | None = None
    summary: HistorySummary | None = None
    cleared_entries: int | None = Field(default=None, alias="clearedEntries")
    error: str | None = None

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


def _error(message: str, status_code: int = 400) -> HistoryActionResponse:
    return HistoryActionResponse(success=False, status_code=status_code, error=message)


def handle_history_action(
    manager: HistoryManager,
    payload: dict[str, Any] | HistoryActionRequest,
) -> HistoryActionResponse:
    """Run one history action against `manager`.

    Args:
        manager: The requesting session's history.
        payload: ``{"action": ..., "entryId": ...}`` or a parsed request.

    Returns:
        HistoryActionResponse. Failures (nothing to undo/redo, unknown entry,
        malformed body) come back as responses with `error` set, never as
        exceptions.
    """
    if isinstance(payload, HistoryActionRequest):
        request = payload
    else:
        try:
            request = HistoryActionRequest.model_validate(payload)
        except ValidationError as exc:
            logger.warning("Invalid history request body: %s", exc.errors())
            return _error(INVALID_REQUEST)

    logger.info("Processing history action %s", request.action)

    if request.action == "undo":
        entry = manager.undo()
        if entry is None:
            logger.warning("Undo requested but nothing to undo")
            return _error(NOTHING_TO_UNDO)
        logger.info("Undo completed for entry %s (%d edits)", entry.id, len(entry.edits))
        return HistoryActionResponse(
            success=True,
            action="undo",
            files=entry.before_state,
            entry=EntryMetadata.from_entry(entry),
        )

    if request.action == "redo":
        entry = manager.redo()
        if entry is None:
            logger.warning("Redo requested but nothing to redo")
            return _error(NOTHING_TO_REDO)
        logger.info("Redo completed for entry %s (%d edits)", entry.id, len(entry.edits))
        return HistoryActionResponse(
            success=True,
            action="redo",
            files=entry.after_state,
            entry=EntryMetadata.from_entry(entry),
        )

    if request.action == "get":
        if not request.entry_id:
            logger.warning("Get action requested without entryId")
            return _error(ENTRY_ID_REQUIRED)
        entry = manager.get_entry_by_id(request.entry_id)
        if entry is None:
            logger.warning("History entry %s not found", request.entry_id)
            return _error(ENTRY_NOT_FOUND, status_code=404)
        return HistoryActionResponse(success=True, action="get", entry=entry)

    if request.action == "clear":
        cleared = manager.clear()
        logger.info("History cleared (%d entries)", cleared)
        return HistoryActionResponse(success=True, action="clear", cleared_entries=cleared)

    summary = manager.get_summary()
    return HistoryActionResponse(success=True, action="summary", summary=summary)


def list_history(manager: HistoryManager) -> dict[str, Any]:
    """Listing of every entry's metadata plus the timeline summary."""
    entries = manager.get_history()
    return {
        "history": [
            {
                "id": entry.id,
                "timestamp": entry.timestamp,
                "explanation": entry.explanation,
                "editsCount": len(entry.edits),
            }
            for entry in entries
        ],
        "summary": manager.get_summary().model_dump(by_alias=True),
    }
