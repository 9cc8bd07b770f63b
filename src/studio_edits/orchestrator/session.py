"""Caller-side contract: apply a batch, record it, serve undo/redo."""

import logging
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from studio_edits.history import (
    HistoryActionResponse,
    HistoryRegistry,
    create_history_entry,
    handle_history_action,
    list_history,
)
from studio_edits.models import Edit, EditStatus, PatchResult, validate_edit
from studio_edits.orchestrator.exceptions import PatchApplicationError
from studio_edits.patching import PatchEngine

logger = logging.getLogger(__name__)


class ApplyEditsResult(BaseModel):
    """What the orchestrator hands back after a batch was accepted."""

    model_config = ConfigDict(frozen=False)

    files: dict[str, str]
    explanation: str | None = None
    edits: list[Edit] = Field(default_factory=list)
    history_id: str | None = None   # None when nothing changed
    applied_count: int = 0
    failed_count: int = 0
    total_count: int = 0
    errors: list[str] = Field(default_factory=list)
    changed_paths: list[str] = Field(default_factory=list)
    warning: str | None = None      # Set for partially applied batches

    def to_payload(self) -> dict[str, Any]:
        """Render the apply-result record extended with counts and history id."""
        return {
            "success": not self.errors,
            "files": dict(self.files),
            "errors": list(self.errors),
            "applied": self.applied_count,
            "failed": self.failed_count,
            "total": self.total_count,
            "changedFiles": list(self.changed_paths),
            "historyId": self.history_id,
        }

    @classmethod
    def from_rejected(
        cls,
        result: PatchResult,
        explanation: str | None = None,
    ) -> "ApplyEditsResult":
        """View of a batch that was rejected and recorded nowhere."""
        return cls(
            files=result.files,
            explanation=explanation,
            applied_count=result.applied_count,
            failed_count=result.failed_count,
            total_count=result.total_count,
            errors=result.errors,
        )


def _partial_warning(applied: int, total: int, failed: int) -> str:
    return f"Partial success: {applied} of {total} edits applied. {failed} failed."


class PatchOrchestrator:
    """Applies edit batches for editing sessions and records their history.

    Each session id gets its own timeline from the registry; nothing is
    shared between sessions.
    """

    def __init__(
        self,
        engine: PatchEngine | None = None,
        registry: HistoryRegistry | None = None,
        require_all: bool = False,
    ) -> None:
        """Initialize the orchestrator.

        Args:
            engine: Patch engine to use. Defaults to a non-atomic engine.
            registry: Session history registry. Defaults to a fresh one.
            require_all: Reject any batch with a failed edit instead of
                accepting the edits that applied.
        """
        self.engine = engine or PatchEngine()
        self.registry = registry or HistoryRegistry()
        self.require_all = require_all

    def apply_edits(
        self,
        session_id: str,
        working_files: dict[str, str],
        edits: list[Any],
        explanation: str | None = None,
    ) -> ApplyEditsResult:
        """Apply `edits` to the session's working files and record the change.

        Args:
            session_id: Editing session that owns the history.
            working_files: Snapshot the edits were proposed against.
            edits: Edit models or wire-format edit dicts.
            explanation: Optional summary stored on the history entry.

        Returns:
            ApplyEditsResult with the new snapshot. `warning` is set when
            only some edits applied.

        Raises:
            PatchApplicationError: If no edit changed the snapshot, or if
                require_all is set and any edit failed.
        """
        result = self.engine.apply(working_files, edits)

        if result.errors and (self.require_all or result.applied_count == 0):
            if result.applied_count == 0:
                message = "Failed to apply all patches: " + ", ".join(result.errors)
            else:
                message = "Failed to apply patches: " + ", ".join(result.errors)
            logger.error("Session %s: %s", session_id, message)
            raise PatchApplicationError(message, result)

        accepted = [
            validate_edit(edits[outcome.index])
            for outcome in result.outcomes
            if outcome.status != EditStatus.INVALID
        ]

        changed = result.changed_paths(working_files)
        history_id = None
        if changed:
            entry = create_history_entry(accepted, working_files, result.files, explanation)
            self.registry.get(session_id).push(entry)
            history_id = entry.id

        warning = None
        if result.failed_count:
            warning = _partial_warning(result.applied_count, result.total_count, result.failed_count)
            logger.warning("Session %s: %s", session_id, warning)

        return ApplyEditsResult(
            files=result.files,
            explanation=explanation,
            edits=accepted,
            history_id=history_id,
            applied_count=result.applied_count,
            failed_count=result.failed_count,
            total_count=result.total_count,
            errors=result.errors,
            changed_paths=changed,
            warning=warning,
        )

    def history_action(
        self,
        session_id: str,
        payload: dict[str, Any],
    ) -> HistoryActionResponse:
        """Run a history action (undo/redo/get/clear/summary) for a session."""
        return handle_history_action(self.registry.get(session_id), payload)

    def history_listing(self, session_id: str) -> dict[str, Any]:
        return list_history(self.registry.get(session_id))

    def end_session(self, session_id: str) -> bool:
        """Discard a session's timeline."""
        return self.registry.discard(session_id)
