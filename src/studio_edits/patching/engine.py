"""Patch engine: applies an ordered edit batch to a file snapshot."""

import logging
from typing import Any

from studio_edits.models import (
    SEARCH_REPLACE,
    UNIFIED_DIFF,
    EditOutcome,
    EditStatus,
    EditValidationError,
    PatchResult,
    SearchReplaceEdit,
    UnifiedDiffEdit,
    normalize_path,
    validate_edit,
)
from studio_edits.patching.exceptions import DiffParseError
from studio_edits.patching.search_replace import replace_first
from studio_edits.patching.unified_diff import apply_hunks, parse_unified_diff

logger = logging.getLogger(__name__)


def _raw_path(raw: Any) -> str:
    if isinstance(raw, dict):
        path = raw.get("filePath", raw.get("file_path"))
        if isinstance(path, str) and path:
            return normalize_path(path)
    return ""


def _raw_type(raw: Any) -> str | None:
    if isinstance(raw, dict) and isinstance(raw.get("type"), str):
        return raw["type"]
    return None


class PatchEngine:
    """Applies edit batches to snapshots without mutating them.

    The engine holds no state between calls; one instance can serve any
    number of concurrent callers as long as each passes its own snapshot.
    """

    def __init__(self, atomic: bool = False) -> None:
        """Initialize the engine.

        Args:
            atomic: Default for apply(). When True, a batch with any error
                returns the base snapshot unchanged.
        """
        self.atomic = atomic

    def apply(
        self,
        base: dict[str, str],
        edits: list[Any],
        atomic: bool | None = None,
    ) -> PatchResult:
        """Apply `edits` in order to a copy of `base`.

        Every edit sees the content produced by the edits before it. Failed
        or invalid edits leave their target untouched and are reported in
        `errors`; the batch always runs to the end.

        Args:
            base: Snapshot to start from. Never modified.
            edits: Edit models or wire-format edit dicts.
            atomic: Overrides the engine default for this call.

        Returns:
            PatchResult with success == (no errors), the resulting files,
            every error message and one EditOutcome per edit.
        """
        atomic = self.atomic if atomic is None else atomic
        files = dict(base)
        outcomes: list[EditOutcome] = []

        for index, raw in enumerate(edits):
            try:
                edit = validate_edit(raw)
            except EditValidationError as exc:
                logger.warning("Rejected edit %d: %s", index, exc)
                outcomes.append(
                    EditOutcome(
                        index=index,
                        file_path=_raw_path(raw),
                        edit_type=_raw_type(raw),
                        status=EditStatus.INVALID,
                        errors=[str(exc)],
                    )
                )
                continue

            if edit.file_path not in files:
                outcome = EditOutcome(
                    index=index,
                    file_path=edit.file_path,
                    edit_type=edit.type,
                    status=EditStatus.FAILED,
                    errors=[f"file not found: {edit.file_path}"],
                )
            elif edit.type == SEARCH_REPLACE:
                outcome = self._apply_search_replace(index, edit, files)
            else:
                outcome = self._apply_unified_diff(index, edit, files)

            if outcome.errors:
                logger.warning("Edit %d on %s: %s", index, edit.file_path, "; ".join(outcome.errors))
            else:
                logger.debug("Applied %s edit %d to %s", edit.type, index, edit.file_path)
            outcomes.append(outcome)

        errors = [message for outcome in outcomes for message in outcome.errors]
        rolled_back = atomic and bool(errors)
        if rolled_back:
            files = dict(base)

        result = PatchResult(
            success=not errors,
            files=files,
            errors=errors,
            outcomes=outcomes,
            rolled_back=rolled_back,
        )
        logger.info(
            "Patch batch finished: %d of %d edits applied, %d failed%s",
            result.applied_count,
            result.total_count,
            result.failed_count,
            " (rolled back)" if rolled_back else "",
        )
        return result

    def _apply_search_replace(
        self,
        index: int,
        edit: SearchReplaceEdit,
        files: dict[str, str],
    ) -> EditOutcome:
        new_content = replace_first(files[edit.file_path], edit.search, edit.replace)
        if new_content is None:
            return EditOutcome(
                index=index,
                file_path=edit.file_path,
                edit_type=edit.type,
                status=EditStatus.FAILED,
                errors=[f"search string not found in {edit.file_path}"],
                hunks_total=1,
            )

        files[edit.file_path] = new_content
        return EditOutcome(
            index=index,
            file_path=edit.file_path,
            edit_type=edit.type,
            status=EditStatus.APPLIED,
            hunks_applied=1,
            hunks_total=1,
        )

    def _apply_unified_diff(
        self,
        index: int,
        edit: UnifiedDiffEdit,
        files: dict[str, str],
    ) -> EditOutcome:
        try:
            hunks = parse_unified_diff(edit.diff, edit.file_path)
        except DiffParseError as exc:
            return EditOutcome(
                index=index,
                file_path=edit.file_path,
                edit_type=edit.type,
                status=EditStatus.FAILED,
                errors=[f"failed to parse diff for {edit.file_path}: {exc}"],
            )

        new_content, failed = apply_hunks(files[edit.file_path], hunks)
        applied = len(hunks) - len(failed)
        if applied:
            files[edit.file_path] = new_content

        if not failed:
            status = EditStatus.APPLIED
        elif applied:
            status = EditStatus.PARTIAL
        else:
            status = EditStatus.FAILED

        return EditOutcome(
            index=index,
            file_path=edit.file_path,
            edit_type=UNIFIED_DIFF,
            status=status,
            errors=[f"hunk context mismatch in {edit.file_path}" for _ in failed],
            hunks_applied=applied,
            hunks_total=len(hunks),
        )


def apply_edits(
    base: dict[str, str],
    edits: list[Any],
    atomic: bool = False,
) -> PatchResult:
    """Apply `edits` to `base` with a default PatchEngine."""
    return PatchEngine(atomic=atomic).apply(base, edits)
