"""Linear undo/redo history over file snapshots."""

import json
import logging
import threading
from typing import Any

from pydantic import ValidationError

from studio_edits.history.exceptions import HistoryRestoreError
from studio_edits.models import HistoryEntry, HistorySummary, HistoryTimelineData

logger = logging.getLogger(__name__)

DEFAULT_MAX_HISTORY_SIZE = 100


class HistoryManager:
    """Ordered history entries plus a cursor marking the current entry.

    `current_index` is -1 before the first entry. Entries after the cursor
    form the redo branch; pushing while a redo branch exists discards it.
    The timeline is capped at `max_history_size` entries, evicting the
    oldest first.

    All operations take an instance lock, so a manager may be shared by the
    threads serving one editing session. Each session should own its own
    manager (see HistoryRegistry).
    """

    def __init__(self, max_history_size: int = DEFAULT_MAX_HISTORY_SIZE) -> None:
        self.max_history_size = max(1, max_history_size)
        self._entries: list[HistoryEntry] = []
        self._current_index = -1
        self._lock = threading.RLock()

    def push(self, entry: HistoryEntry) -> None:
        """Append `entry` after the cursor, discarding any redo branch."""
        with self._lock:
            discarded = len(self._entries) - (self._current_index + 1)
            del self._entries[self._current_index + 1 :]
            self._entries.append(entry)
            self._current_index = len(self._entries) - 1

            excess = len(self._entries) - self.max_history_size
            if excess > 0:
                del self._entries[:excess]
                self._current_index -= excess

            logger.debug(
                "Pushed history entry %s (discarded %d redo, evicted %d)",
                entry.id,
                discarded,
                max(excess, 0),
            )

    def undo(self) -> HistoryEntry | None:
        """Step back one entry.

        Returns:
            The entry being undone (restore its before_state), or None if
            there is nothing to undo.
        """
        with self._lock:
            if self._current_index < 0:
                return None
            entry = self._entries[self._current_index]
            self._current_index -= 1
            return entry

    def redo(self) -> HistoryEntry | None:
        """Step forward one entry.

        Returns:
            The entry being redone (restore its after_state), or None if
            there is nothing to redo.
        """
        with self._lock:
            if self._current_index >= len(self._entries) - 1:
                return None
            self._current_index += 1
            return self._entries[self._current_index]

    def can_undo(self) -> bool:
        with self._lock:
            return self._current_index >= 0

    def can_redo(self) -> bool:
        with self._lock:
            return self._current_index < len(self._entries) - 1

    def get_current_state(self) -> dict[str, str] | None:
        """After-state of the current entry, or None before the first entry."""
        with self._lock:
            if self._current_index < 0:
                return None
            return dict(self._entries[self._current_index].after_state)

    def get_undo_state(self) -> dict[str, str] | None:
        """Snapshot undo() would restore, without moving the cursor."""
        with self._lock:
            if self._current_index < 0:
                return None
            return dict(self._entries[self._current_index].before_state)

    def get_redo_state(self) -> dict[str, str] | None:
        """Snapshot redo() would restore, without moving the cursor."""
        with self._lock:
            if self._current_index >= len(self._entries) - 1:
                return None
            return dict(self._entries[self._current_index + 1].after_state)

    def get_history(self) -> list[HistoryEntry]:
        with self._lock:
            return list(self._entries)

    def get_current_index(self) -> int:
        with self._lock:
            return self._current_index

    def get_entry_by_id(self, entry_id: str) -> HistoryEntry | None:
        with self._lock:
            for entry in self._entries:
                if entry.id == entry_id:
                    return entry
            return None

    def get_recent_entries(self, limit: int = 10) -> list[HistoryEntry]:
        """The last `limit` entries, oldest first."""
        with self._lock:
            if limit <= 0:
                return []
            return self._entries[-limit:]

    def clear(self) -> int:
        """Reset to the initial state.

        Returns:
            Number of entries discarded.
        """
        with self._lock:
            cleared = len(self._entries)
            self._entries = []
            self._current_index = -1
            logger.debug("Cleared %d history entries", cleared)
            return cleared

    def get_summary(self) -> HistorySummary:
        with self._lock:
            total = len(self._entries)
            return HistorySummary(
                total_entries=total,
                current_index=self._current_index,
                can_undo=self._current_index >= 0,
                can_redo=self._current_index < total - 1,
                undo_count=self._current_index + 1,
                redo_count=total - self._current_index - 1,
            )

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    # Serialisation

    def to_dict(self) -> dict[str, Any]:
        """Export as ``{"history": [...], "currentIndex": n}`` (camelCase keys)."""
        with self._lock:
            data = HistoryTimelineData(
                history=list(self._entries),
                current_index=self._current_index,
            )
        return data.model_dump(mode="json", by_alias=True, exclude_none=True)

    def to_json(self) -> str:
        return json.dumps(self.to_dict())

    @classmethod
    def from_dict(
        cls,
        data: dict[str, Any],
        max_history_size: int = DEFAULT_MAX_HISTORY_SIZE,
    ) -> "HistoryManager":
        """Restore a manager from the to_dict() shape.

        A cursor outside ``[-1, len - 1]`` is clamped into range, and
        entries beyond `max_history_size` are evicted oldest first.

        Raises:
            HistoryRestoreError: If `data` does not match the timeline shape.
        """
        try:
            timeline = HistoryTimelineData.model_validate(data)
        except ValidationError as exc:
            raise HistoryRestoreError(f"Invalid history data: {exc}") from exc

        manager = cls(max_history_size=max_history_size)
        entries = list(timeline.history)
        current_index = max(-1, min(timeline.current_index, len(entries) - 1))

        excess = len(entries) - manager.max_history_size
        if excess > 0:
            entries = entries[excess:]
            current_index = max(-1, current_index - excess)

        manager._entries = entries
        manager._current_index = current_index
        return manager

    @classmethod
    def from_json(
        cls,
        raw: str,
        max_history_size: int = DEFAULT_MAX_HISTORY_SIZE,
    ) -> "HistoryManager":
        """Restore a manager from to_json() output.

        Raises:
            HistoryRestoreError: If `raw` is not valid JSON or not a timeline.
        """
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise HistoryRestoreError(f"History is not valid JSON: {exc}") from exc
        if not isinstance(data, dict):
            raise HistoryRestoreError("History JSON must be an object")
        return cls.from_dict(data, max_history_size=max_history_size)
