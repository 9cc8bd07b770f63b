"""Per-session ownership of history managers."""

import logging
import threading

from studio_edits.history.manager import DEFAULT_MAX_HISTORY_SIZE, HistoryManager

logger = logging.getLogger(__name__)


class HistoryRegistry:
    """Maps session ids to their own HistoryManager.

    Managers are created on first use. Sessions never share a timeline.
    """

    def __init__(self, max_history_size: int = DEFAULT_MAX_HISTORY_SIZE) -> None:
        self.max_history_size = max_history_size
        self._managers: dict[str, HistoryManager] = {}
        self._lock = threading.Lock()

    def get(self, session_id: str) -> HistoryManager:
        """Return the session's manager, creating it if needed."""
        with self._lock:
            manager = self._managers.get(session_id)
            if manager is None:
                manager = HistoryManager(max_history_size=self.max_history_size)
                self._managers[session_id] = manager
                logger.debug("Created history for session %s", session_id)
            return manager

    def attach(self, session_id: str, manager: HistoryManager) -> None:
        """Install an existing manager (e.g. restored from storage) for a session."""
        with self._lock:
            self._managers[session_id] = manager

    def discard(self, session_id: str) -> bool:
        """Drop a session's history. Returns False if the session was unknown."""
        with self._lock:
            removed = self._managers.pop(session_id, None)
        if removed is not None:
            logger.debug("Discarded history for session %s (%d entries)", session_id, len(removed))
        return removed is not None

    def session_ids(self) -> list[str]:
        with self._lock:
            return list(self._managers)

    def __contains__(self, session_id: object) -> bool:
        with self._lock:
            return session_id in self._managers

    def __len__(self) -> int:
        with self._lock:
            return len(self._managers)
