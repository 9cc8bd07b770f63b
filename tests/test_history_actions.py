"""Tests for the history action request/response protocol."""

from studio_edits.history import (
    HistoryActionRequest,
    create_history_entry,
    handle_history_action,
    list_history,
)


def make_entry(before: str, after: str, explanation: str | None = None):
    return create_history_entry(
        edits=[{"type": "search-replace", "filePath": "/a.js", "search": before, "replace": after}],
        before_state={"/a.js": before},
        after_state={"/a.js": after},
        explanation=explanation,
    )


class TestUndoRedoActions:
    def test_undo_returns_before_state(self, manager):
        entry = make_entry("v0", "v1", explanation="bump")
        manager.push(entry)
        response = handle_history_action(manager, {"action": "undo"})
        assert response.success is True
        assert response.status_code == 200
        assert response.files == {"/a.js": "v0"}
        assert response.to_payload() == {
            "success": True,
            "action": "undo",
            "files": {"/a.js": "v0"},
            "entry": {"id": entry.id, "timestamp": entry.timestamp, "explanation": "bump"},
        }

    def test_redo_returns_after_state(self, manager):
        manager.push(make_entry("v0", "v1"))
        handle_history_action(manager, {"action": "undo"})
        response = handle_history_action(manager, {"action": "redo"})
        assert response.success is True
        assert response.action == "redo"
        assert response.files == {"/a.js": "v1"}

    def test_nothing_to_undo(self, manager):
        response = handle_history_action(manager, {"action": "undo"})
        assert response.success is False
        assert response.status_code == 400
        assert response.to_payload() == {"success": False, "error": "Nothing to undo"}

    def test_nothing_to_redo(self, manager):
        response = handle_history_action(manager, {"action": "redo"})
        assert response.error == "Nothing to redo"


class TestGetAction:
    """Tests for the get action."""

    def test_get_returns_full_entry(self, manager):
        entry = make_entry("v0", "v1")
        manager.push(entry)
        response = handle_history_action(manager, {"action": "get", "entryId": entry.id})
        assert response.success is True
        payload = response.to_payload()
        assert payload["entry"]["id"] == entry.id
        assert payload["entry"]["beforeState"] == {"/a.js": "v0"}
        assert payload["entry"]["edits"][0]["type"] == "search-replace"

    def test_get_requires_entry_id(self, manager):
        response = handle_history_action(manager, {"action": "get"})
        assert response.error == "entryId required for get action"
        assert response.status_code == 400

    def test_get_unknown_entry(self, manager):
        response = handle_history_action(manager, {"action": "get", "entryId": "nope"})
        assert response.error == "Entry not found"
        assert response.status_code == 404


class TestOtherActions:
    def test_clear_reports_count(self, manager):
        manager.push(make_entry("v0", "v1"))
        manager.push(make_entry("v1", "v2"))
        response = handle_history_action(manager, {"action": "clear"})
        assert response.to_payload() == {"success": True, "action": "clear", "clearedEntries": 2}
        assert len(manager) == 0

    def test_summary(self, manager):
        manager.push(make_entry("v0", "v1"))
        response = handle_history_action(manager, {"action": "summary"})
        assert response.to_payload()["summary"] == {
            "totalEntries": 1,
            "currentIndex": 0,
            "canUndo": True,
            "canRedo": False,
            "undoCount": 1,
            "redoCount": 0,
        }

    def test_parsed_request_accepted(self, manager):
        response = handle_history_action(manager, HistoryActionRequest(action="summary"))
        assert response.success is True

    def test_unknown_action_rejected(self, manager):
        response = handle_history_action(manager, {"action": "rewind"})
        assert response.success is False
        assert response.error == "Invalid request body"
        assert response.status_code == 400


class TestListHistory:
    def test_listing(self, manager):
        first = make_entry("v0", "v1", explanation="first")
        manager.push(first)
        manager.push(make_entry("v1", "v2"))
        listing = list_history(manager)
        assert listing["history"][0] == {
            "id": first.id,
            "timestamp": first.timestamp,
            "explanation": "first",
            "editsCount": 1,
        }
        assert len(listing["history"]) == 2
        assert listing["summary"]["totalEntries"] == 2
