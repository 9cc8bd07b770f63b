"""Tests for HistoryManager and history entry construction."""

import json
import threading

import pytest

from studio_edits.history import HistoryManager, HistoryRestoreError, create_history_entry
from studio_edits.models import EditValidationError, SearchReplaceEdit


def make_entry(before: str, after: str, explanation: str | None = None):
    """Helper to create an entry changing /a.js from `before` to `after`."""
    return create_history_entry(
        edits=[{"type": "search-replace", "filePath": "/a.js", "search": before, "replace": after}],
        before_state={"/a.js": before},
        after_state={"/a.js": after},
        explanation=explanation,
    )


class TestCreateHistoryEntry:
    def test_fields_populated(self):
        entry = make_entry("v0", "v1", explanation="bump")
        assert entry.id
        assert entry.timestamp > 0
        assert entry.explanation == "bump"
        assert isinstance(entry.edits[0], SearchReplaceEdit)
        assert entry.before_state == {"/a.js": "v0"}
        assert entry.after_state == {"/a.js": "v1"}

    def test_ids_are_unique(self):
        assert make_entry("a", "b").id != make_entry("a", "b").id

    def test_snapshots_are_copied(self):
        """Mutating the caller's dicts afterwards does not change the entry."""
        before = {"/a.js": "v0"}
        entry = create_history_entry([], before, {"/a.js": "v1"})
        before["/a.js"] = "changed"
        assert entry.before_state == {"/a.js": "v0"}

    def test_invalid_edit_rejected(self):
        with pytest.raises(EditValidationError):
            create_history_entry([{"type": "search-replace"}], {}, {})


class TestInitialState:
    def test_empty_manager(self, manager):
        assert manager.can_undo() is False
        assert manager.can_redo() is False
        assert manager.get_current_index() == -1
        assert manager.get_current_state() is None
        assert manager.undo() is None
        assert manager.redo() is None
        assert len(manager) == 0

    def test_max_size_clamped_to_one(self):
        assert HistoryManager(max_history_size=0).max_history_size == 1


class TestUndoRedo:
    """Tests for cursor movement."""

    def test_push_moves_cursor(self, manager):
        entry = make_entry("v0", "v1")
        manager.push(entry)
        assert manager.get_current_index() == 0
        assert manager.can_undo() is True
        assert manager.can_redo() is False
        assert manager.get_current_state() == {"/a.js": "v1"}

    def test_undo_returns_entry_for_before_state(self, manager):
        entry = make_entry("v0", "v1")
        manager.push(entry)
        undone = manager.undo()
        assert undone is entry
        assert undone.before_state == {"/a.js": "v0"}
        assert manager.get_current_index() == -1
        assert manager.can_redo() is True

    def test_undo_then_redo_round_trip(self, manager):
        """Undo then redo returns the same entry and restores the cursor."""
        manager.push(make_entry("v0", "v1"))
        manager.push(make_entry("v1", "v2"))
        index = manager.get_current_index()
        undone = manager.undo()
        redone = manager.redo()
        assert redone is undone
        assert manager.get_current_index() == index
        assert redone.after_state == {"/a.js": "v2"}

    def test_full_walk(self, manager):
        manager.push(make_entry("v0", "v1"))
        manager.push(make_entry("v1", "v2"))
        assert manager.undo().before_state == {"/a.js": "v1"}
        assert manager.undo().before_state == {"/a.js": "v0"}
        assert manager.undo() is None
        assert manager.redo().after_state == {"/a.js": "v1"}
        assert manager.redo().after_state == {"/a.js": "v2"}
        assert manager.redo() is None

    def test_push_discards_redo_branch(self, manager):
        """Pushing after an undo drops the undone entries."""
        first = make_entry("v0", "v1")
        second = make_entry("v1", "v2")
        manager.push(first)
        manager.push(second)
        manager.undo()
        third = make_entry("v1", "v3")
        manager.push(third)
        assert manager.can_redo() is False
        assert manager.get_history() == [first, third]
        assert manager.get_entry_by_id(second.id) is None

    def test_peek_states_do_not_move_cursor(self, manager):
        manager.push(make_entry("v0", "v1"))
        manager.push(make_entry("v1", "v2"))
        manager.undo()
        assert manager.get_undo_state() == {"/a.js": "v0"}
        assert manager.get_redo_state() == {"/a.js": "v2"}
        assert manager.get_current_index() == 0

    def test_returned_states_are_copies(self, manager):
        """Mutating a returned snapshot leaves the recorded entry unchanged."""
        manager.push(make_entry("v0", "v1"))
        manager.push(make_entry("v1", "v2"))
        manager.undo()
        manager.get_current_state()["/a.js"] = "changed"
        manager.get_undo_state()["/a.js"] = "changed"
        manager.get_redo_state()["/a.js"] = "changed"
        assert manager.get_current_state() == {"/a.js": "v1"}
        assert manager.get_undo_state() == {"/a.js": "v0"}
        assert manager.get_redo_state() == {"/a.js": "v2"}
        assert manager.redo().after_state == {"/a.js": "v2"}

    def test_peek_states_at_edges(self, manager):
        assert manager.get_undo_state() is None
        manager.push(make_entry("v0", "v1"))
        assert manager.get_redo_state() is None


class TestEviction:
    def test_oldest_entries_evicted(self):
        manager = HistoryManager(max_history_size=3)
        entries = [make_entry(f"v{i}", f"v{i + 1}") for i in range(5)]
        for entry in entries:
            manager.push(entry)
        assert len(manager) == 3
        assert manager.get_history() == entries[2:]
        assert manager.get_current_index() == 2

    def test_undo_stops_at_retained_boundary(self):
        manager = HistoryManager(max_history_size=2)
        for i in range(4):
            manager.push(make_entry(f"v{i}", f"v{i + 1}"))
        assert manager.undo().before_state == {"/a.js": "v3"}
        assert manager.undo().before_state == {"/a.js": "v2"}
        assert manager.undo() is None


class TestQueries:
    def test_get_history_returns_copy(self, manager):
        manager.push(make_entry("v0", "v1"))
        history = manager.get_history()
        history.clear()
        assert len(manager) == 1

    def test_get_entry_by_id(self, manager):
        entry = make_entry("v0", "v1")
        manager.push(entry)
        assert manager.get_entry_by_id(entry.id) is entry
        assert manager.get_entry_by_id("missing") is None

    def test_recent_entries(self, manager):
        entries = [make_entry(f"v{i}", f"v{i + 1}") for i in range(4)]
        for entry in entries:
            manager.push(entry)
        assert manager.get_recent_entries(2) == entries[2:]
        assert manager.get_recent_entries(10) == entries
        assert manager.get_recent_entries(0) == []

    def test_summary_counts(self, manager):
        for i in range(3):
            manager.push(make_entry(f"v{i}", f"v{i + 1}"))
        manager.undo()
        summary = manager.get_summary()
        assert summary.total_entries == 3
        assert summary.current_index == 1
        assert summary.can_undo is True
        assert summary.can_redo is True
        assert summary.undo_count == 2
        assert summary.redo_count == 1

    def test_clear_returns_count(self, manager):
        manager.push(make_entry("v0", "v1"))
        manager.push(make_entry("v1", "v2"))
        assert manager.clear() == 2
        assert manager.get_current_index() == -1
        assert manager.can_undo() is False
        assert manager.can_redo() is False


class TestSerialization:
    """Tests for to_json()/from_json()."""

    def test_round_trip_preserves_timeline(self, manager):
        manager.push(make_entry("v0", "v1", explanation="first"))
        manager.push(make_entry("v1", "v2"))
        manager.undo()
        restored = HistoryManager.from_json(manager.to_json())
        assert restored.get_history() == manager.get_history()
        assert restored.get_current_index() == 0
        assert restored.redo().after_state == {"/a.js": "v2"}

    def test_wire_shape_uses_camel_case(self, manager):
        manager.push(make_entry("v0", "v1"))
        data = json.loads(manager.to_json())
        assert data["currentIndex"] == 0
        entry = data["history"][0]
        assert entry["beforeState"] == {"/a.js": "v0"}
        assert entry["afterState"] == {"/a.js": "v1"}
        assert entry["edits"][0]["filePath"] == "/a.js"
        assert "explanation" not in entry

    def test_out_of_range_cursor_clamped(self, manager):
        manager.push(make_entry("v0", "v1"))
        data = manager.to_dict()
        data["currentIndex"] = 7
        assert HistoryManager.from_dict(data).get_current_index() == 0
        data["currentIndex"] = -5
        assert HistoryManager.from_dict(data).get_current_index() == -1

    def test_restore_evicts_beyond_max_size(self, manager):
        for i in range(4):
            manager.push(make_entry(f"v{i}", f"v{i + 1}"))
        restored = HistoryManager.from_dict(manager.to_dict(), max_history_size=2)
        assert len(restored) == 2
        assert restored.get_current_index() == 1
        assert restored.get_current_state() == {"/a.js": "v4"}

    def test_invalid_json_raises(self):
        with pytest.raises(HistoryRestoreError):
            HistoryManager.from_json("{not json")

    def test_non_object_raises(self):
        with pytest.raises(HistoryRestoreError):
            HistoryManager.from_json("[1, 2]")

    def test_bad_shape_raises(self):
        with pytest.raises(HistoryRestoreError):
            HistoryManager.from_dict({"history": [{"id": "x"}]})

    def test_empty_object_restores_empty_manager(self):
        restored = HistoryManager.from_json("{}")
        assert len(restored) == 0
        assert restored.get_current_index() == -1


class TestConcurrency:
    def test_concurrent_pushes_are_serialized(self):
        manager = HistoryManager(max_history_size=1000)
        entries = [make_entry(f"v{i}", f"v{i + 1}") for i in range(200)]

        def push_all(chunk):
            for entry in chunk:
                manager.push(entry)

        threads = [threading.Thread(target=push_all, args=(entries[i::4],)) for i in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(manager) == 200
        assert manager.get_current_index() == 199
        assert {entry.id for entry in manager.get_history()} == {entry.id for entry in entries}
