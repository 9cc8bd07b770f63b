"""Tests for the exception hierarchies."""

import pytest

from studio_edits.history import HistoryError, HistoryRestoreError
from studio_edits.models import EditValidationError, ModelError, PatchResult
from studio_edits.orchestrator import OrchestratorError, PatchApplicationError
from studio_edits.patching import DiffParseError, PatchError, SearchNotFoundError


class TestHierarchy:
    @pytest.mark.parametrize(
        "exc_class, base",
        [
            (EditValidationError, ModelError),
            (EditValidationError, ValueError),
            (DiffParseError, PatchError),
            (SearchNotFoundError, PatchError),
            (HistoryRestoreError, HistoryError),
            (PatchApplicationError, OrchestratorError),
        ],
    )
    def test_subclass(self, exc_class, base):
        assert issubclass(exc_class, base)

    def test_bases_are_exceptions(self):
        for base in (ModelError, PatchError, HistoryError, OrchestratorError):
            assert issubclass(base, Exception)


class TestPatchApplicationError:
    def test_carries_result(self):
        result = PatchResult(success=False, files={}, errors=["file not found: /a.js"])
        exc = PatchApplicationError("Failed to apply all patches: file not found: /a.js", result)
        assert exc.result is result
        assert str(exc) == "Failed to apply all patches: file not found: /a.js"
