"""Patch application engine and its matching algorithms."""

from studio_edits.patching.blocks import parse_search_replace_blocks
from studio_edits.patching.engine import PatchEngine, apply_edits
from studio_edits.patching.exceptions import DiffParseError, PatchError, SearchNotFoundError
from studio_edits.patching.search_replace import replace_first, search_replace_to_unified_diff
from studio_edits.patching.unified_diff import Hunk, apply_hunks, parse_unified_diff

__all__ = [
    "DiffParseError",
    "Hunk",
    "PatchEngine",
    "PatchError",
    "SearchNotFoundError",
    "apply_edits",
    "apply_hunks",
    "parse_search_replace_blocks",
    "parse_unified_diff",
    "replace_first",
    "search_replace_to_unified_diff",
]
