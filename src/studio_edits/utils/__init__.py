"""Utilities for studio edits."""

from studio_edits.utils.diff_generator import generate_state_diff, generate_unified_diff

__all__ = [
    "generate_state_diff",
    "generate_unified_diff",
]
