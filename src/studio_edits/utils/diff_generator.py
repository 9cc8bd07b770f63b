"""Utilities for rendering unified diffs between file contents and snapshots."""

import difflib


def generate_unified_diff(
    file_path: str,
    original_content: str,
    modified_content: str,
) -> str:
    """Generate a git-compatible unified diff.

    Args:
        file_path: Path of the file inside the snapshot (e.g. "src/app.js").
        original_content: File content before the change.
        modified_content: File content after the change.

    Returns:
        Unified diff string with a/ b/ prefixes. Empty string if no changes.
    """
    if original_content == modified_content:
        return ""

    original_lines = original_content.splitlines(keepends=True)
    modified_lines = modified_content.splitlines(keepends=True)

    diff_gen = difflib.unified_diff(
        original_lines,
        modified_lines,
        fromfile=f"a/{file_path}",
        tofile=f"b/{file_path}",
        lineterm="",
    )

    # Lines from keepends=True carry their own newline; strip before joining
    diff_lines = []
    for line in diff_gen:
        if line.endswith("\n"):
            diff_lines.append(line[:-1])
        else:
            diff_lines.append(line)

    return "\n".join(diff_lines)


def generate_state_diff(before: dict[str, str], after: dict[str, str]) -> str:
    """Render the changes between two snapshots as unified diffs.

    Files present in only one snapshot are diffed against empty content.

    Args:
        before: Snapshot before the change.
        after: Snapshot after the change.

    Returns:
        Per-file diffs in path order, separated by a blank line. Empty string
        when the snapshots are identical.
    """
    diffs = []
    for file_path in sorted(set(before) | set(after)):
        before_content = before.get(file_path, "")
        after_content = after.get(file_path, "")
        if before_content == after_content:
            continue
        diffs.append(
            generate_unified_diff(file_path.lstrip("/"), before_content, after_content)
        )
    return "\n\n".join(diffs)
