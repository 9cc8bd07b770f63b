"""Parsing and hunk-by-hunk application of unified diffs.

Hunks are applied independently: a hunk whose context cannot be found in the
current content is skipped and reported, while the remaining hunks still
apply. Context is located near the line number given in the hunk header,
adjusted by the net line delta of the hunks already applied, and matched
exactly first and then ignoring trailing whitespace.
"""

import re

from pydantic import BaseModel, ConfigDict, Field
from unidiff import PatchSet, UnidiffParseError

from studio_edits.patching.exceptions import DiffParseError

# Only the start lines are read; counts are recomputed from the hunk body
_HUNK_START = re.compile(r"^@@ -(\d+)(?:,\d+)? \+(\d+)(?:,\d+)? @@")


class Hunk(BaseModel):
    """One contiguous change region of a unified diff."""

    model_config = ConfigDict(frozen=True)

    old_start: int | None = None  # 1-based; None for headers without numbers
    old_count: int | None = None
    new_start: int | None = None
    new_count: int | None = None
    lines: list[str] = Field(default_factory=list)  # Prefixed with " ", "-" or "+"

    @property
    def old_lines(self) -> list[str]:
        """Context and removed lines, i.e. what the hunk expects to find."""
        return [line[1:] for line in self.lines if line[:1] in (" ", "-")]

    @property
    def new_lines(self) -> list[str]:
        """Context and added lines, i.e. what the hunk leaves behind."""
        return [line[1:] for line in self.lines if line[:1] in (" ", "+")]


def _is_file_header(lines: list[str], index: int) -> bool:
    line = lines[index]
    if line.startswith("diff --git "):
        return True
    return (
        line.startswith("--- ")
        and index + 1 < len(lines)
        and lines[index + 1].startswith("+++ ")
    )


def _split_hunks(diff_text: str) -> list[tuple[str, list[str]]]:
    """Cut the first file patch into (header, body) pairs."""
    lines = diff_text.splitlines()
    sections: list[tuple[str, list[str]]] = []
    header: str | None = None
    body: list[str] = []

    for index, line in enumerate(lines):
        if line.startswith("@@"):
            if header is not None:
                sections.append((header, body))
            header, body = line, []
            continue
        if header is None:
            continue
        if _is_file_header(lines, index):
            # Only the first file patch applies to the target file
            break
        if line.startswith("\\"):
            continue
        body.append(line)

    if header is not None:
        sections.append((header, body))
    return sections


def _normalize_body(body: list[str]) -> list[str]:
    body = list(body)
    # Blank lines after a hunk are separators, not context
    while body and body[-1] == "":
        body.pop()
    normalized = []
    for line in body:
        if line == "":
            normalized.append(" ")
        elif line[0] in (" ", "-", "+"):
            normalized.append(line)
        else:
            normalized.append(" " + line)
    return normalized


def _strip_eol(value: str) -> str:
    if value.endswith("\n"):
        value = value[:-1]
    if value.endswith("\r"):
        value = value[:-1]
    return value


def parse_unified_diff(diff_text: str, file_path: str = "file") -> list[Hunk]:
    """Parse the hunks of the first file patch in a unified diff.

    Diffs written by a model are often loose: file headers are missing, hunk
    counts are wrong, headers carry no line numbers or hunks are separated
    by blank lines. The text is therefore rebuilt into a well-formed patch
    (synthetic ``---``/``+++`` headers, counts taken from each hunk body)
    before unidiff parses it. ``\\ No newline at end of file`` markers are
    ignored.

    Args:
        diff_text: Unified diff text.
        file_path: Name written into the rebuilt file headers.

    Returns:
        Non-empty list of hunks in diff order.

    Raises:
        DiffParseError: If the text contains no hunk with any body lines, or
            unidiff rejects the rebuilt patch.
    """
    sections = []
    for header, body in _split_hunks(diff_text):
        normalized = _normalize_body(body)
        if normalized:
            sections.append((_HUNK_START.match(header), normalized))
    if not sections:
        raise DiffParseError("no hunks found")

    name = file_path.lstrip("/")
    patch_lines = [f"--- a/{name}", f"+++ b/{name}"]
    for match, body in sections:
        old_start, new_start = match.groups() if match else ("1", "1")
        old_count = sum(1 for line in body if line[0] in (" ", "-"))
        new_count = sum(1 for line in body if line[0] in (" ", "+"))
        patch_lines.append(f"@@ -{old_start},{old_count} +{new_start},{new_count} @@")
        patch_lines.extend(body)

    try:
        patch_set = PatchSet("\n".join(patch_lines) + "\n")
    except UnidiffParseError as exc:
        raise DiffParseError(str(exc)) from exc
    if not patch_set:
        raise DiffParseError("no hunks found")

    hunks = []
    for (match, _), parsed in zip(sections, patch_set[0]):
        numbered = match is not None
        hunks.append(
            Hunk(
                old_start=parsed.source_start if numbered else None,
                old_count=parsed.source_length,
                new_start=parsed.target_start if numbered else None,
                new_count=parsed.target_length,
                lines=[line.line_type + _strip_eol(line.value) for line in parsed],
            )
        )
    return hunks


def _split_content(content: str) -> tuple[list[str], str, bool]:
    eol = "\r\n" if "\r\n" in content else "\n"
    trailing = content.endswith(eol)
    body = content[: -len(eol)] if trailing else content
    lines = body.split(eol) if content else []
    return lines, eol, trailing


def _join_content(lines: list[str], eol: str, trailing: bool) -> str:
    if not lines:
        return ""
    return eol.join(lines) + (eol if trailing else "")


def locate_lines(lines: list[str], target: list[str], hint: int) -> int | None:
    """Find where `target` occurs in `lines`, preferring positions near `hint`.

    Returns:
        The 0-based start index, or None if no exact or trailing-whitespace
        tolerant match exists.
    """
    if not target:
        return min(max(hint, 0), len(lines))

    size = len(target)
    for normalize in (None, str.rstrip):
        wanted = target if normalize is None else [normalize(line) for line in target]
        candidates = []
        for start in range(len(lines) - size + 1):
            window = lines[start : start + size]
            if normalize is not None:
                window = [normalize(line) for line in window]
            if window == wanted:
                candidates.append(start)
        if candidates:
            return min(candidates, key=lambda start: (abs(start - hint), start))
    return None


def apply_hunks(content: str, hunks: list[Hunk]) -> tuple[str, list[int]]:
    """Apply hunks in order, skipping any whose context cannot be located.

    Args:
        content: Current file content.
        hunks: Hunks from parse_unified_diff().

    Returns:
        Tuple of (new_content, failed_hunk_indices). The content reflects
        every hunk that matched; failed indices are 0-based positions in
        `hunks`.
    """
    lines, eol, trailing = _split_content(content)
    failed: list[int] = []
    offset = 0
    cursor = 0

    for index, hunk in enumerate(hunks):
        old = hunk.old_lines
        new = hunk.new_lines

        if hunk.old_start is None:
            hint = cursor
        elif not old:
            # "-N,0" inserts after line N
            hint = hunk.old_start + offset
        else:
            hint = max(hunk.old_start - 1, 0) + offset

        position = locate_lines(lines, old, hint)
        if position is None:
            failed.append(index)
            continue

        lines[position : position + len(old)] = new
        offset += len(new) - len(old)
        cursor = position + len(new)

    if not content and lines:
        trailing = True
    return _join_content(lines, eol, trailing), failed
