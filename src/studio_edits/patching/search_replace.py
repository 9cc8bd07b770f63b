"""Literal search/replace matching."""

from studio_edits.patching.exceptions import SearchNotFoundError
from studio_edits.utils.diff_generator import generate_unified_diff


def replace_first(content: str, search: str, replace: str) -> str | None:
    """Replace the first literal, case-sensitive occurrence of `search`.

    Returns:
        The new content, or None if `search` does not occur in `content`.
    """
    index = content.find(search)
    if index == -1:
        return None
    return content[:index] + replace + content[index + len(search):]


def search_replace_to_unified_diff(
    file_path: str,
    content: str,
    search: str,
    replace: str,
) -> str:
    """Render a first-match search/replace as a unified diff.

    Raises:
        SearchNotFoundError: If `search` is not present in `content`.
    """
    new_content = replace_first(content, search, replace)
    if new_content is None:
        raise SearchNotFoundError(f"search string not found in {file_path}")
    return generate_unified_diff(file_path.lstrip("/"), content, new_content)
