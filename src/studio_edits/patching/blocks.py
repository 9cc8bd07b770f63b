"""Extraction of SEARCH/REPLACE blocks from free-form model output.

Format::

    <<<<<<< SEARCH
    old code
    =======
    new code
    >>>>>>> REPLACE
"""

import logging
import re

from studio_edits.models import SearchReplaceEdit

logger = logging.getLogger(__name__)

_BLOCK_PATTERN = re.compile(
    r"<<<<<<< SEARCH\n(.*?)\n=======\n(.*?)\n>>>>>>> REPLACE",
    re.DOTALL,
)


def parse_search_replace_blocks(text: str, file_path: str) -> list[SearchReplaceEdit]:
    """Parse every SEARCH/REPLACE block in `text` into edits on `file_path`.

    Blocks with an empty search or replace section cannot form a valid edit
    and are dropped.
    """
    edits: list[SearchReplaceEdit] = []
    for match in _BLOCK_PATTERN.finditer(text.replace("\r\n", "\n")):
        search, replace = match.group(1), match.group(2)
        if not search or not replace:
            logger.debug("Dropping SEARCH/REPLACE block with an empty section")
            continue
        edits.append(SearchReplaceEdit(file_path=file_path, search=search, replace=replace))
    return edits
