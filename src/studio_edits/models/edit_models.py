"""Models for edit operations proposed against a virtual file system."""

from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError, field_validator

from studio_edits.models.exceptions import EditValidationError

# path -> full text content
FileSnapshot = dict[str, str]

SEARCH_REPLACE = "search-replace"
UNIFIED_DIFF = "unified-diff"


def normalize_path(file_path: str) -> str:
    """Return file_path with a single leading slash."""
    return file_path if file_path.startswith("/") else f"/{file_path}"


class _EditBase(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    file_path: str = Field(alias="filePath", min_length=1)
    context: str | None = None  # Free-form note from the AI layer, never applied

    @field_validator("file_path")
    @classmethod
    def _normalize_file_path(cls, value: str) -> str:
        return normalize_path(value)


class SearchReplaceEdit(_EditBase):
    """Replace the first literal occurrence of `search` with `replace`."""

    type: Literal["search-replace"] = SEARCH_REPLACE
    search: str = Field(min_length=1)
    replace: str = Field(min_length=1)


class UnifiedDiffEdit(_EditBase):
    """Apply unified-diff hunks to the target file."""

    type: Literal["unified-diff"] = UNIFIED_DIFF
    diff: str = Field(min_length=1)


Edit = Annotated[Union[SearchReplaceEdit, UnifiedDiffEdit], Field(discriminator="type")]

_edit_adapter: TypeAdapter = TypeAdapter(Edit)

# Required payload fields per edit type, in wire naming
_REQUIRED_FIELDS = {
    SEARCH_REPLACE: ("filePath", "search", "replace"),
    UNIFIED_DIFF: ("filePath", "diff"),
}
_PYTHON_NAMES = {"file_path": "filePath"}


def _describe_path(raw: Any) -> str:
    if isinstance(raw, dict):
        path = raw.get("filePath", raw.get("file_path"))
        if isinstance(path, str) and path:
            return normalize_path(path)
    return "<unknown file>"


def validate_edit(raw: Any) -> SearchReplaceEdit | UnifiedDiffEdit:
    """Validate a wire edit record at the application boundary.

    Args:
        raw: An edit model instance or a dict in wire format
            (camelCase keys) or Python format (snake_case keys).

    Returns:
        The validated edit model.

    Raises:
        EditValidationError: If the record is not a dict, has an unknown
            type, or lacks a non-empty required field. The message names
            the file path and the offending fields.
    """
    if isinstance(raw, (SearchReplaceEdit, UnifiedDiffEdit)):
        return raw
    if not isinstance(raw, dict):
        raise EditValidationError(
            f"invalid edit: expected an object, got {type(raw).__name__}"
        )

    path = _describe_path(raw)
    edit_type = raw.get("type")
    if not isinstance(edit_type, str) or edit_type not in _REQUIRED_FIELDS:
        raise EditValidationError(
            f"invalid edit for {path}: unsupported edit type {edit_type!r}"
        )

    try:
        return _edit_adapter.validate_python(raw)
    except ValidationError as exc:
        bad_fields: list[str] = []
        for error in exc.errors():
            loc = [part for part in error["loc"] if isinstance(part, str)]
            if not loc:
                continue
            name = _PYTHON_NAMES.get(loc[-1], loc[-1])
            if name in _REQUIRED_FIELDS[edit_type] and name not in bad_fields:
                bad_fields.append(name)
        if bad_fields:
            ordered = [f for f in _REQUIRED_FIELDS[edit_type] if f in bad_fields]
            detail = "missing " + ", ".join(ordered)
        else:
            detail = "; ".join(err["msg"] for err in exc.errors())
        raise EditValidationError(
            f"invalid {edit_type} edit for {path}: {detail}"
        ) from exc
