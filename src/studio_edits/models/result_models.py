"""Result models for patch application."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class EditStatus(str, Enum):
    """Outcome of a single edit within a batch."""

    APPLIED = "applied"
    PARTIAL = "partial"  # Some unified-diff hunks applied, others skipped
    FAILED = "failed"
    INVALID = "invalid"


class EditOutcome(BaseModel):
    """Per-edit accumulator record produced by the patch engine."""

    model_config = ConfigDict(frozen=False)

    index: int                     # Position of the edit in its batch
    file_path: str
    edit_type: str | None = None   # None when the record had no usable type
    status: EditStatus
    errors: list[str] = Field(default_factory=list)
    hunks_applied: int = 0
    hunks_total: int = 0

    @property
    def changed_content(self) -> bool:
        return self.status in (EditStatus.APPLIED, EditStatus.PARTIAL)


class PatchResult(BaseModel):
    """Result of applying an edit batch to a snapshot."""

    model_config = ConfigDict(frozen=False)

    success: bool
    files: dict[str, str]
    errors: list[str] = Field(default_factory=list)
    outcomes: list[EditOutcome] = Field(default_factory=list)
    rolled_back: bool = False      # True when atomic mode discarded changes

    @property
    def total_count(self) -> int:
        return len(self.outcomes)

    @property
    def applied_count(self) -> int:
        if self.rolled_back:
            return 0
        return sum(1 for outcome in self.outcomes if outcome.changed_content)

    @property
    def failed_count(self) -> int:
        return sum(1 for outcome in self.outcomes if outcome.errors)

    def changed_paths(self, base: dict[str, str]) -> list[str]:
        """Paths whose content differs from `base`, sorted."""
        return sorted(
            path for path, content in self.files.items() if base.get(path) != content
        )

    def to_payload(self) -> dict:
        """Render the wire apply-result record."""
        return {
            "success": self.success,
            "files": dict(self.files),
            "errors": list(self.errors),
        }
