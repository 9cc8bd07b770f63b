"""Models for the undo/redo timeline."""

from pydantic import BaseModel, ConfigDict, Field

from studio_edits.models.edit_models import Edit


class HistoryEntry(BaseModel):
    """Immutable record of one applied edit batch."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str
    timestamp: int  # Epoch milliseconds
    explanation: str | None = None
    edits: list[Edit] = Field(default_factory=list)
    before_state: dict[str, str] = Field(alias="beforeState")
    after_state: dict[str, str] = Field(alias="afterState")


class EntryMetadata(BaseModel):
    """Lightweight view of an entry returned by undo/redo."""

    model_config = ConfigDict(frozen=True)

    id: str
    timestamp: int
    explanation: str | None = None

    @classmethod
    def from_entry(cls, entry: HistoryEntry) -> "EntryMetadata":
        return cls(id=entry.id, timestamp=entry.timestamp, explanation=entry.explanation)


class HistorySummary(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    total_entries: int = Field(alias="totalEntries")
    current_index: int = Field(alias="currentIndex")
    can_undo: bool = Field(alias="canUndo")
    can_redo: bool = Field(alias="canRedo")
    undo_count: int = Field(alias="undoCount")
    redo_count: int = Field(alias="redoCount")


class HistoryTimelineData(BaseModel):
    """Serialised form of a timeline: ``{history, currentIndex}``."""

    model_config = ConfigDict(populate_by_name=True)

    history: list[HistoryEntry] = Field(default_factory=list)
    current_index: int = Field(default=-1, alias="currentIndex")
