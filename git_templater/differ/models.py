"""Pydantic v2 models describing a folder-tree comparison."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field, model_validator


class DiffStatus(str, Enum):
    """Comparison outcome for one relative path."""

    IDENTICAL = "identical"
    MODIFIED = "modified"
    ADDED_IN_TARGET = "added_in_target"
    REMOVED_FROM_TARGET = "removed_from_target"


class LineEditKind(str, Enum):
    ADDED = "added"
    REMOVED = "removed"
    MODIFIED = "modified"


class LineEdit(BaseModel):
    """One index-aligned line difference (1-based line number)."""

    model_config = ConfigDict(frozen=True)

    line_number: int = Field(..., ge=1)
    kind: LineEditKind
    source_text: Optional[str] = None
    target_text: Optional[str] = None


class DiffEntry(BaseModel):
    """Comparison result for a single relative file path."""

    model_config = ConfigDict(frozen=True)

    relative_path: str
    status: DiffStatus
    source_line_count: int = Field(default=0, ge=0)
    target_line_count: int = Field(default=0, ge=0)
    line_edits: list[LineEdit] = Field(default_factory=list)

    @model_validator(mode="after")
    def _edits_match_status(self) -> "DiffEntry":
        if self.status is DiffStatus.MODIFIED and not self.line_edits:
            raise ValueError("a modified entry needs at least one line edit")
        if self.status is not DiffStatus.MODIFIED and self.line_edits:
            raise ValueError(f"a {self.status.value} entry cannot carry line edits")
        return self

    @property
    def difference_units(self) -> int:
        """Contribution of this entry to ``DiffSummary.total_difference_units``."""
        if self.status is DiffStatus.MODIFIED:
            return len(self.line_edits)
        if self.status is DiffStatus.REMOVED_FROM_TARGET:
            return self.source_line_count
        if self.status is DiffStatus.ADDED_IN_TARGET:
            return self.target_line_count
        return 0


class DiffSummary(BaseModel):
    """Aggregate counters over every ``DiffEntry`` of a report."""

    model_config = ConfigDict(frozen=True)

    total_files: int = 0
    identical_files: int = 0
    modified_files: int = 0
    only_in_source: int = 0
    only_in_target: int = 0
    total_difference_units: int = 0

    @classmethod
    def from_entries(cls, entries: list[DiffEntry]) -> "DiffSummary":
        counts = {status: 0 for status in DiffStatus}
        for entry in entries:
            counts[entry.status] += 1
        return cls(
            total_files=len(entries),
            identical_files=counts[DiffStatus.IDENTICAL],
            modified_files=counts[DiffStatus.MODIFIED],
            only_in_source=counts[DiffStatus.REMOVED_FROM_TARGET],
            only_in_target=counts[DiffStatus.ADDED_IN_TARGET],
            total_difference_units=sum(entry.difference_units for entry in entries),
        )


class DiffReport(BaseModel):
    """Result of comparing a source tree against a target tree.

    ``entries`` are sorted by ``relative_path``. The report is the
    authoritative result; the text artifact written next to the target is
    informational only.
    """

    model_config = ConfigDict(frozen=True)

    source_folder: str
    target_folder: str
    generated_at: str = Field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat(),
    )
    entries: list[DiffEntry] = Field(default_factory=list)
    summary: DiffSummary = Field(default_factory=DiffSummary)

    @computed_field  # type: ignore[misc]
    @property
    def has_differences(self) -> bool:
        """True when any entry is not identical."""
        return any(entry.status is not DiffStatus.IDENTICAL for entry in self.entries)

    def differences(self) -> list[DiffEntry]:
        return [entry for entry in self.entries if entry.status is not DiffStatus.IDENTICAL]

    def entry(self, relative_path: str) -> Optional[DiffEntry]:
        for candidate in self.entries:
            if candidate.relative_path == relative_path:
                return candidate
        return None

    def relative_paths(self) -> list[str]:
        return [entry.relative_path for entry in self.entries]

    def summary_dict(self) -> dict[str, object]:
        """Condensed summary suitable for tables and logs."""
        return {
            "Source": self.source_folder,
            "Target": self.target_folder,
            "Total files": self.summary.total_files,
            "Identical": self.summary.identical_files,
            "Modified": self.summary.modified_files,
            "Only in source": self.summary.only_in_source,
            "Only in target": self.summary.only_in_target,
            "Difference units": self.summary.total_difference_units,
        }
