"""Pydantic v2 models for folder analysis.

Defines the development-status enumeration, immutable snapshots of folder
facts and the aggregate ``AnalysisResult`` returned by the analyzer.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class DevelopmentStatus(str, Enum):
    """Where a folder stands in the template development workflow.

    Members are listed in precedence order: the first matching condition wins.
    """

    FOLDER_NOT_FOUND = "folder_not_found"
    NOT_A_TEMPLATE_PROJECT = "not_a_template_project"
    READY_FOR_TEMPLATING = "ready_for_templating"
    TEMPLATE_FOLDER_WITHOUT_PAIR = "template_folder_without_pair"
    PAIR_MISSING_CONFIGURATION = "pair_missing_configuration"
    READY_FOR_ITERATION = "ready_for_iteration"
    UNKNOWN = "unknown"


def classify_status(
    exists: bool,
    is_version_controlled: bool,
    has_template_configuration: bool,
    pair_exists: bool,
    pair_has_configuration: bool,
) -> DevelopmentStatus:
    """Map the folder facts onto exactly one ``DevelopmentStatus``."""
    if not exists:
        return DevelopmentStatus.FOLDER_NOT_FOUND
    if not is_version_controlled and not has_template_configuration:
        return DevelopmentStatus.NOT_A_TEMPLATE_PROJECT
    if is_version_controlled and not has_template_configuration and not pair_exists:
        return DevelopmentStatus.READY_FOR_TEMPLATING
    if has_template_configuration and not pair_exists:
        return DevelopmentStatus.TEMPLATE_FOLDER_WITHOUT_PAIR
    if pair_exists and not pair_has_configuration:
        return DevelopmentStatus.PAIR_MISSING_CONFIGURATION
    if pair_exists and pair_has_configuration:
        return DevelopmentStatus.READY_FOR_ITERATION
    return DevelopmentStatus.UNKNOWN


class FolderState(BaseModel):
    """Point-in-time snapshot of one ``FolderDescriptor``."""

    model_config = ConfigDict(frozen=True)

    path: str = Field(..., description="Absolute folder path")
    exists: bool = False
    is_version_controlled: bool = False
    has_template_configuration: bool = False


class ConfigurationCheck(BaseModel):
    """Validation outcome for a template configuration directory."""

    model_config = ConfigDict(frozen=True)

    path: str
    valid: bool
    errors: list[str] = Field(default_factory=list)
    has_cleanup_phase: bool = False


class AnalysisResult(BaseModel):
    """Result of analysing a source folder together with its paired folder."""

    model_config = ConfigDict(frozen=True)

    source: FolderState
    paired: FolderState
    paired_found: bool = Field(
        default=False,
        description="True when the paired path was found on disk (canonical or legacy name)",
    )
    status: DevelopmentStatus
    recommendations: list[str] = Field(default_factory=list)
    source_configuration: Optional[ConfigurationCheck] = None
    paired_configuration: Optional[ConfigurationCheck] = None
    analyzed_at: str = Field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat(),
    )

    @property
    def ready_for_iteration(self) -> bool:
        return self.status is DevelopmentStatus.READY_FOR_ITERATION

    def summary_text(self) -> str:
        """Human-readable multi-line status report."""
        lines: list[str] = []
        lines.append(f"Folder: {self.source.path}")
        lines.append(f"Status: {self.status.value}")
        lines.append("-" * 60)
        lines.append(f"  {'Exists':28s} {_mark(self.source.exists)}")
        lines.append(f"  {'Version controlled':28s} {_mark(self.source.is_version_controlled)}")
        lines.append(f"  {'Template configuration':28s} {_mark(self.source.has_template_configuration)}")
        lines.append(f"  {'Templated folder':28s} {self.paired.path}")
        lines.append(f"  {'Templated folder exists':28s} {_mark(self.paired.exists)}")
        lines.append(
            f"  {'Templated configuration':28s} {_mark(self.paired.has_template_configuration)}"
        )
        for label, check in (
            ("Source configuration", self.source_configuration),
            ("Templated configuration", self.paired_configuration),
        ):
            if check is None:
                continue
            state = "valid" if check.valid else "invalid"
            lines.append(f"  {label + ' check':28s} {state}")
            for error in check.errors:
                lines.append(f"      - {error}")
        if self.recommendations:
            lines.append("")
            lines.append("Recommendations:")
            for index, recommendation in enumerate(self.recommendations, start=1):
                lines.append(f"  {index}. {recommendation}")
        lines.append("-" * 60)
        return "\n".join(lines)


def _mark(value: bool) -> str:
    return "yes" if value else "no"
