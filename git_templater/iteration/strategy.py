"""Decide what an iteration request can do for a given development status.

The decision is a single hop from ``DevelopmentStatus`` to
``IterationDecision``; nothing is cached, the status is re-derived from disk
by the analyzer on every call.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict

from git_templater.folders.models import AnalysisResult, DevelopmentStatus


class DecisionKind(str, Enum):
    FULL_ITERATION = "full_iteration"
    CREATE_TEMPLATED_FOLDER = "create_templated_folder"
    TEMPLATE_ONLY_UPDATE = "template_only_update"
    CANNOT_ITERATE = "cannot_iterate"


class IterationDecision(BaseModel):
    """What the iterate command should do next, and why."""

    model_config = ConfigDict(frozen=True)

    kind: DecisionKind
    reason: str
    can_proceed: bool


_NEEDS_PAIR = (
    DevelopmentStatus.TEMPLATE_FOLDER_WITHOUT_PAIR,
    DevelopmentStatus.READY_FOR_TEMPLATING,
)


def decide(status: DevelopmentStatus, create_if_missing: bool = False) -> IterationDecision:
    """Map a development status onto exactly one decision."""
    if status is DevelopmentStatus.READY_FOR_ITERATION:
        return IterationDecision(
            kind=DecisionKind.FULL_ITERATION,
            reason="Source and templated folders are ready for a full iteration",
            can_proceed=True,
        )
    if status in _NEEDS_PAIR:
        if create_if_missing:
            return IterationDecision(
                kind=DecisionKind.CREATE_TEMPLATED_FOLDER,
                reason="Templated folder is missing and will be created",
                can_proceed=True,
            )
        return IterationDecision(
            kind=DecisionKind.CANNOT_ITERATE,
            reason="Templated folder does not exist; rerun with --create-templated-folder to create it",
            can_proceed=False,
        )
    if status is DevelopmentStatus.PAIR_MISSING_CONFIGURATION:
        return IterationDecision(
            kind=DecisionKind.TEMPLATE_ONLY_UPDATE,
            reason="Templated folder exists without a template configuration; updating it only",
            can_proceed=True,
        )

    reasons = {
        DevelopmentStatus.FOLDER_NOT_FOUND: "Folder does not exist",
        DevelopmentStatus.NOT_A_TEMPLATE_PROJECT: (
            "Folder is neither a git repository nor a template project"
        ),
    }
    return IterationDecision(
        kind=DecisionKind.CANNOT_ITERATE,
        reason=reasons.get(status, f"Cannot iterate from status '{status.value}'"),
        can_proceed=False,
    )


class IterationStrategy:
    """Stateless wrapper around ``decide`` for an ``AnalysisResult``."""

    def decide(self, analysis: AnalysisResult, create_if_missing: bool = False) -> IterationDecision:
        return decide(analysis.status, create_if_missing)
