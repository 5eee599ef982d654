"""Iteration: decide what to do for a folder, then reconcile its template."""

from .cleanup import build_cleanup_steps, merge_cleanup_steps
from .orchestrator import IterationResult, ReconciliationOrchestrator
from .runner import IterationOutcome, TemplateIterator
from .strategy import DecisionKind, IterationDecision, IterationStrategy, decide

__all__ = [
    "DecisionKind",
    "IterationDecision",
    "IterationOutcome",
    "IterationResult",
    "IterationStrategy",
    "ReconciliationOrchestrator",
    "TemplateIterator",
    "build_cleanup_steps",
    "decide",
    "merge_cleanup_steps",
]
