"""git-templater -- converge a project template toward a reference application.

The package discovers the state of a source folder and its paired
"templated" folder, applies the template to regenerate a candidate project,
diffs the candidate against the reference and folds the differences back
into the template's cleanup phase.

Quick usage::

    from git_templater import TemplateIterator

    outcome = TemplateIterator().run("examples/rails/simple")
    print(outcome.result.differences_count)
"""

from git_templater.config import Config
from git_templater.differ import DiffEngine, DiffReport
from git_templater.folders import DevelopmentStatus, FolderDescriptor, FolderStateAnalyzer
from git_templater.iteration import (
    IterationDecision,
    IterationResult,
    IterationStrategy,
    ReconciliationOrchestrator,
    TemplateIterator,
)

__version__ = "0.1.0"

__all__ = [
    "Config",
    "DevelopmentStatus",
    "DiffEngine",
    "DiffReport",
    "FolderDescriptor",
    "FolderStateAnalyzer",
    "IterationDecision",
    "IterationResult",
    "IterationStrategy",
    "ReconciliationOrchestrator",
    "TemplateIterator",
]
