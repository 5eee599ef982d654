"""The iterate command: analyse, decide, then reconcile.

``TemplateIterator`` ties the folder analyzer, the iteration strategy and
the reconciliation orchestrator together for a single source folder path.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict

from git_templater.config import Config
from git_templater.errors import InvalidPathError, ReconciliationError
from git_templater.folders.analyzer import FolderStateAnalyzer
from git_templater.folders.models import AnalysisResult
from git_templater.iteration.orchestrator import IterationResult, ReconciliationOrchestrator
from git_templater.iteration.strategy import DecisionKind, IterationDecision, IterationStrategy
from git_templater.template.applier import ApplyOutcome
from git_templater.template.scaffold import create_template_configuration, create_templated_folder
from git_templater.utils import console, print_error, print_section_header, print_warning


class IterationOutcome(BaseModel):
    """Everything the iterate command did for one folder."""

    model_config = ConfigDict(frozen=True)

    decision: IterationDecision
    analysis: AnalysisResult
    templated_folder: str
    success: bool
    created_templated_folder: bool = False
    dry_run: bool = False
    result: Optional[IterationResult] = None
    apply_outcome: Optional[ApplyOutcome] = None


class TemplateIterator:
    """Run one iteration request end to end."""

    def __init__(
        self,
        analyzer: Optional[FolderStateAnalyzer] = None,
        strategy: Optional[IterationStrategy] = None,
        orchestrator: Optional[ReconciliationOrchestrator] = None,
        config: Optional[Config] = None,
    ) -> None:
        self.config = config or Config()
        self.analyzer = analyzer or FolderStateAnalyzer(self.config)
        self.strategy = strategy or IterationStrategy()
        self.orchestrator = orchestrator or ReconciliationOrchestrator(config=self.config)

    def run(
        self,
        path: str | Path,
        create_if_missing: bool = False,
        *,
        dry_run: bool = False,
    ) -> IterationOutcome:
        """Analyse *path* and act on the resulting decision.

        With *dry_run* nothing on disk changes: a full iteration runs on a
        temporary copy of the templated folder and other decisions are only
        reported.

        Raises:
            InvalidPathError: If *path* is empty.
            ReconciliationError: If a reconciliation step fails.
        """
        if path is None or not str(path).strip():
            raise InvalidPathError(path, "Folder path cannot be empty")

        print_section_header("analyze", f"Analysing {path}")
        analysis = self.analyzer.analyze(path)
        decision = self.strategy.decide(analysis, create_if_missing)
        console.print(f"  status   {analysis.status.value}")
        console.print(f"  decision {decision.kind.value}: {decision.reason}")

        source = Path(analysis.source.path)
        templated = Path(analysis.paired.path)
        outcome = IterationOutcome(
            decision=decision,
            analysis=analysis,
            templated_folder=str(templated),
            success=decision.can_proceed,
            dry_run=dry_run,
        )

        if decision.kind is DecisionKind.CANNOT_ITERATE:
            print_error(decision.reason)
            for recommendation in analysis.recommendations:
                console.print(f"  - {recommendation}")
            return outcome

        if dry_run:
            if decision.kind is DecisionKind.FULL_ITERATION:
                result = self.orchestrator.preview(source, templated)
                return outcome.model_copy(update={"result": result})
            print_warning(f"Dry run: would {decision.kind.value.replace('_', ' ')} at {templated}")
            return outcome

        if decision.kind is DecisionKind.TEMPLATE_ONLY_UPDATE:
            return outcome.model_copy(
                update={"apply_outcome": self._template_only_update(source, templated)}
            )

        created = False
        if decision.kind is DecisionKind.CREATE_TEMPLATED_FOLDER:
            templated = create_templated_folder(
                templated, self.analyzer.descriptor(source).root, source.name, self.config
            )
            created = True

        result = self.orchestrator.iterate(source, templated)
        return outcome.model_copy(
            update={
                "result": result,
                "created_templated_folder": created,
                "templated_folder": str(templated),
            }
        )

    def _template_only_update(self, source: Path, templated: Path) -> ApplyOutcome:
        """Give the existing templated folder a configuration and apply it in place."""
        config_dir = templated / self.config.config_dir_name
        if not (config_dir / self.config.definition_file).exists():
            create_template_configuration(templated, source.name, self.config)

        print_section_header("apply", f"Applying template to {templated}")
        applied = self.orchestrator.applier.apply(config_dir, templated)
        if applied.output:
            console.print(applied.output, markup=False, highlight=False)
        if not applied.success:
            raise ReconciliationError("apply", "Template application failed", output=applied.output)
        return applied
