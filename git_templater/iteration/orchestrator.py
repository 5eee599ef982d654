"""Clean / apply / diff / fold reconciliation of a templated folder.

One ``iterate`` call regenerates the templated folder from its template
configuration, compares the result with the source folder and folds every
difference into the template's cleanup phase, so that the next call starts
closer to a zero-difference fixed point.

The steps run strictly in order and the first failure aborts the rest.
Two callers iterating the same target concurrently is unsupported; callers
must serialise access themselves.
"""

from __future__ import annotations

import shutil
import tempfile
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from git_templater.config import Config
from git_templater.differ.engine import DiffEngine
from git_templater.differ.models import DiffReport
from git_templater.errors import (
    InvalidPathError,
    ReconciliationError,
    TemplaterError,
    TemplateValidationError,
)
from git_templater.iteration.cleanup import (
    build_cleanup_steps,
    cleanup_header,
    merge_cleanup_steps,
)
from git_templater.template.applier import (
    ApplyOutcome,
    GeneratorTemplateApplier,
    TemplateApplier,
)
from git_templater.template.configuration import TemplateConfiguration
from git_templater.utils import (
    console,
    is_within,
    print_section_header,
    print_success,
    print_warning,
)


class IterationResult(BaseModel):
    """Outcome of one reconciliation cycle."""

    model_config = ConfigDict(frozen=True)

    source_folder: str
    target_folder: str
    applied: bool
    differences_found: bool
    differences_count: int = Field(default=0, ge=0)
    cleanup_updated: bool = False
    apply_output: str = ""
    report: Optional[DiffReport] = None

    def summary_dict(self) -> dict[str, object]:
        return {
            "Source folder": self.source_folder,
            "Templated folder": self.target_folder,
            "Template applied": self.applied,
            "Differences found": self.differences_found,
            "Difference units": self.differences_count,
            "Cleanup phase updated": self.cleanup_updated,
        }


class ReconciliationOrchestrator:
    """Run the iterate cycle against a (source, target) folder pair.

    Parameters
    ----------
    applier:
        Materialises the template into the target. Defaults to a
        ``GeneratorTemplateApplier``.
    engine:
        Folder comparison engine. Defaults to ``DiffEngine(config)``.
    config:
        Shared settings; names of the configuration directory and report.
    """

    def __init__(
        self,
        applier: Optional[TemplateApplier] = None,
        engine: Optional[DiffEngine] = None,
        config: Optional[Config] = None,
    ) -> None:
        self.config = config or Config()
        self.applier = applier or GeneratorTemplateApplier(config=self.config)
        self.engine = engine or DiffEngine(self.config)

    # -- Public API ----------------------------------------------------------

    def iterate(self, source: str | Path, target: str | Path) -> IterationResult:
        """Clean *target*, apply its template, diff against *source*, fold.

        Raises:
            InvalidPathError: If either folder does not exist.
            TemplateValidationError: If *target* has no usable configuration.
            ReconciliationError: If a step fails; ``step`` names which one.
        """
        source_path, target_path = self._validate(source, target)
        return self._run(source_path, target_path, self._excludes(source_path, target_path))

    def preview(self, source: str | Path, target: str | Path) -> IterationResult:
        """Run ``iterate`` on a temporary copy of *target*.

        The real target, including its cleanup phase, is left untouched.
        """
        source_path, target_path = self._validate(source, target)
        excludes = self._excludes(source_path, target_path)
        with tempfile.TemporaryDirectory(prefix="git_templater_preview_") as scratch:
            copy = Path(scratch) / target_path.name
            shutil.copytree(target_path, copy, symlinks=True)
            result = self._run(source_path, copy, excludes)
        return result.model_copy(update={"target_folder": str(target_path)})

    def clean_target(self, target: Path) -> None:
        """Delete every entry of *target* except the configuration directory.

        The configuration directory is moved into a backup folder beside the
        target while the rest is deleted, and moved back afterwards, also
        when deletion fails.

        Raises:
            ReconciliationError: With ``step == "clean"``.
        """
        config_dir = target / self.config.config_dir_name
        try:
            backup_root = Path(tempfile.mkdtemp(prefix=".git_template_backup_", dir=target.parent))
        except OSError as exc:
            raise ReconciliationError("clean", f"Cannot create backup beside {target}", exc) from exc
        backup = backup_root / self.config.config_dir_name

        try:
            shutil.move(str(config_dir), str(backup))
            for entry in list(target.iterdir()):
                if entry.is_dir() and not entry.is_symlink():
                    shutil.rmtree(entry)
                else:
                    entry.unlink()
        except OSError as exc:
            self._restore(backup, config_dir)
            raise ReconciliationError("clean", f"Cannot clean {target}", exc) from exc
        else:
            self._restore(backup, config_dir)
        finally:
            if not backup.exists():
                shutil.rmtree(backup_root, ignore_errors=True)

    def fold(self, report: DiffReport, source: Path, config_dir: Path) -> bool:
        """Merge the differences of *report* into the cleanup phase.

        Returns:
            ``True`` if the cleanup phase file was rewritten.
        """
        configuration = TemplateConfiguration(config_dir, self.config)
        try:
            existing = configuration.cleanup_steps()
            steps = merge_cleanup_steps(existing, build_cleanup_steps(report, source))
            if steps == existing:
                print_warning("Differences remain that the cleanup phase already covers")
                return False
            path = configuration.write_cleanup_phase(steps, cleanup_header(report))
        except (OSError, TemplateValidationError) as exc:
            raise ReconciliationError("fold", "Cannot update cleanup phase", exc) from exc
        console.print(f"  [blue]update[/blue]  {path} ({len(steps)} steps)")
        return True

    # -- Internal ------------------------------------------------------------

    def _run(self, source_path: Path, target_path: Path, excludes: tuple[str, ...]) -> IterationResult:
        config_dir = target_path / self.config.config_dir_name

        print_section_header("clean", f"Cleaning {target_path}")
        self.clean_target(target_path)

        print_section_header("apply", "Applying template")
        outcome = self._apply(config_dir, target_path)

        print_section_header("diff", f"Comparing with {source_path}")
        report = self._diff(source_path, target_path, excludes)

        cleanup_updated = False
        if report.has_differences:
            print_section_header("fold", "Updating cleanup phase")
            cleanup_updated = self.fold(report, source_path, config_dir)
        else:
            print_success("Templated folder matches the source folder")

        return IterationResult(
            source_folder=str(source_path),
            target_folder=str(target_path),
            applied=outcome.success,
            differences_found=report.has_differences,
            differences_count=report.summary.total_difference_units,
            cleanup_updated=cleanup_updated,
            apply_output=outcome.output,
            report=report,
        )

    def _validate(self, source: str | Path, target: str | Path) -> tuple[Path, Path]:
        source_path = Path(source).expanduser().resolve()
        target_path = Path(target).expanduser().resolve()
        if not source_path.is_dir():
            raise InvalidPathError(source_path, f"Source folder does not exist: {source_path}")
        if not target_path.is_dir():
            raise InvalidPathError(target_path, f"Templated folder does not exist: {target_path}")
        config_dir = target_path / self.config.config_dir_name
        if not config_dir.is_dir():
            raise TemplateValidationError(
                config_dir, [f"Templated folder has no {self.config.config_dir_name} directory"]
            )
        return source_path, target_path

    def _apply(self, config_dir: Path, target: Path) -> ApplyOutcome:
        try:
            outcome = self.applier.apply(config_dir, target)
        except (TemplateValidationError, ReconciliationError):
            raise
        except Exception as exc:
            raise ReconciliationError("apply", "Template application raised", exc) from exc
        if outcome.output:
            console.print(outcome.output, markup=False, highlight=False)
        if not outcome.success:
            raise ReconciliationError(
                "apply", "Template application failed", output=outcome.output
            )
        return outcome

    def _excludes(self, source: Path, target: Path) -> tuple[str, ...]:
        """The configuration directory, plus *target* itself when it lies inside *source*."""
        excludes = [self.config.config_dir_name]
        if target != source and is_within(target, source):
            excludes.append(target.relative_to(source).as_posix())
        return tuple(excludes)

    def _diff(self, source: Path, target: Path, excludes: tuple[str, ...]) -> DiffReport:
        try:
            return self.engine.compare(source, target, extra_excludes=excludes)
        except (TemplaterError, OSError) as exc:
            raise ReconciliationError("diff", "Folder comparison failed", exc) from exc

    @staticmethod
    def _restore(backup: Path, config_dir: Path) -> None:
        if backup.exists() and not config_dir.exists():
            shutil.move(str(backup), str(config_dir))
