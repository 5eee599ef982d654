"""Folder state analysis.

Combines the ``FolderDescriptor`` of a source folder with the descriptor of
its paired templated folder, classifies the pair into a
``DevelopmentStatus`` and produces actionable recommendations. Analysis is
a read-only query: it never creates the folders it recommends.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from git_templater.config import Config
from git_templater.errors import FolderAnalysisError, InvalidPathError
from git_templater.folders.descriptor import FolderDescriptor
from git_templater.folders.models import (
    AnalysisResult,
    ConfigurationCheck,
    DevelopmentStatus,
    FolderState,
    classify_status,
)
from git_templater.template.configuration import TemplateConfiguration


class FolderStateAnalyzer:
    """Stateless analyzer; every call re-reads the filesystem."""

    def __init__(self, config: Optional[Config] = None, root: str | Path | None = None) -> None:
        self.config = config or Config()
        self.root = root

    def descriptor(self, path: str | Path) -> FolderDescriptor:
        return FolderDescriptor(path, root=self.root, config=self.config)

    def analyze(self, path: str | Path) -> AnalysisResult:
        """Analyse *path* and its paired folder.

        Raises:
            InvalidPathError: If *path* is empty.
            FolderAnalysisError: If the filesystem could not be read.
        """
        if path is None or not str(path).strip():
            raise InvalidPathError(path, "Folder path cannot be empty")

        source = self.descriptor(str(path).strip())
        try:
            source_state = source.snapshot()
            paired_path, paired_found = source.paired_path()
            paired_state = source.paired_descriptor().snapshot()
            source_check = self._check_configuration(source_state, source.configuration_path)
            paired_check = self._check_configuration(
                paired_state, paired_path / self.config.config_dir_name
            )
        except OSError as exc:
            raise FolderAnalysisError(source.path, exc) from exc

        status = classify_status(
            source_state.exists,
            source_state.is_version_controlled,
            source_state.has_template_configuration,
            paired_state.exists,
            paired_state.has_template_configuration,
        )
        recommendations = self.recommendations_for(status, source_state, paired_state)
        for check in (source_check, paired_check):
            if check is not None and not check.valid:
                recommendations.append(f"Fix the template configuration errors in {check.path}")

        return AnalysisResult(
            source=source_state,
            paired=paired_state,
            paired_found=paired_found,
            status=status,
            recommendations=recommendations,
            source_configuration=source_check,
            paired_configuration=paired_check,
        )

    def analyze_many(
        self, paths: list[str | Path]
    ) -> tuple[list[AnalysisResult], list[FolderAnalysisError | InvalidPathError]]:
        """Analyse several folders, collecting per-folder failures."""
        results: list[AnalysisResult] = []
        errors: list[FolderAnalysisError | InvalidPathError] = []
        for path in paths:
            try:
                results.append(self.analyze(path))
            except (FolderAnalysisError, InvalidPathError) as exc:
                errors.append(exc)
        return results, errors

    # -- Recommendations ---------------------------------------------------------

    def recommendations_for(
        self,
        status: DevelopmentStatus,
        source: FolderState,
        paired: FolderState,
    ) -> list[str]:
        """Recommendations for *status*, most urgent first."""
        config_dir = self.config.config_dir_name
        if status is DevelopmentStatus.FOLDER_NOT_FOUND:
            return [
                f"Create the folder {source.path}",
                f"Verify the path is correct: {source.path}",
            ]
        if status is DevelopmentStatus.NOT_A_TEMPLATE_PROJECT:
            return [
                f"Initialize a git repository in {source.path}",
                f"Or add a template configuration directory at {Path(source.path) / config_dir}",
            ]
        if status in (
            DevelopmentStatus.READY_FOR_TEMPLATING,
            DevelopmentStatus.TEMPLATE_FOLDER_WITHOUT_PAIR,
        ):
            return [
                f"Create the templated folder {paired.path} with a {config_dir} configuration",
                f"Run 'git-templater iterate {source.path} --create-templated-folder' "
                "to scaffold it automatically",
            ]
        if status is DevelopmentStatus.PAIR_MISSING_CONFIGURATION:
            return [f"Add a {config_dir} directory to the templated folder {paired.path}"]
        if status is DevelopmentStatus.READY_FOR_ITERATION:
            return [f"Run 'git-templater iterate {source.path}' to compare it with {paired.path}"]
        return [f"Review the folder structure and template configuration of {source.path}"]

    # -- Internal ----------------------------------------------------------------

    def _check_configuration(
        self, state: FolderState, config_dir: Path
    ) -> Optional[ConfigurationCheck]:
        if not state.has_template_configuration:
            return None
        configuration = TemplateConfiguration(config_dir, self.config)
        valid, errors = configuration.validate()
        return ConfigurationCheck(
            path=str(config_dir),
            valid=valid,
            errors=errors,
            has_cleanup_phase=configuration.has_cleanup_phase(),
        )
