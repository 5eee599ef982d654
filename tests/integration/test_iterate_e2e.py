"""Integration tests for the full template development workflow.

These tests drive the real analyzer, strategy, generators, diff engine and
orchestrator against temporary folders, from an untemplated application to
a converged template.

No network access or git executable is required.
"""

from __future__ import annotations

import sys
from pathlib import Path

import pytest
import yaml

from git_templater import FolderStateAnalyzer, TemplateIterator
from git_templater.folders.models import DevelopmentStatus
from git_templater.template.applier import GeneratorTemplateApplier


@pytest.mark.integration
class TestTemplateDevelopmentWorkflow:
    """Status transitions and convergence across repeated iterations."""

    def test_untemplated_app_to_converged_template(self, source_app: Path, work_root: Path):
        analyzer = FolderStateAnalyzer()
        iterator = TemplateIterator()

        assert analyzer.analyze("apps/blog").status is DevelopmentStatus.READY_FOR_TEMPLATING

        first = iterator.run("apps/blog", create_if_missing=True)
        assert first.result.differences_found is True

        assert analyzer.analyze("apps/blog").status is DevelopmentStatus.READY_FOR_ITERATION

        second = iterator.run("apps/blog")
        assert second.result.differences_found is False
        assert second.result.cleanup_updated is False

    def test_hand_written_template_with_generators(self, source_app: Path, work_root: Path, definition):
        templated = work_root / "templated" / "apps" / "blog"
        script = "import pathlib; pathlib.Path('build.log').write_text('built')"
        definition(
            templated,
            variables={"title": "Sample app"},
            steps=[
                {"generator": "directory", "path": "config"},
                {"generator": "template", "path": "README.md", "content": "# {{ title }}\n"},
                {"generator": "file", "path": "config/settings.yml", "content": "port: 3000\n"},
                {"generator": "command", "run": f'"{sys.executable}" -c "{script}"'},
            ],
        )
        iterator = TemplateIterator()

        first = iterator.run("apps/blog")
        report = first.result.report
        assert report.entry("README.md").status.value == "identical"
        assert report.entry("config/settings.yml").status.value == "identical"
        assert report.entry("build.log").status.value == "added_in_target"
        assert report.entry("app.rb").status.value == "removed_from_target"

        cleanup = yaml.safe_load(
            (templated / ".git_template" / "cleanup.yaml").read_text(encoding="utf-8")
        )
        paths = {step["path"] for step in cleanup["steps"]}
        assert paths == {"build.log", "app.rb", ".env.example"}

        second = iterator.run("apps/blog")
        assert second.result.differences_found is False

    def test_source_edits_are_picked_up(self, source_app: Path, work_root: Path):
        iterator = TemplateIterator()
        iterator.run("apps/blog", create_if_missing=True)

        (source_app / "app" / "models").mkdir(parents=True)
        (source_app / "app" / "models" / "post.rb").write_text("class Post; end\n", encoding="utf-8")
        (source_app / "README.md").write_text("# Renamed\n", encoding="utf-8")

        changed = iterator.run("apps/blog")
        assert changed.result.report.entry("app/models/post.rb").status.value == "removed_from_target"
        assert changed.result.report.entry("README.md").status.value == "modified"

        settled = iterator.run("apps/blog")
        assert settled.result.differences_found is False

    def test_legacy_sibling_pair(self, source_app: Path, work_root: Path, definition):
        legacy = source_app.parent / "blog-templated"
        definition(legacy)

        outcome = TemplateIterator().run("apps/blog")

        assert outcome.templated_folder == str(legacy.resolve())
        assert (legacy / ".git_template" / "cleanup.yaml").exists()
        assert not (work_root / "templated").exists()

    def test_generated_folder_reproduces_source_from_configuration_alone(
        self, source_app: Path, work_root: Path, tmp_path: Path
    ):
        TemplateIterator().run("apps/blog", create_if_missing=True)
        config_dir = work_root / "templated" / "apps" / "blog" / ".git_template"

        fresh = tmp_path / "fresh"
        fresh.mkdir()
        outcome = GeneratorTemplateApplier().apply(config_dir, fresh)

        assert outcome.success is True
        for relative in ("app.rb", "README.md", "config/settings.yml", ".env.example"):
            assert (fresh / relative).read_bytes() == (source_app / relative).read_bytes()
