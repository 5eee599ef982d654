"""Unit tests for git_templater.iteration.runner (the iterate command)."""

from __future__ import annotations

from pathlib import Path

import pytest

from git_templater.errors import InvalidPathError
from git_templater.iteration.runner import TemplateIterator
from git_templater.iteration.strategy import DecisionKind


class TestFullIteration:
    @pytest.mark.unit
    def test_ready_pair(self, templated_pair):
        source, templated = templated_pair
        outcome = TemplateIterator().run("apps/blog")

        assert outcome.decision.kind is DecisionKind.FULL_ITERATION
        assert outcome.success is True
        assert outcome.result is not None
        assert outcome.result.target_folder == str(templated.resolve())
        assert outcome.created_templated_folder is False

    @pytest.mark.unit
    def test_dry_run_uses_a_copy(self, templated_pair):
        _, templated = templated_pair
        outcome = TemplateIterator().run("apps/blog", dry_run=True)

        assert outcome.dry_run is True
        assert outcome.result is not None
        assert outcome.result.differences_found is True
        assert not (templated / ".git_template" / "cleanup.yaml").exists()


class TestCreateTemplatedFolder:
    @pytest.mark.unit
    def test_without_flag_cannot_iterate(self, source_app, work_root: Path):
        outcome = TemplateIterator().run("apps/blog")

        assert outcome.decision.kind is DecisionKind.CANNOT_ITERATE
        assert outcome.success is False
        assert outcome.result is None
        assert not (work_root / "templated").exists()

    @pytest.mark.unit
    def test_with_flag_creates_and_iterates(self, source_app, work_root: Path):
        outcome = TemplateIterator().run("apps/blog", create_if_missing=True)

        templated = (work_root / "templated" / "apps" / "blog").resolve()
        assert outcome.decision.kind is DecisionKind.CREATE_TEMPLATED_FOLDER
        assert outcome.created_templated_folder is True
        assert outcome.templated_folder == str(templated)
        assert (templated / ".git_template" / "template.yaml").exists()
        assert outcome.result.cleanup_updated is True

    @pytest.mark.unit
    def test_created_folder_then_converges(self, source_app):
        iterator = TemplateIterator()
        iterator.run("apps/blog", create_if_missing=True)
        outcome = iterator.run("apps/blog")

        assert outcome.decision.kind is DecisionKind.FULL_ITERATION
        assert outcome.result.differences_found is False

    @pytest.mark.unit
    def test_working_root_as_source(self, work_root: Path, tree):
        tree(work_root, {"app.rb": "puts 1\n", ".git/HEAD": "ref: refs/heads/main\n"})
        iterator = TemplateIterator()

        first = iterator.run(".", create_if_missing=True)
        second = iterator.run(".")
        third = iterator.run(".")

        assert first.templated_folder == str((work_root / "templated").resolve())
        assert first.result.report.relative_paths() == ["app.rb"]
        assert second.result.differences_found is False
        assert third.result.differences_found is False

    @pytest.mark.unit
    def test_dry_run_creates_nothing(self, source_app, work_root: Path):
        outcome = TemplateIterator().run("apps/blog", create_if_missing=True, dry_run=True)
        assert outcome.success is True
        assert outcome.result is None
        assert not (work_root / "templated").exists()


class TestTemplateOnlyUpdate:
    @pytest.mark.unit
    def test_adds_configuration_and_applies_in_place(self, source_app, work_root: Path):
        templated = work_root / "templated" / "apps" / "blog"
        templated.mkdir(parents=True)
        (templated / "existing.txt").write_text("keep me", encoding="utf-8")

        outcome = TemplateIterator().run("apps/blog")

        assert outcome.decision.kind is DecisionKind.TEMPLATE_ONLY_UPDATE
        assert outcome.success is True
        assert outcome.apply_outcome is not None
        assert outcome.apply_outcome.success is True
        assert outcome.result is None
        assert (templated / ".git_template" / "template.yaml").exists()
        assert (templated / "existing.txt").read_text(encoding="utf-8") == "keep me"
        assert not (templated / ".git_template_diff").exists()


class TestCannotIterate:
    @pytest.mark.unit
    def test_missing_folder(self, work_root: Path):
        outcome = TemplateIterator().run("does/not/exist")
        assert outcome.success is False
        assert outcome.decision.kind is DecisionKind.CANNOT_ITERATE
        assert outcome.analysis.recommendations

    @pytest.mark.unit
    def test_plain_folder(self, work_root: Path):
        (work_root / "plain").mkdir()
        outcome = TemplateIterator().run("plain", create_if_missing=True)
        assert outcome.success is False

    @pytest.mark.unit
    @pytest.mark.parametrize("path", ["", "  "])
    def test_empty_path(self, path: str):
        with pytest.raises(InvalidPathError):
            TemplateIterator().run(path)
