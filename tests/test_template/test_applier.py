"""Unit tests for git_templater.template.applier."""

from __future__ import annotations

from pathlib import Path

import pytest

from git_templater.errors import InvalidPathError, TemplateValidationError
from git_templater.template.applier import ApplyOutcome, GeneratorTemplateApplier, TemplateApplier
from git_templater.template.configuration import TemplateConfiguration


class TestGeneratorTemplateApplier:
    @pytest.mark.unit
    def test_satisfies_protocol(self):
        assert isinstance(GeneratorTemplateApplier(), TemplateApplier)

    @pytest.mark.unit
    def test_runs_steps_in_order(self, tmp_path: Path, definition):
        config_dir = definition(
            tmp_path,
            steps=[
                {"generator": "file", "path": "a.txt", "content": "first"},
                {"generator": "file", "path": "a.txt", "content": "second"},
                {"generator": "template", "path": "name.txt", "content": "{{ app }}"},
            ],
            variables={"app": "blog"},
        )

        outcome = GeneratorTemplateApplier().apply(config_dir, tmp_path)

        assert outcome == ApplyOutcome(output=outcome.output, success=True, steps_run=3)
        assert (tmp_path / "a.txt").read_text(encoding="utf-8") == "second"
        assert (tmp_path / "name.txt").read_text(encoding="utf-8") == "blog"

    @pytest.mark.unit
    def test_cleanup_phase_runs_after_main_steps(self, tmp_path: Path, definition):
        config_dir = definition(
            tmp_path,
            steps=[
                {"generator": "file", "path": "keep.txt", "content": "generated"},
                {"generator": "file", "path": "junk.txt", "content": "junk"},
            ],
        )
        TemplateConfiguration(config_dir).write_cleanup_phase(
            [
                {"generator": "file", "path": "keep.txt", "content": "from source"},
                {"generator": "remove", "path": "junk.txt"},
            ]
        )

        outcome = GeneratorTemplateApplier().apply(config_dir, tmp_path)

        assert outcome.steps_run == 4
        assert (tmp_path / "keep.txt").read_text(encoding="utf-8") == "from source"
        assert not (tmp_path / "junk.txt").exists()

    @pytest.mark.unit
    def test_failing_step_stops_the_run(self, tmp_path: Path, definition):
        config_dir = definition(
            tmp_path,
            steps=[
                {"generator": "file", "path": "a.txt", "content": "x"},
                {"generator": "file", "path": "../escape.txt", "content": "x"},
                {"generator": "file", "path": "never.txt", "content": "x"},
            ],
        )

        outcome = GeneratorTemplateApplier().apply(config_dir, tmp_path)

        assert outcome.success is False
        assert outcome.steps_run == 1
        assert "escapes the target folder" in outcome.output
        assert not (tmp_path / "never.txt").exists()

    @pytest.mark.unit
    def test_invalid_configuration_raises(self, tmp_path: Path, definition):
        config_dir = definition(tmp_path, steps=[{"generator": "teleport"}])
        with pytest.raises(TemplateValidationError):
            GeneratorTemplateApplier().apply(config_dir, tmp_path)

    @pytest.mark.unit
    def test_missing_target(self, tmp_path: Path, definition):
        config_dir = definition(tmp_path)
        with pytest.raises(InvalidPathError):
            GeneratorTemplateApplier().apply(config_dir, tmp_path / "missing")

    @pytest.mark.unit
    def test_configuration_directory_untouched(self, tmp_path: Path, definition):
        config_dir = definition(tmp_path, steps=[{"generator": "remove", "path": ".git_template"}])

        outcome = GeneratorTemplateApplier().apply(config_dir, tmp_path)

        assert outcome.success is False
        assert (config_dir / "template.yaml").exists()
