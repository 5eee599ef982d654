"""Unit tests for the git-templater error taxonomy."""

from __future__ import annotations

import pytest

from git_templater.errors import (
    InvalidPathError,
    ReconciliationError,
    TemplateValidationError,
)


class TestReconciliationError:
    @pytest.mark.unit
    @pytest.mark.parametrize("step", ["clean", "apply", "diff", "fold"])
    def test_known_steps(self, step: str):
        error = ReconciliationError(step, "boom")
        assert error.step == step
        assert str(error) == f"Step '{step}' failed: boom"

    @pytest.mark.unit
    def test_unknown_step_rejected(self):
        with pytest.raises(ValueError, match="publish"):
            ReconciliationError("publish", "boom")

    @pytest.mark.unit
    def test_to_dict_includes_cause(self):
        error = ReconciliationError("clean", "Cannot clean", OSError("busy"))
        data = error.to_dict()
        assert data["error_type"] == "ReconciliationError"
        assert data["step"] == "clean"
        assert data["cause"] == "busy"


class TestOtherErrors:
    @pytest.mark.unit
    def test_invalid_path_default_message(self):
        error = InvalidPathError(None)
        assert error.path == ""
        assert error.to_dict()["path"] == ""

    @pytest.mark.unit
    def test_validation_error_joins_messages(self):
        error = TemplateValidationError("/t/.git_template", ["a", "b"])
        assert "a; b" in str(error)
        assert error.to_dict()["errors"] == ["a", "b"]
