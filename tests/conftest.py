"""Shared pytest fixtures for the git-templater test suite.

Provides reusable fixtures for:
- Writing small folder trees from ``{relative_path: content}`` mappings
- A source application folder with a ``.git`` directory
- A source / templated folder pair laid out under a temporary working root
- A recording applier that stands in for real template generation
"""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Optional

import pytest
import yaml

from git_templater.config import Config
from git_templater.template.applier import ApplyOutcome


def write_tree(root: Path, files: dict[str, str | bytes]) -> Path:
    """Create *files* below *root* and return *root*."""
    root.mkdir(parents=True, exist_ok=True)
    for relative, content in files.items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(content, bytes):
            path.write_bytes(content)
        else:
            path.write_text(content, encoding="utf-8")
    return root


def write_definition(folder: Path, steps: Optional[list[dict]] = None, **extra) -> Path:
    """Write ``.git_template/template.yaml`` into *folder*."""
    config_dir = folder / ".git_template"
    config_dir.mkdir(parents=True, exist_ok=True)
    data = {"name": folder.name, "steps": steps or [], **extra}
    (config_dir / "template.yaml").write_text(yaml.safe_dump(data), encoding="utf-8")
    return config_dir


SOURCE_FILES: dict[str, str] = {
    "app.rb": "require 'sinatra'\nget '/' do\n  'hello'\nend\n",
    "README.md": "# Sample app\n",
    "config/settings.yml": "port: 3000\n",
    ".env.example": "PORT=3000\n",
}


# ---------------------------------------------------------------------------
# Paths & Directories
# ---------------------------------------------------------------------------


@pytest.fixture
def config() -> Config:
    return Config()


@pytest.fixture
def tree() -> Callable[[Path, dict[str, str | bytes]], Path]:
    """The ``write_tree`` helper as a fixture."""
    return write_tree


@pytest.fixture
def work_root(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Temporary working directory; paired folders are resolved against it."""
    root = tmp_path / "workspace"
    root.mkdir()
    monkeypatch.chdir(root)
    return root


@pytest.fixture
def source_app(work_root: Path) -> Path:
    """A version-controlled reference application without a template."""
    app = write_tree(work_root / "apps" / "blog", SOURCE_FILES)
    (app / ".git").mkdir()
    (app / ".git" / "HEAD").write_text("ref: refs/heads/main\n", encoding="utf-8")
    return app


@pytest.fixture
def templated_pair(source_app: Path, work_root: Path) -> tuple[Path, Path]:
    """``(source, templated)`` where the templated folder has an empty template."""
    templated = work_root / "templated" / "apps" / "blog"
    templated.mkdir(parents=True)
    write_definition(templated)
    return source_app, templated


# ---------------------------------------------------------------------------
# Collaborator doubles
# ---------------------------------------------------------------------------


class RecordingApplier:
    """Writes fixed files into the target and records every call."""

    def __init__(
        self,
        files: Optional[dict[str, str]] = None,
        success: bool = True,
        raises: Optional[BaseException] = None,
    ) -> None:
        self.files = files or {}
        self.success = success
        self.raises = raises
        self.calls: list[tuple[Path, Path]] = []

    def apply(self, config_dir: Path, target_dir: Path) -> ApplyOutcome:
        self.calls.append((Path(config_dir), Path(target_dir)))
        if self.raises is not None:
            raise self.raises
        write_tree(Path(target_dir), self.files)
        return ApplyOutcome(
            output=f"wrote {len(self.files)} file(s)",
            success=self.success,
            steps_run=len(self.files),
        )


@pytest.fixture
def recording_applier() -> RecordingApplier:
    return RecordingApplier()


@pytest.fixture
def applier_factory() -> type[RecordingApplier]:
    return RecordingApplier


@pytest.fixture
def definition() -> Callable[..., Path]:
    """The ``write_definition`` helper as a fixture."""
    return write_definition
