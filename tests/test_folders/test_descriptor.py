"""Unit tests for git_templater.folders.descriptor."""

from __future__ import annotations

from pathlib import Path

import pytest

from git_templater.config import Config
from git_templater.folders.descriptor import FolderDescriptor


class TestFolderFacts:
    @pytest.mark.unit
    def test_missing_folder_is_all_false(self, tmp_path: Path):
        descriptor = FolderDescriptor(tmp_path / "nope", root=tmp_path)
        assert descriptor.exists() is False
        assert descriptor.is_version_controlled() is False
        assert descriptor.has_template_configuration() is False

    @pytest.mark.unit
    def test_file_is_not_a_folder(self, tmp_path: Path):
        (tmp_path / "file.txt").write_text("x", encoding="utf-8")
        assert FolderDescriptor(tmp_path / "file.txt", root=tmp_path).exists() is False

    @pytest.mark.unit
    def test_version_controlled(self, tmp_path: Path):
        (tmp_path / "app" / ".git").mkdir(parents=True)
        descriptor = FolderDescriptor("app", root=tmp_path)
        assert descriptor.exists()
        assert descriptor.is_version_controlled()
        assert not descriptor.has_template_configuration()

    @pytest.mark.unit
    def test_git_file_does_not_count(self, tmp_path: Path):
        (tmp_path / "app").mkdir()
        (tmp_path / "app" / ".git").write_text("gitdir: elsewhere\n", encoding="utf-8")
        assert FolderDescriptor("app", root=tmp_path).is_version_controlled() is False

    @pytest.mark.unit
    def test_template_configuration(self, tmp_path: Path):
        (tmp_path / "app" / ".git_template").mkdir(parents=True)
        descriptor = FolderDescriptor("app", root=tmp_path)
        assert descriptor.has_template_configuration()
        assert descriptor.configuration_path == (tmp_path / "app" / ".git_template").resolve()

    @pytest.mark.unit
    def test_custom_config_dir_name(self, tmp_path: Path):
        (tmp_path / "app" / ".tpl").mkdir(parents=True)
        descriptor = FolderDescriptor("app", root=tmp_path, config=Config(config_dir_name=".tpl"))
        assert descriptor.has_template_configuration()

    @pytest.mark.unit
    def test_relative_path_resolved_against_root(self, tmp_path: Path):
        descriptor = FolderDescriptor("a/../b", root=tmp_path)
        assert descriptor.path == (tmp_path / "b").resolve()

    @pytest.mark.unit
    def test_default_root_is_cwd(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.chdir(tmp_path)
        assert FolderDescriptor("x").root == tmp_path.resolve()

    @pytest.mark.unit
    def test_never_creates_anything(self, tmp_path: Path):
        descriptor = FolderDescriptor("ghost", root=tmp_path)
        descriptor.snapshot()
        descriptor.paired_path()
        assert list(tmp_path.iterdir()) == []


class TestPairedPath:
    @pytest.mark.unit
    def test_canonical_path_when_nothing_exists(self, tmp_path: Path):
        (tmp_path / "examples" / "rails" / "simple").mkdir(parents=True)
        descriptor = FolderDescriptor("examples/rails/simple", root=tmp_path)
        path, found = descriptor.paired_path()
        assert path == tmp_path.resolve() / "templated" / "examples" / "rails" / "simple"
        assert found is False
        assert descriptor.paired_folder_exists() is False

    @pytest.mark.unit
    def test_canonical_path_found(self, tmp_path: Path):
        (tmp_path / "templated" / "app").mkdir(parents=True)
        path, found = FolderDescriptor("app", root=tmp_path).paired_path()
        assert path == (tmp_path / "templated" / "app").resolve()
        assert found is True

    @pytest.mark.unit
    @pytest.mark.parametrize("suffix", ["-templated", "-templatd"])
    def test_legacy_sibling_found(self, tmp_path: Path, suffix: str):
        (tmp_path / f"app{suffix}").mkdir()
        path, found = FolderDescriptor("app", root=tmp_path).paired_path()
        assert path == (tmp_path / f"app{suffix}").resolve()
        assert found is True

    @pytest.mark.unit
    def test_canonical_wins_over_legacy(self, tmp_path: Path):
        (tmp_path / "templated" / "app").mkdir(parents=True)
        (tmp_path / "app-templated").mkdir()
        path, _ = FolderDescriptor("app", root=tmp_path).paired_path()
        assert path == (tmp_path / "templated" / "app").resolve()

    @pytest.mark.unit
    def test_legacy_probe_order(self, tmp_path: Path):
        (tmp_path / "app-templated").mkdir()
        (tmp_path / "app-templatd").mkdir()
        path, _ = FolderDescriptor("app", root=tmp_path).paired_path()
        assert path.name == "app-templated"

    @pytest.mark.unit
    def test_folder_outside_root(self, tmp_path: Path):
        root = tmp_path / "root"
        root.mkdir()
        outside = tmp_path / "elsewhere" / "app"
        path, _ = FolderDescriptor(outside, root=root).paired_path()
        assert path.parts[: len(root.resolve().parts) + 1] == (*root.resolve().parts, "templated")
        assert path.name == "app"

    @pytest.mark.unit
    def test_paired_path_is_memoized(self, tmp_path: Path):
        descriptor = FolderDescriptor("app", root=tmp_path)
        first = descriptor.paired_path()
        (tmp_path / "app-templated").mkdir()
        assert descriptor.paired_path() == first

    @pytest.mark.unit
    def test_paired_descriptor(self, tmp_path: Path):
        (tmp_path / "templated" / "app" / ".git_template").mkdir(parents=True)
        paired = FolderDescriptor("app", root=tmp_path).paired_descriptor()
        assert paired.exists()
        assert paired.has_template_configuration()


class TestSnapshot:
    @pytest.mark.unit
    def test_snapshot_fields(self, tmp_path: Path):
        (tmp_path / "app" / ".git").mkdir(parents=True)
        state = FolderDescriptor("app", root=tmp_path).snapshot()
        assert state.path == str((tmp_path / "app").resolve())
        assert state.exists is True
        assert state.is_version_controlled is True
        assert state.has_template_configuration is False
