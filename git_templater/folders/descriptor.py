"""Filesystem facts about a single folder.

``FolderDescriptor`` answers the questions the analyzer needs -- does the
folder exist, is it under version control, does it carry a template
configuration, and where does its paired "templated" folder live.
"""

from __future__ import annotations

import os
import stat
from functools import cached_property
from pathlib import Path
from typing import Optional

from git_templater.config import Config
from git_templater.folders.models import FolderState


def _is_dir(path: Path) -> bool:
    """``True`` if *path* is a directory; missing paths are ``False``.

    Other ``OSError``s (permission denied, I/O errors) propagate.
    """
    try:
        return stat.S_ISDIR(os.stat(path).st_mode)
    except (FileNotFoundError, NotADirectoryError):
        return False


class FolderDescriptor:
    """One filesystem location, stored as an absolute path.

    Derived facts are recomputed on every call except ``paired_path``, which
    is memoized for the lifetime of the descriptor. Nothing here creates or
    modifies files.
    """

    def __init__(
        self,
        path: str | Path,
        root: str | Path | None = None,
        config: Optional[Config] = None,
    ) -> None:
        self.config = config or Config()
        self.root = Path(root if root is not None else Path.cwd()).expanduser().resolve()
        candidate = Path(path).expanduser()
        if not candidate.is_absolute():
            candidate = self.root / candidate
        self.path = candidate.resolve()

    def __repr__(self) -> str:
        return f"FolderDescriptor({str(self.path)!r})"

    # -- Core checks ---------------------------------------------------------

    def exists(self) -> bool:
        return _is_dir(self.path)

    def is_version_controlled(self) -> bool:
        if not self.exists():
            return False
        return _is_dir(self.path / self.config.vcs_dir_name)

    def has_template_configuration(self) -> bool:
        if not self.exists():
            return False
        return _is_dir(self.configuration_path)

    @property
    def configuration_path(self) -> Path:
        return self.path / self.config.config_dir_name

    # -- Paired folder discovery --------------------------------------------

    @property
    def canonical_paired_path(self) -> Path:
        """``<root>/<templated_root>/<path relative to root>``.

        Folders outside ``root`` use their absolute path minus the anchor as
        the relative part.
        """
        try:
            relative = self.path.relative_to(self.root)
        except ValueError:
            relative = self.path.relative_to(self.path.anchor)
        return self.root / self.config.templated_root / relative

    def legacy_paired_paths(self) -> list[Path]:
        return [
            self.path.parent / f"{self.path.name}{suffix}"
            for suffix in self.config.legacy_suffixes
        ]

    @cached_property
    def _paired(self) -> tuple[Path, bool]:
        for candidate in [self.canonical_paired_path, *self.legacy_paired_paths()]:
            if _is_dir(candidate):
                return candidate, True
        return self.canonical_paired_path, False

    def paired_path(self) -> tuple[Path, bool]:
        """Return ``(path, found)`` for the paired templated folder.

        Probes the canonical location first, then the legacy sibling names
        in configuration order. When none exists the canonical path is
        returned with ``found=False``.
        """
        return self._paired

    def paired_folder_exists(self) -> bool:
        return self.paired_path()[1]

    def paired_descriptor(self) -> "FolderDescriptor":
        """Descriptor for the paired folder (existing or not)."""
        return FolderDescriptor(self.paired_path()[0], root=self.root, config=self.config)

    # -- Snapshot --------------------------------------------------------------

    def snapshot(self) -> FolderState:
        return FolderState(
            path=str(self.path),
            exists=self.exists(),
            is_version_controlled=self.is_version_controlled(),
            has_template_configuration=self.has_template_configuration(),
        )
