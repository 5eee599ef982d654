"""Tree-walking, line-level folder comparison.

``DiffEngine.compare`` enumerates every file below two roots, classifies each
relative path and, for files present on both sides with different bytes,
produces an index-aligned line diff.

The line diff is positional: line *i* of the source is compared with line
*i* of the target. It runs in linear time and is adequate for near-identical
generated files, but an insertion in the middle of a file makes every
following line appear modified.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable, Optional

from git_templater.config import Config
from git_templater.differ.models import (
    DiffEntry,
    DiffReport,
    DiffStatus,
    DiffSummary,
    LineEdit,
    LineEditKind,
)
from git_templater.differ.report import write_report
from git_templater.errors import FolderAnalysisError, InvalidPathError
from git_templater.utils import print_warning

UNREADABLE_CONTENT = "[ERROR: could not read]"


# ---------------------------------------------------------------------------
# Pure helpers
# ---------------------------------------------------------------------------


def split_lines(text: str) -> list[str]:
    """Split on ``\\n`` keeping line endings; a trailing newline adds no line."""
    if not text:
        return []
    pieces = text.split("\n")
    lines = [piece + "\n" for piece in pieces[:-1]]
    if pieces[-1]:
        lines.append(pieces[-1])
    return lines


def _display(line: Optional[str]) -> Optional[str]:
    if line is None:
        return None
    return line.rstrip("\n").rstrip("\r")


def positional_line_diff(source_lines: list[str], target_lines: list[str]) -> list[LineEdit]:
    """Compare two line lists index by index.

    Lines still carry their endings, so ``"a\\n"`` and ``"a"`` differ even
    though both display as ``a``.
    """
    edits: list[LineEdit] = []
    for index in range(max(len(source_lines), len(target_lines))):
        source_line = source_lines[index] if index < len(source_lines) else None
        target_line = target_lines[index] if index < len(target_lines) else None

        if source_line is None:
            kind = LineEditKind.ADDED
        elif target_line is None:
            kind = LineEditKind.REMOVED
        elif source_line != target_line:
            kind = LineEditKind.MODIFIED
        else:
            continue

        edits.append(
            LineEdit(
                line_number=index + 1,
                kind=kind,
                source_text=_display(source_line),
                target_text=_display(target_line),
            )
        )
    return edits


def _decode(data: bytes) -> str:
    return data.decode("utf-8", errors="backslashreplace")


# ---------------------------------------------------------------------------
# DiffEngine
# ---------------------------------------------------------------------------


class DiffEngine:
    """Compare two folder trees file by file and line by line.

    The engine holds no state between calls; every ``compare`` walks both
    trees afresh.
    """

    def __init__(self, config: Optional[Config] = None) -> None:
        self.config = config or Config()

    # -- Public API ----------------------------------------------------------

    def compare(
        self,
        source_root: str | Path,
        target_root: str | Path,
        *,
        write_report_file: Optional[bool] = None,
        extra_excludes: Iterable[str] = (),
    ) -> DiffReport:
        """Compare *source_root* against *target_root*.

        Args:
            source_root: Reference tree.
            target_root: Candidate tree; the report artifact is written here.
            write_report_file: Override ``Config.write_diff_report``.
            extra_excludes: Relative POSIX paths ignored, with everything
                below them, on both sides.

        Raises:
            InvalidPathError: If either root is not a directory.
            FolderAnalysisError: If a tree cannot be enumerated.
        """
        source = Path(source_root).expanduser().resolve()
        target = Path(target_root).expanduser().resolve()
        if not source.is_dir():
            raise InvalidPathError(source, f"Source folder does not exist: {source}")
        if not target.is_dir():
            raise InvalidPathError(target, f"Target folder does not exist: {target}")

        excludes = frozenset(extra_excludes)
        source_files = self.list_files(source, excludes)
        target_files = self.list_files(target, excludes)

        entries = [
            self._compare_path(relative, source, target, source_files, target_files)
            for relative in sorted(source_files | target_files)
        ]
        report = DiffReport(
            source_folder=str(source),
            target_folder=str(target),
            entries=entries,
            summary=DiffSummary.from_entries(entries),
        )

        should_write = self.config.write_diff_report if write_report_file is None else write_report_file
        if should_write:
            destination = target / self.config.diff_report_name
            try:
                write_report(report, destination)
            except OSError as exc:
                print_warning(f"Could not write diff report to {destination}: {exc}")
        return report

    def list_files(self, root: Path, extra_excludes: frozenset[str] = frozenset()) -> set[str]:
        """Relative POSIX paths of every file below *root*.

        Dot-files are included; VCS metadata directories (at any depth), the
        report artifact at the root and *extra_excludes* are not. An exclude
        is a relative POSIX path and drops that entry with everything below
        it. Symlinked directories are followed; a link back into one of its
        own ancestors is skipped with a warning.
        """

        def _abort(error: OSError) -> None:
            raise FolderAnalysisError(root, error)

        files: set[str] = set()
        ancestors = {str(root): (os.path.realpath(root),)}
        for dirpath, dirnames, filenames in os.walk(root, onerror=_abort, followlinks=True):
            chain = ancestors.pop(dirpath, ())
            relative_dir = Path(dirpath).relative_to(root)
            at_root = relative_dir == Path(".")

            kept: list[str] = []
            for name in dirnames:
                if name == self.config.vcs_dir_name:
                    continue
                if (relative_dir / name).as_posix() in extra_excludes:
                    continue
                full = os.path.join(dirpath, name)
                real = os.path.realpath(full)
                if real in chain:
                    print_warning(f"Skipping symlink loop: {full} -> {real}")
                    continue
                ancestors[full] = chain + (real,)
                kept.append(name)
            dirnames[:] = kept

            for name in filenames:
                relative = (relative_dir / name).as_posix()
                if at_root and name == self.config.diff_report_name:
                    continue
                if relative in extra_excludes:
                    continue
                files.add(relative)
        return files

    # -- Internal ------------------------------------------------------------

    def _compare_path(
        self,
        relative: str,
        source: Path,
        target: Path,
        source_files: set[str],
        target_files: set[str],
    ) -> DiffEntry:
        in_source = relative in source_files
        in_target = relative in target_files

        if in_source and in_target:
            return self._compare_contents(relative, source / relative, target / relative)

        if in_source:
            return DiffEntry(
                relative_path=relative,
                status=DiffStatus.REMOVED_FROM_TARGET,
                source_line_count=self._count_lines(source / relative),
            )
        return DiffEntry(
            relative_path=relative,
            status=DiffStatus.ADDED_IN_TARGET,
            target_line_count=self._count_lines(target / relative),
        )

    def _compare_contents(self, relative: str, source_path: Path, target_path: Path) -> DiffEntry:
        source_bytes = self._read(source_path)
        target_bytes = self._read(target_path)
        if source_bytes is None:
            source_bytes = UNREADABLE_CONTENT.encode("utf-8")
        if target_bytes is None:
            target_bytes = UNREADABLE_CONTENT.encode("utf-8")

        source_lines = split_lines(_decode(source_bytes))
        target_lines = split_lines(_decode(target_bytes))

        if source_bytes == target_bytes:
            return DiffEntry(
                relative_path=relative,
                status=DiffStatus.IDENTICAL,
                source_line_count=len(source_lines),
                target_line_count=len(target_lines),
            )

        edits = positional_line_diff(source_lines, target_lines)
        if not edits:
            # Distinct bytes that decode to the same text.
            edits = [
                LineEdit(
                    line_number=1,
                    kind=LineEditKind.MODIFIED,
                    source_text=_display(source_lines[0]) if source_lines else "",
                    target_text=_display(target_lines[0]) if target_lines else "",
                )
            ]
        return DiffEntry(
            relative_path=relative,
            status=DiffStatus.MODIFIED,
            source_line_count=len(source_lines),
            target_line_count=len(target_lines),
            line_edits=edits,
        )

    def _count_lines(self, path: Path) -> int:
        data = self._read(path)
        if data is None:
            return 0
        return len(split_lines(_decode(data)))

    @staticmethod
    def _read(path: Path) -> Optional[bytes]:
        try:
            return path.read_bytes()
        except OSError as exc:
            print_warning(f"Could not read {path}: {exc}")
            return None
