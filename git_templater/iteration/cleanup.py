"""Fold a diff report back into a template's cleanup phase.

Each difference becomes one generator step that makes the regenerated
folder match the source for that path: a ``file`` step carrying the source
content for modified and missing files, a ``remove`` step for files the
template produced but the source does not have.
"""

from __future__ import annotations

import base64
from pathlib import Path
from typing import Any

import yaml

from git_templater.differ.models import DiffReport, DiffStatus
from git_templater.template.configuration import dump_steps
from git_templater.utils import print_warning


def build_cleanup_steps(report: DiffReport, source_root: str | Path) -> list[dict[str, Any]]:
    """One step per non-identical entry of *report*, in report order.

    Source files that cannot be read are skipped with a warning.
    """
    root = Path(source_root)
    steps: list[dict[str, Any]] = []
    for entry in report.differences():
        if entry.status is DiffStatus.ADDED_IN_TARGET:
            steps.append({"generator": "remove", "path": entry.relative_path})
            continue

        source_file = root / entry.relative_path
        try:
            data = source_file.read_bytes()
        except OSError as exc:
            print_warning(f"Skipping {entry.relative_path}: cannot read {source_file}: {exc}")
            continue
        steps.append(file_step(entry.relative_path, data))
    return steps


def file_step(relative_path: str, data: bytes) -> dict[str, Any]:
    """A ``file`` step reproducing *data*.

    Content is stored as text when it survives a trip through the cleanup
    file's YAML unchanged, and base64-encoded otherwise (non-UTF-8 bytes,
    CR and Unicode line separators that YAML folds).
    """
    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError:
        text = None
    if text is not None:
        step = {"generator": "file", "path": relative_path, "content": text}
        if _survives_yaml(step):
            return step
    return {
        "generator": "file",
        "path": relative_path,
        "encoding": "base64",
        "content": base64.b64encode(data).decode("ascii"),
    }


def _survives_yaml(step: dict[str, Any]) -> bool:
    if "\r" in step["content"]:
        return False
    loaded = yaml.safe_load(dump_steps([step]))
    return loaded["steps"][0] == step


def merge_cleanup_steps(
    existing: list[dict[str, Any]], new: list[dict[str, Any]]
) -> list[dict[str, Any]]:
    """Overlay *new* on *existing*.

    A new step replaces, in place, the existing step for the same ``path``;
    steps for new paths are appended. Steps without a ``path`` are kept as-is.
    """
    merged = [dict(step) for step in existing]
    index_by_path = {
        step.get("path"): position
        for position, step in enumerate(merged)
        if isinstance(step, dict) and step.get("path")
    }
    for step in new:
        path = step.get("path")
        if path in index_by_path:
            merged[index_by_path[path]] = dict(step)
        else:
            index_by_path[path] = len(merged)
            merged.append(dict(step))
    return merged


def cleanup_header(report: DiffReport) -> str:
    """Comment block written above the cleanup steps."""
    return "\n".join(
        [
            "Cleanup phase maintained by 'git-templater iterate'.",
            f"Source: {report.source_folder}",
            f"Last updated: {report.generated_at}",
            f"Folded differences: {report.summary.total_files - report.summary.identical_files}",
            "Steps run after template.yaml; edit with care.",
        ]
    )


def describe_steps(steps: list[dict[str, Any]]) -> str:
    """One line per step, e.g. ``file     app/models/user.rb``."""
    lines = []
    for step in steps:
        target = step.get("path") or step.get("run") or ""
        lines.append(f"{step.get('generator', '?'):8s} {target}")
    return "\n".join(lines)
