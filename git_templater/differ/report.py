"""Human-readable rendering of a ``DiffReport``.

The rendered text is documentation for people inspecting a target folder;
callers must use the ``DiffReport`` object, never parse this output.
"""

from __future__ import annotations

from pathlib import Path

from git_templater.differ.models import DiffReport
from git_templater.rendering import TemplateRenderer

_TEMPLATE_DIR = Path(__file__).parent / "templates"
_REPORT_TEMPLATE = "diff_report.txt.j2"


def render_report(report: DiffReport) -> str:
    """Render the header, summary and every non-identical entry."""
    renderer = TemplateRenderer(_TEMPLATE_DIR)
    return renderer.render(_REPORT_TEMPLATE, {"report": report})


def write_report(report: DiffReport, destination: str | Path) -> Path:
    """Render *report* and write it as UTF-8 to *destination*."""
    path = Path(destination)
    path.write_text(render_report(report), encoding="utf-8")
    return path
