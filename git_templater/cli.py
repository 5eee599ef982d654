"""Command-line interface for git-templater.

Subcommands::

    git-templater status PATH... [--json]
    git-templater compare SOURCE TARGET [--json] [--no-report]
    git-templater iterate PATH [--create-templated-folder] [--dry-run] [--json]
    git-templater validate PATH
    git-templater clone URL [DEST]
    git-templater push PATH [--remote NAME] [--branch NAME]
"""

from __future__ import annotations

import argparse
import sys
from contextlib import contextmanager
from dataclasses import asdict
from pathlib import Path
from typing import Any, Iterator, Optional

from git_templater import __version__
from git_templater.config import Config
from git_templater.differ.engine import DiffEngine
from git_templater.differ.models import DiffReport
from git_templater.errors import TemplaterError, VersionControlError
from git_templater.folders.analyzer import FolderStateAnalyzer
from git_templater.folders.models import AnalysisResult
from git_templater.iteration.cleanup import describe_steps
from git_templater.iteration.runner import TemplateIterator
from git_templater.template.configuration import TemplateConfiguration
from git_templater.utils import (
    console,
    print_error,
    print_success,
    print_summary_table,
    print_warning,
)
from git_templater.vcs import GitVersionControl, RepositoryStatus


@contextmanager
def _quiet(enabled: bool) -> Iterator[None]:
    """Silence progress output while a ``--json`` command runs."""
    previous = console.quiet
    console.quiet = enabled or previous
    try:
        yield
    finally:
        console.quiet = previous


def _emit_json(data: Any) -> None:
    console.print_json(data=data)


def _print_report(report: DiffReport) -> None:
    print_summary_table(report.summary_dict(), title="Folder comparison")
    for entry in report.differences():
        console.print(
            f"  [yellow]{entry.status.value:20s}[/yellow] {entry.relative_path}",
            highlight=False,
        )
        for edit in entry.line_edits[:10]:
            console.print(f"      line {edit.line_number} ({edit.kind.value})", highlight=False)
        if len(entry.line_edits) > 10:
            console.print(f"      ... {len(entry.line_edits) - 10} more", highlight=False)


# ---------------------------------------------------------------------------
# Subcommands
# ---------------------------------------------------------------------------


def _repository_status(vcs: GitVersionControl, result: AnalysisResult) -> Optional[RepositoryStatus]:
    """Git working-tree state of an analysed source folder, if it is a repository."""
    folder = result.source.path
    if not result.source.is_version_controlled or not vcs.is_repository(folder):
        return None
    try:
        return vcs.status(folder)
    except VersionControlError as exc:
        print_warning(f"Cannot read git status of {folder}: {exc}")
        return None


def _repository_dict(status: Optional[RepositoryStatus]) -> Optional[dict[str, Any]]:
    if status is None:
        return None
    return {**asdict(status), "path": str(status.path)}


def cmd_status(args: argparse.Namespace, config: Config) -> int:
    analyzer = FolderStateAnalyzer(config)
    vcs = GitVersionControl()
    with _quiet(args.json):
        results, errors = analyzer.analyze_many(args.paths)
        repositories = [_repository_status(vcs, result) for result in results]

    if args.json:
        _emit_json(
            {
                "results": [
                    {**result.model_dump(mode="json"), "repository": _repository_dict(repository)}
                    for result, repository in zip(results, repositories)
                ],
                "errors": [error.to_dict() for error in errors],
            }
        )
    else:
        for result, repository in zip(results, repositories):
            console.print(result.summary_text(), markup=False, highlight=False)
            if repository is not None:
                console.print(f"  {'Branch':28s} {repository.branch or '(no commits)'}", highlight=False)
                console.print(
                    f"  {'Uncommitted changes':28s} {'yes' if repository.has_changes else 'no'}",
                    highlight=False,
                )
                console.print(
                    f"  {'Remotes':28s} {', '.join(repository.remotes) or '(none)'}",
                    highlight=False,
                )
            console.print()
        for error in errors:
            print_error(str(error))
    return 1 if errors else 0


def cmd_compare(args: argparse.Namespace, config: Config) -> int:
    engine = DiffEngine(config)
    with _quiet(args.json):
        report = engine.compare(args.source, args.target, write_report_file=not args.no_report)

    if args.json:
        _emit_json(report.model_dump(mode="json"))
        return 0

    _print_report(report)
    if report.has_differences:
        print_warning(f"{len(report.differences())} file(s) differ")
    else:
        print_success("Folders are identical")
    return 0


def cmd_iterate(args: argparse.Namespace, config: Config) -> int:
    iterator = TemplateIterator(config=config)
    with _quiet(args.json):
        outcome = iterator.run(
            args.path, create_if_missing=args.create_templated_folder, dry_run=args.dry_run
        )

    if args.json:
        _emit_json(outcome.model_dump(mode="json", exclude={"analysis"}))
        return 0 if outcome.success else 1

    if outcome.result is not None:
        title = "Iteration preview" if outcome.dry_run else "Iteration"
        print_summary_table(outcome.result.summary_dict(), title=title)
        if outcome.result.report is not None and outcome.result.report.has_differences:
            _print_report(outcome.result.report)
    if outcome.created_templated_folder:
        print_success(f"Created templated folder {outcome.templated_folder}")
    if outcome.apply_outcome is not None:
        print_success(
            f"Applied {outcome.apply_outcome.steps_run} step(s) to {outcome.templated_folder}"
        )
    return 0 if outcome.success else 1


def cmd_validate(args: argparse.Namespace, config: Config) -> int:
    path = Path(args.path)
    config_dir = path if path.name == config.config_dir_name else path / config.config_dir_name
    configuration = TemplateConfiguration(config_dir, config)
    valid, errors = configuration.validate()
    if not valid:
        print_error(f"Invalid template configuration: {config_dir}")
        for error in errors:
            console.print(f"  - {error}", markup=False, highlight=False)
        return 1

    definition = configuration.load_definition()
    steps = describe_steps(definition.steps)
    print_success(f"Template configuration is valid: {config_dir}")
    console.print(f"  {len(definition.steps)} step(s)", highlight=False)
    if steps:
        console.print(steps, markup=False, highlight=False)
    if configuration.has_cleanup_phase():
        console.print(
            f"  cleanup phase: {len(configuration.cleanup_steps())} step(s)", highlight=False
        )
    return 0


def cmd_clone(args: argparse.Namespace, config: Config) -> int:
    destination = args.dest or _repository_name(args.url)
    vcs = GitVersionControl()
    folder = vcs.clone(args.url, destination)
    print_success(f"Cloned into {folder}")

    result = FolderStateAnalyzer(config).analyze(folder)
    console.print(result.summary_text(), markup=False, highlight=False)
    return 0


def cmd_push(args: argparse.Namespace, config: Config) -> int:
    folder = Path(args.path).expanduser().resolve()
    vcs = GitVersionControl()
    if not vcs.is_repository(folder):
        raise VersionControlError(f"Not a git repository: {folder}")

    status = vcs.status(folder)
    if status.has_changes:
        print_warning(f"{folder} has uncommitted changes; only committed work is pushed")
    output = vcs.push(folder, remote=args.remote, branch=args.branch)
    if output:
        console.print(output, markup=False, highlight=False)
    print_success(f"Pushed {status.branch or 'current branch'} to {args.remote}")
    return 0


def _repository_name(url: str) -> str:
    name = url.rstrip("/").rsplit("/", 1)[-1].rsplit(":", 1)[-1]
    return name[: -len(".git")] if name.endswith(".git") else name


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="git-templater",
        description="Develop project templates by iterating them against a reference application",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  git-templater status examples/rails/simple\n"
            "  git-templater iterate examples/rails/simple --create-templated-folder\n"
            "  git-templater compare app templated/app --no-report\n"
        ),
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--config",
        default=None,
        help="JSON settings file (default: environment variables)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    status = subparsers.add_parser("status", help="Show the development status of folders")
    status.add_argument("paths", nargs="+", metavar="PATH")
    status.add_argument("--json", action="store_true", help="Emit JSON")
    status.set_defaults(handler=cmd_status)

    compare = subparsers.add_parser("compare", help="Compare two folder trees")
    compare.add_argument("source")
    compare.add_argument("target")
    compare.add_argument("--json", action="store_true", help="Emit JSON")
    compare.add_argument(
        "--no-report", action="store_true", help="Do not write the report file into TARGET"
    )
    compare.set_defaults(handler=cmd_compare)

    iterate = subparsers.add_parser("iterate", help="Run one template iteration for a folder")
    iterate.add_argument("path")
    iterate.add_argument(
        "--create-templated-folder",
        action="store_true",
        help="Create the templated folder when it is missing",
    )
    iterate.add_argument(
        "--dry-run", action="store_true", help="Preview on a temporary copy of the templated folder"
    )
    iterate.add_argument("--json", action="store_true", help="Emit JSON")
    iterate.set_defaults(handler=cmd_iterate)

    validate = subparsers.add_parser("validate", help="Validate a template configuration")
    validate.add_argument("path", help="Folder containing the configuration, or the directory itself")
    validate.set_defaults(handler=cmd_validate)

    clone = subparsers.add_parser("clone", help="Clone a repository and show its status")
    clone.add_argument("url")
    clone.add_argument("dest", nargs="?", default=None)
    clone.set_defaults(handler=cmd_clone)

    push = subparsers.add_parser("push", help="Push a folder's repository to its remote")
    push.add_argument("path")
    push.add_argument("--remote", default="origin", help="Remote name (default: origin)")
    push.add_argument("--branch", default=None, help="Branch to push (default: current)")
    push.set_defaults(handler=cmd_push)

    return parser


def main(argv: Optional[list[str]] = None) -> None:
    """CLI entry point for ``git-templater``."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = Config.load(Path(args.config)) if args.config else Config.from_env()
    except (OSError, ValueError) as exc:
        console.print(f"[bold red]Error:[/bold red] Cannot load settings: {exc}")
        sys.exit(1)

    try:
        code = args.handler(args, config)
    except TemplaterError as exc:
        if getattr(args, "json", False):
            _emit_json(exc.to_dict())
        else:
            print_error(f"{type(exc).__name__}: {exc}")
            output = getattr(exc, "output", "")
            if output:
                console.print(output, markup=False, highlight=False)
        sys.exit(1)
    except KeyboardInterrupt:
        print_warning("Interrupted")
        sys.exit(130)

    if code:
        sys.exit(code)


if __name__ == "__main__":
    main()
