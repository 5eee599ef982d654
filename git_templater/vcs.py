"""Git operations used by the command-line interface.

Cloning a source repository, checking whether a folder is a repository,
reading its working-tree status and pushing. The reconciliation core never
touches version control.
"""

import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from git_templater.errors import VersionControlError
from git_templater.utils import console


@dataclass
class RepositoryStatus:
    """Working-tree state of one repository."""

    path: Path
    has_changes: bool
    remotes: list[str] = field(default_factory=list)
    branch: str = ""


def _run_git(
    *args: str,
    cwd: str | Path | None = None,
    timeout: float = 120.0,
) -> tuple[str, str]:
    """Run a git command and return (stdout, stderr).

    Raises VersionControlError if the command exits with a non-zero code,
    times out or git is not installed.
    """
    cmd = ["git"] + list(args)
    cmd_str = " ".join(cmd)

    try:
        completed = subprocess.run(
            cmd,
            cwd=str(cwd) if cwd else None,
            capture_output=True,
            timeout=timeout,
        )
    except subprocess.TimeoutExpired:
        raise VersionControlError(
            f"Git command timed out after {timeout}s: {cmd_str}",
            command=cmd_str,
        )
    except FileNotFoundError as exc:
        raise VersionControlError(f"git executable not found: {exc}", command=cmd_str)

    stdout = (completed.stdout or b"").decode("utf-8", errors="replace").strip()
    stderr = (completed.stderr or b"").decode("utf-8", errors="replace").strip()

    if completed.returncode != 0:
        raise VersionControlError(
            f"Git command failed (exit {completed.returncode}): {cmd_str}\n{stderr}",
            command=cmd_str,
            stderr=stderr,
        )

    return stdout, stderr


class GitVersionControl:
    """Thin blocking wrapper around the ``git`` executable."""

    def __init__(self, timeout: float = 120.0):
        self.timeout = timeout

    def is_repository(self, path: str | Path) -> bool:
        """True if *path* is inside a git work tree."""
        folder = Path(path)
        if not folder.is_dir():
            return False
        try:
            stdout, _ = _run_git("rev-parse", "--is-inside-work-tree", cwd=folder, timeout=self.timeout)
        except VersionControlError:
            return False
        return stdout == "true"

    def clone(self, url: str, target: str | Path) -> Path:
        """Clone *url* into *target*.

        Raises:
            VersionControlError: If *target* already exists and is not empty,
                or git fails.
        """
        destination = Path(target).resolve()
        if destination.exists() and any(destination.iterdir()):
            raise VersionControlError(f"Destination is not empty: {destination}")
        destination.parent.mkdir(parents=True, exist_ok=True)

        console.print(f"[cyan]Cloning[/cyan] {url} -> {destination}")
        _run_git("clone", url, str(destination), timeout=self.timeout)
        return destination

    def status(self, path: str | Path) -> RepositoryStatus:
        folder = Path(path).resolve()
        porcelain, _ = _run_git("status", "--porcelain", cwd=folder, timeout=self.timeout)
        remotes_out, _ = _run_git("remote", cwd=folder, timeout=self.timeout)
        try:
            branch, _ = _run_git("rev-parse", "--abbrev-ref", "HEAD", cwd=folder, timeout=self.timeout)
        except VersionControlError:
            # No commits yet
            branch = ""
        return RepositoryStatus(
            path=folder,
            has_changes=bool(porcelain),
            remotes=[line for line in remotes_out.splitlines() if line.strip()],
            branch=branch,
        )

    def push(self, path: str | Path, remote: str = "origin", branch: Optional[str] = None) -> str:
        """Push *branch* (default: the current branch) to *remote*."""
        folder = Path(path).resolve()
        args = ["push", remote]
        if branch:
            args.append(branch)
        stdout, stderr = _run_git(*args, cwd=folder, timeout=self.timeout)
        return stdout or stderr
