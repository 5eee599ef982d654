"""Error taxonomy for git-templater.

Every error carries enough context (path, step, underlying cause) to be
reported and fixed without reading the implementation.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional


class TemplaterError(Exception):
    """Base class for all git-templater errors."""

    def to_dict(self) -> dict[str, Any]:
        """Serialisable form used by ``--json`` CLI output."""
        return {"error_type": type(self).__name__, "error": str(self)}


class InvalidPathError(TemplaterError):
    """A supplied path is empty, or a parent that must exist does not."""

    def __init__(self, path: str | Path | None, message: str = "") -> None:
        self.path = str(path) if path is not None else ""
        super().__init__(message or f"Invalid path: {self.path!r}")

    def to_dict(self) -> dict[str, Any]:
        return {**super().to_dict(), "path": self.path}


class FolderAnalysisError(TemplaterError):
    """Filesystem access failed while analysing or enumerating a folder."""

    def __init__(self, path: str | Path, cause: BaseException | str) -> None:
        self.path = str(path)
        self.cause = cause
        super().__init__(f"Failed to analyse {self.path}: {cause}")

    def to_dict(self) -> dict[str, Any]:
        return {**super().to_dict(), "path": self.path, "cause": str(self.cause)}


class TemplateValidationError(TemplaterError):
    """A template configuration exists but fails structural validation."""

    def __init__(self, path: str | Path, errors: list[str]) -> None:
        self.path = str(path)
        self.errors = list(errors)
        joined = "; ".join(self.errors) or "unknown validation failure"
        super().__init__(f"Invalid template configuration at {self.path}: {joined}")

    def to_dict(self) -> dict[str, Any]:
        return {**super().to_dict(), "path": self.path, "errors": self.errors}


class ReconciliationError(TemplaterError):
    """A step of the iterate cycle (clean / apply / diff / fold) failed."""

    STEPS = ("clean", "apply", "diff", "fold")

    def __init__(
        self,
        step: str,
        message: str,
        cause: Optional[BaseException] = None,
        output: str = "",
    ) -> None:
        if step not in self.STEPS:
            raise ValueError(f"Unknown reconciliation step {step!r}; expected one of {self.STEPS}")
        self.step = step
        self.cause = cause
        self.output = output
        detail = f"{message}: {cause}" if cause is not None else message
        super().__init__(f"Step '{step}' failed: {detail}")

    def to_dict(self) -> dict[str, Any]:
        data = {**super().to_dict(), "step": self.step}
        if self.cause is not None:
            data["cause"] = str(self.cause)
        return data


class GeneratorError(TemplaterError):
    """A single generator step could not be executed."""

    def __init__(self, generator: str, message: str) -> None:
        self.generator = generator
        super().__init__(f"[{generator}] {message}")


class VersionControlError(TemplaterError):
    """Raised when a git command fails."""

    def __init__(self, message: str, command: str = "", stderr: str = "") -> None:
        self.command = command
        self.stderr = stderr
        super().__init__(message)
