"""git-templater configuration.

Centralised, typed configuration for folder analysis, diffing and template
iteration. Settings use a Pydantic v2 model so they are validated at
construction time and can be serialised to/from JSON or read from
environment variables.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, Field


class Config(BaseModel):
    """Global git-templater configuration.

    Instances are created once by the CLI (or by the caller) and passed to
    every component. Components constructed without one use ``Config()``.
    """

    config_dir_name: str = Field(
        default=".git_template", min_length=1,
        description="Name of the template configuration directory",
    )
    vcs_dir_name: str = Field(
        default=".git", min_length=1,
        description="Name of the version-control metadata directory",
    )
    diff_report_name: str = Field(
        default=".git_template_diff", min_length=1,
        description="Report file written into the compared target folder",
    )
    templated_root: str = Field(
        default="templated", min_length=1,
        description="Prefix under which paired folders are created",
    )
    legacy_suffixes: list[str] = Field(
        default_factory=lambda: ["-templated", "-templatd"],
        description="Sibling-folder suffixes probed for backward compatibility",
    )
    definition_file: str = Field(default="template.yaml", min_length=1)
    cleanup_file: str = Field(default="cleanup.yaml", min_length=1)
    command_timeout: Optional[int] = Field(
        default=None, ge=1,
        description="Timeout in seconds for command generator steps (None = no timeout)",
    )
    write_diff_report: bool = Field(default=True)

    # ------------------------------------------------------------------
    # Serialisation helpers
    # ------------------------------------------------------------------

    def save(self, path: Path) -> Path:
        """Persist the configuration to a JSON file.

        Returns:
            The path where the file was written.
        """
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(self.model_dump_json(indent=2), encoding="utf-8")
        return target

    @classmethod
    def load(cls, path: Path) -> "Config":
        """Load a previously-saved configuration from JSON."""
        raw = Path(path).read_text(encoding="utf-8")
        return cls.model_validate_json(raw)

    @classmethod
    def from_env(cls) -> "Config":
        """Build a ``Config`` from environment variables.

        Recognised variables (all optional):
            GIT_TEMPLATER_CONFIG_DIR, GIT_TEMPLATER_TEMPLATED_ROOT,
            GIT_TEMPLATER_DIFF_REPORT, GIT_TEMPLATER_COMMAND_TIMEOUT,
            GIT_TEMPLATER_WRITE_DIFF_REPORT.
        """
        kwargs: dict[str, Any] = {}
        if os.environ.get("GIT_TEMPLATER_CONFIG_DIR"):
            kwargs["config_dir_name"] = os.environ["GIT_TEMPLATER_CONFIG_DIR"]
        if os.environ.get("GIT_TEMPLATER_TEMPLATED_ROOT"):
            kwargs["templated_root"] = os.environ["GIT_TEMPLATER_TEMPLATED_ROOT"]
        if os.environ.get("GIT_TEMPLATER_DIFF_REPORT"):
            kwargs["diff_report_name"] = os.environ["GIT_TEMPLATER_DIFF_REPORT"]
        if os.environ.get("GIT_TEMPLATER_COMMAND_TIMEOUT"):
            kwargs["command_timeout"] = int(os.environ["GIT_TEMPLATER_COMMAND_TIMEOUT"])
        if os.environ.get("GIT_TEMPLATER_WRITE_DIFF_REPORT"):
            value = os.environ["GIT_TEMPLATER_WRITE_DIFF_REPORT"].strip().lower()
            kwargs["write_diff_report"] = value not in ("0", "false", "no", "off")
        return cls(**kwargs)
