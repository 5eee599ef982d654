"""Generator steps executed by the template applier.

A template step is a YAML mapping such as::

    - generator: file
      path: config/app.rb
      content: |
        puts "hello"

The ``generator`` key selects a ``Generator`` subclass from a
``GeneratorRegistry``; the remaining keys are validated by that subclass's
parameter model. Nothing in a step is evaluated as code except the shell
string of a ``command`` step.
"""

from __future__ import annotations

import base64
import binascii
import shutil
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import Any, Callable, Optional

from jinja2 import TemplateError
from pydantic import BaseModel, Field, ValidationError

from git_templater.config import Config
from git_templater.errors import GeneratorError
from git_templater.rendering import TemplateRenderer
from git_templater.utils import is_within, run_command


@dataclass
class GeneratorContext:
    """Everything a generator needs to act on one target folder."""

    target_dir: Path
    config: Config = field(default_factory=Config)
    variables: dict[str, Any] = field(default_factory=dict)
    renderer: TemplateRenderer = field(default_factory=lambda: TemplateRenderer(strict=True))

    def resolve(self, generator: str, relative: str) -> Path:
        """Map a step path onto the target folder.

        Raises:
            GeneratorError: If the path is absolute, escapes the target or
                points into the configuration directory.
        """
        if not relative:
            raise GeneratorError(generator, "Step path must not be empty")
        posix = PurePosixPath(relative)
        if posix.is_absolute() or Path(relative).is_absolute():
            raise GeneratorError(generator, f"Step path must be relative: {relative}")

        root = self.target_dir.resolve()
        destination = (root / Path(*posix.parts)).resolve()
        if destination == root or not is_within(destination, root):
            raise GeneratorError(generator, f"Step path escapes the target folder: {relative}")
        if is_within(destination, root / self.config.config_dir_name):
            raise GeneratorError(
                generator, f"Step path points into {self.config.config_dir_name}: {relative}"
            )
        return destination


# ---------------------------------------------------------------------------
# Base class
# ---------------------------------------------------------------------------


class Generator(ABC):
    """One executable template step."""

    name: str = ""

    class Params(BaseModel):
        pass

    def __init__(self, step: dict[str, Any]) -> None:
        values = {key: value for key, value in step.items() if key != "generator"}
        try:
            self.params = self.Params.model_validate(values)
        except ValidationError as exc:
            raise GeneratorError(self.name, f"Invalid step parameters: {exc}") from exc

    @abstractmethod
    def execute(self, context: GeneratorContext) -> str:
        """Apply the step to ``context.target_dir`` and return a log line."""


# ---------------------------------------------------------------------------
# Concrete generators
# ---------------------------------------------------------------------------


class FileGenerator(Generator):
    """Write literal content to a file, creating parent directories."""

    name = "file"

    class Params(BaseModel):
        path: str
        content: str = ""
        encoding: Optional[str] = Field(default=None, pattern="^base64$")

    def execute(self, context: GeneratorContext) -> str:
        destination = context.resolve(self.name, self.params.path)
        if self.params.encoding == "base64":
            try:
                data = base64.b64decode(self.params.content, validate=True)
            except (binascii.Error, ValueError) as exc:
                raise GeneratorError(self.name, f"Invalid base64 content for {self.params.path}") from exc
        else:
            data = self.params.content.encode("utf-8")
        _write_bytes(self.name, destination, data)
        return f"create  {self.params.path}"


class TemplateGenerator(Generator):
    """Write Jinja2-rendered content; template variables come from the definition."""

    name = "template"

    class Params(BaseModel):
        path: str
        content: str
        variables: dict[str, Any] = Field(default_factory=dict)

    def execute(self, context: GeneratorContext) -> str:
        destination = context.resolve(self.name, self.params.path)
        variables = {**context.variables, **self.params.variables}
        try:
            rendered = context.renderer.render_string(self.params.content, variables)
        except TemplateError as exc:
            raise GeneratorError(self.name, f"Cannot render {self.params.path}: {exc}") from exc
        _write_bytes(self.name, destination, rendered.encode("utf-8"))
        return f"render  {self.params.path}"


class DirectoryGenerator(Generator):
    name = "directory"

    class Params(BaseModel):
        path: str

    def execute(self, context: GeneratorContext) -> str:
        destination = context.resolve(self.name, self.params.path)
        try:
            destination.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise GeneratorError(self.name, f"Cannot create {self.params.path}: {exc}") from exc
        return f"mkdir   {self.params.path}"


class RemoveGenerator(Generator):
    """Delete a file or directory; a missing path is not an error."""

    name = "remove"

    class Params(BaseModel):
        path: str

    def execute(self, context: GeneratorContext) -> str:
        destination = context.resolve(self.name, self.params.path)
        try:
            if destination.is_dir() and not destination.is_symlink():
                shutil.rmtree(destination)
            elif destination.exists() or destination.is_symlink():
                destination.unlink()
            else:
                return f"skip    {self.params.path} (absent)"
        except OSError as exc:
            raise GeneratorError(self.name, f"Cannot remove {self.params.path}: {exc}") from exc
        return f"remove  {self.params.path}"


class CommandGenerator(Generator):
    """Run a shell command with the target folder as working directory."""

    name = "command"

    class Params(BaseModel):
        run: str = Field(..., min_length=1)
        timeout: Optional[int] = Field(default=None, ge=1)

    def execute(self, context: GeneratorContext) -> str:
        timeout = self.params.timeout or context.config.command_timeout
        returncode, stdout, stderr = run_command(
            self.params.run, cwd=context.target_dir, timeout=timeout
        )
        if returncode != 0:
            detail = stderr or stdout or f"exit code {returncode}"
            raise GeneratorError(self.name, f"'{self.params.run}' failed: {detail}")
        lines = [f"run     {self.params.run}"]
        if stdout:
            lines.append(stdout)
        return "\n".join(lines)


def _write_bytes(generator: str, destination: Path, data: bytes) -> None:
    try:
        destination.parent.mkdir(parents=True, exist_ok=True)
        destination.write_bytes(data)
    except OSError as exc:
        raise GeneratorError(generator, f"Cannot write {destination}: {exc}") from exc


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

GeneratorFactory = Callable[[dict[str, Any]], Generator]


class GeneratorRegistry:
    """Maps generator names to factories.

    Registries are plain instances; ``GeneratorRegistry.default()`` returns
    a new one pre-populated with the built-in generators, so registering a
    custom generator never affects other registries.
    """

    def __init__(self) -> None:
        self._factories: dict[str, GeneratorFactory] = {}

    @classmethod
    def default(cls) -> "GeneratorRegistry":
        registry = cls()
        for generator_cls in (
            FileGenerator,
            TemplateGenerator,
            DirectoryGenerator,
            RemoveGenerator,
            CommandGenerator,
        ):
            registry.register(generator_cls.name, generator_cls)
        return registry

    def register(self, name: str, factory: GeneratorFactory) -> None:
        if not name:
            raise ValueError("Generator name must not be empty")
        self._factories[name] = factory

    def names(self) -> list[str]:
        return sorted(self._factories)

    def create(self, step: dict[str, Any]) -> Generator:
        """Instantiate the generator a step names.

        Raises:
            GeneratorError: If the step is not a mapping or names an
                unregistered generator.
        """
        if not isinstance(step, dict):
            raise GeneratorError("registry", f"Step must be a mapping, got {type(step).__name__}")
        name = step.get("generator")
        factory = self._factories.get(name) if isinstance(name, str) else None
        if factory is None:
            raise GeneratorError("registry", f"Unknown generator: {name!r}")
        return factory(step)
