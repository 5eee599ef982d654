"""Apply a template configuration to a target folder.

``TemplateApplier`` is the seam the reconciliation orchestrator depends on;
``GeneratorTemplateApplier`` is the built-in implementation that runs the
YAML generator steps of a configuration directory.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Protocol, runtime_checkable

from pydantic import BaseModel, Field

from git_templater.config import Config
from git_templater.errors import GeneratorError, InvalidPathError
from git_templater.rendering import TemplateRenderer
from git_templater.template.configuration import TemplateConfiguration
from git_templater.template.generators import GeneratorContext, GeneratorRegistry


class ApplyOutcome(BaseModel):
    """Result of applying a configuration to a folder."""

    output: str = ""
    success: bool = True
    steps_run: int = Field(default=0, ge=0)


@runtime_checkable
class TemplateApplier(Protocol):
    """Anything that can populate *target_dir* from *config_dir*."""

    def apply(self, config_dir: Path, target_dir: Path) -> ApplyOutcome: ...


class GeneratorTemplateApplier:
    """Run the main steps, then the cleanup-phase steps, of a configuration.

    Raises ``TemplateValidationError`` for a structurally invalid
    configuration. A step that fails stops the run and is reported as
    ``success=False`` with the output gathered up to that point.
    """

    def __init__(
        self,
        registry: Optional[GeneratorRegistry] = None,
        config: Optional[Config] = None,
    ) -> None:
        self.config = config or Config()
        self.registry = registry or GeneratorRegistry.default()

    def apply(self, config_dir: Path, target_dir: Path) -> ApplyOutcome:
        target = Path(target_dir)
        if not target.is_dir():
            raise InvalidPathError(target, f"Target folder does not exist: {target}")

        configuration = TemplateConfiguration(config_dir, self.config)
        configuration.ensure_valid(self.registry)
        definition = configuration.load_definition()

        context = GeneratorContext(
            target_dir=target,
            config=self.config,
            variables=dict(definition.variables),
            renderer=TemplateRenderer(strict=True),
        )
        steps = list(definition.steps) + configuration.cleanup_steps()

        lines: list[str] = []
        for index, step in enumerate(steps):
            try:
                generator = self.registry.create(step)
                lines.append(generator.execute(context))
            except GeneratorError as exc:
                lines.append(f"error   {exc}")
                return ApplyOutcome(output="\n".join(lines), success=False, steps_run=index)

        return ApplyOutcome(output="\n".join(lines), success=True, steps_run=len(steps))
