"""Template configuration directory (``.git_template/``).

The directory holds two YAML documents:

``template.yaml``
    ``name``, ``description``, ``variables`` and an ordered list of generator
    ``steps``. Each step is a mapping with a ``generator`` key naming a
    registered generator plus that generator's parameters.

``cleanup.yaml`` (optional)
    The cleanup phase: a mapping with a ``steps`` list in the same format.
    Steps here run after the main steps and are rewritten by the fold step
    of an iteration.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Any, Optional

import yaml
from pydantic import BaseModel, Field, ValidationError

from git_templater.config import Config
from git_templater.errors import TemplateValidationError

if TYPE_CHECKING:
    from git_templater.template.generators import GeneratorRegistry


def dump_steps(steps: list[dict[str, Any]]) -> str:
    """Serialise *steps* as a ``{steps: [...]}`` YAML document."""
    return yaml.safe_dump(
        {"steps": steps}, sort_keys=False, allow_unicode=True, default_flow_style=False
    )


class TemplateDefinition(BaseModel):
    """Parsed contents of ``template.yaml``."""

    name: str = Field(default="", description="Human-readable template name")
    description: str = Field(default="")
    variables: dict[str, Any] = Field(
        default_factory=dict,
        description="Values exposed to ``template`` generator steps",
    )
    steps: list[dict[str, Any]] = Field(default_factory=list)


class TemplateConfiguration:
    """Read, validate and update one configuration directory."""

    def __init__(self, config_dir: str | Path, config: Optional[Config] = None) -> None:
        self.config = config or Config()
        self.config_dir = Path(config_dir)

    @property
    def definition_path(self) -> Path:
        return self.config_dir / self.config.definition_file

    @property
    def cleanup_path(self) -> Path:
        return self.config_dir / self.config.cleanup_file

    def exists(self) -> bool:
        return self.config_dir.is_dir()

    def has_cleanup_phase(self) -> bool:
        return self.cleanup_path.is_file()

    # -- Validation ----------------------------------------------------------

    def validate(self, registry: Optional["GeneratorRegistry"] = None) -> tuple[bool, list[str]]:
        """Check the structure of both YAML documents.

        Returns:
            ``(valid, errors)``; *errors* is empty when *valid* is ``True``.
        """
        from git_templater.template.generators import GeneratorRegistry

        registry = registry or GeneratorRegistry.default()
        errors: list[str] = []

        if not self.exists():
            return False, [f"Configuration directory not found: {self.config_dir}"]
        if not self.definition_path.is_file():
            return False, [f"Missing {self.config.definition_file} in {self.config_dir}"]

        try:
            raw = self._load_yaml(self.definition_path)
        except TemplateValidationError as exc:
            return False, exc.errors

        if not isinstance(raw, dict):
            errors.append(f"{self.config.definition_file} must contain a mapping")
        else:
            try:
                TemplateDefinition.model_validate({k: v for k, v in raw.items() if k != "steps"})
            except ValidationError as exc:
                for err in exc.errors():
                    location = ".".join(str(part) for part in err["loc"])
                    errors.append(f"{self.config.definition_file}: {location}: {err['msg']}")
            errors.extend(
                self._validate_steps(raw.get("steps", []), self.config.definition_file, registry)
            )

        if self.has_cleanup_phase():
            try:
                cleanup = self._load_yaml(self.cleanup_path)
            except TemplateValidationError as exc:
                errors.extend(exc.errors)
            else:
                if cleanup is not None and not isinstance(cleanup, dict):
                    errors.append(f"{self.config.cleanup_file} must contain a mapping")
                elif cleanup:
                    errors.extend(
                        self._validate_steps(
                            cleanup.get("steps", []), self.config.cleanup_file, registry
                        )
                    )

        return not errors, errors

    def ensure_valid(self, registry: Optional["GeneratorRegistry"] = None) -> None:
        """Raise ``TemplateValidationError`` unless ``validate`` passes."""
        valid, errors = self.validate(registry)
        if not valid:
            raise TemplateValidationError(self.config_dir, errors)

    @staticmethod
    def _validate_steps(
        steps: Any, filename: str, registry: "GeneratorRegistry"
    ) -> list[str]:
        if steps is None:
            return []
        if not isinstance(steps, list):
            return [f"{filename}: 'steps' must be a list"]

        errors: list[str] = []
        known = set(registry.names())
        for index, step in enumerate(steps, start=1):
            if not isinstance(step, dict):
                errors.append(f"{filename}: step {index} must be a mapping")
                continue
            name = step.get("generator")
            if not name:
                errors.append(f"{filename}: step {index} has no 'generator'")
            elif name not in known:
                errors.append(f"{filename}: step {index} uses unknown generator '{name}'")
        return errors

    # -- Loading -------------------------------------------------------------

    def load_definition(self) -> TemplateDefinition:
        """Parse ``template.yaml``.

        Raises:
            TemplateValidationError: If the file is missing or malformed.
        """
        if not self.definition_path.is_file():
            raise TemplateValidationError(
                self.config_dir, [f"Missing {self.config.definition_file} in {self.config_dir}"]
            )
        raw = self._load_yaml(self.definition_path) or {}
        try:
            return TemplateDefinition.model_validate(raw)
        except ValidationError as exc:
            raise TemplateValidationError(self.definition_path, [str(exc)]) from exc

    def cleanup_steps(self) -> list[dict[str, Any]]:
        """Steps of the cleanup phase, or an empty list when there is none."""
        if not self.has_cleanup_phase():
            return []
        raw = self._load_yaml(self.cleanup_path) or {}
        if not isinstance(raw, dict):
            raise TemplateValidationError(
                self.cleanup_path, [f"{self.config.cleanup_file} must contain a mapping"]
            )
        return list(raw.get("steps") or [])

    def write_cleanup_phase(self, steps: list[dict[str, Any]], header: str = "") -> Path:
        """Replace the cleanup phase with *steps*.

        *header* is written as leading ``#`` comment lines.
        """
        self.config_dir.mkdir(parents=True, exist_ok=True)
        body = dump_steps(steps)
        comment = "".join(f"# {line}".rstrip() + "\n" for line in header.splitlines())
        self.cleanup_path.write_text(comment + body, encoding="utf-8")
        return self.cleanup_path

    @staticmethod
    def _load_yaml(path: Path) -> Any:
        try:
            return yaml.safe_load(path.read_text(encoding="utf-8"))
        except yaml.YAMLError as exc:
            raise TemplateValidationError(path, [f"{path.name}: invalid YAML: {exc}"]) from exc
        except (OSError, UnicodeDecodeError) as exc:
            raise TemplateValidationError(path, [f"{path.name}: cannot be read: {exc}"]) from exc
