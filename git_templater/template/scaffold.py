"""Scaffolding of templated folders and default template configurations."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from git_templater.config import Config
from git_templater.errors import InvalidPathError
from git_templater.rendering import TemplateRenderer
from git_templater.utils import console, ensure_dir

_TEMPLATE_DIR = Path(__file__).parent / "templates"


def render_default_definition(source_name: str, config: Optional[Config] = None) -> str:
    """Render the default ``template.yaml`` for a source folder name."""
    config = config or Config()
    renderer = TemplateRenderer(_TEMPLATE_DIR)
    return renderer.render(
        "template.yaml.j2",
        {"source_name": source_name, "cleanup_file": config.cleanup_file},
    )


def create_template_configuration(
    folder: str | Path,
    source_name: str,
    config: Optional[Config] = None,
    *,
    force: bool = False,
) -> Path:
    """Create ``<folder>/.git_template/template.yaml``.

    Returns:
        The configuration directory.

    Raises:
        FileExistsError: If a definition already exists and *force* is false.
    """
    config = config or Config()
    config_dir = ensure_dir(Path(folder) / config.config_dir_name)
    definition = config_dir / config.definition_file
    if definition.exists() and not force:
        raise FileExistsError(f"Template definition already exists: {definition}")
    definition.write_text(render_default_definition(source_name, config), encoding="utf-8")
    console.print(f"  [green]create[/green]  {definition}")
    return config_dir


def create_templated_folder(
    paired_path: str | Path,
    root: str | Path,
    source_name: str,
    config: Optional[Config] = None,
) -> Path:
    """Create the paired folder (parents included) with a default configuration.

    Raises:
        InvalidPathError: If *root* does not exist.
    """
    config = config or Config()
    root_path = Path(root)
    if not root_path.is_dir():
        raise InvalidPathError(root_path, f"Root folder does not exist: {root_path}")

    folder = ensure_dir(paired_path)
    console.print(f"  [green]create[/green]  {folder}")
    definition = folder / config.config_dir_name / config.definition_file
    if not definition.exists():
        create_template_configuration(folder, source_name, config)
    return folder
