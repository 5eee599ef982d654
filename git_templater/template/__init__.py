"""Template configurations, generator steps and the applier that runs them."""

from .applier import ApplyOutcome, GeneratorTemplateApplier, TemplateApplier
from .configuration import TemplateConfiguration, TemplateDefinition
from .generators import (
    CommandGenerator,
    DirectoryGenerator,
    FileGenerator,
    Generator,
    GeneratorContext,
    GeneratorRegistry,
    RemoveGenerator,
    TemplateGenerator,
)
from .scaffold import (
    create_template_configuration,
    create_templated_folder,
    render_default_definition,
)

__all__ = [
    "ApplyOutcome",
    "CommandGenerator",
    "DirectoryGenerator",
    "FileGenerator",
    "Generator",
    "GeneratorContext",
    "GeneratorRegistry",
    "GeneratorTemplateApplier",
    "RemoveGenerator",
    "TemplateApplier",
    "TemplateConfiguration",
    "TemplateDefinition",
    "TemplateGenerator",
    "create_template_configuration",
    "create_templated_folder",
    "render_default_definition",
]
