"""SAM template inspection."""

from samdeploy.templates.parameters import (
    TemplateParameter,
    get_parameters,
    get_required_parameter_names,
    load_template,
)

__all__ = [
    "TemplateParameter",
    "get_parameters",
    "get_required_parameter_names",
    "load_template",
]
