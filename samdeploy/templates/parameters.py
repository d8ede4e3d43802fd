"""SAM template parameter introspection.

Reads the ``Parameters`` section of a SAM / CloudFormation template so the
deploy wizard can work out which parameters must be overridden before a
deployment can succeed.  A parameter is *required* when it declares no
``Default``.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml
from knack.util import CLIError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TemplateParameter:
    """A parameter declared by a template."""

    name: str
    required: bool
    type: str = "String"
    default: Any = None
    description: str = ""


class _CloudFormationLoader(yaml.SafeLoader):
    """SafeLoader extended with CloudFormation short-form intrinsics.

    ``!Ref Foo`` becomes ``{"Ref": "Foo"}`` and ``!Sub "..."`` becomes
    ``{"Fn::Sub": "..."}`` so templates using the short syntax load
    without a ConstructorError.
    """


def _construct_intrinsic(loader: yaml.Loader, tag_suffix: str, node: yaml.Node) -> dict:
    """Map a ``!Tag`` node to its long-form intrinsic function."""
    if isinstance(node, yaml.ScalarNode):
        value: Any = loader.construct_scalar(node)
    elif isinstance(node, yaml.SequenceNode):
        value = loader.construct_sequence(node, deep=True)
    else:
        value = loader.construct_mapping(node, deep=True)

    if tag_suffix == "Ref":
        return {"Ref": value}
    if tag_suffix == "GetAtt" and isinstance(value, str):
        # Short form "Resource.Attribute" -> ["Resource", "Attribute"]
        value = value.split(".", 1)
    if tag_suffix == "Condition":
        return {"Condition": value}
    return {f"Fn::{tag_suffix}": value}


_CloudFormationLoader.add_multi_constructor("!", _construct_intrinsic)


def load_template(template_path: str | Path) -> dict:
    """Load a SAM template (YAML or JSON) into a dict.

    Raises:
        CLIError if the file is missing or cannot be parsed.
    """
    path = Path(template_path)
    if not path.is_file():
        raise CLIError(f"Template not found: {path}")

    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise CLIError(f"Could not read template {path}: {e}") from e

    if path.suffix.lower() == ".json":
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise CLIError(f"Could not parse template {path}: {e}") from e
    else:
        try:
            data = yaml.load(text, Loader=_CloudFormationLoader)  # noqa: S506
        except yaml.YAMLError as e:
            raise CLIError(f"Could not parse template {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise CLIError(f"Template {path} is not a mapping")
    return data


def get_parameters(template_path: str | Path) -> dict[str, TemplateParameter]:
    """Return the parameters declared by the template at *template_path*.

    Returns an empty dict when the template has no ``Parameters`` section.
    """
    template = load_template(template_path)
    declared = template.get("Parameters") or {}
    if not isinstance(declared, dict):
        logger.warning("Ignoring malformed Parameters section in %s", template_path)
        return {}

    parameters: dict[str, TemplateParameter] = {}
    for name, definition in declared.items():
        definition = definition if isinstance(definition, dict) else {}
        parameters[str(name)] = TemplateParameter(
            name=str(name),
            required="Default" not in definition,
            type=str(definition.get("Type", "String")),
            default=definition.get("Default"),
            description=str(definition.get("Description", "")),
        )

    logger.debug("Template %s declares %d parameter(s)", template_path, len(parameters))
    return parameters


def get_required_parameter_names(parameters: dict[str, TemplateParameter]) -> set[str]:
    """Names of the parameters in *parameters* that have no default."""
    return {name for name, param in parameters.items() if param.required}
