"""Persisted per-template parameter overrides.

Overrides live in ``.samdeploy/templates.yaml`` under the project
directory, keyed by the template path relative to the project::

    templates:
      app/template.yaml:
        parameter_overrides:
          TableName: orders
          Stage: dev

A template with no ``parameter_overrides`` section has *not been
configured* — :meth:`TemplatesConfig.get_overridden_parameters` returns
``None`` for it.  An empty section means the user has seen the overrides
prompt and chose to keep the defaults.
"""

from __future__ import annotations

import logging
from pathlib import Path

from samdeploy.config import _dump_yaml_file, _load_yaml_file

logger = logging.getLogger(__name__)

TEMPLATES_CONFIG_FILE = ".samdeploy/templates.yaml"


class TemplatesConfig:
    """Reads and writes the parameter overrides file for a project."""

    def __init__(self, project_dir: str):
        self._project_dir = Path(project_dir)
        self._path = self._project_dir / TEMPLATES_CONFIG_FILE

    @property
    def path(self) -> Path:
        return self._path

    @property
    def exists(self) -> bool:
        return self._path.exists()

    def template_key(self, template: str | Path) -> str:
        """Return the key under which *template* is stored.

        Templates inside the project are keyed by their POSIX relative
        path; anything outside falls back to the absolute path.
        """
        template_path = Path(template)
        if not template_path.is_absolute():
            template_path = self._project_dir / template_path
        template_path = template_path.resolve()
        try:
            return template_path.relative_to(self._project_dir.resolve()).as_posix()
        except ValueError:
            logger.warning("Template %s is outside project %s", template_path, self._project_dir)
            return template_path.as_posix()

    def _load(self) -> dict:
        if not self._path.exists():
            return {}
        return _load_yaml_file(self._path)

    def get_overridden_parameters(self, template: str | Path) -> dict[str, str] | None:
        """Return the overrides for *template*, or None if never configured."""
        templates = self._load().get("templates") or {}
        section = (templates.get(self.template_key(template)) or {}).get("parameter_overrides")
        if section is None:
            return None
        return {str(name): "" if value is None else str(value) for name, value in section.items()}

    def set_overridden_parameters(self, template: str | Path, overrides: dict[str, str]) -> None:
        """Replace the overrides for *template* and persist."""
        data = self._load()
        key = self.template_key(template)
        templates = data.get("templates") or {}
        entry = templates.get(key) or {}
        entry["parameter_overrides"] = dict(overrides)
        templates[key] = entry
        data["templates"] = templates
        _dump_yaml_file(self._path, data)
        logger.info("Saved parameter overrides for %s to %s", template, self._path)

    def configure_parameter_overrides(self, template: str | Path, required_names=()) -> Path:
        """Pre-fill the overrides section so the user can edit it.

        Every name in *required_names* that is not already overridden is
        added with an empty value.  Existing values are left untouched.

        Returns:
            Path to the overrides file to open for editing.
        """
        existing = self.get_overridden_parameters(template) or {}
        merged = dict(existing)
        for name in sorted(required_names):
            merged.setdefault(name, "")
        self.set_overridden_parameters(template, merged)
        return self._path
