"""Project configuration management."""

import copy
import logging
from pathlib import Path
from typing import Any

import yaml
from knack.util import CLIError

from samdeploy.regions import KNOWN_AWS_REGIONS

logger = logging.getLogger(__name__)


def _sanitize_for_yaml(data: Any) -> Any:
    """Recursively convert values to plain Python types for safe YAML.

    ``yaml.safe_dump`` refuses ``str`` / ``int`` subclasses (for example
    enum members or values wrapped by a CLI layer).  This helper coerces
    any such wrapper types to the corresponding built-in type.
    """
    if isinstance(data, dict):
        return {str(k): _sanitize_for_yaml(v) for k, v in data.items()}
    if isinstance(data, (list, tuple, set, frozenset)):
        return [_sanitize_for_yaml(item) for item in data]
    # Order matters: bool before int (bool is an int subclass)
    if isinstance(data, bool):
        return bool(data)
    if isinstance(data, int):
        return int(data)
    if isinstance(data, float):
        return float(data)
    if isinstance(data, str):
        return str(data)
    return data


def _load_yaml_file(path: Path) -> dict:
    """Read a YAML mapping from *path*, raising CLIError on malformed files."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise CLIError(f"Could not parse {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise CLIError(f"Expected a mapping at the top level of {path}")
    return data


def _dump_yaml_file(path: Path, data: dict):
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        yaml.safe_dump(
            _sanitize_for_yaml(data),
            f,
            default_flow_style=False,
            sort_keys=False,
            allow_unicode=True,
        )


# CloudFormation capabilities accepted by ``sam deploy --capabilities``.
_ALLOWED_CAPABILITIES = frozenset(
    {
        "CAPABILITY_IAM",
        "CAPABILITY_NAMED_IAM",
        "CAPABILITY_AUTO_EXPAND",
    }
)

DEFAULT_CONFIG = {
    "sam_cli": {
        "location": "",
    },
    "deploy": {
        "region": "",
        "capabilities": ["CAPABILITY_IAM"],
        "bucket_lookup_workers": 8,
    },
}


class ProjectConfig:
    """Manages samdeploy.yaml project configuration.

    Provides dot-notation get/set for nested config values
    and handles persistence to disk.  Unlike the overrides file, the
    project config is optional: when ``samdeploy.yaml`` does not exist
    every lookup falls back to :data:`DEFAULT_CONFIG`.
    """

    CONFIG_FILENAME = "samdeploy.yaml"

    def __init__(self, project_dir: str):
        self.project_dir = Path(project_dir)
        self.config_path = self.project_dir / self.CONFIG_FILENAME
        self._config: dict = copy.deepcopy(DEFAULT_CONFIG)

    # ------------------------------------------------------------------ #
    #  Persistence                                                        #
    # ------------------------------------------------------------------ #

    def load(self) -> dict:
        """Load configuration from samdeploy.yaml, overlaid onto defaults.

        Returns:
            Merged config dict.

        Raises:
            CLIError if the file exists but is not a YAML mapping.
        """
        self._config = copy.deepcopy(DEFAULT_CONFIG)
        if self.config_path.exists():
            self._apply_overrides_to(self._config, _load_yaml_file(self.config_path))
            logger.debug("Configuration loaded from %s", self.config_path)
        return self._config

    def save(self):
        """Persist current configuration to samdeploy.yaml."""
        _dump_yaml_file(self.config_path, self._config)
        logger.debug("Configuration saved to %s", self.config_path)

    def get(self, key: str, default: Any = None) -> Any:
        """Get a config value by dot-separated key.

        Examples:
            config.get("sam_cli.location")
            config.get("deploy.capabilities")
        """
        parts = key.split(".")
        current = self._config

        for part in parts:
            if isinstance(current, dict) and part in current:
                current = current[part]
            else:
                return default

        return current

    def set(self, key: str, value: Any):
        """Set a config value by dot-separated key.

        Creates intermediate dicts as needed and validates the value
        before persisting.  A single capability is stored as a list.
        """
        value = self._normalize_config_value(key, value)
        self._validate_config_value(key, value)
        self._set_nested(self._config, key, value)
        self.save()

    def get_capabilities(self) -> list[str]:
        """Return ``deploy.capabilities`` as a validated list."""
        return self._get_checked("deploy.capabilities") or list(DEFAULT_CONFIG["deploy"]["capabilities"])

    def get_bucket_lookup_workers(self) -> int:
        """Return ``deploy.bucket_lookup_workers`` as a validated integer."""
        value = self._get_checked("deploy.bucket_lookup_workers")
        return DEFAULT_CONFIG["deploy"]["bucket_lookup_workers"] if value is None else value

    def _get_checked(self, key: str) -> Any:
        # Values read from samdeploy.yaml never went through set()
        value = self.get(key)
        if value is None:
            return None
        value = self._normalize_config_value(key, value)
        self._validate_config_value(key, value)
        return value

    # ------------------------------------------------------------------ #
    #  Validation                                                         #
    # ------------------------------------------------------------------ #

    @staticmethod
    def _normalize_config_value(key: str, value: Any) -> Any:
        if key == "deploy.capabilities":
            if isinstance(value, str):
                return [value]
            if isinstance(value, (list, tuple)):
                return list(value)
        if key == "deploy.bucket_lookup_workers" and isinstance(value, str) and value.strip().isdigit():
            return int(value.strip())
        return value

    @staticmethod
    def _validate_config_value(key: str, value: Any):
        """Enforce constraints at config-set time.

        Rules:
          - deploy.region must be a known AWS region (or empty).
          - deploy.capabilities must be a list of CloudFormation capabilities.
          - deploy.bucket_lookup_workers must be a positive integer.
        """
        if key == "deploy.region":
            region = str(value).strip()
            if region and region not in KNOWN_AWS_REGIONS:
                raise CLIError(f"Unknown AWS region: '{value}'.")

        if key == "deploy.capabilities":
            if not isinstance(value, list):
                raise CLIError("deploy.capabilities must be a list of CloudFormation capabilities.")
            unknown = [str(v) for v in value if not isinstance(v, str) or v not in _ALLOWED_CAPABILITIES]
            if unknown:
                raise CLIError(
                    f"Unknown capabilities: {', '.join(unknown)}.\n"
                    f"Supported capabilities: {', '.join(sorted(_ALLOWED_CAPABILITIES))}"
                )

        if key == "deploy.bucket_lookup_workers":
            if isinstance(value, bool) or not isinstance(value, int) or value < 1:
                raise CLIError("deploy.bucket_lookup_workers must be a positive integer.")

    def to_dict(self) -> dict:
        """Return a copy of the full config dict."""
        return copy.deepcopy(self._config)

    def _apply_overrides_to(self, base: dict, overlay: dict):
        """Recursively merge *overlay* into *base*."""

        def merge(b: dict, o: dict):
            for key, value in o.items():
                if isinstance(value, dict) and isinstance(b.get(key), dict):
                    merge(b[key], value)
                else:
                    b[key] = value

        merge(base, overlay)

    @staticmethod
    def _set_nested(target: dict, key: str, value: Any):
        """Set a dot-separated *key* in *target*, creating intermediate dicts."""
        parts = key.split(".")
        current = target
        for part in parts[:-1]:
            if part not in current or not isinstance(current[part], dict):
                current[part] = {}
            current = current[part]
        current[parts[-1]] = value

    def exists(self) -> bool:
        """Check if config file exists."""
        return self.config_path.exists()
