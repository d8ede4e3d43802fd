"""SAM CLI executable resolution.

The ``sam`` executable is resolved, in order, from:

1. ``sam_cli.location`` in ``samdeploy.yaml``
2. the ``SAM_CLI_LOCATION`` environment variable
3. ``shutil.which("sam")`` — standard PATH lookup
4. well-known install locations (including ``sam.cmd`` on Windows)
"""

from __future__ import annotations

import logging
import os
import shutil
import sys

from knack.util import CLIError

logger = logging.getLogger(__name__)

SAM_CLI_LOCATION_ENV = "SAM_CLI_LOCATION"

_WINDOWS_LOCATIONS = (
    r"C:\Program Files\Amazon\AWSSAMCLI\bin\sam.cmd",
    r"C:\Program Files (x86)\Amazon\AWSSAMCLI\bin\sam.cmd",
)

_POSIX_LOCATIONS = (
    "/usr/local/bin/sam",
    "/usr/bin/sam",
    "/home/linuxbrew/.linuxbrew/bin/sam",
    "~/.local/bin/sam",
)


def _well_known_locations() -> list[str]:
    """Install locations checked when PATH lookup fails."""
    # pip-installed sam is usually a sibling of the Python interpreter
    bin_dir = os.path.dirname(sys.executable)
    candidates = [os.path.join(bin_dir, "sam"), os.path.join(bin_dir, "sam.cmd")]

    if sys.platform == "win32":
        candidates.extend(_WINDOWS_LOCATIONS)
    else:
        candidates.extend(os.path.expanduser(p) for p in _POSIX_LOCATIONS)
    return candidates


def find_sam_cli(configured_location: str | None = None) -> str | None:
    """Return the path of the SAM CLI executable, or ``None``."""
    if configured_location:
        if os.path.isfile(configured_location):
            return configured_location
        logger.warning("Configured SAM CLI location does not exist: %s", configured_location)

    from_env = os.environ.get(SAM_CLI_LOCATION_ENV)
    if from_env:
        if os.path.isfile(from_env):
            return from_env
        logger.warning("%s points to a missing file: %s", SAM_CLI_LOCATION_ENV, from_env)

    found = shutil.which("sam")
    if found:
        return found

    for candidate in _well_known_locations():
        if os.path.isfile(candidate):
            return candidate

    return None


class SamCliConfiguration:
    """Resolves and caches the SAM CLI location for one project.

    Args:
        config: Optional :class:`~samdeploy.config.ProjectConfig`; its
            ``sam_cli.location`` takes precedence over auto-detection.
    """

    def __init__(self, config=None):
        self._config = config
        self._location: str | None = None

    def get_sam_cli_location(self) -> str:
        """Return the resolved executable path.

        Raises:
            CLIError: if the SAM CLI cannot be found.
        """
        if self._location is None:
            configured = self._config.get("sam_cli.location") if self._config else None
            location = find_sam_cli(configured)
            if location is None:
                raise CLIError(
                    "Unable to find the SAM CLI. Install it, add it to PATH, or set "
                    f"'sam_cli.location' in samdeploy.yaml (or the {SAM_CLI_LOCATION_ENV} "
                    "environment variable)."
                )
            logger.debug("Using SAM CLI at %s", location)
            self._location = location
        return self._location
