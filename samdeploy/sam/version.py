"""SAM CLI version validation."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from enum import Enum

from knack.util import CLIError

from samdeploy.requirements import (
    MAXIMUM_SAM_CLI_VERSION_EXCLUSIVE,
    MINIMUM_SAM_CLI_VERSION_INCLUSIVE,
    compare_semver,
    get_requirement,
    is_strict_semver,
)
from samdeploy.sam.cli import DefaultSamCliInvoker, SamCliInvoker

logger = logging.getLogger(__name__)


class SamCliVersionValidation(str, Enum):
    VALID = "Valid"
    VERSION_TOO_LOW = "VersionTooLow"
    VERSION_TOO_HIGH = "VersionTooHigh"
    VERSION_NOT_PARSEABLE = "VersionNotParseable"


def validate_sam_cli_version(version: str | None) -> SamCliVersionValidation:
    """Check *version* against the supported SAM CLI window.

    >>> validate_sam_cli_version("0.15.0")
    <SamCliVersionValidation.VALID: 'Valid'>
    >>> validate_sam_cli_version("0.16.0").name
    'VERSION_TOO_HIGH'
    """
    if not is_strict_semver(version):
        return SamCliVersionValidation.VERSION_NOT_PARSEABLE

    if compare_semver(version, MINIMUM_SAM_CLI_VERSION_INCLUSIVE) < 0:
        return SamCliVersionValidation.VERSION_TOO_LOW

    if compare_semver(version, MAXIMUM_SAM_CLI_VERSION_EXCLUSIVE) >= 0:
        return SamCliVersionValidation.VERSION_TOO_HIGH

    return SamCliVersionValidation.VALID


class SamCliVersionProvider(ABC):
    @abstractmethod
    def get_sam_cli_version(self) -> str | None:
        """Return the installed SAM CLI version string."""


class DefaultSamCliVersionProvider(SamCliVersionProvider):
    """Reads the version from ``sam --info``."""

    def __init__(self, invoker: SamCliInvoker | None = None):
        self._invoker = invoker or DefaultSamCliInvoker()

    def get_sam_cli_version(self) -> str | None:
        return self._invoker.info().get("version")


def ensure_supported_sam_cli(provider: SamCliVersionProvider) -> str:
    """Return the installed SAM CLI version, or raise if it is unsupported.

    Raises:
        CLIError: when the version is outside
            [``MINIMUM_SAM_CLI_VERSION_INCLUSIVE``,
            ``MAXIMUM_SAM_CLI_VERSION_EXCLUSIVE``) or cannot be parsed.
    """
    version = provider.get_sam_cli_version()
    validation = validate_sam_cli_version(version)
    logger.debug("SAM CLI version %s: %s", version, validation.value)

    if validation is SamCliVersionValidation.VALID:
        return version

    requirement = get_requirement("SAM CLI")
    supported = ", ".join(requirement.constraints) if requirement else (
        f">={MINIMUM_SAM_CLI_VERSION_INCLUSIVE}, <{MAXIMUM_SAM_CLI_VERSION_EXCLUSIVE}"
    )
    if validation is SamCliVersionValidation.VERSION_NOT_PARSEABLE:
        message = f"Could not determine the SAM CLI version (got {version!r})."
    elif validation is SamCliVersionValidation.VERSION_TOO_LOW:
        message = f"SAM CLI {version} is too old; supported versions are {supported}."
    else:
        message = f"SAM CLI {version} is newer than this tool supports ({supported})."

    if requirement and requirement.install_hint:
        message += f" See {requirement.install_hint}"
    raise CLIError(message)
