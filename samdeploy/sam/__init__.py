"""SAM CLI integration — locating, invoking, and version-checking ``sam``."""

from samdeploy.sam.cli import (
    ChildProcessResult,
    DefaultSamCliInvoker,
    DefaultSamCliProcessInvoker,
    DefaultSamCliTaskInvoker,
    SamCliInvoker,
    SamCliProcessInvoker,
    SamCliTaskInvoker,
)
from samdeploy.sam.locator import SamCliConfiguration, find_sam_cli
from samdeploy.sam.version import (
    DefaultSamCliVersionProvider,
    SamCliVersionProvider,
    SamCliVersionValidation,
    ensure_supported_sam_cli,
    validate_sam_cli_version,
)

__all__ = [
    "ChildProcessResult",
    "DefaultSamCliInvoker",
    "DefaultSamCliProcessInvoker",
    "DefaultSamCliTaskInvoker",
    "DefaultSamCliVersionProvider",
    "SamCliConfiguration",
    "SamCliInvoker",
    "SamCliProcessInvoker",
    "SamCliTaskInvoker",
    "SamCliVersionProvider",
    "SamCliVersionValidation",
    "ensure_supported_sam_cli",
    "find_sam_cli",
    "validate_sam_cli_version",
]
