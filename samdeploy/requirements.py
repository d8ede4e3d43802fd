"""External-tool requirements and semantic version comparison.

Declares the SAM CLI dependency in a single registry with its supported
version window, plus the strict semver helpers used to check an installed
version against it.

This module is **self-contained** — it uses only the Python standard library
and has zero intra-package imports so it can be loaded very early in the
startup path.

Public API
----------
- ``is_strict_semver(s)``     — ``"0.14.2"`` → ``True``, ``"0.14"`` → ``False``
- ``compare_semver(a, b)``    — ``-1`` / ``0`` / ``1`` by semver precedence
- ``get_requirement(name)``   — lookup by display name (case-insensitive)
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

# ======================================================================
# Version constants
# ======================================================================

MINIMUM_SAM_CLI_VERSION_INCLUSIVE = "0.7.0"
MAXIMUM_SAM_CLI_VERSION_EXCLUSIVE = "0.16.0"


# ======================================================================
# Data structures
# ======================================================================


@dataclass
class ToolRequirement:
    """Declaration of an external tool dependency."""

    name: str  # Display name, e.g. "SAM CLI"
    command: str  # Binary name, e.g. "sam"
    constraints: list[str] = field(default_factory=list)  # e.g. [">=0.7.0", "<0.16.0"]
    install_hint: str = ""  # URL or install guidance


TOOL_REQUIREMENTS: list[ToolRequirement] = [
    ToolRequirement(
        name="SAM CLI",
        command="sam",
        constraints=[
            f">={MINIMUM_SAM_CLI_VERSION_INCLUSIVE}",
            f"<{MAXIMUM_SAM_CLI_VERSION_EXCLUSIVE}",
        ],
        install_hint="https://docs.aws.amazon.com/serverless-application-model/latest/developerguide/"
        "serverless-sam-cli-install.html",
    ),
]

# ======================================================================
# Version parsing
# ======================================================================

# Strict semantic version: MAJOR.MINOR.PATCH with optional pre-release and
# build metadata.  A leading "v" is tolerated.
_SEMVER_RE = re.compile(
    r"^v?(?P<major>0|[1-9]\d*)\.(?P<minor>0|[1-9]\d*)\.(?P<patch>0|[1-9]\d*)"
    r"(?:-(?P<prerelease>[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*))?"
    r"(?:\+[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*)?\Z"
)


def is_strict_semver(s: str | None) -> bool:
    """Return True if *s* is a full ``MAJOR.MINOR.PATCH`` version."""
    if not s:
        return False
    return _SEMVER_RE.match(s.strip()) is not None


def compare_semver(left: str, right: str) -> int:
    """Compare two strict semantic versions, returning -1, 0 or 1.

    A pre-release sorts before its release (``0.16.0-rc1`` < ``0.16.0``).
    Build metadata is ignored.  Raises ``ValueError`` when either side is
    not a strict version.

    >>> compare_semver("0.7.0", "0.16.0")
    -1
    """
    lm = _SEMVER_RE.match(left.strip())
    rm = _SEMVER_RE.match(right.strip())
    if not lm or not rm:
        raise ValueError(f"Cannot compare versions: {left!r}, {right!r}")

    lcore = (int(lm.group("major")), int(lm.group("minor")), int(lm.group("patch")))
    rcore = (int(rm.group("major")), int(rm.group("minor")), int(rm.group("patch")))
    if lcore != rcore:
        return -1 if lcore < rcore else 1

    lpre, rpre = lm.group("prerelease"), rm.group("prerelease")
    if lpre == rpre:
        return 0
    if lpre is None:
        return 1
    if rpre is None:
        return -1
    return _compare_prerelease(lpre, rpre)


def _compare_prerelease(left: str, right: str) -> int:
    """Compare dot-separated pre-release identifiers per semver precedence."""
    for a, b in zip(left.split("."), right.split(".")):
        if a == b:
            continue
        if a.isdigit() and b.isdigit():
            return -1 if int(a) < int(b) else 1
        # Numeric identifiers always have lower precedence than alphanumeric
        if a.isdigit():
            return -1
        if b.isdigit():
            return 1
        return -1 if a < b else 1
    a_len, b_len = len(left.split(".")), len(right.split("."))
    if a_len == b_len:
        return 0
    return -1 if a_len < b_len else 1


# ======================================================================
# Public API
# ======================================================================


def get_requirement(name: str) -> ToolRequirement | None:
    """Look up a tool requirement by display name (case-insensitive)."""
    lower = name.lower()
    for req in TOOL_REQUIREMENTS:
        if req.name.lower() == lower:
            return req
    return None
