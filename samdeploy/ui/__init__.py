"""UI utilities for samdeploy.

Provides Rich-based console output with:
- Semantic styles for success, warning and error messages
- Spinners around long-running SAM CLI calls
"""

from samdeploy.ui.console import Console, console

__all__ = [
    "Console",
    "console",
]
