"""Rich-based console utilities for styled CLI output.

The deploy command reports progress through this console the way an IDE
would write to an output channel:
- Color scheme: dim gray for background, white for content, green/red for outcomes
- Bordered panels for deployment summaries
- Spinners for long-running SAM CLI invocations
"""

from __future__ import annotations

import time
from contextlib import contextmanager
from typing import Iterator

from rich.console import Console as RichConsole
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn, TimeElapsedColumn
from rich.theme import Theme

# -------------------------------------------------------------------- #
# Color scheme
# -------------------------------------------------------------------- #

THEME = Theme({
    # Background/secondary text
    "dim": "#888888",
    "muted": "#666666",

    # Primary content
    "content": "bright_white",

    # Callouts and highlights
    "success": "bright_green",
    "error": "bright_red",
    "warning": "bright_yellow",
    "info": "bright_cyan",
    "accent": "bright_magenta",

    "panel.border": "#555555",

    # Progress indicators
    "progress.description": "bright_white",

    # Stack and bucket names
    "resource": "bright_cyan bold",

    # File paths
    "path": "bright_cyan",
})


class Console:
    """Styled console output.

    Provides:
    - Colored output with semantic styles
    - Spinners for long operations
    - Bordered panels for summaries
    """

    def __init__(self, rich_console: RichConsole | None = None):
        self._console = rich_console or RichConsole(theme=THEME, highlight=False)

    # ------------------------------------------------------------------ #
    # Basic output
    # ------------------------------------------------------------------ #

    def print_success(self, message: str):
        """Print a success message (green)."""
        self._console.print(f"[success]✓[/success] {message}")

    def print_error(self, message: str):
        """Print an error message (red)."""
        self._console.print(f"[error]✗[/error] {message}")

    def print_info(self, message: str):
        """Print an info message (cyan)."""
        self._console.print(f"[info]→[/info] {message}")

    def print_header(self, title: str):
        """Print a section header."""
        self._console.print()
        self._console.print(f"[accent bold]{title}[/accent bold]")
        self._console.print()

    # ------------------------------------------------------------------ #
    # Progress indicators
    # ------------------------------------------------------------------ #

    @contextmanager
    def spinner(self, message: str) -> Iterator[None]:
        """Show a spinner while an operation is in progress.

        On completion, prints a persistent line with elapsed time so the
        user can see what completed and how long it took.  If the body
        raises, no completion line is printed.

        Usage:
            with console.spinner("Packaging..."):
                invoker.package(...)
        """
        start = time.monotonic()
        progress = Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            TimeElapsedColumn(),
            console=self._console,
            transient=True,
        )
        with progress:
            progress.add_task(message, total=None)
            yield
        elapsed = time.monotonic() - start
        h, rem = divmod(int(elapsed), 3600)
        m, s = divmod(rem, 60)
        self._console.print(
            f"[success]✓[/success] {message} completed. ({h}:{m:02d}:{s:02d})"
        )

    # ------------------------------------------------------------------ #
    # Panels and boxes
    # ------------------------------------------------------------------ #

    def panel(
        self,
        content: str,
        title: str | None = None,
        border_style: str = "panel.border",
        padding: tuple[int, int] = (0, 1),
    ):
        """Print content in a bordered panel."""
        self._console.print(Panel(
            content,
            title=title,
            border_style=border_style,
            padding=padding,
        ))


# -------------------------------------------------------------------- #
# Module-level singleton
# -------------------------------------------------------------------- #

console = Console()
