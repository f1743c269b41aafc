"""Central UI handler for ghaudit.

Single source of truth for Rich console styling. Import this instead of
instantiating Console() in every command file.

Usage:
    from ghaudit.pipeline.ui import console, print_warning

    console.print("[success]No findings[/success]")
    print_warning("No workflow files found")
"""

import sys

from rich.console import Console
from rich.theme import Theme

GHAUDIT_THEME = Theme({
    "info": "bold cyan",
    "warning": "bold yellow",
    "error": "bold red",
    "success": "bold green",
    "critical": "bold red",
    "high": "bold yellow",
    "medium": "bold blue",
    "low": "cyan",
    "policy": "bold magenta",
    "path": "bold cyan",
    "dim": "dim white",
})

# stdout carries findings; diagnostics go to err_console
console = Console(theme=GHAUDIT_THEME, force_terminal=sys.stdout.isatty(), highlight=False)
err_console = Console(theme=GHAUDIT_THEME, stderr=True, highlight=False)


def print_warning(msg: str) -> None:
    """Print a warning message in yellow to stderr."""
    err_console.print(f"[warning]WARNING:[/warning] {msg}")
