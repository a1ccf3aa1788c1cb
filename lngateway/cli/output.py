"""Rich-based output utilities for the lngateway CLI."""

import json
from typing import Any

from rich.console import Console

# Shared console instances (results on stdout, diagnostics on stderr)
console = Console()
err_console = Console(stderr=True)


def print_json(data: Any) -> None:
    """Print data as formatted JSON."""
    console.print_json(json.dumps(data))


def print_error(message: str) -> None:
    """Print an error message in red."""
    err_console.print(f"[bold red]Error:[/bold red] {message}")


def print_info(message: str) -> None:
    """Print an informational message."""
    err_console.print(f"[dim]{message}[/dim]")
