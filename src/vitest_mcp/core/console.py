"""User-facing console output.

Everything goes to stderr: stdout carries the MCP stdio transport.

Usage::

    from vitest_mcp.core.console import status

    status("Server ready", style="success")  # ✓ Server ready
    status("Vitest not installed", style="error")  # ✗ Vitest not installed
"""

from __future__ import annotations

from rich.console import Console

from vitest_mcp.core.logging import get_logger

_console = Console(stderr=True)

# Style prefixes
_STYLES = {
    "success": "[green]✓[/green] ",
    "error": "[red]✗[/red] ",
    "warning": "[yellow]![/yellow] ",
    "info": "  ",
    "none": "",
}


def get_console() -> Console:
    """Get the shared Rich console instance."""
    return _console


def status(message: str, *, style: str = "info", indent: int = 0) -> None:
    """Print a styled status message to stderr."""
    prefix = _STYLES.get(style, "")
    padding = " " * indent
    _console.print(f"{padding}{prefix}{message}", highlight=False)

    # Looked up per call so it picks up the runtime logging config
    get_logger("console").debug("status", message=message, style=style)


def pluralize(count: int, singular: str, plural: str | None = None) -> str:
    """'1 file' / '3 files'."""
    if plural is None:
        plural = singular + "s"
    word = singular if count == 1 else plural
    return f"{count} {word}"
