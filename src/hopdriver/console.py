"""Centralized terminal output for the hopdriver CLI.

Key principle: stderr for status and diagnostics, stdout for response bodies.
"""

from __future__ import annotations

from collections.abc import Sequence

from rich.console import Console

from hopdriver.transports.base import Response

# stderr console for status messages
err_console = Console(stderr=True)

# stdout console for data output (tables)
out_console = Console()


def error(message: str, *, console: Console | None = None) -> None:
    """Print an error message (red X) to stderr."""
    c = console or err_console
    c.print(f"[red]  ✗ {message}[/red]", highlight=False)


def warn(message: str, *, console: Console | None = None) -> None:
    """Print a warning message (yellow) to stderr."""
    c = console or err_console
    c.print(f"[yellow]  ⚠ {message}[/yellow]")


def info(message: str, *, console: Console | None = None) -> None:
    """Print an info message (dim) to stderr."""
    c = console or err_console
    c.print(f"[dim]  {message}[/dim]")


def where(remote: bool) -> str:
    """Label for the transport that served a request."""
    return "remote" if remote else "local"


def status(response: Response, *, console: Console | None = None) -> None:
    """Print the final status line: code, reason, URL and transport."""
    c = console or err_console
    color = "green" if response.ok else "red"
    c.print(
        f"[{color}]HTTP {response.status_code}[/{color}] [dim]{response.reason}[/dim] "
        f"{response.url} [cyan]({where(response.remote)})[/cyan]",
        highlight=False,
    )


def chain(urls: Sequence[str], *, console: Console | None = None) -> None:
    """Print the redirect chain that led to the final response."""
    c = console or err_console
    for hop, url in enumerate(urls, start=1):
        c.print(f"[dim]  ↪ {hop}: {url}[/dim]", highlight=False)
