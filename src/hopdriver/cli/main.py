"""hopdriver CLI - drive a local WSGI app and the real web from one session."""

import os
from typing import Annotated

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

import hopdriver
from hopdriver.cli.http_commands import build_settings, http_app, visit
from hopdriver.config import get_settings
from hopdriver.exceptions import InvalidURLError
from hopdriver.hosts import is_remote
from hopdriver.logging import configure_logging, enable_network_debug, get_logger

# Configure logging early using env vars directly; the -v/-vv and
# --log-format flags in main_callback() may reconfigure later.
configure_logging(
    level=os.environ.get("HOPDRIVER_LOG_LEVEL", "WARNING"),
    json_output=os.environ.get("HOPDRIVER_LOG_FORMAT", "console") == "json",
)

LOG = get_logger(__name__)

app = typer.Typer(
    name="hopdriver",
    help="""
    hopdriver - drive a local WSGI app and the real web from one session

    \b
    Quick start:
      hopdriver visit https://example.com              Remote GET
      hopdriver visit / --app myproject.wsgi:app       In-process GET
      hopdriver classify http://www.example.com/page   Local or remote?
      hopdriver config                                 Show configuration
    """,
    no_args_is_help=True,
    rich_markup_mode="rich",
    context_settings={"help_option_names": ["-h", "--help"]},
)
console = Console()

app.add_typer(http_app)
app.command("visit")(visit)


@app.callback(invoke_without_command=True)
def main_callback(
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose",
            "-v",
            count=True,
            help="Increase verbosity (-v for info, -vv for debug)",
        ),
    ] = 0,
    log_format: Annotated[
        str | None,
        typer.Option(
            "--log-format",
            help="Log output format: console (human-readable) or json (structured)",
        ),
    ] = None,
    network_debug: Annotated[
        bool,
        typer.Option(
            "--network-debug",
            help="Enable wire-level debug logging for remote requests (urllib3, http.client)",
        ),
    ] = False,
) -> None:
    """hopdriver - drive a local WSGI app and the real web from one session."""
    settings = get_settings()
    json_output = (log_format or settings.log_format) == "json"

    if verbose >= 2:
        configure_logging(level="DEBUG", json_output=json_output)
    elif verbose >= 1:
        configure_logging(level="INFO", json_output=json_output)
    elif log_format is not None:
        configure_logging(level=settings.log_level, json_output=json_output)

    if network_debug:
        enable_network_debug()


@app.command("version")
def version() -> None:
    """Show hopdriver version."""
    console.print(
        Panel(
            f"[bold cyan]hopdriver[/bold cyan] v{hopdriver.__version__}",
            title="Local and remote, one session",
            border_style="cyan",
        )
    )


@app.command("classify")
def classify(
    urls: Annotated[list[str], typer.Argument(help="URLs or paths to classify")],
    last_url: Annotated[
        str | None,
        typer.Option("--last-url", help="Pretend this absolute URL was visited last"),
    ] = None,
    app_host: Annotated[str | None, typer.Option("--app-host")] = None,
    default_host: Annotated[str | None, typer.Option("--default-host")] = None,
    local_host: Annotated[list[str] | None, typer.Option("--local-host")] = None,
) -> None:
    """Show whether each URL would be served locally or remotely."""
    roots = build_settings(
        app_host=app_host,
        default_host=default_host,
        local_hosts=local_host,
    ).host_roots()

    table = Table(header_style="bold cyan", border_style="dim")
    table.add_column("URL", style="white")
    table.add_column("Transport")

    failed = False
    for url in urls:
        try:
            remote = is_remote(url, last_url, roots)
        except InvalidURLError as exc:
            table.add_row(url, f"[red]invalid: {exc.reason}[/red]")
            failed = True
            continue
        table.add_row(url, "[yellow]remote[/yellow]" if remote else "[green]local[/green]")

    console.print(table)
    if failed:
        raise typer.Exit(1)


@app.command("config")
def config() -> None:
    """Show current hopdriver configuration."""
    settings = get_settings()
    local_hosts = ", ".join(settings.local_hosts) or "[dim](none)[/dim]"

    info = f"""
[dim]App host:[/dim]            {settings.app_host or "[dim](unset)[/dim]"}
[dim]Default host:[/dim]        {settings.default_host or "[dim](unset)[/dim]"}
[dim]Local hosts:[/dim]         {local_hosts}
[dim]Follow redirects:[/dim]    {settings.follow_redirects}
[dim]Redirect limit:[/dim]      {settings.redirect_limit}
[dim]Raise server errors:[/dim] {settings.raise_server_errors}
[dim]Timeout:[/dim]             {settings.timeout}s
[dim]Log level:[/dim]           {settings.log_level}
[dim]Log format:[/dim]          {settings.log_format}"""

    console.print(Panel(info.strip(), title="⚙ Configuration", border_style="cyan"))


if __name__ == "__main__":
    app()
