"""Ad-hoc navigation through a driver from the command line.

Provides ``hopdriver visit`` and the ``hopdriver http`` command group. A WSGI
application can be loaded with ``--app module:attribute``; requests to its
hosts are dispatched in-process, everything else goes over the network.
"""

from __future__ import annotations

import sys
from importlib import import_module
from typing import Annotated, Any

import typer

from hopdriver import console as hd_console
from hopdriver.config import DriverSettings
from hopdriver.driver import Driver
from hopdriver.exceptions import HopDriverError
from hopdriver.logging import get_logger
from hopdriver.transports.base import Response
from hopdriver.transports.wsgi import WSGIApp

LOG = get_logger(__name__)

http_app = typer.Typer(
    name="http",
    help="Make requests through a driver (local app or network).",
    no_args_is_help=True,
)


def load_app(path: str) -> WSGIApp:
    """Import a WSGI application from ``module:attribute`` (or ``module.attribute``).

    Raises:
        typer.BadParameter: If the module or attribute cannot be found, or
            the attribute is not callable.
    """
    module_path, sep, attr = path.partition(":")
    if not sep:
        module_path, _, attr = path.rpartition(".")
    if not module_path or not attr:
        raise typer.BadParameter(f"Expected 'module:attribute', got {path!r}")

    try:
        module = import_module(module_path)
    except ImportError as exc:
        raise typer.BadParameter(f"Cannot import {module_path!r}: {exc}") from exc

    app = getattr(module, attr, None)
    if app is None or not callable(app):
        raise typer.BadParameter(f"{path!r} is not a WSGI callable")
    return app


def parse_headers(values: list[str] | None) -> dict[str, str]:
    """Parse ``Name: value`` strings into a header dict.

    Raises:
        typer.BadParameter: If a value has no colon.
    """
    headers: dict[str, str] = {}
    for header_str in values or []:
        if ":" not in header_str:
            raise typer.BadParameter(f"Invalid header format (expected 'Name: value'): {header_str}")
        name, _, value = header_str.partition(":")
        headers[name.strip()] = value.strip()
    return headers


def build_settings(
    *,
    app_host: str | None = None,
    default_host: str | None = None,
    local_hosts: list[str] | None = None,
    raise_server_errors: bool | None = None,
    timeout: float | None = None,
) -> DriverSettings:
    """Build settings from the environment, with CLI overrides applied on top."""
    overrides: dict[str, Any] = {
        "app_host": app_host,
        "default_host": default_host,
        "local_hosts": local_hosts or None,
        "raise_server_errors": raise_server_errors,
        "timeout": timeout,
    }
    try:
        return DriverSettings(**{k: v for k, v in overrides.items() if v is not None})
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc


def _print_response(response: Response, *, include: bool = False, body_only: bool = False) -> None:
    """Print the status line, redirect chain and body.

    Args:
        response: Final driver response.
        include: Also print response headers.
        body_only: Print only the body (pipe-friendly).
    """
    if body_only:
        sys.stdout.write(response.text)
        return

    hd_console.chain(response.history)
    hd_console.status(response)
    if response.is_redirect:
        hd_console.warn(f"Redirect not followed: {response.location}")
    if include:
        for key, value in response.headers.items():
            hd_console.info(f"< {key}: {value}")
        hd_console.info("<")
    sys.stdout.write(response.text)
    if response.text and not response.text.endswith("\n"):
        sys.stdout.write("\n")


def run_request(
    method: str,
    url: str,
    *,
    app_path: str | None = None,
    data: str | None = None,
    extra_headers: list[str] | None = None,
    follow: bool | None = None,
    redirect_limit: int | None = None,
    settings: DriverSettings | None = None,
) -> Response:
    """Run one navigation through a fresh driver.

    Raises:
        typer.Exit: With code 1 if the driver raises.
    """
    wsgi_app = load_app(app_path) if app_path else None
    headers = parse_headers(extra_headers)
    if data is not None:
        headers.setdefault("Content-Type", "application/x-www-form-urlencoded")

    try:
        with Driver(
            wsgi_app,
            headers=headers,
            follow_redirects=follow,
            redirect_limit=redirect_limit,
            settings=settings or build_settings(),
        ) as driver:
            return driver.process(method, url, data=data)
    except ValueError as exc:
        hd_console.error(str(exc))
        raise typer.Exit(1) from exc
    except HopDriverError as exc:
        LOG.debug("cli_request_failed", method=method, url=url, error=type(exc).__name__)
        hd_console.error(str(exc))
        raise typer.Exit(1) from exc


def _http_command(method: str) -> typer.models.CommandFunctionType:
    """Factory that creates a Typer command for the given HTTP method."""

    def command(
        url: Annotated[str, typer.Argument(help="Target URL or path")],
        app_path: Annotated[
            str | None,
            typer.Option("--app", "-a", help="WSGI application as 'module:attribute'"),
        ] = None,
        data: Annotated[
            str | None,
            typer.Option("--data", "-d", help="Form-encoded body"),
        ] = None,
        header: Annotated[
            list[str] | None,
            typer.Option("--header", "-H", help="Header sent on every hop, 'Name: value'"),
        ] = None,
        no_follow: Annotated[
            bool,
            typer.Option("--no-follow", help="Return the first response, even a redirect"),
        ] = False,
        redirect_limit: Annotated[
            int | None,
            typer.Option("--redirect-limit", min=1, help="Maximum redirects to follow"),
        ] = None,
        app_host: Annotated[
            str | None,
            typer.Option("--app-host", help="Base URL of the app; only its host is local"),
        ] = None,
        default_host: Annotated[
            str | None,
            typer.Option("--default-host", help="Base URL for relative paths"),
        ] = None,
        local_host: Annotated[
            list[str] | None,
            typer.Option("--local-host", help="Extra hostname treated as local"),
        ] = None,
        raise_server_errors: Annotated[
            bool,
            typer.Option("--raise-server-errors", help="Fail on a final status >= 400"),
        ] = False,
        include: Annotated[
            bool,
            typer.Option("--include", "-i", help="Show response headers"),
        ] = False,
        body_only: Annotated[
            bool,
            typer.Option("--body-only", help="Output only the response body"),
        ] = False,
        timeout: Annotated[
            float | None,
            typer.Option("--timeout", help="Network timeout in seconds"),
        ] = None,
    ) -> None:
        settings = build_settings(
            app_host=app_host,
            default_host=default_host,
            local_hosts=local_host,
            raise_server_errors=raise_server_errors or None,
            timeout=timeout,
        )
        response = run_request(
            method,
            url,
            app_path=app_path,
            data=data,
            extra_headers=header,
            follow=False if no_follow else None,
            redirect_limit=redirect_limit,
            settings=settings,
        )
        _print_response(response, include=include, body_only=body_only)

    command.__doc__ = f"Make an HTTP {method.upper()} request through the driver."
    return command  # type: ignore[return-value]


# Register HTTP method commands
for _method in ("get", "post", "put", "patch", "delete", "head"):
    http_app.command(_method)(_http_command(_method))

visit = _http_command("get")
visit.__doc__ = "Visit a URL (GET) and print where the driver ended up."
