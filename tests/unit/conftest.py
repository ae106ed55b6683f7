"""Shared fixtures for unit tests: a WSGI test app and a real "remote" server.

The same application is served two ways: in-process through the driver's
local transport, and over a socket by a background ``wsgiref`` server whose
``127.0.0.1:<port>`` address is never a local host, so the driver reaches it
through the network transport.
"""

from __future__ import annotations

import re
import threading
from collections.abc import Callable, Iterator
from typing import Any
from wsgiref.simple_server import WSGIRequestHandler, make_server

import pytest
import requests

from hopdriver.config import DriverSettings
from hopdriver.driver import Driver

HEADER_LINKS_PAGE = """<html><body>
<a href="/get_header">Link</a>
<form action="/get_header" method="post">
  <input type="submit" value="Post"/>
</form>
</body></html>"""

RELATIVE_LINKS_PAGE = """<html><body>
<a href="/host">Host</a>
<a href="#top">Top</a>
<span id="inert">Not a link</span>
</body></html>"""

FORM_PAGE = """<html><body>
<form id="search" action="/echo" method="get">
  <input type="text" name="q" value="kittens"/>
  <input type="submit" name="go" value="Search"/>
</form>
<form id="signup" action="/echo" method="post">
  <input type="text" name="name" value=""/>
  <input type="hidden" name="token" value="t0k"/>
  <input type="checkbox" name="terms" value="yes"/>
  <input type="radio" name="plan" value="free" checked/>
  <input type="radio" name="plan" value="pro"/>
  <select name="color"><option value="red">Red</option><option value="blue" selected>Blue</option></select>
  <textarea name="bio">hello</textarea>
  <input type="text" name="ignored" value="x" disabled/>
  <input type="submit" name="save" value="Save"/>
  <button type="submit" name="publish" value="now">Publish</button>
</form>
</body></html>"""


def _respond(
    start_response: Callable[..., Any],
    status: str,
    body: str,
    *,
    content_type: str = "text/html; charset=utf-8",
    headers: list[tuple[str, str]] | None = None,
) -> list[bytes]:
    payload = body.encode("utf-8")
    start_response(
        status,
        [("Content-Type", content_type), ("Content-Length", str(len(payload))), *(headers or [])],
    )
    return [payload]


def _redirect(
    start_response: Callable[..., Any],
    location: str,
    status: str = "302 Found",
    headers: list[tuple[str, str]] | None = None,
) -> list[bytes]:
    start_response(status, [("Location", location), ("Content-Length", "0"), *(headers or [])])
    return [b""]


def wsgi_test_app(environ: dict[str, Any], start_response: Callable[..., Any]) -> list[bytes]:
    """Application under test, covering headers, redirects, cookies and forms."""
    path = environ["PATH_INFO"]
    method = environ["REQUEST_METHOD"]

    if path == "/":
        return _respond(start_response, "200 OK", "Hello world! <a href='/landed'>Go</a>")
    if path == "/get_header":
        return _respond(start_response, "200 OK", environ.get("HTTP_FOO", ""))
    if path == "/header_links":
        return _respond(start_response, "200 OK", HEADER_LINKS_PAGE)
    if path == "/get_header_via_redirect":
        return _redirect(start_response, "/get_header")
    if path == "/redirect":
        return _redirect(start_response, "/redirect_again")
    if path == "/redirect_again":
        return _redirect(start_response, "/landed")
    if path == "/landed":
        return _respond(start_response, "200 OK", "You landed")
    if path.startswith("/redirect_to/"):
        return _redirect(start_response, path[len("/redirect_to/") :])

    times = re.fullmatch(r"/redirect/(\d+)/times", path)
    if times:
        remaining = int(times.group(1))
        if remaining == 0:
            return _respond(start_response, "200 OK", "redirection complete")
        return _redirect(start_response, f"/redirect/{remaining - 1}/times")

    if path == "/host":
        host = f"{environ['wsgi.url_scheme']}://{environ.get('HTTP_HOST', '')}"
        return _respond(start_response, "200 OK", f"Current host is {host}")
    if path == "/echo":
        length = int(environ.get("CONTENT_LENGTH") or 0)
        body = environ["wsgi.input"].read(length).decode("utf-8")
        query = environ.get("QUERY_STRING", "")
        return _respond(
            start_response,
            "200 OK",
            f"method={method} query={query} body={body}",
            content_type="text/plain; charset=utf-8",
        )
    if path == "/redirect_307":
        return _redirect(start_response, "/echo", "307 Temporary Redirect")
    if path == "/redirect_303":
        return _redirect(start_response, "/echo", "303 See Other")
    if path == "/set_cookie":
        return _redirect(start_response, "/get_cookie", headers=[("Set-Cookie", "flavor=oatmeal; Path=/")])
    if path == "/get_cookie":
        return _respond(start_response, "200 OK", environ.get("HTTP_COOKIE", ""))
    if path == "/relative_links":
        return _respond(start_response, "200 OK", RELATIVE_LINKS_PAGE)
    if path == "/form":
        return _respond(start_response, "200 OK", FORM_PAGE)
    if path == "/error":
        return _respond(start_response, "500 Internal Server Error", "boom")

    return _respond(start_response, "404 Not Found", "Not Found")


class _QuietHandler(WSGIRequestHandler):
    def log_message(self, format: str, *args: Any) -> None:  # noqa: A002
        pass


def _no_env_proxies(session: requests.Session) -> None:
    session.trust_env = False


@pytest.fixture(scope="session")
def remote_test_url() -> Iterator[str]:
    """Base URL of a real HTTP server serving the test app on a free port."""
    server = make_server("127.0.0.1", 0, wsgi_test_app, handler_class=_QuietHandler)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    try:
        yield f"http://127.0.0.1:{server.server_port}"
    finally:
        server.shutdown()
        server.server_close()


@pytest.fixture
def test_app() -> Callable[..., list[bytes]]:
    return wsgi_test_app


@pytest.fixture
def settings() -> DriverSettings:
    """Fresh settings with the stock defaults (default host www.example.com)."""
    return DriverSettings()


@pytest.fixture
def make_driver(settings: DriverSettings) -> Iterator[Callable[..., Driver]]:
    """Factory for drivers over the test app that ignore environment proxies."""
    drivers: list[Driver] = []

    def _make(app: Any = wsgi_test_app, **kwargs: Any) -> Driver:
        kwargs.setdefault("settings", settings)
        driver = Driver(app, **kwargs).configure(_no_env_proxies)
        drivers.append(driver)
        return driver

    yield _make
    for driver in drivers:
        driver.close()


@pytest.fixture
def driver(make_driver: Callable[..., Driver]) -> Driver:
    return make_driver()
