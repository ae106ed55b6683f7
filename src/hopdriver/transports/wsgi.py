"""In-process transport: dispatch requests straight into a WSGI application.

``WSGIAdapter`` is a :class:`requests.adapters.BaseAdapter`, so the local
transport is an ordinary :class:`requests.Session` with the adapter mounted
for ``http://`` and ``https://``. Header merging, query encoding, form
encoding and cookie replay all go through requests exactly as they do for
the network transport; only the final hop into the application differs.
"""

from __future__ import annotations

import io
import sys
from collections.abc import Callable, Iterable
from http.client import HTTPMessage
from typing import Any, TypeAlias
from urllib.parse import unquote_to_bytes, urlsplit

import requests
from requests.adapters import BaseAdapter
from requests.cookies import MockRequest, MockResponse
from requests.structures import CaseInsensitiveDict
from requests.utils import get_encoding_from_headers

from hopdriver.exceptions import HopDriverError
from hopdriver.logging import get_logger
from hopdriver.transports.base import Request, Response

LOG = get_logger(__name__)

WSGIApp: TypeAlias = Callable[[dict[str, Any], Callable[..., Any]], Iterable[bytes]]

_DEFAULT_PORTS = {"http": 80, "https": 443}


def not_found_app(environ: dict[str, Any], start_response: Callable[..., Any]) -> list[bytes]:
    """WSGI application that answers 404 to every request."""
    body = b"Not Found"
    start_response(
        "404 Not Found",
        [("Content-Type", "text/plain; charset=utf-8"), ("Content-Length", str(len(body)))],
    )
    return [body]


def _request_body(request: requests.PreparedRequest) -> bytes:
    body = request.body
    if body is None:
        return b""
    if isinstance(body, str):
        return body.encode("utf-8")
    if hasattr(body, "read"):
        return body.read()
    return bytes(body)


def build_environ(request: requests.PreparedRequest) -> dict[str, Any]:
    """Build a PEP 3333 environ for a prepared request.

    Args:
        request: Prepared request with an absolute URL.

    Returns:
        The environ dict. ``PATH_INFO`` is percent-decoded and latin-1
        mapped; request headers become ``HTTP_*`` keys.
    """
    parts = urlsplit(request.url or "")
    scheme = parts.scheme or "http"
    body = _request_body(request)

    environ: dict[str, Any] = {
        "REQUEST_METHOD": (request.method or "GET").upper(),
        "SCRIPT_NAME": "",
        "PATH_INFO": unquote_to_bytes(parts.path or "/").decode("latin-1"),
        "QUERY_STRING": parts.query,
        "SERVER_NAME": parts.hostname or "localhost",
        "SERVER_PORT": str(parts.port or _DEFAULT_PORTS.get(scheme, 80)),
        "SERVER_PROTOCOL": "HTTP/1.1",
        "REMOTE_ADDR": "127.0.0.1",
        "CONTENT_LENGTH": str(len(body)),
        "wsgi.version": (1, 0),
        "wsgi.url_scheme": scheme,
        "wsgi.input": io.BytesIO(body),
        "wsgi.errors": sys.stderr,
        "wsgi.multithread": False,
        "wsgi.multiprocess": False,
        "wsgi.run_once": False,
    }

    for name, value in request.headers.items():
        key = name.upper().replace("-", "_")
        if key == "CONTENT_TYPE":
            environ["CONTENT_TYPE"] = value
        elif key != "CONTENT_LENGTH":
            environ[f"HTTP_{key}"] = value
    environ.setdefault("HTTP_HOST", parts.netloc)
    return environ


class WSGIAdapter(BaseAdapter):
    """Transport adapter that calls a WSGI application instead of a socket.

    Exceptions raised by the application propagate to the caller unchanged.
    """

    def __init__(self, app: WSGIApp) -> None:
        super().__init__()
        self.app = app

    def send(
        self,
        request: requests.PreparedRequest,
        stream: bool = False,
        timeout: Any = None,
        verify: Any = True,
        cert: Any = None,
        proxies: Any = None,
    ) -> requests.Response:
        """Dispatch *request* into the application and build a response."""
        environ = build_environ(request)
        captured: dict[str, Any] = {}
        chunks: list[bytes] = []

        def start_response(
            status: str,
            headers: list[tuple[str, str]],
            exc_info: Any = None,
        ) -> Callable[[bytes], None]:
            if exc_info and captured:
                raise exc_info[1].with_traceback(exc_info[2])
            captured["status"] = status
            captured["headers"] = headers
            return chunks.append

        result = self.app(environ, start_response)
        try:
            for chunk in result:
                if chunk:
                    chunks.append(chunk)
        finally:
            close = getattr(result, "close", None)
            if close is not None:
                close()

        if "status" not in captured:
            raise HopDriverError("WSGI application returned without calling start_response")

        return self.build_response(request, captured["status"], captured["headers"], b"".join(chunks))

    def build_response(
        self,
        request: requests.PreparedRequest,
        status: str,
        headers: list[tuple[str, str]],
        body: bytes,
    ) -> requests.Response:
        """Build a :class:`requests.Response` from WSGI output.

        Repeated headers are comma-joined like urllib3 does; ``Set-Cookie``
        values are read individually into ``response.cookies``.
        """
        code, _, reason = status.partition(" ")

        merged: CaseInsensitiveDict[str] = CaseInsensitiveDict()
        message = HTTPMessage()
        for name, value in headers:
            message[name] = value
            merged[name] = f"{merged[name]}, {value}" if name in merged else value

        response = requests.Response()
        response.status_code = int(code)
        response.reason = reason
        response.headers = merged
        response.raw = io.BytesIO(body)
        response.url = request.url or ""
        response.request = request
        response.encoding = get_encoding_from_headers(merged)
        response.connection = self
        response.cookies.extract_cookies(MockResponse(message), MockRequest(request))
        return response

    def close(self) -> None:
        """Nothing to release; the application is called synchronously."""


class WSGITransport:
    """Local transport backed by an in-process WSGI application.

    Attributes:
        app: The WSGI application under test.
        session: requests session with :class:`WSGIAdapter` mounted.
    """

    name = "wsgi"
    is_remote = False

    def __init__(self, app: WSGIApp | None = None) -> None:
        self.app: WSGIApp = app or not_found_app
        self.session = requests.Session()
        # Environment proxies must never apply to in-process requests.
        self.session.trust_env = False
        adapter = WSGIAdapter(self.app)
        self.session.mount("http://", adapter)
        self.session.mount("https://", adapter)

    def send(self, request: Request) -> Response:
        """Dispatch *request* into the application without following redirects."""
        resp = self.session.request(**request.as_kwargs(), allow_redirects=False)
        self.session.cookies.update(resp.cookies)
        return Response.from_requests(resp, remote=False)

    def clear_cookies(self) -> None:
        """Forget every cookie the application has set."""
        self.session.cookies.clear()
