"""Base protocol and data classes for request transports.

A transport turns a :class:`Request` into a :class:`Response` without ever
following redirects itself; redirect handling belongs to
:mod:`hopdriver.redirects`, which needs to re-classify every hop.

Example:
    >>> from hopdriver.transports import Request, WSGITransport
    >>> transport = WSGITransport(app)  # any WSGI callable
    >>> response = transport.send(Request("GET", "http://www.example.com/"))
    >>> response.status_code
    200
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from http import HTTPStatus
from typing import Any, Protocol, TypeAlias, runtime_checkable

import requests
from requests.structures import CaseInsensitiveDict
from requests.utils import get_encoding_from_headers

FormData: TypeAlias = Mapping[str, str] | Sequence[tuple[str, str]] | bytes | str


def reason_for(status_code: int) -> str:
    """Return the standard reason phrase for *status_code* (or empty string)."""
    try:
        return HTTPStatus(status_code).phrase
    except ValueError:
        return ""


def _decode_body(content: bytes, headers: Mapping[str, str]) -> str:
    """Decode a body, defaulting to UTF-8 when no charset is declared.

    ``get_encoding_from_headers`` falls back to ISO-8859-1 for ``text/*``
    without a charset; HTML test pages are UTF-8 far more often.
    """
    content_type = headers.get("Content-Type", "")
    encoding = get_encoding_from_headers(CaseInsensitiveDict(headers))
    if encoding is None or "charset" not in content_type.lower():
        encoding = "utf-8"
    try:
        return content.decode(encoding, errors="replace")
    except LookupError:
        return content.decode("utf-8", errors="replace")


@dataclass(frozen=True)
class Request:
    """One HTTP request as issued by the driver.

    Attributes:
        method: Upper-case HTTP method.
        url: Target URL. Absolute once handed to a transport.
        headers: Headers attached verbatim.
        params: Query parameters appended to the URL.
        data: Form body (mapping or pairs, url-encoded by requests) or raw body.
    """

    method: str
    url: str
    headers: Mapping[str, str] = field(default_factory=dict)
    params: Mapping[str, str] | Sequence[tuple[str, str]] | None = None
    data: FormData | None = None

    def as_kwargs(self) -> dict[str, Any]:
        """Keyword arguments for :meth:`requests.Session.request`."""
        return {
            "method": self.method.upper(),
            "url": self.url,
            "headers": dict(self.headers),
            "params": self.params,
            "data": self.data,
        }


@dataclass(frozen=True, eq=False)
class Response:
    """Status, headers, and body of one hop, plus where it ended up.

    Attributes:
        status_code: HTTP status.
        reason: Reason phrase.
        headers: Case-insensitive response headers. ``Location`` is present
            only if the server sent it.
        content: Raw body bytes.
        url: URL this response was served from. For a followed chain this is
            the final URL.
        history: Redirect chain that led here, oldest first, excluding ``url``.
        remote: Whether the network transport served the response.
    """

    status_code: int
    reason: str
    headers: CaseInsensitiveDict[str]
    content: bytes
    url: str
    history: tuple[str, ...] = ()
    remote: bool = False

    @classmethod
    def from_requests(cls, resp: requests.Response, *, remote: bool) -> Response:
        """Convert a :class:`requests.Response` into a driver response."""
        return cls(
            status_code=resp.status_code,
            reason=resp.reason or reason_for(resp.status_code),
            headers=CaseInsensitiveDict(resp.headers),
            content=resp.content or b"",
            url=str(resp.url),
            remote=remote,
        )

    @property
    def text(self) -> str:
        """Body decoded with the declared charset (UTF-8 otherwise)."""
        return _decode_body(self.content, self.headers)

    @property
    def location(self) -> str | None:
        """The ``Location`` header, if any."""
        return self.headers.get("Location")

    @property
    def is_redirect(self) -> bool:
        """True for a 3xx status carrying a ``Location`` header."""
        return 300 <= self.status_code < 400 and bool(self.location)

    @property
    def ok(self) -> bool:
        """True when the status is below 400."""
        return self.status_code < 400


@runtime_checkable
class Transport(Protocol):
    """Protocol for anything that can send a :class:`Request`.

    Implementations must send ``request.headers`` verbatim and must not
    follow redirects.

    Attributes:
        name: Short identifier used in logs (``"wsgi"``, ``"network"``).
        is_remote: Whether responses come from the network.
    """

    name: str
    is_remote: bool

    def send(self, request: Request) -> Response:
        """Send *request* and return the (unfollowed) response."""
        ...

    def clear_cookies(self) -> None:
        """Forget every cookie collected so far."""
        ...


def describe(request: Request) -> dict[str, Any]:
    """Log-friendly summary of a request."""
    return {"method": request.method, "url": request.url, "header_names": sorted(request.headers)}
