"""Driver facade: one browsing session over a local app and the network.

The driver owns session state (last URL, last response, cookies) and routes
every request through the host classifier: local targets go into the WSGI
application in-process, remote targets go over the network. Redirects are
followed hop by hop so a chain may cross between the two.

Example::

    from hopdriver import Driver

    driver = Driver(app, headers={"X-Trace": "t-1"})
    driver.visit("/login")
    driver.find_css("input[type=submit]")[0].click()
    assert driver.status_code == 200
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, Sequence
from types import MappingProxyType
from typing import Any
from urllib.parse import urlsplit

import requests
from bs4 import BeautifulSoup
from requests.structures import CaseInsensitiveDict

from hopdriver import hosts, redirects
from hopdriver.config import DriverSettings, get_settings
from hopdriver.exceptions import ServerError
from hopdriver.logging import get_logger
from hopdriver.nodes import Node, click_target, form_fields, form_target, is_submit_control, with_query
from hopdriver.transports.base import FormData, Request, Response, Transport
from hopdriver.transports.network import NetworkTransport
from hopdriver.transports.wsgi import WSGIApp, WSGITransport

LOG = get_logger(__name__)


def _check_redirect_limit(limit: Any) -> int:
    if isinstance(limit, bool) or not isinstance(limit, int) or limit < 1:
        raise ValueError(f"redirect_limit must be a positive integer, got {limit!r}")
    return limit


def _merge_headers(extra: Mapping[str, str] | None, configured: Mapping[str, str]) -> dict[str, str]:
    """Combine per-request headers with the configured ones, which always win.

    Names are compared case-insensitively so ``foo`` cannot shadow ``Foo``.
    """
    taken = {name.lower() for name in configured}
    merged = {k: v for k, v in (extra or {}).items() if k.lower() not in taken}
    merged.update(configured)
    return merged


class Driver:
    """Sequential HTTP driver for one test session.

    Construction-time options (``headers``, ``follow_redirects``,
    ``redirect_limit``) hold for the driver's lifetime. Host roots and the
    server-error flag are read from ``settings`` each time they are needed,
    so changing them between navigations takes effect immediately.

    Not thread-safe; one driver serves one sequential test.

    Args:
        app: WSGI application under test. Without one, local requests get 404.
        headers: Headers attached to every request and every redirect hop.
        follow_redirects: Follow 3xx redirects. Defaults to the settings value.
        redirect_limit: Maximum redirects per navigation. Defaults to the
            settings value. Must be a positive integer.
        settings: Configuration object. Defaults to :func:`get_settings`.

    Raises:
        ValueError: If ``redirect_limit`` is not a positive integer.
    """

    def __init__(
        self,
        app: WSGIApp | None = None,
        *,
        headers: Mapping[str, str] | None = None,
        follow_redirects: bool | None = None,
        redirect_limit: int | None = None,
        settings: DriverSettings | None = None,
    ) -> None:
        self.settings = settings if settings is not None else get_settings()
        self.app = app
        self._headers: Mapping[str, str] = MappingProxyType(dict(headers or {}))
        self._follow_redirects = (
            self.settings.follow_redirects if follow_redirects is None else bool(follow_redirects)
        )
        self._redirect_limit = _check_redirect_limit(
            self.settings.redirect_limit if redirect_limit is None else redirect_limit
        )

        self.local = WSGITransport(app)
        self.remote = NetworkTransport(timeout=self.settings.timeout)

        self._last_url: str | None = None
        self._response: Response | None = None
        self._document: BeautifulSoup | None = None

    def __enter__(self) -> Driver:
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    @property
    def headers(self) -> Mapping[str, str]:
        """Read-only view of the headers sent with every request."""
        return self._headers

    @property
    def follow_redirects(self) -> bool:
        return self._follow_redirects

    @property
    def redirect_limit(self) -> int:
        return self._redirect_limit

    def configure(self, callback: Callable[[requests.Session], Any]) -> Driver:
        """Hand the network session to *callback* for extra setup.

        Use it for proxies, client certificates or custom adapters on remote
        requests.

        Args:
            callback: Called once with the network transport's session.

        Returns:
            The driver, for chaining.
        """
        callback(self.remote.session)
        return self

    # ------------------------------------------------------------------
    # Classification
    # ------------------------------------------------------------------

    def is_remote(self, url: str) -> bool:
        """Whether a request to *url* would go over the network right now."""
        return hosts.is_remote(url, self._last_url, self.settings.host_roots())

    def _select_transport(self, url: str) -> Transport:
        return self.remote if self.is_remote(url) else self.local

    def _base_url(self) -> str:
        return self._last_url or self.settings.host_roots().base_url

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    def process(
        self,
        method: str,
        url: str,
        *,
        params: Mapping[str, str] | Sequence[tuple[str, str]] | None = None,
        data: FormData | None = None,
        headers: Mapping[str, str] | None = None,
    ) -> Response:
        """Issue a request and update the session from its final response.

        Args:
            method: HTTP method.
            url: Absolute URL, or a path resolved against the last URL.
            params: Query parameters.
            data: Form fields or raw body.
            headers: Extra headers for this navigation only. The configured
                headers are always sent and win over an extra header of the
                same name.

        Returns:
            The final response after redirects.

        Raises:
            InfiniteRedirectError: More than ``redirect_limit`` redirects.
            NetworkError: A remote hop could not be completed.
            ServerError: Final status >= 400 while ``raise_server_errors`` is on.
            InvalidURLError: The URL (or a redirect target) is malformed.
        """
        method = method.upper()
        request = Request(
            method=method,
            url=url,
            headers=_merge_headers(headers, self._headers),
            params=params,
            data=data,
        )
        response = redirects.resolve(
            request,
            self._select_transport,
            base_url=self._base_url(),
            limit=self._redirect_limit,
            follow_redirects=self._follow_redirects,
        )
        self._raise_server_error(method, url, response)

        self._last_url = response.url
        self._response = response
        self._document = None
        LOG.info(
            "navigation_complete",
            method=method,
            url=url,
            final_url=response.url,
            status=response.status_code,
            remote=response.remote,
            redirects=len(response.history),
        )
        return response

    def _raise_server_error(self, method: str, url: str, response: Response) -> None:
        if response.status_code < 400 or not self.settings.raise_server_errors:
            return
        path = urlsplit(url).path or "/"
        LOG.error(
            "server_error",
            method=method,
            path=path,
            status=response.status_code,
            remote=response.remote,
        )
        raise ServerError(method, path, response.status_code, response.reason, response)

    def visit(self, url: str) -> Response:
        """Navigate to *url* with a GET."""
        return self.process("GET", url)

    def get(self, url: str, params: Any = None, **kwargs: Any) -> Response:
        return self.process("GET", url, params=params, **kwargs)

    def post(self, url: str, data: FormData | None = None, **kwargs: Any) -> Response:
        return self.process("POST", url, data=data, **kwargs)

    def put(self, url: str, data: FormData | None = None, **kwargs: Any) -> Response:
        return self.process("PUT", url, data=data, **kwargs)

    def patch(self, url: str, data: FormData | None = None, **kwargs: Any) -> Response:
        return self.process("PATCH", url, data=data, **kwargs)

    def delete(self, url: str, **kwargs: Any) -> Response:
        return self.process("DELETE", url, **kwargs)

    def head(self, url: str, **kwargs: Any) -> Response:
        return self.process("HEAD", url, **kwargs)

    def click(self, node: Node) -> Response | None:
        """Click an element of the current page.

        Links navigate with GET to their ``href``; submit controls submit
        their form; checkboxes and radios toggle. Any other element is
        inert. Relative targets follow the last URL, so a link found on a
        remote page is requested remotely.

        Returns:
            The navigation response, or None when nothing was requested.
        """
        href = click_target(node)
        if href is not None:
            return self.process("GET", href)

        if is_submit_control(node.tag):
            form = node.form
            if form is not None:
                return self.submit(form, button=node)
        elif node.tag_name == "input" and (node["type"] or "").lower() in ("checkbox", "radio"):
            node.toggle()
            return None

        LOG.debug("click_ignored", tag=node.tag_name)
        return None

    def submit(self, form: Node, button: Node | None = None) -> Response:
        """Submit *form*, as if *button* had been clicked.

        GET forms put their fields in the query string of the action;
        other methods send them url-encoded in the body.
        """
        button_tag = button.tag if button is not None else None
        method, action = form_target(form.tag, button_tag, self.current_url)
        fields = form_fields(form.tag, button_tag)
        if method == "GET":
            return self.process("GET", with_query(action, fields))
        return self.process(method, action, data=fields)

    def reset(self) -> None:
        """Forget the session: last URL, response, redirect chain, cookies.

        Construction-time options and settings are kept.
        """
        self._last_url = None
        self._response = None
        self._document = None
        self.local.clear_cookies()
        self.remote.clear_cookies()
        LOG.debug("driver_reset")

    def close(self) -> None:
        """Reset the session and release both transports' connections."""
        self.reset()
        self.local.session.close()
        self.remote.session.close()

    # ------------------------------------------------------------------
    # Page state
    # ------------------------------------------------------------------

    @property
    def current_url(self) -> str:
        """URL of the last completed navigation (empty before any)."""
        return self._last_url or ""

    @property
    def response(self) -> Response | None:
        return self._response

    @property
    def status_code(self) -> int | None:
        return self._response.status_code if self._response is not None else None

    @property
    def response_headers(self) -> CaseInsensitiveDict[str]:
        if self._response is None:
            return CaseInsensitiveDict()
        return self._response.headers

    @property
    def html(self) -> str:
        """Body of the last response as text (empty before any)."""
        return self._response.text if self._response is not None else ""

    body = html

    @property
    def redirect_chain(self) -> tuple[str, ...]:
        """URLs that redirected during the last navigation."""
        return self._response.history if self._response is not None else ()

    @property
    def dom(self) -> BeautifulSoup:
        """Parsed document of the last response, cached until the next navigation."""
        if self._document is None:
            self._document = BeautifulSoup(self.html, "html.parser")
        return self._document

    def find_css(self, selector: str) -> list[Node]:
        """Return the elements of the current page matching a CSS selector."""
        return [Node(self, tag) for tag in self.dom.select(selector)]
