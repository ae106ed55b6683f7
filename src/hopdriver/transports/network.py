"""Remote transport: real HTTP over a :class:`requests.Session`."""

from __future__ import annotations

import requests

from hopdriver.exceptions import NetworkError
from hopdriver.logging import get_logger
from hopdriver.transports.base import Request, Response

LOG = get_logger(__name__)


class NetworkTransport:
    """Remote transport that performs real HTTP requests.

    Connection failures, timeouts and other requests-level transport errors
    are raised as :class:`NetworkError`; HTTP error statuses are returned as
    normal responses. Nothing is retried.

    Attributes:
        session: The underlying requests session. Exposed so callers can
            configure proxies, certificates or extra adapters.
        timeout: Per-request timeout in seconds.
    """

    name = "network"
    is_remote = True

    def __init__(
        self,
        *,
        timeout: float = 30.0,
        session: requests.Session | None = None,
    ) -> None:
        self.session = session or requests.Session()
        self.timeout = timeout

    def send(self, request: Request) -> Response:
        """Send *request* over the network without following redirects.

        Raises:
            NetworkError: If the request could not be completed.
        """
        try:
            resp = self.session.request(
                **request.as_kwargs(),
                allow_redirects=False,
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            LOG.warning(
                "network_error",
                method=request.method,
                url=request.url,
                error=type(exc).__name__,
            )
            raise NetworkError(request.url, f"{type(exc).__name__}: {exc}") from exc
        return Response.from_requests(resp, remote=True)

    def clear_cookies(self) -> None:
        """Forget every cookie collected from remote hosts."""
        self.session.cookies.clear()
