"""Custom exceptions for hopdriver package."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from hopdriver.transports.base import Response


class HopDriverError(Exception):
    """Base exception class for all hopdriver errors."""


class InvalidURLError(HopDriverError, ValueError):
    """Raised when a URL cannot be classified or dispatched.

    Covers URLs whose scheme is present but whose host is empty
    (``http:///path``) and URLs with a non-HTTP scheme.
    """

    def __init__(self, url: str, reason: str = "malformed URL") -> None:
        self.url = url
        self.reason = reason
        super().__init__(f"{reason}: {url!r}")


class InfiniteRedirectError(HopDriverError):
    """Raised when a navigation follows more redirects than the limit allows.

    This is a hard stop. It usually means a redirect loop or a
    misconfigured host, never a transient fault.

    Attributes:
        limit: The redirect limit that was exceeded.
        chain: URLs visited before giving up, in order.
    """

    def __init__(self, limit: int, chain: list[str] | tuple[str, ...] = ()) -> None:
        self.limit = limit
        self.chain = tuple(chain)
        super().__init__(
            f"redirected more than {limit} times, check for infinite redirects"
        )


class NetworkError(HopDriverError):
    """Raised when the network transport could not complete a request."""

    def __init__(self, url: str, message: str) -> None:
        self.url = url
        super().__init__(f"{message} ({url})")


class ServerError(HopDriverError):
    """Final response carried an error status while server errors are raised.

    The message names the HTTP method and the request path so the failing
    call can be located, since it usually points at a misconfigured host.

    Attributes:
        method: HTTP method of the navigation.
        path: Path that was requested.
        status_code: Final HTTP status.
        reason: HTTP reason phrase.
        response: The final response, for inspection.
    """

    def __init__(
        self,
        method: str,
        path: str,
        status_code: int,
        reason: str,
        response: Response | None = None,
    ) -> None:
        self.method = method
        self.path = path
        self.status_code = status_code
        self.reason = reason
        self.response = response
        super().__init__(
            f"Received the following error for a {method} request to {path}: "
            f"'{status_code} {reason}'"
        )
