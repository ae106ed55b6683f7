"""Request transports for hopdriver.

Two transports share one interface (:class:`Transport`):

    - wsgi: dispatches into an in-process WSGI application (always local)
    - network: real HTTP through requests (always remote)

Example:
    >>> from hopdriver.transports import NetworkTransport, Request
    >>> transport = NetworkTransport(timeout=5)
    >>> transport.send(Request("GET", "https://example.com/")).status_code
    200
"""

from hopdriver.transports.base import Request, Response, Transport
from hopdriver.transports.network import NetworkTransport
from hopdriver.transports.wsgi import WSGIAdapter, WSGITransport, build_environ, not_found_app

__all__ = [
    "NetworkTransport",
    "Request",
    "Response",
    "Transport",
    "WSGIAdapter",
    "WSGITransport",
    "build_environ",
    "not_found_app",
]
