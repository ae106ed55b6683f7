"""hopdriver - drive an in-process WSGI app and the real web from one session.

A test-automation HTTP driver. Requests to the application's own hosts are
dispatched in-process; requests to any other host go over the network.
The choice is made per request (and per redirect hop) from the URL and the
last visited page.

This package provides:
- Local/remote host classification
- Hop-by-hop redirect following with a hard limit
- Persistent headers on every navigation, click, submit and redirect
- Link clicks and form submission on the current page

Example:
    >>> from hopdriver import Driver
    >>> driver = Driver(app, headers={"X-Test-Run": "42"})
    >>> driver.visit("/")
    >>> driver.find_css("a")[0].click()
    >>> driver.current_url
    'http://www.example.com/next'
"""

from hopdriver.config import DriverSettings, get_settings, reset_settings
from hopdriver.driver import Driver
from hopdriver.exceptions import (
    HopDriverError,
    InfiniteRedirectError,
    InvalidURLError,
    NetworkError,
    ServerError,
)
from hopdriver.hosts import HostRoots, is_remote
from hopdriver.nodes import Node
from hopdriver.transports import NetworkTransport, Request, Response, Transport, WSGITransport

__version__ = "0.3.0"

__all__ = [
    # Version
    "__version__",
    # Driver
    "Driver",
    "Node",
    # Classification
    "HostRoots",
    "is_remote",
    # Transports
    "Transport",
    "WSGITransport",
    "NetworkTransport",
    "Request",
    "Response",
    # Configuration
    "DriverSettings",
    "get_settings",
    "reset_settings",
    # Exceptions
    "HopDriverError",
    "InfiniteRedirectError",
    "InvalidURLError",
    "NetworkError",
    "ServerError",
]
