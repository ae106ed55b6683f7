"""Hop-by-hop redirect following across local and remote transports.

requests can follow redirects on its own, but a redirect may cross from the
in-process application to a real host (or back), so every hop has to be
re-classified. Transports are therefore always called with redirects off
and this module drives the chain.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import replace
from typing import Final

from hopdriver.exceptions import InfiniteRedirectError
from hopdriver.hosts import resolve_url
from hopdriver.logging import get_logger
from hopdriver.transports.base import Request, Response, Transport, describe

LOG = get_logger(__name__)

DEFAULT_REDIRECT_LIMIT: Final[int] = 5

# Statuses that replay the original method and body on the next hop.
_METHOD_PRESERVING: Final[frozenset[int]] = frozenset({307, 308})

_BODY_HEADERS: Final[frozenset[str]] = frozenset({"content-type", "content-length"})

SelectTransport = Callable[[str], Transport]


def redirect_request(request: Request, status_code: int, location: str) -> Request:
    """Build the request for the hop after a redirect.

    307 and 308 keep the method and body. Every other redirect becomes a
    bodiless GET (HEAD stays HEAD). Headers are carried over in full, minus
    body headers once the body is dropped.

    Args:
        request: The request that was redirected (absolute URL).
        status_code: Redirect status received.
        location: Absolute target of the redirect.

    Returns:
        The next hop's request.
    """
    if status_code in _METHOD_PRESERVING:
        return replace(request, url=location, params=None)

    method = "HEAD" if request.method == "HEAD" else "GET"
    headers = {k: v for k, v in request.headers.items() if k.lower() not in _BODY_HEADERS}
    return Request(method=method, url=location, headers=headers)


def resolve(
    request: Request,
    select_transport: SelectTransport,
    *,
    base_url: str,
    limit: int = DEFAULT_REDIRECT_LIMIT,
    follow_redirects: bool = True,
) -> Response:
    """Send *request*, following redirects up to *limit* hops.

    The transport for each hop is chosen by ``select_transport`` from that
    hop's target. The first target is ``request.url`` as given (possibly
    relative, so the selector can apply its last-URL rule); later targets
    are ``Location`` values resolved against the redirecting hop's URL.

    Args:
        request: Initial request; its URL may be relative.
        select_transport: Maps a target URL to the transport that serves it.
        base_url: Base for resolving a relative initial URL.
        limit: Maximum number of redirects to follow.
        follow_redirects: When False, the first response is returned as-is,
            redirect or not.

    Returns:
        The final response. ``url`` is the last hop's URL and ``history``
        lists the redirecting URLs in order.

    Raises:
        InfiniteRedirectError: If more than *limit* redirects are issued.
        NetworkError: If a remote hop cannot be completed.
        InvalidURLError: If a hop target is malformed.
        ValueError: If *limit* is not positive.
    """
    if limit < 1:
        raise ValueError(f"redirect limit must be a positive integer, got {limit!r}")

    chain: list[str] = []
    target = request.url
    current = request

    while True:
        transport = select_transport(target)
        hop = replace(current, url=resolve_url(target, base_url))
        LOG.debug("request_dispatched", transport=transport.name, hop=len(chain), **describe(hop))
        response = transport.send(hop)

        if not follow_redirects or not response.is_redirect:
            return replace(response, history=tuple(chain))

        chain.append(response.url)
        if len(chain) > limit:
            LOG.warning("redirect_limit_exceeded", limit=limit, chain=chain)
            raise InfiniteRedirectError(limit, chain)

        location = resolve_url(response.location or "", response.url)
        LOG.debug(
            "redirect_followed",
            status=response.status_code,
            from_url=response.url,
            to_url=location,
            hop=len(chain),
        )
        current = redirect_request(hop, response.status_code, location)
        target = location
