"""Local/remote host classification.

Every outgoing URL is either *local* (dispatched into the in-process WSGI
application) or *remote* (sent over the network). The decision is made from
the URL's own host against the configured :class:`HostRoots`. A URL without
a host inherits the classification of the last visited absolute URL, so a
relative link found on a remote page stays remote.

Example:
    >>> roots = HostRoots(default_host="http://www.local.com")
    >>> is_remote("http://www.local.com/page", None, roots)
    False
    >>> is_remote("/page", "http://www.remote.com/", roots)
    True
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Final
from urllib.parse import urljoin, urlsplit

from hopdriver.exceptions import InvalidURLError

HTTP_SCHEMES: Final[frozenset[str]] = frozenset({"http", "https"})

# Base for hostless requests when neither app_host nor default_host is set.
FALLBACK_BASE_URL: Final[str] = "http://localhost"


@dataclass(frozen=True)
class HostRoots:
    """Snapshot of the host configuration used for one classification.

    Attributes:
        app_host: Absolute base URL of the application under test. When set,
            only its host is local.
        default_host: Base URL used for relative paths when no app_host is
            set. Its host, plus ``local_hosts``, is local.
        local_hosts: Extra hostnames always treated as local alongside
            ``default_host``.
    """

    app_host: str | None = None
    default_host: str | None = None
    local_hosts: frozenset[str] = field(default_factory=frozenset)

    @property
    def base_url(self) -> str:
        """Base URL for hostless requests made before any navigation."""
        return self.app_host or self.default_host or FALLBACK_BASE_URL


def host_of(url: str) -> str | None:
    """Return the lower-cased hostname of *url*, or None if it has no host.

    Args:
        url: Absolute, scheme-relative, or relative URL.

    Returns:
        The hostname without port, or None for relative URLs.

    Raises:
        InvalidURLError: If the URL has a non-HTTP scheme, or a scheme/netloc
            with an empty host.
    """
    try:
        parts = urlsplit(url)
        hostname = parts.hostname
    except ValueError as exc:
        raise InvalidURLError(url, str(exc)) from exc

    if not parts.scheme and not parts.netloc:
        return None
    if parts.scheme and parts.scheme.lower() not in HTTP_SCHEMES:
        raise InvalidURLError(url, "unsupported URL scheme")
    if not hostname:
        raise InvalidURLError(url, "URL has no host")
    return hostname


def is_remote(url: str, last_url: str | None, roots: HostRoots) -> bool:
    """Decide whether *url* must be sent over the network.

    Args:
        url: Target URL, absolute or relative.
        last_url: Last visited absolute URL, or None before any navigation.
        roots: Host configuration, read as given on every call.

    Returns:
        True for remote, False for local.

    Raises:
        InvalidURLError: If *url* (or *last_url* for relative targets) is
            malformed.
    """
    host = host_of(url)
    if host is None:
        if not last_url:
            return False
        return is_remote(last_url, None, roots)

    if roots.app_host:
        return host != host_of(roots.app_host)

    if roots.default_host:
        if host == host_of(roots.default_host):
            return False
        return host not in {h.lower() for h in roots.local_hosts}

    # Hostless URLs were resolved against the fallback base and served
    # in-process, so pages reached that way stay local.
    return host != host_of(FALLBACK_BASE_URL)


def resolve_url(url: str, base: str) -> str:
    """Resolve *url* against *base*; absolute URLs are returned unchanged."""
    return urljoin(base, url)
