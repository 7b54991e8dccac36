"""
URL Guard - Normalization & SSRF Protection
===========================================
Canonicalizes user-supplied URLs and rejects anything that could point
the fetcher or browser at internal infrastructure.

Conservative by rule: a host that cannot be resolved is rejected.
"""

import ipaddress
import socket
from typing import Callable, List, Optional
from urllib.parse import urlparse, urlunparse

from core.errors import InvalidURL


ALLOWED_SCHEMES = ("http", "https")

Resolver = Callable[[str], List[str]]


def normalize_url(raw_url: str) -> str:
    """
    Adds https:// when no scheme is present and ensures a non-empty path.

    Returns "" for empty input.
    """
    raw_url = (raw_url or "").strip()
    if not raw_url:
        return ""

    if not raw_url.lower().startswith(("http://", "https://")):
        raw_url = "https://" + raw_url

    parsed = urlparse(raw_url)
    if not parsed.path:
        parsed = parsed._replace(path="/")
    return urlunparse(parsed)


def _system_resolver(host: str) -> List[str]:
    """All addresses a host name resolves to."""
    infos = socket.getaddrinfo(host, None)
    return [info[4][0] for info in infos]


def _is_blocked_ip(ip) -> bool:
    mapped = getattr(ip, "ipv4_mapped", None)
    if mapped is not None:
        ip = mapped
    return (
        ip.is_loopback
        or ip.is_private
        or ip.is_link_local
        or ip.is_unspecified
        or ip.is_reserved
        or ip.is_multicast
    )


def _parse_ip(value: str):
    try:
        # Strip IPv6 zone index ("fe80::1%eth0")
        return ipaddress.ip_address(value.split("%", 1)[0])
    except ValueError:
        return None


def validate_url(url: str, resolver: Optional[Resolver] = None) -> str:
    """
    Validates a normalized URL against scheme and SSRF rules.

    Args:
        url: URL to check (call normalize_url first)
        resolver: Host -> addresses function (defaults to getaddrinfo)

    Returns:
        The URL unchanged

    Raises:
        InvalidURL: On format, scheme, localhost or private-address violations
    """
    try:
        parsed = urlparse(url or "")
        host = parsed.hostname
    except ValueError:
        raise InvalidURL("invalid URL format")

    if parsed.scheme not in ALLOWED_SCHEMES:
        raise InvalidURL("only http/https URLs allowed")

    if not host:
        raise InvalidURL("invalid URL format")

    host = host.lower().rstrip(".")
    if host == "localhost" or host.endswith(".localhost"):
        raise InvalidURL("localhost not allowed")

    literal = _parse_ip(host)
    if literal is not None:
        if _is_blocked_ip(literal):
            raise InvalidURL("private/internal IPs not allowed")
        return url

    resolve = resolver or _system_resolver
    try:
        addresses = resolve(host)
    except (OSError, UnicodeError):
        raise InvalidURL("host could not be resolved")

    if not addresses:
        raise InvalidURL("host could not be resolved")

    for address in addresses:
        ip = _parse_ip(address)
        if ip is None or _is_blocked_ip(ip):
            raise InvalidURL("host resolves to a private/internal address")

    return url
