"""SSRF protection for user-supplied source URLs.

A URL is only fetched when its scheme is http(s) and every address its host
resolves to is publicly routable. Name resolution failures are rejections.
"""

from __future__ import annotations

import ipaddress
import socket
from urllib.parse import urlsplit

ALLOWED_SCHEMES = ("http", "https")

BLOCKED_HOSTNAMES = frozenset(
    {
        "localhost",
        "metadata",
        "metadata.google.internal",
        "metadata.azure.com",
        "instance-data",
        "instance-data.ec2.internal",
    }
)
BLOCKED_SUFFIXES = (".localhost", ".local", ".internal", ".localdomain")

IPAddress = ipaddress.IPv4Address | ipaddress.IPv6Address


def is_blocked_address(address: IPAddress) -> bool:
    """True for any address that must not be reached from the server."""
    if isinstance(address, ipaddress.IPv6Address):
        mapped = address.ipv4_mapped or address.sixtofour
        if mapped is not None:
            return is_blocked_address(mapped)
    return (
        address.is_private
        or address.is_loopback
        or address.is_link_local
        or address.is_multicast
        or address.is_reserved
        or address.is_unspecified
        or not address.is_global
    )


def _resolve(host: str, port: int) -> list[IPAddress]:
    infos = socket.getaddrinfo(host, port, proto=socket.IPPROTO_TCP)
    addresses: list[IPAddress] = []
    for _family, _type, _proto, _canon, sockaddr in infos:
        # Strip IPv6 zone ids ("fe80::1%eth0")
        addresses.append(ipaddress.ip_address(str(sockaddr[0]).split("%", 1)[0]))
    return addresses


def validate_url_for_ssrf(url: str) -> tuple[bool, str | None]:
    """Check a URL before fetching it.

    Args:
        url: The URL to check.

    Returns:
        Tuple of (is_valid, error message or None).
    """
    try:
        parts = urlsplit(url.strip())
        port = parts.port
    except ValueError:
        return False, "Invalid URL format"

    if parts.scheme.lower() not in ALLOWED_SCHEMES:
        return False, "Only HTTP and HTTPS URLs are allowed"

    host = (parts.hostname or "").rstrip(".").lower()
    if not host:
        return False, "URL must include a hostname"

    if host in BLOCKED_HOSTNAMES or host.endswith(BLOCKED_SUFFIXES):
        return False, "Access to internal hostnames is not allowed"

    try:
        literal: IPAddress | None = ipaddress.ip_address(host)
    except ValueError:
        literal = None

    if literal is not None:
        if is_blocked_address(literal):
            return False, "Access to private or reserved IP addresses is not allowed"
        return True, None

    default_port = 443 if parts.scheme.lower() == "https" else 80
    try:
        addresses = _resolve(host, port or default_port)
    except (socket.gaierror, UnicodeError, OSError):
        return False, f"Could not resolve hostname: {host}"

    if not addresses:
        return False, f"Could not resolve hostname: {host}"

    for address in addresses:
        if is_blocked_address(address):
            return False, "URL resolves to a private or reserved IP address"

    return True, None
