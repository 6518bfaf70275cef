"""Local-access gate: the checker is only served to loopback or trusted callers."""

from __future__ import annotations

import ipaddress
import logging
from typing import TYPE_CHECKING

from actioncheck import ActionCheckError

if TYPE_CHECKING:
    from collections.abc import Iterable

logger = logging.getLogger(__name__)

_LOCAL_NAMES: frozenset[str] = frozenset({"localhost"})


class AccessDenied(ActionCheckError):
    """Raised for callers outside the trust boundary."""


def is_local_request(host: str | None, trusted_hosts: Iterable[str] = ()) -> bool:
    """Return True if *host* is a loopback address, ``localhost`` or trusted."""
    if not host:
        return False
    if host in _LOCAL_NAMES or host in set(trusted_hosts):
        return True
    try:
        addr = ipaddress.ip_address(host.strip("[]"))
    except ValueError:
        return False
    # Dual-stack sockets report IPv4 peers as ::ffff:a.b.c.d.
    if isinstance(addr, ipaddress.IPv6Address) and addr.ipv4_mapped is not None:
        return addr.ipv4_mapped.is_loopback
    return addr.is_loopback


def require_local(host: str | None, trusted_hosts: Iterable[str] = ()) -> None:
    """Raise :class:`AccessDenied` unless *host* passes :func:`is_local_request`."""
    if not is_local_request(host, trusted_hosts):
        logger.warning("Refusing system check request from %s", host or "<unknown>")
        raise AccessDenied(host or "<unknown>")
