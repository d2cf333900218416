"""
Host network interface queries for pihole-ha.
"""

from __future__ import annotations

import socket

import psutil
import structlog

logger = structlog.get_logger(__name__)

LOOPBACK_NAMES = frozenset({"lo"})


def list_interfaces() -> list[str]:
    """Names of the network interfaces currently present on this host."""
    return sorted(psutil.net_if_stats())


def interface_addresses(interface: str) -> list[str]:
    """IPv4 addresses bound to ``interface`` (empty if it does not exist)."""
    addresses = psutil.net_if_addrs().get(interface, [])
    return [addr.address for addr in addresses if addr.family == socket.AF_INET]


def is_address_bound(interface: str, address: str) -> bool:
    """Whether ``address`` is currently assigned to ``interface``."""
    bound = address in interface_addresses(interface)
    logger.debug("Checked address binding", interface=interface, address=address, bound=bound)
    return bound
