"""
External network address discovery.
"""

import ipaddress
import logging
import socket
from typing import Dict, List

import psutil

from .errors import AddressResolutionError

logger = logging.getLogger(__name__)

DEFAULT_ADDRESS = "127.0.0.1"


def resolve_external_address() -> str:
    """
    Find the first IPv4 address of an interface that is up and not loopback

    Returns:
        Dotted-quad address string

    Raises:
        AddressResolutionError: No such interface exists or the lookup failed
    """
    try:
        stats = psutil.net_if_stats()
        addrs = psutil.net_if_addrs()
    except (OSError, RuntimeError) as e:
        raise AddressResolutionError(f"Cannot enumerate network interfaces: {e}") from e

    for name, entries in addrs.items():
        if name in stats and not stats[name].isup:
            continue
        for address in _ipv4_addresses(entries):
            if ipaddress.ip_address(address).is_loopback:
                continue
            return address

    raise AddressResolutionError("Are you connected to the network?")


def _ipv4_addresses(entries: List) -> List[str]:
    return [entry.address for entry in entries if entry.family == socket.AF_INET]


def get_hostname(fallback: str) -> str:
    """
    Get the OS host name, or *fallback* when the OS cannot report one
    """
    try:
        hostname = socket.gethostname()
    except OSError:
        hostname = ""
    if not hostname:
        logger.warning("Can't get hostname from OS, using %s as host name", fallback)
        return fallback
    return hostname


def interface_summary() -> Dict[str, List[str]]:
    """
    Map of interface name to its IPv4 addresses, for diagnostics logging
    """
    try:
        return {
            name: _ipv4_addresses(entries)
            for name, entries in psutil.net_if_addrs().items()
        }
    except (OSError, RuntimeError):
        return {}
