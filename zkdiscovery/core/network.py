from __future__ import annotations

import ipaddress
import socket

from loguru import logger

from zkdiscovery.datastructures.type_aliases import HostAddress

LOOPBACK_ADDRESS: HostAddress = "127.0.0.1"
# nothing is sent; connecting a UDP socket only selects the outbound interface
_PROBE_TARGET = ("192.0.2.1", 9)


def _is_usable(address: str) -> bool:
    try:
        parsed = ipaddress.ip_address(address)
    except ValueError:
        return False
    return not (parsed.is_loopback or parsed.is_unspecified or parsed.is_link_local)


def local_address() -> HostAddress:
    """Best guess at this host's non-loopback IPv4 address."""
    try:
        with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as probe:
            probe.connect(_PROBE_TARGET)
            address = probe.getsockname()[0]
        if _is_usable(address):
            return address
    except OSError as exc:
        logger.debug("Outbound interface probe failed: {}", exc)

    try:
        infos = socket.getaddrinfo(socket.gethostname(), None, socket.AF_INET)
    except OSError as exc:
        logger.debug("Hostname lookup failed: {}", exc)
        infos = []
    for info in infos:
        address = str(info[4][0])
        if _is_usable(address):
            return address

    logger.warning("No usable interface address found, using {}", LOOPBACK_ADDRESS)
    return LOOPBACK_ADDRESS
