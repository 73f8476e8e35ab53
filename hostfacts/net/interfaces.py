"""
Network interface enumeration and per-interface configuration.

Enumeration queries the backend with the context's reusable ifconf
buffer, growing it until the reply fits. Configuration is assembled from
individual field queries; only the address and flags are mandatory.
"""

import logging
from typing import Callable

from ..core.collection import NET_INTERFACE_LIST, Collection
from ..core.errors import BufferTooSmall
from ..core.models import NULL_HWADDR, InterfaceConfig, InterfaceFlags
from .hwaddr import resolve_hwaddr
from .ifconf import IFREQ_SIZE


logger = logging.getLogger(__name__)

MAX_IFCONF_ROUNDS = 8


def _query_ifconf(context):
    """Run the interface-list query until the reply fits the buffer."""
    buffer = context.ifconf_buffer
    backend = context.backend
    max_rounds = getattr(context.config, "ifconf_max_rounds", MAX_IFCONF_ROUNDS)
    lastlen = 0

    for _ in range(max_rounds):
        if not buffer.capacity or lastlen:
            buffer.grow(IFREQ_SIZE * NET_INTERFACE_LIST.increment)

        # Records left by an earlier reply must never be read back.
        buffer.length = 0
        try:
            length = backend.ifconf(buffer)
        except BufferTooSmall as e:
            if e.length == lastlen:
                # Some platforms keep reporting the same size; take it.
                logger.debug(f"ifconf length stuck at {e.length}, accepting reply")
                return
            lastlen = e.length
            continue

        if length < buffer.capacity:
            return  # got them all

        if length != lastlen:
            lastlen = length  # might be more
            continue

        return

    logger.debug(
        f"ifconf reply still filled {buffer.capacity} bytes after "
        f"{max_rounds} rounds, using what was returned"
    )


def _is_configured(context, name: str) -> bool:
    try:
        get_interface_config(context, name)
    except OSError:
        return False
    return True


def list_interfaces(context) -> Collection[str]:
    """
    List the names of the network interfaces on the host.

    Args:
        context: Collector context owning the backend and ifconf buffer

    Returns:
        A new collection of interface names owned by the caller

    Raises:
        OSError: The interface-list query failed
    """
    _query_ifconf(context)
    backend = context.backend

    iflist = Collection.create(NET_INTERFACE_LIST)
    for record in context.ifconf_buffer.records():
        if not backend.record_admissible(record):
            continue
        if record.name in iflist:
            continue
        if backend.require_configured and not _is_configured(context, record.name):
            logger.debug(f"Skipping unconfigured interface {record.name}")
            continue

        if iflist.is_full:
            iflist.grow()
        iflist.append(record.name)

    logger.debug(f"Found {iflist.count} network interfaces")
    return iflist


def _best_effort(query: Callable[[str], int], name: str, field: str) -> int:
    try:
        return query(name)
    except OSError as e:
        logger.debug(f"{name}: {field} unavailable: {e}")
        return 0


def get_interface_config(context, name: str) -> InterfaceConfig:
    """
    Get the configuration of one interface.

    Args:
        context: Collector context
        name: Interface name as returned by ``list_interfaces``

    Returns:
        The interface configuration

    Raises:
        OSError: The address or flags query failed
    """
    backend = context.backend
    config = InterfaceConfig(name=name)

    # If this one fails, so will everything else.
    config.address = backend.interface_address(name)
    config.netmask = _best_effort(backend.interface_netmask, name, "netmask")

    # Flags exist for every device; other queries may fail while it is down.
    config.flags = InterfaceFlags(backend.interface_flags(name))

    if config.is_loopback:
        config.destination = config.address
        config.broadcast = 0
        config.hwaddr = NULL_HWADDR
    else:
        config.destination = _best_effort(backend.interface_destination, name, "destination")
        config.broadcast = _best_effort(backend.interface_broadcast, name, "broadcast")
        resolve_hwaddr(context, config)

    config.mtu = _best_effort(backend.interface_mtu, name, "mtu")
    # 0 means something else to routing code.
    config.metric = _best_effort(backend.interface_metric, name, "metric") or 1

    return config
