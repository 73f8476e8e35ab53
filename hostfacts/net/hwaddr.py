"""
Hardware (link-layer) address resolution.

Each backend is built with exactly one strategy:

- ``DirectQuery``: ask the OS for the interface's hardware address.
- ``RecordScan``: look for the interface's link-layer record in the
  context's ifconf buffer, as left by the last interface enumeration.
- ``NeighborProbe``: look up the interface's own IPv4 address in the
  neighbour (ARP) table.

None of them fail: an unresolved address is the null sentinel.
"""

import abc
import logging
from typing import Optional

from ..core.models import NULL_HWADDR, InterfaceConfig


logger = logging.getLogger(__name__)


def format_hwaddr(data: bytes) -> str:
    """Render six bytes as ``XX:XX:XX:XX:XX:XX``."""
    return ":".join("%02X" % (b & 0xFF) for b in data[:6])


def parse_hwaddr(text: str) -> Optional[bytes]:
    """Parse ``aa:bb:cc:dd:ee:ff`` or ``AA-BB-CC-DD-EE-FF`` into bytes."""
    digits = text.strip().replace(":", "").replace("-", "")
    if len(digits) != 12:
        return None
    try:
        return bytes.fromhex(digits)
    except ValueError:
        return None


class HardwareAddressStrategy(abc.ABC):
    """Resolves the hardware address for an interface configuration."""

    name = ""

    @abc.abstractmethod
    def lookup(self, context, config: InterfaceConfig) -> str:
        """Return the formatted hardware address for ``config``."""


class DirectQuery(HardwareAddressStrategy):
    name = "direct"

    def lookup(self, context, config: InterfaceConfig) -> str:
        try:
            data = context.backend.interface_hwaddr(config.name)
        except OSError as e:
            logger.debug(f"{config.name}: hardware address query failed: {e}")
            return NULL_HWADDR
        return format_hwaddr(data)


class RecordScan(HardwareAddressStrategy):
    name = "scan"

    def lookup(self, context, config: InterfaceConfig) -> str:
        # Only meaningful after list_interfaces() has filled the buffer.
        for record in context.ifconf_buffer.records():
            if record.is_link and record.name == config.name:
                return format_hwaddr(record.lladdr)
        logger.debug(f"{config.name}: no link-layer record in ifconf buffer")
        return NULL_HWADDR


class NeighborProbe(HardwareAddressStrategy):
    name = "neighbor"

    def lookup(self, context, config: InterfaceConfig) -> str:
        try:
            data = context.backend.neighbor_hwaddr(config.address)
        except OSError as e:
            logger.debug(f"{config.name}: neighbour lookup failed: {e}")
            data = None
        return format_hwaddr(data or bytes(6))


STRATEGIES = {
    DirectQuery.name: DirectQuery,
    RecordScan.name: RecordScan,
    NeighborProbe.name: NeighborProbe,
}


def get_strategy(name: str) -> HardwareAddressStrategy:
    """Instantiate a strategy by its configuration name."""
    try:
        return STRATEGIES[name]()
    except KeyError:
        raise ValueError(f"Unknown hardware address strategy: {name}") from None


def resolve_hwaddr(context, config: InterfaceConfig):
    """Fill ``config.hwaddr`` using the backend's strategy."""
    config.hwaddr = context.backend.hwaddr_strategy.lookup(context, config)
