"""Network interface, hardware address and FQDN resolution."""

from .fqdn import FQDN_LEN, resolve_fqdn
from .hwaddr import format_hwaddr
from .interfaces import get_interface_config, list_interfaces

__all__ = [
    "FQDN_LEN",
    "format_hwaddr",
    "get_interface_config",
    "list_interfaces",
    "resolve_fqdn",
]
