"""
Platform backend interface.

A backend wraps the OS calls the collector needs: name resolution, the
raw interface list, per-interface field queries, the neighbour table and
resource limits. Queries raise ``OSError`` carrying the native errno.
"""

import abc
import logging
import os
import re
import socket
import subprocess
from typing import List, NamedTuple, Optional, Tuple

from ..core.errors import NotImplementedByPlatform
from ..core.models import FIELD_NOTIMPL, FileSystemType, InterfaceFlags, NetRoute, inet_ntoa
from ..net.hwaddr import HardwareAddressStrategy, parse_hwaddr
from ..net.ifconf import IfconfBuffer, IfReq

if os.name == "posix":
    import resource
else:
    resource = None


logger = logging.getLogger(__name__)

# rlim_t is unsigned; Linux builds expose RLIM_INFINITY as -1.
RLIM_MASK = 2 ** 64 - 1


def _unsigned_limit(value: int) -> int:
    return value & RLIM_MASK if value < 0 else value


class HostEntry(NamedTuple):
    """Result of a forward or reverse name lookup."""

    name: str
    aliases: List[str]
    addresses: List[str]


class PlatformBackend(abc.ABC):
    """
    OS collaborator for one platform family.

    The hardware-address strategy is fixed when the backend is built.
    ``require_configured`` drops interfaces whose configuration cannot be
    read from the interface list.
    """

    name = "base"
    require_configured = False

    def __init__(self, hwaddr_strategy: Optional[HardwareAddressStrategy] = None):
        self.hwaddr_strategy = hwaddr_strategy or self.default_hwaddr_strategy()

    @abc.abstractmethod
    def default_hwaddr_strategy(self) -> HardwareAddressStrategy:
        ...

    def close(self):
        pass

    # Name resolution

    def gethostname(self) -> str:
        return socket.gethostname()

    def gethostbyname(self, name: str) -> HostEntry:
        hostname, aliases, addresses = socket.gethostbyname_ex(name)
        return HostEntry(hostname, list(aliases), list(addresses))

    def gethostbyaddr(self, address: str) -> HostEntry:
        hostname, aliases, addresses = socket.gethostbyaddr(address)
        return HostEntry(hostname, list(aliases), list(addresses))

    def getdomainname(self) -> str:
        raise NotImplementedByPlatform("getdomainname")

    # Interface list

    @abc.abstractmethod
    def ifconf(self, buffer: IfconfBuffer) -> int:
        """
        Fill ``buffer`` with interface records and return the byte length.

        Raises ``BufferTooSmall`` when the platform signals the reply did
        not fit; a silently truncated reply returns the full capacity.
        """

    def record_admissible(self, record: IfReq) -> bool:
        return True

    # Per-interface fields

    @abc.abstractmethod
    def interface_address(self, name: str) -> int:
        ...

    @abc.abstractmethod
    def interface_netmask(self, name: str) -> int:
        ...

    @abc.abstractmethod
    def interface_flags(self, name: str) -> InterfaceFlags:
        ...

    @abc.abstractmethod
    def interface_destination(self, name: str) -> int:
        ...

    @abc.abstractmethod
    def interface_broadcast(self, name: str) -> int:
        ...

    @abc.abstractmethod
    def interface_mtu(self, name: str) -> int:
        ...

    def interface_metric(self, name: str) -> int:
        raise NotImplementedByPlatform("interface metric")

    def interface_hwaddr(self, name: str) -> bytes:
        raise NotImplementedByPlatform("interface hardware address")

    def neighbor_hwaddr(self, address: int) -> Optional[bytes]:
        """Look up ``address`` in the ARP table with ``arp -n``."""
        ip = inet_ntoa(address)
        try:
            result = subprocess.run(
                ["arp", "-n", ip],
                capture_output=True,
                text=True,
                timeout=1,
            )
        except (subprocess.TimeoutExpired, FileNotFoundError) as e:
            logger.debug(f"ARP lookup failed for {ip}: {e}")
            return None

        if result.returncode != 0:
            return None

        for line in result.stdout.split("\n"):
            if ip not in line:
                continue
            match = re.search(r"([0-9a-f]{1,2}[:-]){5}[0-9a-f]{1,2}", line, re.I)
            if match:
                return parse_hwaddr(":".join(
                    part.zfill(2) for part in re.split(r"[:-]", match.group(0))
                ))
        return None

    # Other facts

    def getrlimit(self, resource_id: int) -> Tuple[int, int]:
        if resource is None:
            raise NotImplementedByPlatform("getrlimit")
        cur, max_ = resource.getrlimit(resource_id)
        return _unsigned_limit(cur), _unsigned_limit(max_)

    def rlimit_infinity(self) -> int:
        if resource is None:
            return FIELD_NOTIMPL
        return _unsigned_limit(resource.RLIM_INFINITY)

    def fs_type(self, sys_type_name: str) -> Optional[FileSystemType]:
        """Classify a filesystem by platform-specific names, if known."""
        return None

    def net_routes(self) -> List[NetRoute]:
        raise NotImplementedByPlatform("route list")
