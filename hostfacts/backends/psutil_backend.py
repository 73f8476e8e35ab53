"""
psutil-based backend for platforms without the Linux ioctl set.

The interface list is rebuilt from ``psutil.net_if_addrs()`` as a reply of
``struct ifreq`` records: one link-layer record per interface followed by
one AF_INET record per IPv4 address. Only the link-layer records name
interfaces, so each interface is listed once.
"""

import errno
import logging
import os
import socket
import subprocess
import sys
from typing import Optional

import psutil

from ..core.errors import NotImplementedByPlatform
from ..core.models import FileSystemType, InterfaceFlags, inet_aton
from ..net.hwaddr import HardwareAddressStrategy, NeighborProbe, RecordScan, parse_hwaddr
from ..net.ifconf import IfconfBuffer, IfReq, inet_record, link_record
from .base import PlatformBackend


logger = logging.getLogger(__name__)

BSD_PLATFORMS = ("darwin", "freebsd", "openbsd", "netbsd", "dragonfly")

# psutil's ``snicstats.flags`` names
FLAG_NAMES = {
    "up": InterfaceFlags.UP,
    "broadcast": InterfaceFlags.BROADCAST,
    "debug": InterfaceFlags.DEBUG,
    "loopback": InterfaceFlags.LOOPBACK,
    "pointopoint": InterfaceFlags.POINTOPOINT,
    "notrailers": InterfaceFlags.NOTRAILERS,
    "running": InterfaceFlags.RUNNING,
    "noarp": InterfaceFlags.NOARP,
    "promisc": InterfaceFlags.PROMISC,
    "allmulti": InterfaceFlags.ALLMULTI,
    "multicast": InterfaceFlags.MULTICAST,
}

LOCAL_FS_TYPES = {"apfs", "exfat", "fat32", "hfs", "ntfs", "refs", "ufs", "zfs"}


def _is_bsd() -> bool:
    return sys.platform.startswith(BSD_PLATFORMS)


class PsutilBackend(PlatformBackend):
    """Backend answering interface queries from psutil."""

    name = "psutil"

    def __init__(self, hwaddr_strategy: Optional[HardwareAddressStrategy] = None):
        super().__init__(hwaddr_strategy)
        # Neighbour-probe platforms list stale entries for unconfigured devices.
        self.require_configured = isinstance(self.hwaddr_strategy, NeighborProbe)

    def default_hwaddr_strategy(self) -> HardwareAddressStrategy:
        if _is_bsd():
            return RecordScan()
        return NeighborProbe()

    def _addrs(self, name: str):
        addrs = psutil.net_if_addrs()
        if name not in addrs:
            raise OSError(errno.ENODEV, os.strerror(errno.ENODEV), name)
        return addrs[name]

    def _inet(self, name: str):
        for addr in self._addrs(name):
            if addr.family == socket.AF_INET:
                return addr
        raise OSError(errno.EADDRNOTAVAIL, os.strerror(errno.EADDRNOTAVAIL), name)

    def _stats(self, name: str):
        stats = psutil.net_if_stats()
        if name not in stats:
            raise OSError(errno.ENODEV, os.strerror(errno.ENODEV), name)
        return stats[name]

    def getdomainname(self) -> str:
        if os.name != "posix":
            raise NotImplementedByPlatform("getdomainname")
        try:
            result = subprocess.run(
                ["domainname"],
                capture_output=True,
                text=True,
                timeout=2,
            )
        except FileNotFoundError:
            raise NotImplementedByPlatform("getdomainname") from None
        except subprocess.TimeoutExpired as e:
            raise OSError(errno.ETIMEDOUT, os.strerror(errno.ETIMEDOUT)) from e
        return result.stdout.strip()

    def ifconf(self, buffer: IfconfBuffer) -> int:
        records = []
        for name, addrs in psutil.net_if_addrs().items():
            lladdr = None
            for addr in addrs:
                if addr.family == psutil.AF_LINK and addr.address:
                    lladdr = parse_hwaddr(addr.address)
            records.append(link_record(name, lladdr or bytes(6)))
            for addr in addrs:
                if addr.family == socket.AF_INET:
                    records.append(inet_record(name, inet_aton(addr.address)))
        return buffer.fill(b"".join(record.pack() for record in records))

    def record_admissible(self, record: IfReq) -> bool:
        return record.is_link

    def interface_address(self, name: str) -> int:
        return inet_aton(self._inet(name).address)

    def interface_netmask(self, name: str) -> int:
        netmask = self._inet(name).netmask
        if not netmask:
            raise OSError(errno.EADDRNOTAVAIL, os.strerror(errno.EADDRNOTAVAIL), name)
        return inet_aton(netmask)

    def interface_destination(self, name: str) -> int:
        ptp = self._inet(name).ptp
        return inet_aton(ptp) if ptp else 0

    def interface_broadcast(self, name: str) -> int:
        broadcast = self._inet(name).broadcast
        return inet_aton(broadcast) if broadcast else 0

    def interface_flags(self, name: str) -> InterfaceFlags:
        stats = self._stats(name)
        flags = InterfaceFlags(0)
        names = getattr(stats, "flags", "")
        if names:
            for flag_name in names.split(","):
                flags |= FLAG_NAMES.get(flag_name.strip(), InterfaceFlags(0))
            return flags

        # Older psutil: only the up/down state is known.
        if stats.isup:
            flags |= InterfaceFlags.UP | InterfaceFlags.RUNNING
        inet = [addr for addr in self._addrs(name) if addr.family == socket.AF_INET]
        if inet and inet[0].address.startswith("127."):
            flags |= InterfaceFlags.LOOPBACK
        return flags

    def interface_mtu(self, name: str) -> int:
        return self._stats(name).mtu

    def interface_hwaddr(self, name: str) -> bytes:
        for addr in self._addrs(name):
            if addr.family == psutil.AF_LINK and addr.address:
                data = parse_hwaddr(addr.address)
                if data:
                    return data
        raise OSError(errno.EADDRNOTAVAIL, os.strerror(errno.EADDRNOTAVAIL), name)

    def fs_type(self, sys_type_name: str) -> Optional[FileSystemType]:
        if sys_type_name.lower() in LOCAL_FS_TYPES:
            return FileSystemType.LOCAL_DISK
        return None
