"""
Linux backend.

Interface data comes from the classic ``SIOCGIF*`` ioctls on an AF_INET
datagram socket; the hardware address is queried directly.
"""

import errno
import fcntl
import logging
import socket
import struct
import sys
from pathlib import Path
from typing import List, Optional

from ..core.errors import BufferTooSmall
from ..core.models import FileSystemType, InterfaceFlags, NetRoute
from ..net.hwaddr import DirectQuery, HardwareAddressStrategy
from ..net.ifconf import IFNAMSIZ, IFREQ_SIZE, IfconfBuffer
from .base import PlatformBackend


logger = logging.getLogger(__name__)

SIOCGIFCONF = 0x8912
SIOCGIFFLAGS = 0x8913
SIOCGIFADDR = 0x8915
SIOCGIFDSTADDR = 0x8917
SIOCGIFBRDADDR = 0x8919
SIOCGIFNETMASK = 0x891B
SIOCGIFMETRIC = 0x891D
SIOCGIFMTU = 0x8921
SIOCGIFHWADDR = 0x8927

# struct ifconf { int ifc_len; char *ifc_buf; }
IFCONF = struct.Struct("iL")

IFF_MULTICAST = 0x1000

LOCAL_FS_TYPES = {
    "btrfs", "ext2", "ext3", "ext4", "gfs", "hpfs", "jfs",
    "ocfs", "psfs", "reiserfs", "vzfs", "xfs", "zfs",
}
NETWORK_FS_TYPES = {"cifs", "nfs4"}
RAM_FS_TYPES = {"ramfs", "tmpfs"}

DOMAINNAME_PATH = Path("/proc/sys/kernel/domainname")
ROUTE_PATH = Path("/proc/net/route")


def _hex_address(text: str) -> int:
    """Convert a /proc/net/route address (host-order hex) to an integer."""
    return int.from_bytes(int(text, 16).to_bytes(4, sys.byteorder), "big")


class LinuxBackend(PlatformBackend):
    """Backend for Linux hosts."""

    name = "linux"

    def __init__(self, hwaddr_strategy: Optional[HardwareAddressStrategy] = None):
        super().__init__(hwaddr_strategy)
        self._sock = None

    def default_hwaddr_strategy(self) -> HardwareAddressStrategy:
        return DirectQuery()

    def _socket(self) -> socket.socket:
        if self._sock is None:
            self._sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        return self._sock

    def close(self):
        if self._sock is not None:
            self._sock.close()
            self._sock = None

    def _ioctl(self, request: int, name: str) -> bytes:
        ifreq = name.encode()[:IFNAMSIZ - 1].ljust(IFREQ_SIZE, b"\0")
        return fcntl.ioctl(self._socket().fileno(), request, ifreq)

    def _ioctl_address(self, request: int, name: str) -> int:
        reply = self._ioctl(request, name)
        # ifr_name, sin_family, sin_port, sin_addr
        return int.from_bytes(reply[20:24], "big")

    def _ioctl_int(self, request: int, name: str) -> int:
        reply = self._ioctl(request, name)
        return struct.unpack("i", reply[16:20])[0]

    def getdomainname(self) -> str:
        return DOMAINNAME_PATH.read_text().strip()

    def ifconf(self, buffer: IfconfBuffer) -> int:
        request = IFCONF.pack(buffer.capacity, buffer.address)
        try:
            reply = fcntl.ioctl(self._socket().fileno(), SIOCGIFCONF, request)
        except OSError as e:
            if e.errno == errno.EINVAL:
                logger.debug(f"SIOCGIFCONF reply did not fit {buffer.capacity} bytes")
                raise BufferTooSmall(buffer.capacity) from e
            raise
        length, _ = IFCONF.unpack(reply)
        buffer.length = length
        return length

    def interface_address(self, name: str) -> int:
        return self._ioctl_address(SIOCGIFADDR, name)

    def interface_netmask(self, name: str) -> int:
        return self._ioctl_address(SIOCGIFNETMASK, name)

    def interface_destination(self, name: str) -> int:
        return self._ioctl_address(SIOCGIFDSTADDR, name)

    def interface_broadcast(self, name: str) -> int:
        return self._ioctl_address(SIOCGIFBRDADDR, name)

    def interface_flags(self, name: str) -> InterfaceFlags:
        reply = self._ioctl(SIOCGIFFLAGS, name)
        flags = struct.unpack("H", reply[16:18])[0]
        # 0x800 is IFF_SLAVE here; report multicast in its place.
        if flags & IFF_MULTICAST:
            flags |= int(InterfaceFlags.MULTICAST)
        else:
            flags &= ~int(InterfaceFlags.MULTICAST)
        return InterfaceFlags(flags)

    def interface_mtu(self, name: str) -> int:
        return self._ioctl_int(SIOCGIFMTU, name)

    def interface_metric(self, name: str) -> int:
        return self._ioctl_int(SIOCGIFMETRIC, name)

    def interface_hwaddr(self, name: str) -> bytes:
        reply = self._ioctl(SIOCGIFHWADDR, name)
        return reply[18:24]

    def fs_type(self, sys_type_name: str) -> Optional[FileSystemType]:
        if sys_type_name in LOCAL_FS_TYPES:
            return FileSystemType.LOCAL_DISK
        if sys_type_name in NETWORK_FS_TYPES:
            return FileSystemType.NETWORK
        if sys_type_name in RAM_FS_TYPES:
            return FileSystemType.RAM_DISK
        return None

    def net_routes(self) -> List[NetRoute]:
        routes = []
        with open(ROUTE_PATH, "r") as f:
            next(f, None)  # header
            for line in f:
                fields = line.split()
                if len(fields) < 11:
                    continue
                routes.append(NetRoute(
                    ifname=fields[0],
                    destination=_hex_address(fields[1]),
                    gateway=_hex_address(fields[2]),
                    flags=int(fields[3], 16),
                    refcnt=int(fields[4]),
                    use=int(fields[5]),
                    metric=int(fields[6]),
                    mask=_hex_address(fields[7]),
                    mtu=int(fields[8]),
                    window=int(fields[9]),
                    irtt=int(fields[10]),
                ))
        return routes
