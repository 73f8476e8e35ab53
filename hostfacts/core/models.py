"""
Data models for host facts.

These dataclasses represent the structured records returned by the
collector context and its resource lists.
"""

import enum
import ipaddress
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional


NULL_HWADDR = "00:00:00:00:00:00"

# Reported for a field the platform cannot provide.
FIELD_NOTIMPL = -1


class InterfaceFlags(enum.IntFlag):
    """Interface flag bits, normalised across platforms."""

    UP = 0x1
    BROADCAST = 0x2
    DEBUG = 0x4
    LOOPBACK = 0x8
    POINTOPOINT = 0x10
    NOTRAILERS = 0x20
    RUNNING = 0x40
    NOARP = 0x80
    PROMISC = 0x100
    ALLMULTI = 0x200
    MULTICAST = 0x800


def inet_ntoa(address: int) -> str:
    """Render an integer IPv4 address in dotted-decimal form."""
    return str(ipaddress.IPv4Address(address))


def inet_aton(address: str) -> int:
    """Parse a dotted-decimal IPv4 address into an integer."""
    return int(ipaddress.IPv4Address(address))


@dataclass
class InterfaceConfig:
    """Configuration of one network interface."""

    name: str
    address: int = 0
    netmask: int = 0
    broadcast: int = 0
    destination: int = 0
    hwaddr: str = NULL_HWADDR
    flags: InterfaceFlags = InterfaceFlags(0)
    mtu: int = 0
    metric: int = 0

    @property
    def is_loopback(self) -> bool:
        return bool(self.flags & InterfaceFlags.LOOPBACK)

    @property
    def is_up(self) -> bool:
        return bool(self.flags & InterfaceFlags.UP)

    @property
    def flag_names(self) -> List[str]:
        """Names of the set flags, lowest bit first."""
        return [flag.name for flag in InterfaceFlags if flag in self.flags]

    def to_dict(self) -> dict:
        """Convert to a dictionary with dotted-decimal addresses."""
        return {
            "name": self.name,
            "address": inet_ntoa(self.address),
            "netmask": inet_ntoa(self.netmask),
            "broadcast": inet_ntoa(self.broadcast),
            "destination": inet_ntoa(self.destination),
            "hwaddr": self.hwaddr,
            "flags": self.flag_names,
            "mtu": self.mtu,
            "metric": self.metric,
        }


@dataclass
class ResourceLimit:
    """Current and maximum values for each process resource limit."""

    cpu_cur: int = FIELD_NOTIMPL
    cpu_max: int = FIELD_NOTIMPL
    file_size_cur: int = FIELD_NOTIMPL
    file_size_max: int = FIELD_NOTIMPL
    data_cur: int = FIELD_NOTIMPL
    data_max: int = FIELD_NOTIMPL
    stack_cur: int = FIELD_NOTIMPL
    stack_max: int = FIELD_NOTIMPL
    core_cur: int = FIELD_NOTIMPL
    core_max: int = FIELD_NOTIMPL
    memory_cur: int = FIELD_NOTIMPL
    memory_max: int = FIELD_NOTIMPL
    processes_cur: int = FIELD_NOTIMPL
    processes_max: int = FIELD_NOTIMPL
    open_files_cur: int = FIELD_NOTIMPL
    open_files_max: int = FIELD_NOTIMPL
    virtual_memory_cur: int = FIELD_NOTIMPL
    virtual_memory_max: int = FIELD_NOTIMPL
    unlimited: int = FIELD_NOTIMPL


@dataclass
class CpuInfo:
    """Static description of the installed processors."""

    vendor: str = ""
    model: str = ""
    mhz: int = 0
    cache_size: int = FIELD_NOTIMPL
    total_cores: int = 0


@dataclass
class Cpu:
    """Accumulated CPU times for one logical processor, in milliseconds."""

    user: int = 0
    sys: int = 0
    nice: int = 0
    idle: int = 0
    wait: int = 0
    total: int = 0


class FileSystemType(enum.IntEnum):
    """Filesystem classification; values index ``FSTYPE_NAMES``."""

    UNKNOWN = 0
    NONE = 1
    LOCAL_DISK = 2
    NETWORK = 3
    RAM_DISK = 4
    CDROM = 5
    SWAP = 6


FSTYPE_NAMES = ("unknown", "none", "local", "remote", "ram", "cdrom", "swap")


@dataclass
class FileSystem:
    """One mounted filesystem."""

    dir_name: str = ""
    dev_name: str = ""
    type_name: str = ""
    sys_type_name: str = ""
    type: FileSystemType = FileSystemType.UNKNOWN
    options: str = ""


@dataclass
class NetRoute:
    """One entry of the kernel routing table."""

    destination: int = 0
    gateway: int = 0
    mask: int = 0
    flags: int = 0
    refcnt: int = 0
    use: int = 0
    metric: int = 0
    mtu: int = 0
    window: int = 0
    irtt: int = 0
    ifname: str = ""


class ConnectionType(enum.IntFlag):
    """Connection protocols; also used as a filter mask."""

    CLIENT = 0x01
    SERVER = 0x02
    TCP = 0x10
    UDP = 0x20
    RAW = 0x40
    UNIX = 0x80


class TcpState(enum.IntEnum):
    """TCP connection states."""

    UNKNOWN = 0
    ESTABLISHED = 1
    SYN_SENT = 2
    SYN_RECV = 3
    FIN_WAIT1 = 4
    FIN_WAIT2 = 5
    TIME_WAIT = 6
    CLOSE = 7
    CLOSE_WAIT = 8
    LAST_ACK = 9
    LISTEN = 10
    CLOSING = 11
    IDLE = 12
    BOUND = 13


def net_connection_type_name(conn_type: int) -> str:
    """Short protocol name for a connection type."""
    names = {
        ConnectionType.TCP: "tcp",
        ConnectionType.UDP: "udp",
        ConnectionType.RAW: "raw",
        ConnectionType.UNIX: "unix",
    }
    return names.get(conn_type, "unknown")


def net_connection_state_name(state: int) -> str:
    """Upper-case name for a TCP state."""
    try:
        return TcpState(state).name
    except ValueError:
        return TcpState.UNKNOWN.name


@dataclass
class NetConnection:
    """One socket known to the kernel."""

    local_address: str = ""
    local_port: int = 0
    remote_address: str = ""
    remote_port: int = 0
    type: ConnectionType = ConnectionType.TCP
    state: TcpState = TcpState.UNKNOWN
    pid: Optional[int] = None

    @property
    def type_name(self) -> str:
        return net_connection_type_name(self.type)

    @property
    def state_name(self) -> str:
        return net_connection_state_name(self.state)


@dataclass
class Who:
    """A logged-in user session."""

    user: str = ""
    device: str = ""
    host: str = ""
    time: int = 0


@dataclass
class HostSnapshot:
    """Complete set of facts for the local host at a point in time."""

    fqdn: str = ""
    interfaces: List[InterfaceConfig] = field(default_factory=list)
    resource_limit: ResourceLimit = field(default_factory=ResourceLimit)
    counts: Dict[str, int] = field(default_factory=dict)
    timestamp: datetime = field(default_factory=datetime.now)
    collection_duration_ms: float = 0.0
    errors: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        """Convert snapshot to dictionary for serialization."""
        return {
            "fqdn": self.fqdn,
            "interfaces": [iface.to_dict() for iface in self.interfaces],
            "resource_limit": vars(self.resource_limit).copy(),
            "counts": dict(self.counts),
            "timestamp": self.timestamp.isoformat(),
            "collection_duration_ms": self.collection_duration_ms,
            "errors": self.errors,
        }
