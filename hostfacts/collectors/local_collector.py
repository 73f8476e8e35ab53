"""
Local Resource List Collector.

Collects process, CPU, filesystem, connection, user and route lists from
the local machine using psutil and the context's platform backend.
"""

import errno
import logging
import platform
import socket
import time
from datetime import datetime
from typing import Optional

import psutil

from ..context import HostContext
from ..core.collection import (
    CPU_INFO_LIST,
    CPU_LIST,
    FILE_SYSTEM_LIST,
    NET_CONNECTION_LIST,
    NET_ROUTE_LIST,
    PROC_ARGS,
    PROC_LIST,
    WHO_LIST,
    Collection,
)
from ..core.models import (
    FSTYPE_NAMES,
    ConnectionType,
    Cpu,
    CpuInfo,
    FileSystem,
    FileSystemType,
    HostSnapshot,
    NetConnection,
    NetRoute,
    TcpState,
    Who,
)


logger = logging.getLogger(__name__)

COMMON_FS_TYPES = {
    "nfs": FileSystemType.NETWORK,
    "smbfs": FileSystemType.NETWORK,
    "afs": FileSystemType.NETWORK,
    "swap": FileSystemType.SWAP,
    "iso9660": FileSystemType.CDROM,
    "msdos": FileSystemType.LOCAL_DISK,
    "minix": FileSystemType.LOCAL_DISK,
    "hpfs": FileSystemType.LOCAL_DISK,
    "vfat": FileSystemType.LOCAL_DISK,
}

DEFAULT_CONNECTION_FLAGS = (
    ConnectionType.CLIENT | ConnectionType.SERVER | ConnectionType.TCP | ConnectionType.UDP
)


def fs_type_get(fs: FileSystem, backend=None):
    """Classify ``fs`` by platform rules first, then common type names."""
    if not fs.type:
        os_type = backend.fs_type(fs.sys_type_name) if backend else None
        fs.type = os_type or COMMON_FS_TYPES.get(fs.sys_type_name, FileSystemType.NONE)

    if fs.type >= len(FSTYPE_NAMES):
        fs.type = FileSystemType.NONE

    fs.type_name = FSTYPE_NAMES[fs.type]


def _ms(seconds: float) -> int:
    return int(seconds * 1000)


def _tcp_state(status: str) -> TcpState:
    try:
        return TcpState[status]
    except KeyError:
        return TcpState.UNKNOWN


def _access_error(e: psutil.Error, what: str) -> OSError:
    if isinstance(e, psutil.NoSuchProcess):
        return ProcessLookupError(errno.ESRCH, f"{what}: no such process")
    return PermissionError(errno.EACCES, f"{what}: access denied")


class LocalCollector:
    """
    Collects resource lists from the local machine.

    Every list is returned as a new Collection owned by the caller.
    """

    def __init__(self, context: Optional[HostContext] = None):
        self.context = context or HostContext.open()

    def proc_list(self) -> Collection[int]:
        """Get the ids of all running processes."""
        proclist = Collection.create(PROC_LIST)
        for pid in psutil.pids():
            if proclist.is_full:
                proclist.grow()
            proclist.append(pid)
        return proclist

    def proc_args(self, pid: int) -> Collection[str]:
        """Get the command line arguments of a process."""
        try:
            cmdline = psutil.Process(pid).cmdline()
        except psutil.Error as e:
            raise _access_error(e, f"pid {pid}") from e

        procargs = Collection.create(PROC_ARGS)
        for arg in cmdline:
            if procargs.is_full:
                procargs.grow()
            procargs.append(arg)
        return procargs

    def cpu_list(self) -> Collection[Cpu]:
        """Get accumulated times for each logical CPU."""
        cpulist = Collection.create(CPU_LIST)
        for times in psutil.cpu_times(percpu=True):
            cpu = Cpu(
                user=_ms(times.user),
                sys=_ms(times.system),
                nice=_ms(getattr(times, "nice", 0.0)),
                idle=_ms(times.idle),
                wait=_ms(getattr(times, "iowait", 0.0)),
            )
            cpu.total = _ms(sum(times))
            if cpulist.is_full:
                cpulist.grow()
            cpulist.append(cpu)
        return cpulist

    def cpu_info_list(self) -> Collection[CpuInfo]:
        """Get a description of each logical CPU."""
        vendor, model, cache_size = self._get_cpu_model()
        try:
            cpu_freq = psutil.cpu_freq()
            mhz = int(cpu_freq.current) if cpu_freq else 0
        except (OSError, NotImplementedError):
            mhz = 0
        total = psutil.cpu_count(logical=True) or 1

        cpu_infos = Collection.create(CPU_INFO_LIST)
        for _ in range(total):
            if cpu_infos.is_full:
                cpu_infos.grow()
            cpu_infos.append(CpuInfo(
                vendor=vendor,
                model=model,
                mhz=mhz,
                cache_size=cache_size,
                total_cores=total,
            ))
        return cpu_infos

    def _get_cpu_model(self):
        """Get CPU vendor, model name and cache size in KB."""
        vendor, model, cache_size = "", "", -1
        if platform.system() == "Linux":
            try:
                with open("/proc/cpuinfo", "r") as f:
                    for line in f:
                        key, _, value = line.partition(":")
                        key, value = key.strip(), value.strip()
                        if key == "vendor_id" and not vendor:
                            vendor = value
                        elif key == "model name" and not model:
                            model = value
                        elif key == "cache size" and cache_size < 0:
                            cache_size = int(value.split()[0])
            except (OSError, ValueError) as e:
                logger.debug(f"Could not read /proc/cpuinfo: {e}")
        return vendor, model or platform.processor(), cache_size

    def file_system_list(self) -> Collection[FileSystem]:
        """Get all mounted filesystems."""
        fslist = Collection.create(FILE_SYSTEM_LIST)
        for partition in psutil.disk_partitions(all=True):
            fs = FileSystem(
                dir_name=partition.mountpoint,
                dev_name=partition.device,
                sys_type_name=partition.fstype,
                options=partition.opts,
            )
            fs_type_get(fs, self.context.backend)
            if fslist.is_full:
                fslist.grow()
            fslist.append(fs)
        return fslist

    def net_connection_list(self, flags: int = DEFAULT_CONNECTION_FLAGS) -> Collection[NetConnection]:
        """
        Get the sockets matching ``flags``.

        Args:
            flags: ConnectionType bits; CLIENT/SERVER select the side and
                TCP/UDP/RAW/UNIX the protocols

        Returns:
            A new collection of connections
        """
        try:
            connections = psutil.net_connections(kind="all")
        except psutil.Error as e:
            raise _access_error(e, "net_connections") from e

        connlist = Collection.create(NET_CONNECTION_LIST)
        for conn in connections:
            if conn.family == getattr(socket, "AF_UNIX", None):
                conn_type = ConnectionType.UNIX
            elif conn.type == socket.SOCK_STREAM:
                conn_type = ConnectionType.TCP
            elif conn.type == socket.SOCK_DGRAM:
                conn_type = ConnectionType.UDP
            else:
                conn_type = ConnectionType.RAW

            if not flags & conn_type:
                continue

            state = _tcp_state(conn.status) if conn_type == ConnectionType.TCP else TcpState.UNKNOWN
            is_server = state == TcpState.LISTEN or (conn_type != ConnectionType.TCP and not conn.raddr)
            side = ConnectionType.SERVER if is_server else ConnectionType.CLIENT
            if not flags & side:
                continue

            laddr = conn.laddr if isinstance(conn.laddr, tuple) else None
            raddr = conn.raddr if isinstance(conn.raddr, tuple) else None
            if connlist.is_full:
                connlist.grow()
            connlist.append(NetConnection(
                local_address=laddr[0] if laddr else (conn.laddr or ""),
                local_port=laddr[1] if laddr else 0,
                remote_address=raddr[0] if raddr else (conn.raddr or ""),
                remote_port=raddr[1] if raddr else 0,
                type=conn_type,
                state=state,
                pid=conn.pid,
            ))
        return connlist

    def who_list(self) -> Collection[Who]:
        """Get the users currently logged in."""
        wholist = Collection.create(WHO_LIST)
        for user in psutil.users():
            if not user.name:
                continue
            if wholist.is_full:
                wholist.grow()
            wholist.append(Who(
                user=user.name,
                device=user.terminal or "",
                host=user.host or "",
                time=int(user.started),
            ))
        return wholist

    def net_route_list(self) -> Collection[NetRoute]:
        """Get the kernel IPv4 routing table."""
        routes = self.context.backend.net_routes()
        routelist = Collection.create(NET_ROUTE_LIST)
        for route in routes:
            if routelist.is_full:
                routelist.grow()
            routelist.append(route)
        return routelist

    def _count(self, producer) -> int:
        with producer() as collection:
            return collection.count

    def collect_all(self) -> HostSnapshot:
        """Collect all host facts and return a complete snapshot."""
        start_time = time.time()
        snapshot = HostSnapshot()

        # Collect each fact type with error handling
        try:
            snapshot.fqdn = self.context.fqdn()
        except OSError as e:
            snapshot.errors.append(f"FQDN: {e}")

        try:
            with self.context.net_interface_list() as iflist:
                for name in iflist:
                    try:
                        snapshot.interfaces.append(self.context.net_interface_config(name))
                    except OSError as e:
                        logger.debug(f"Could not read configuration of {name}: {e}")
        except OSError as e:
            snapshot.errors.append(f"Network interfaces: {e}")

        try:
            snapshot.resource_limit = self.context.resource_limit()
        except OSError as e:
            snapshot.errors.append(f"Resource limits: {e}")

        producers = {
            "processes": self.proc_list,
            "cpus": self.cpu_list,
            "cpu_infos": self.cpu_info_list,
            "file_systems": self.file_system_list,
            "connections": self.net_connection_list,
            "users": self.who_list,
            "routes": self.net_route_list,
        }
        for name, producer in producers.items():
            try:
                snapshot.counts[name] = self._count(producer)
            except (OSError, psutil.Error) as e:
                snapshot.errors.append(f"{name}: {e}")

        snapshot.timestamp = datetime.now()
        snapshot.collection_duration_ms = (time.time() - start_time) * 1000
        return snapshot


# Convenience function for quick local facts
def get_local_snapshot() -> HostSnapshot:
    """Get a snapshot of the local machine."""
    with HostContext.open() as context:
        return LocalCollector(context).collect_all()
