"""Pytest configuration and shared fixtures for host facts tests."""
from __future__ import annotations

import errno
import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

import pytest

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from hostfacts.backends.base import HostEntry, PlatformBackend
from hostfacts.context import HostContext
from hostfacts.core.config import CollectorConfig
from hostfacts.core.errors import BufferTooSmall, NotImplementedByPlatform
from hostfacts.core.models import InterfaceFlags, inet_aton
from hostfacts.net.hwaddr import DirectQuery
from hostfacts.net.ifconf import IfconfBuffer, IfReq, inet_record, link_record


def _missing(name: str, what: str) -> OSError:
    return OSError(errno.ENXIO, f"{name}: no {what}")


@dataclass
class FakeInterface:
    """Answers for the per-interface queries; None makes a query fail."""
    address: Optional[str] = "10.0.0.1"
    netmask: Optional[str] = "255.255.255.0"
    flags: Optional[int] = InterfaceFlags.UP | InterfaceFlags.BROADCAST | InterfaceFlags.RUNNING
    destination: Optional[str] = None
    broadcast: Optional[str] = "10.0.0.255"
    mtu: Optional[int] = 1500
    metric: Optional[int] = None
    hwaddr: Optional[bytes] = b"\x00\x16\x3e\x12\x34\x56"
    neighbor: Optional[bytes] = None


@dataclass
class FakeBackend(PlatformBackend):
    """
    Scriptable backend.

    ``records`` is the raw interface-list reply; ``too_small`` holds the
    lengths to report through ``BufferTooSmall`` on the first calls.
    """
    interfaces: Dict[str, FakeInterface] = field(default_factory=dict)
    records: Optional[List[IfReq]] = None
    too_small: List[int] = field(default_factory=list)
    ifconf_error: Optional[OSError] = None
    admit_link_only: bool = False
    hostname: Optional[str] = "host"
    forward: Dict[str, HostEntry] = field(default_factory=dict)
    reverse: Dict[str, HostEntry] = field(default_factory=dict)
    domain: Optional[str] = "(none)"
    limits: Dict[int, tuple] = field(default_factory=dict)
    strategy: object = None

    def __post_init__(self):
        super().__init__(self.strategy)
        self.require_configured = False
        self.ifconf_calls: List[int] = []
        self.rlimit_calls: List[int] = []
        self.domain_calls = 0

    def default_hwaddr_strategy(self):
        return DirectQuery()

    def gethostname(self) -> str:
        if self.hostname is None:
            raise OSError(errno.EFAULT, "gethostname failed")
        return self.hostname

    def gethostbyname(self, name: str) -> HostEntry:
        if name not in self.forward:
            raise OSError(errno.ENOENT, f"unknown host {name}")
        return self.forward[name]

    def gethostbyaddr(self, address: str) -> HostEntry:
        if address not in self.reverse:
            raise OSError(errno.ENOENT, f"unknown address {address}")
        return self.reverse[address]

    def getdomainname(self) -> str:
        self.domain_calls += 1
        if self.domain is None:
            raise NotImplementedByPlatform("getdomainname")
        return self.domain

    def _reply(self) -> List[IfReq]:
        if self.records is not None:
            return self.records
        records = []
        for name, iface in self.interfaces.items():
            if iface.address:
                records.append(inet_record(name, inet_aton(iface.address)))
        return records

    def ifconf(self, buffer: IfconfBuffer) -> int:
        self.ifconf_calls.append(buffer.capacity)
        if self.ifconf_error:
            raise self.ifconf_error
        raw = b"".join(record.pack() for record in self._reply())
        length = buffer.fill(raw)
        if self.too_small:
            raise BufferTooSmall(self.too_small.pop(0))
        return length

    def record_admissible(self, record: IfReq) -> bool:
        return record.is_link if self.admit_link_only else True

    def _iface(self, name: str) -> FakeInterface:
        if name not in self.interfaces:
            raise OSError(errno.ENODEV, os.strerror(errno.ENODEV), name)
        return self.interfaces[name]

    def _address(self, name: str, what: str) -> int:
        value = getattr(self._iface(name), what)
        if value is None:
            raise _missing(name, what)
        return inet_aton(value)

    def interface_address(self, name: str) -> int:
        return self._address(name, "address")

    def interface_netmask(self, name: str) -> int:
        return self._address(name, "netmask")

    def interface_destination(self, name: str) -> int:
        return self._address(name, "destination")

    def interface_broadcast(self, name: str) -> int:
        return self._address(name, "broadcast")

    def interface_flags(self, name: str) -> InterfaceFlags:
        flags = self._iface(name).flags
        if flags is None:
            raise _missing(name, "flags")
        return InterfaceFlags(flags)

    def interface_mtu(self, name: str) -> int:
        mtu = self._iface(name).mtu
        if mtu is None:
            raise _missing(name, "mtu")
        return mtu

    def interface_metric(self, name: str) -> int:
        metric = self._iface(name).metric
        if metric is None:
            raise _missing(name, "metric")
        return metric

    def interface_hwaddr(self, name: str) -> bytes:
        hwaddr = self._iface(name).hwaddr
        if hwaddr is None:
            raise _missing(name, "hwaddr")
        return hwaddr

    def neighbor_hwaddr(self, address: int) -> Optional[bytes]:
        for iface in self.interfaces.values():
            if iface.address and inet_aton(iface.address) == address:
                return iface.neighbor
        return None

    def getrlimit(self, resource_id: int):
        self.rlimit_calls.append(resource_id)
        if resource_id not in self.limits:
            raise OSError(errno.EINVAL, "bad resource")
        return self.limits[resource_id]

    def rlimit_infinity(self) -> int:
        return 2 ** 64 - 1


def loopback() -> FakeInterface:
    return FakeInterface(
        address="127.0.0.1",
        netmask="255.0.0.0",
        flags=InterfaceFlags.UP | InterfaceFlags.LOOPBACK | InterfaceFlags.RUNNING,
        broadcast="127.255.255.255",
        mtu=65536,
        hwaddr=b"\xaa\xbb\xcc\xdd\xee\xff",
    )


@pytest.fixture
def fake_backend():
    """Backend with a loopback and one ethernet interface."""
    return FakeBackend(interfaces={
        "lo": loopback(),
        "eth0": FakeInterface(address="192.168.1.10", broadcast="192.168.1.255"),
    })


@pytest.fixture
def make_context():
    """Factory for contexts around a fake backend; closed after the test."""
    contexts = []

    def factory(backend: FakeBackend, **config) -> HostContext:
        context = HostContext(backend=backend, config=CollectorConfig(**config))
        contexts.append(context)
        return context

    yield factory

    for context in contexts:
        context.close()


@pytest.fixture
def context(fake_backend, make_context):
    return make_context(fake_backend)


def link(name: str, lladdr: bytes = bytes(6)) -> IfReq:
    return link_record(name, lladdr)
