"""
Collector context.

The context owns the platform backend and the ifconf buffer reused by
interface enumeration and the record-scan hardware-address lookup. It
keeps mutable state between calls: callers sharing one context across
threads must serialise access themselves.
"""

import os
from typing import Optional

from .backends import PlatformBackend, get_backend
from .core.collection import Collection
from .core.config import CollectorConfig
from .core.models import InterfaceConfig, ResourceLimit
from .core.rlimits import get_resource_limit
from .net.fqdn import resolve_fqdn
from .net.ifconf import IfconfBuffer
from .net.interfaces import get_interface_config, list_interfaces


class HostContext:
    """
    Entry point for host facts.

    Use as a context manager, or call ``close()`` when done::

        with HostContext.open() as host:
            print(host.fqdn())
    """

    def __init__(
        self,
        backend: Optional[PlatformBackend] = None,
        config: Optional[CollectorConfig] = None,
    ):
        self.config = config or CollectorConfig()
        self.backend = backend or get_backend(
            self.config.backend, self.config.hwaddr_strategy
        )
        self.ifconf_buffer = IfconfBuffer()
        self._pid: Optional[int] = None

    @classmethod
    def open(cls, config: Optional[CollectorConfig] = None) -> "HostContext":
        """Open a context with the backend selected for this host."""
        return cls(config=config)

    def close(self):
        """Release the ifconf buffer and backend resources."""
        self.ifconf_buffer.release()
        self.backend.close()

    def __enter__(self) -> "HostContext":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    @property
    def pid(self) -> int:
        if not self._pid:
            self._pid = os.getpid()
        return self._pid

    def net_interface_list(self) -> Collection[str]:
        return list_interfaces(self)

    def net_interface_config(self, name: str) -> InterfaceConfig:
        return get_interface_config(self, name)

    def fqdn(self, namelen: Optional[int] = None) -> str:
        return resolve_fqdn(self, namelen or self.config.fqdn_len)

    def resource_limit(self) -> ResourceLimit:
        return get_resource_limit(self)
