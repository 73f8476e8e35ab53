"""Platform backends and the start-up selection between them."""

import logging
import sys
from typing import Optional

from ..net.hwaddr import get_strategy
from .base import HostEntry, PlatformBackend
from .psutil_backend import PsutilBackend

if sys.platform.startswith("linux"):
    from .linux import LinuxBackend
else:
    LinuxBackend = None


logger = logging.getLogger(__name__)

__all__ = [
    "HostEntry",
    "PlatformBackend",
    "PsutilBackend",
    "LinuxBackend",
    "get_backend",
]


def get_backend(name: str = "auto", hwaddr_strategy: Optional[str] = None) -> PlatformBackend:
    """
    Build the backend for this host.

    Args:
        name: "auto", "linux" or "psutil"
        hwaddr_strategy: "direct", "scan" or "neighbor" to override the
            backend's own hardware-address strategy; None or "auto" keeps it

    Returns:
        A ready backend instance
    """
    if name == "auto":
        name = "linux" if LinuxBackend is not None else "psutil"

    strategy = None
    if hwaddr_strategy and hwaddr_strategy != "auto":
        strategy = get_strategy(hwaddr_strategy)

    if name == "linux":
        if LinuxBackend is None:
            raise ValueError(f"The linux backend is not available on {sys.platform}")
        backend = LinuxBackend(strategy)
    elif name == "psutil":
        backend = PsutilBackend(strategy)
    else:
        raise ValueError(f"Unknown backend: {name}")

    logger.debug(
        f"Using {backend.name} backend with {backend.hwaddr_strategy.name} "
        f"hardware address lookup"
    )
    return backend
