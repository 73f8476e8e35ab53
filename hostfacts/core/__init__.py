"""Core module containing collections, data models and configuration."""

from .collection import Collection, ListKind
from .config import Config
from .errors import HostFactsError, NotImplementedByPlatform, strerror
from .models import (
    NULL_HWADDR,
    FIELD_NOTIMPL,
    InterfaceConfig,
    InterfaceFlags,
    ResourceLimit,
    HostSnapshot,
)

__all__ = [
    "Collection",
    "ListKind",
    "Config",
    "HostFactsError",
    "NotImplementedByPlatform",
    "strerror",
    "NULL_HWADDR",
    "FIELD_NOTIMPL",
    "InterfaceConfig",
    "InterfaceFlags",
    "ResourceLimit",
    "HostSnapshot",
]
