"""Collectors module for gathering host resource lists."""

from .local_collector import LocalCollector, get_local_snapshot

__all__ = [
    "LocalCollector",
    "get_local_snapshot",
]
