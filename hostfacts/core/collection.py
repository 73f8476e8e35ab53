"""
Growable collections shared by every resource-list type.

A collection is created with one increment of capacity. Producers call
``grow()`` themselves before writing past the end; ``append`` never grows.
"""

from dataclasses import dataclass
from typing import Generic, Iterator, List, Optional, TypeVar

from .errors import OutOfMemoryError


T = TypeVar("T")


@dataclass(frozen=True)
class ListKind:
    """Growth policy for one kind of resource list."""

    name: str
    increment: int
    owns_elements: bool = False


PROC_LIST = ListKind("proc_list", 256)
PROC_ARGS = ListKind("proc_args", 12, owns_elements=True)
FILE_SYSTEM_LIST = ListKind("file_system_list", 10)
CPU_INFO_LIST = ListKind("cpu_info_list", 16)
CPU_LIST = ListKind("cpu_list", 16)
NET_ROUTE_LIST = ListKind("net_route_list", 6)
NET_INTERFACE_LIST = ListKind("net_interface_list", 20, owns_elements=True)
NET_CONNECTION_LIST = ListKind("net_connection_list", 20)
WHO_LIST = ListKind("who_list", 12)


class Collection(Generic[T]):
    """
    Dynamic array of resource records.

    ``count`` elements are live out of ``capacity`` allocated slots.
    Capacity only grows by ``kind.increment`` and is released by
    ``destroy()``, which is safe to call more than once.
    """

    def __init__(self, kind: ListKind):
        if kind.increment <= 0:
            raise ValueError(f"{kind.name}: increment must be positive")
        self.kind = kind
        self.count = 0
        self.capacity = 0
        self.items: List[Optional[T]] = []

    @classmethod
    def create(cls, kind: ListKind) -> "Collection[T]":
        """Create an empty collection with one increment pre-allocated."""
        collection = cls(kind)
        collection.grow()
        return collection

    @property
    def is_full(self) -> bool:
        return self.count == self.capacity

    def grow(self):
        """Add one increment of capacity, keeping existing elements."""
        try:
            self.items.extend([None] * self.kind.increment)
        except MemoryError as e:
            raise OutOfMemoryError(self.kind.name) from e
        self.capacity += self.kind.increment

    def append(self, item: T):
        """Write ``item`` at index ``count``; the caller grows first if full."""
        if self.is_full:
            raise IndexError(f"{self.kind.name} is full ({self.capacity})")
        self.items[self.count] = item
        self.count += 1

    def destroy(self):
        """Release all elements and the backing store."""
        if not self.capacity:
            return
        if self.kind.owns_elements:
            for i in range(self.count):
                self.items[i] = None
        self.items = []
        self.count = self.capacity = 0

    def __len__(self) -> int:
        return self.count

    def __getitem__(self, index: int) -> T:
        if index < 0:
            index += self.count
        if not 0 <= index < self.count:
            raise IndexError(f"{self.kind.name} index out of range")
        return self.items[index]

    def __iter__(self) -> Iterator[T]:
        for i in range(self.count):
            yield self.items[i]

    def __contains__(self, item) -> bool:
        return any(existing == item for existing in self)

    def __enter__(self) -> "Collection[T]":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.destroy()

    def __repr__(self) -> str:
        return (
            f"Collection({self.kind.name}, count={self.count}, "
            f"capacity={self.capacity})"
        )
