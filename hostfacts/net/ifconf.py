"""
Raw interface-list buffer and ``struct ifreq`` records.

The buffer lives on the collector context and is reused between calls:
it only ever grows, and the hardware-address record scan reads back the
records left by the most recent enumeration.
"""

import array
import socket
import struct
from dataclasses import dataclass
from typing import Iterator

from ..core.errors import OutOfMemoryError


# name[IFNAMSIZ], sa_family, sa_data padded to the size of the ifreq union
IFREQ = struct.Struct("=16sH22s")
IFREQ_SIZE = IFREQ.size
IFNAMSIZ = 16

# Family tag for link-layer records (AF_LINK on BSD, AF_PACKET on Linux).
AF_LINK = getattr(socket, "AF_LINK", getattr(socket, "AF_PACKET", 18))


@dataclass(frozen=True)
class IfReq:
    """One fixed-size record of an interface-list reply."""

    name: str
    family: int
    payload: bytes

    @property
    def is_link(self) -> bool:
        return self.family == AF_LINK

    @property
    def address(self) -> int:
        """IPv4 address of an AF_INET record (sin_port precedes it)."""
        return int.from_bytes(self.payload[2:6], "big")

    @property
    def lladdr(self) -> bytes:
        """Link-layer address of a link record."""
        return self.payload[:6]

    def pack(self) -> bytes:
        return IFREQ.pack(self.name.encode()[:IFNAMSIZ - 1], self.family, self.payload)

    @classmethod
    def unpack(cls, raw: bytes) -> "IfReq":
        name, family, payload = IFREQ.unpack(raw)
        return cls(
            name=name.split(b"\0", 1)[0].decode(errors="replace"),
            family=family,
            payload=payload,
        )


def inet_record(name: str, address: int) -> IfReq:
    """Build the record a kernel returns for an interface's IPv4 address."""
    payload = struct.pack("!HI", 0, address)
    return IfReq(name, socket.AF_INET, payload.ljust(22, b"\0"))


def link_record(name: str, lladdr: bytes) -> IfReq:
    """Build a link-layer record carrying ``lladdr``."""
    return IfReq(name, AF_LINK, lladdr[:6].ljust(22, b"\0"))


class IfconfBuffer:
    """
    Growable byte buffer handed to the interface-list query.

    ``length`` is the number of bytes the last query filled in. Not safe
    for concurrent use; one context serialises its own calls.
    """

    def __init__(self):
        self.data = array.array("B")
        self.length = 0

    @property
    def capacity(self) -> int:
        return len(self.data)

    @property
    def address(self) -> int:
        """Address of the first byte, for ioctl arguments."""
        return self.data.buffer_info()[0]

    def grow(self, nbytes: int):
        try:
            self.data.frombytes(bytes(nbytes))
        except MemoryError as e:
            raise OutOfMemoryError("ifconf buffer") from e

    def fill(self, raw: bytes) -> int:
        """Copy a reply into the buffer, truncated to whole records that fit."""
        usable = (self.capacity // IFREQ_SIZE) * IFREQ_SIZE
        raw = raw[:usable]
        self.data[:len(raw)] = array.array("B", raw)
        self.length = len(raw)
        return self.length

    def records(self) -> Iterator[IfReq]:
        """Iterate over the records of the last reply."""
        raw = self.data.tobytes()
        end = min(self.length, len(raw))
        for offset in range(0, end - IFREQ_SIZE + 1, IFREQ_SIZE):
            yield IfReq.unpack(raw[offset:offset + IFREQ_SIZE])

    def release(self):
        self.data = array.array("B")
        self.length = 0
