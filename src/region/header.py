"""Region header decoding.

A region file starts with two 4 KiB tables of 1024 big-endian words each. The
first holds chunk locations (24-bit sector offset, 8-bit sector count), the
second holds last-modified timestamps. Slot ``x + z * 32`` describes the chunk
at grid coordinates ``(x, z)``.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import BinaryIO, Iterator, Tuple

from .errors import ChunkCoordinateError, RegionHeaderError

SECTOR_BYTES = 4096
GRID_SIZE = 32
SLOT_COUNT = GRID_SIZE * GRID_SIZE
HEADER_BYTES = 2 * SECTOR_BYTES

CHUNK_LENGTH_BYTES = 4
CHUNK_PREFIX_BYTES = CHUNK_LENGTH_BYTES + 1

COMPRESSION_GZIP = 1
COMPRESSION_ZLIB = 2
COMPRESSION_NONE = 3

_TABLE = struct.Struct(f">{SLOT_COUNT}I")


@dataclass(frozen=True)
class SlotRecord:
    """Location and timestamp of one chunk slot."""

    offset: int
    sector_count: int
    timestamp: int

    @property
    def exists(self) -> bool:
        return self.offset > 0

    @property
    def allocated_bytes(self) -> int:
        return self.sector_count * SECTOR_BYTES

    @property
    def end(self) -> int:
        return self.offset + self.allocated_bytes


def slot_index(x: int, z: int) -> int:
    if not (0 <= x < GRID_SIZE and 0 <= z < GRID_SIZE):
        raise ChunkCoordinateError(x, z)
    return x % GRID_SIZE + (z % GRID_SIZE) * GRID_SIZE


def _read_table(stream: BinaryIO, consumed: int) -> Tuple[int, ...]:
    raw = stream.read(SECTOR_BYTES)
    if len(raw) != SECTOR_BYTES:
        raise RegionHeaderError(consumed + len(raw), HEADER_BYTES)
    return _TABLE.unpack(raw)


@dataclass(frozen=True)
class RegionIndex:
    """Immutable view of a region header, one record per slot."""

    slots: Tuple[SlotRecord, ...]

    def __post_init__(self) -> None:
        if len(self.slots) != SLOT_COUNT:
            raise ValueError(f"Region index needs {SLOT_COUNT} slots, got {len(self.slots)}")

    @classmethod
    def parse(cls, stream: BinaryIO) -> "RegionIndex":
        """Decode the header from the start of ``stream``.

        The cursor is left at byte 8192, right after the timestamp table.
        """

        stream.seek(0)
        locations = _read_table(stream, 0)
        timestamps = _read_table(stream, SECTOR_BYTES)

        slots = []
        for location, timestamp in zip(locations, timestamps):
            sector_offset = location >> 8
            slots.append(
                SlotRecord(
                    offset=sector_offset * SECTOR_BYTES,
                    sector_count=location & 0xFF,
                    timestamp=timestamp,
                )
            )
        return cls(slots=tuple(slots))

    def lookup(self, x: int, z: int) -> SlotRecord:
        return self.slots[slot_index(x, z)]

    def iter_slots(self) -> Iterator[Tuple[int, int, SlotRecord]]:
        """Yield ``(x, z, record)`` with x in the outer loop."""

        for x in range(GRID_SIZE):
            for z in range(GRID_SIZE):
                yield x, z, self.slots[x + z * GRID_SIZE]

    def existing(self) -> Iterator[Tuple[int, int, SlotRecord]]:
        return ((x, z, record) for x, z, record in self.iter_slots() if record.exists)

    @property
    def chunk_count(self) -> int:
        return sum(1 for record in self.slots if record.exists)
