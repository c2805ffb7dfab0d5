"""Detection of stale bytes left behind in a chunk's allocated sectors."""

from __future__ import annotations

import logging
import struct
from enum import Enum
from typing import BinaryIO, Tuple

from .errors import ChunkNotFoundError, RegionInvariantError, TruncatedChunkError
from .header import CHUNK_LENGTH_BYTES, CHUNK_PREFIX_BYTES, HEADER_BYTES, SECTOR_BYTES, SlotRecord


logger = logging.getLogger(__name__)


class JunkMode(str, Enum):
    ALL_OR_NOTHING = "all-or-nothing"
    COUNT = "count"


class WindowPolicy(str, Enum):
    """How far past the chunk prefix the scanner reads.

    ``SECTOR_COUNT`` trusts the sector count recorded in the header.
    ``DECLARED_LENGTH`` rounds the declared length up to the next sector
    boundary instead, never reading past the allocated region. The two differ
    when the header's sector count is larger than the payload needs.
    """

    SECTOR_COUNT = "sector-count"
    DECLARED_LENGTH = "declared-length"


def require_chunk(record: SlotRecord, x: int, z: int) -> None:
    """Reject slots that hold no chunk or whose allocation cannot hold one.

    An allocation must start past the header and leave room for the 5-byte
    chunk prefix; otherwise reads and writes would land outside it.
    """

    if not record.exists:
        raise ChunkNotFoundError(x, z)
    if record.offset < HEADER_BYTES:
        raise RegionInvariantError(
            f"Chunk ({x}, {z}) starts at offset {record.offset}, inside the {HEADER_BYTES}-byte header"
        )
    if record.allocated_bytes < CHUNK_PREFIX_BYTES:
        raise RegionInvariantError(
            f"Chunk ({x}, {z}) has {record.sector_count} sector(s) allocated, too few for its prefix"
        )


def read_exact(stream: BinaryIO, size: int, x: int, z: int) -> bytes:
    data = stream.read(size)
    if len(data) != size:
        raise TruncatedChunkError(x, z, len(data), size)
    return data


def read_prefix(stream: BinaryIO, record: SlotRecord, x: int, z: int) -> Tuple[int, int]:
    """Seek to a chunk and return its declared length and compression tag."""

    stream.seek(record.offset)
    prefix = read_exact(stream, CHUNK_PREFIX_BYTES, x, z)
    (declared_length,) = struct.unpack(">I", prefix[:CHUNK_LENGTH_BYTES])
    return declared_length, prefix[CHUNK_LENGTH_BYTES]


def window_end(record: SlotRecord, declared_length: int, policy: WindowPolicy) -> int:
    """Return the scan window's end, relative to the chunk offset."""

    if policy is WindowPolicy.SECTOR_COUNT:
        return record.allocated_bytes
    used = declared_length + CHUNK_LENGTH_BYTES
    rounded = -(-used // SECTOR_BYTES) * SECTOR_BYTES
    return min(rounded, record.allocated_bytes)


def junk_bytes(
    stream: BinaryIO,
    record: SlotRecord,
    x: int,
    z: int,
    mode: JunkMode = JunkMode.ALL_OR_NOTHING,
    policy: WindowPolicy = WindowPolicy.SECTOR_COUNT,
) -> int:
    require_chunk(record, x, z)

    declared_length, _ = read_prefix(stream, record, x, z)
    size = max(window_end(record, declared_length, policy) - CHUNK_PREFIX_BYTES, 0)
    window = read_exact(stream, size, x, z)

    trailing = window[declared_length:]
    if mode is JunkMode.COUNT:
        junk = len(trailing) - trailing.count(0)
    else:
        junk = len(trailing) if any(trailing) else 0

    if junk:
        logger.debug("Chunk (%d, %d) carries %d junk byte(s)", x, z, junk)
    return junk
