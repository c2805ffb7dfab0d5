"""In-place chunk rewriting: tail cleanup and zlib recompression.

Both operations stay inside the slot's allocated sectors. Everything after the
new payload is zero-filled up to the end of the allocation, so the stream
cursor must finish on a sector boundary.
"""

from __future__ import annotations

import gzip
import logging
import struct
import zlib
from typing import BinaryIO, Tuple

from .errors import (
    ChunkDataError,
    ChunkTooLargeError,
    RegionInvariantError,
    UnsupportedCompressionFormatError,
)
from .header import (
    CHUNK_LENGTH_BYTES,
    CHUNK_PREFIX_BYTES,
    COMPRESSION_GZIP,
    COMPRESSION_NONE,
    COMPRESSION_ZLIB,
    SECTOR_BYTES,
    SlotRecord,
)
from .scanner import read_exact, read_prefix, require_chunk


logger = logging.getLogger(__name__)

MIN_LEVEL = 1
MAX_LEVEL = 9


def validate_level(level: int) -> int:
    if not MIN_LEVEL <= level <= MAX_LEVEL:
        raise ValueError(f"Compression level must be between {MIN_LEVEL} and {MAX_LEVEL}, got {level}")
    return level


def _check_fits(record: SlotRecord, declared_length: int, x: int, z: int) -> None:
    if declared_length + CHUNK_LENGTH_BYTES > record.allocated_bytes:
        raise RegionInvariantError(
            f"Chunk ({x}, {z}) declares {declared_length} bytes but only "
            f"{record.allocated_bytes} are allocated"
        )


def _check_aligned(stream: BinaryIO, x: int, z: int) -> None:
    position = stream.tell()
    if position % SECTOR_BYTES:
        raise RegionInvariantError(f"Chunk ({x}, {z}) rewrite ended at unaligned offset {position}")


def _decompress_zlib(payload: bytes, x: int, z: int) -> bytes:
    decompressor = zlib.decompressobj()
    try:
        data = decompressor.decompress(payload) + decompressor.flush()
    except zlib.error as exc:
        raise ChunkDataError(f"Chunk ({x}, {z}) holds a corrupt zlib stream: {exc}") from exc
    if not decompressor.eof:
        raise ChunkDataError(f"Chunk ({x}, {z}) holds a truncated zlib stream")
    return data


def _compress(data: bytes, level: int) -> bytes:
    return zlib.compress(data, level)


def decompress_payload(compression_type: int, payload: bytes, x: int, z: int) -> bytes:
    if compression_type == COMPRESSION_ZLIB:
        return _decompress_zlib(payload, x, z)
    if compression_type == COMPRESSION_GZIP:
        try:
            return gzip.decompress(payload)
        except (OSError, EOFError, zlib.error) as exc:
            raise ChunkDataError(f"Chunk ({x}, {z}) holds a corrupt gzip stream: {exc}") from exc
    if compression_type == COMPRESSION_NONE:
        return payload
    raise UnsupportedCompressionFormatError(compression_type)


def _read_header(stream: BinaryIO, record: SlotRecord, x: int, z: int) -> Tuple[int, int]:
    declared_length, compression_type = read_prefix(stream, record, x, z)
    _check_fits(record, declared_length, x, z)
    if declared_length < 1:
        raise ChunkDataError(f"Chunk ({x}, {z}) declares an empty payload")
    return declared_length, compression_type


def read_chunk_data(stream: BinaryIO, record: SlotRecord, x: int, z: int) -> bytes:
    """Return the decompressed payload of a chunk."""

    require_chunk(record, x, z)
    declared_length, compression_type = _read_header(stream, record, x, z)
    payload = read_exact(stream, declared_length - 1, x, z)
    return decompress_payload(compression_type, payload, x, z)


def clean_chunk(stream: BinaryIO, record: SlotRecord, x: int, z: int) -> int:
    """Zero everything between the declared payload and the end of the allocation.

    Returns the number of bytes zeroed, which is 0 when the tail was already
    clean and nothing had to be written.
    """

    require_chunk(record, x, z)
    stream.seek(record.offset)
    raw_length = read_exact(stream, CHUNK_LENGTH_BYTES, x, z)
    (declared_length,) = struct.unpack(">I", raw_length)
    _check_fits(record, declared_length, x, z)

    tail_size = record.allocated_bytes - declared_length - CHUNK_LENGTH_BYTES
    tail_start = record.offset + CHUNK_LENGTH_BYTES + declared_length
    stream.seek(tail_start)
    tail = read_exact(stream, tail_size, x, z)

    if not any(tail):
        _check_aligned(stream, x, z)
        return 0

    stream.seek(tail_start)
    stream.write(bytes(tail_size))
    _check_aligned(stream, x, z)
    logger.debug("Zeroed %d byte(s) after chunk (%d, %d)", tail_size, x, z)
    return tail_size


def recompress_chunk(stream: BinaryIO, record: SlotRecord, x: int, z: int, level: int) -> Tuple[int, int]:
    """Recompress a zlib chunk at ``level`` and write it back in place.

    Returns ``(old declared length, new declared length)``. Every check runs
    before the first write, so a raised error leaves the chunk untouched.
    """

    validate_level(level)
    require_chunk(record, x, z)
    declared_length, compression_type = _read_header(stream, record, x, z)
    if compression_type != COMPRESSION_ZLIB:
        raise UnsupportedCompressionFormatError(compression_type)

    payload = read_exact(stream, declared_length - 1, x, z)
    compressed = _compress(_decompress_zlib(payload, x, z), level)
    new_length = len(compressed) + 1

    available = record.allocated_bytes - CHUNK_PREFIX_BYTES
    if available <= new_length:
        raise ChunkTooLargeError(x, z, new_length, available)

    stream.seek(record.offset)
    stream.write(struct.pack(">IB", new_length, compression_type))
    stream.write(compressed)
    stream.write(bytes(available - len(compressed)))
    _check_aligned(stream, x, z)

    logger.debug("Recompressed chunk (%d, %d): %d -> %d bytes", x, z, declared_length, new_length)
    return declared_length, new_length
