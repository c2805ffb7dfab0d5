"""Region file container engine."""

from .errors import (
    ChunkCoordinateError,
    ChunkDataError,
    ChunkNotFoundError,
    ChunkTooLargeError,
    RegionError,
    RegionHeaderError,
    RegionInvariantError,
    TruncatedChunkError,
    UnsupportedCompressionFormatError,
)
from .file import RegionFile, SlotResult
from .header import RegionIndex, SlotRecord
from .scanner import JunkMode, WindowPolicy

__all__ = [
    "ChunkCoordinateError",
    "ChunkDataError",
    "ChunkNotFoundError",
    "ChunkTooLargeError",
    "JunkMode",
    "RegionError",
    "RegionFile",
    "RegionHeaderError",
    "RegionIndex",
    "RegionInvariantError",
    "SlotRecord",
    "SlotResult",
    "TruncatedChunkError",
    "UnsupportedCompressionFormatError",
    "WindowPolicy",
]
