"""Region file exceptions."""

from __future__ import annotations


class RegionError(Exception):
    """Base class for region file data and format errors."""


class RegionHeaderError(RegionError, EOFError):
    """Raised when the stream is too short to hold the 8 KiB header."""

    def __init__(self, received: int, expected: int) -> None:
        super().__init__(f"Region header truncated: got {received} of {expected} bytes")
        self.received = received
        self.expected = expected


class TruncatedChunkError(RegionError, EOFError):
    """Raised when a read inside a chunk's allocated region comes back short."""

    def __init__(self, x: int, z: int, received: int, expected: int) -> None:
        super().__init__(f"Chunk ({x}, {z}) truncated: got {received} of {expected} bytes")
        self.x = x
        self.z = z
        self.received = received
        self.expected = expected


class ChunkDataError(RegionError):
    """Raised when a chunk's compressed stream is corrupt or incomplete."""


class UnsupportedCompressionFormatError(RegionError):
    def __init__(self, compression_type: int) -> None:
        super().__init__(f"Unsupported compression format: {compression_type}")
        self.compression_type = compression_type


class ChunkTooLargeError(RegionError):
    """Raised when a recompressed payload would not fit the chunk's sectors.

    Nothing has been written when this is raised; the chunk can be skipped.
    """

    def __init__(self, x: int, z: int, new_length: int, available: int) -> None:
        super().__init__(
            f"Chunk ({x}, {z}) recompressed to {new_length} bytes, only {available} available"
        )
        self.x = x
        self.z = z
        self.new_length = new_length
        self.available = available


class RegionInvariantError(RegionError):
    """Raised when on-disk data violates the container layout."""


class ChunkNotFoundError(LookupError):
    """Raised when an operation targets a slot that holds no chunk."""

    def __init__(self, x: int, z: int) -> None:
        super().__init__(f"Chunk ({x}, {z}) does not exist in this region")
        self.x = x
        self.z = z


class ChunkCoordinateError(IndexError):
    """Raised when a chunk coordinate falls outside the 32x32 grid."""

    def __init__(self, x: int, z: int) -> None:
        super().__init__(f"Chunk coordinates ({x}, {z}) outside 0..31")
        self.x = x
        self.z = z
