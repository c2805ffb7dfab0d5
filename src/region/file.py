"""Region file engine bound to a single binary stream."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, List, Optional, Tuple

from . import rewriter, scanner
from .errors import ChunkTooLargeError, RegionError
from .header import RegionIndex, SlotRecord
from .scanner import JunkMode, WindowPolicy


logger = logging.getLogger(__name__)


@dataclass
class SlotResult:
    """Outcome of one slot in a per-slot batch report."""

    x: int
    z: int
    old_length: int = 0
    new_length: int = 0
    cleaned_bytes: int = 0
    error: Optional[RegionError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


class RegionFile:
    """A parsed region file.

    The instance takes ownership of ``stream``: nothing else may read or write
    it while the instance is alive, and :meth:`close` closes it. The header is
    parsed once here; rewrites never touch it, so the index stays valid for the
    lifetime of the instance.
    """

    def __init__(self, stream: BinaryIO) -> None:
        self._stream = stream
        self.index = RegionIndex.parse(stream)

    @classmethod
    def open(cls, path: Path, writable: bool = False) -> "RegionFile":
        stream = Path(path).open("r+b" if writable else "rb")
        try:
            return cls(stream)
        except BaseException:
            stream.close()
            raise

    def close(self) -> None:
        self._stream.close()

    def __enter__(self) -> "RegionFile":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Header lookups
    # ------------------------------------------------------------------

    def _record(self, x: int, z: int) -> SlotRecord:
        return self.index.lookup(x, z)

    def chunk_exists(self, x: int, z: int) -> bool:
        return self._record(x, z).exists

    def get_chunk_timestamp(self, x: int, z: int) -> Optional[int]:
        """Return the last-modified time of a chunk, or None if it does not exist."""

        record = self._record(x, z)
        return record.timestamp if record.exists else None

    def get_chunk_offset(self, x: int, z: int) -> int:
        return self._record(x, z).offset

    def get_chunk_size(self, x: int, z: int) -> int:
        """Return the number of bytes allocated to a chunk."""

        return self._record(x, z).allocated_bytes

    # ------------------------------------------------------------------
    # Reading
    # ------------------------------------------------------------------

    def junk_bytes(
        self,
        x: int,
        z: int,
        mode: JunkMode = JunkMode.ALL_OR_NOTHING,
        policy: WindowPolicy = WindowPolicy.SECTOR_COUNT,
    ) -> int:
        return scanner.junk_bytes(self._stream, self._record(x, z), x, z, mode=mode, policy=policy)

    def total_junk_bytes(
        self,
        mode: JunkMode = JunkMode.ALL_OR_NOTHING,
        policy: WindowPolicy = WindowPolicy.SECTOR_COUNT,
    ) -> int:
        total = 0
        for x, z, record in self.index.existing():
            total += scanner.junk_bytes(self._stream, record, x, z, mode=mode, policy=policy)
        return total

    def get_chunk_compression(self, x: int, z: int) -> int:
        """Return the compression tag stored in front of a chunk's payload."""

        record = self._record(x, z)
        scanner.require_chunk(record, x, z)
        _, compression_type = scanner.read_prefix(self._stream, record, x, z)
        return compression_type

    def read_chunk_data(self, x: int, z: int) -> bytes:
        return rewriter.read_chunk_data(self._stream, self._record(x, z), x, z)

    # ------------------------------------------------------------------
    # Cleanup
    # ------------------------------------------------------------------

    def clean_chunk(self, x: int, z: int) -> int:
        return rewriter.clean_chunk(self._stream, self._record(x, z), x, z)

    def clean_junk(self) -> int:
        """Zero the tail of every chunk; stops at the first error."""

        total = 0
        for x, z, record in self.index.existing():
            total += rewriter.clean_chunk(self._stream, record, x, z)
        return total

    def clean_junk_slots(self) -> List[SlotResult]:
        results: List[SlotResult] = []
        for x, z, record in self.index.existing():
            try:
                cleaned = rewriter.clean_chunk(self._stream, record, x, z)
            except RegionError as exc:
                logger.warning("Cleanup of chunk (%d, %d) failed: %s", x, z, exc)
                results.append(SlotResult(x=x, z=z, error=exc))
            else:
                results.append(SlotResult(x=x, z=z, cleaned_bytes=cleaned))
        return results

    # ------------------------------------------------------------------
    # Recompression
    # ------------------------------------------------------------------

    def recompress_chunk(self, x: int, z: int, level: int) -> Tuple[int, int]:
        return rewriter.recompress_chunk(self._stream, self._record(x, z), x, z, level)

    def recompress_region(self, level: int) -> Tuple[int, int]:
        """Recompress every chunk at ``level``.

        Chunks whose recompressed payload would not fit their sectors are left
        as they are and count with their old length on both sides. Any other
        error aborts the run; chunks already rewritten stay rewritten.
        """

        rewriter.validate_level(level)
        total_old = 0
        total_new = 0
        for x, z, record in self.index.existing():
            try:
                old_length, new_length = rewriter.recompress_chunk(self._stream, record, x, z, level)
            except ChunkTooLargeError as exc:
                logger.warning("Skipping chunk (%d, %d): %s", x, z, exc)
                old_length = new_length = self._declared_length(record, x, z)
            total_old += old_length
            total_new += new_length
        return total_old, total_new

    def recompress_region_slots(self, level: int) -> List[SlotResult]:
        rewriter.validate_level(level)
        results: List[SlotResult] = []
        for x, z, record in self.index.existing():
            try:
                old_length, new_length = rewriter.recompress_chunk(self._stream, record, x, z, level)
            except RegionError as exc:
                logger.warning("Recompression of chunk (%d, %d) failed: %s", x, z, exc)
                results.append(SlotResult(x=x, z=z, error=exc))
            else:
                results.append(SlotResult(x=x, z=z, old_length=old_length, new_length=new_length))
        return results

    def _declared_length(self, record: SlotRecord, x: int, z: int) -> int:
        declared_length, _ = scanner.read_prefix(self._stream, record, x, z)
        return declared_length
