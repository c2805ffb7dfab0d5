from __future__ import annotations

import io
import struct

import pytest

from region.errors import ChunkCoordinateError, RegionHeaderError
from region.header import HEADER_BYTES, SECTOR_BYTES, SLOT_COUNT, RegionIndex, SlotRecord, slot_index


def test_parse_decodes_offsets_counts_and_timestamps(region_stream: io.BytesIO) -> None:
    index = RegionIndex.parse(region_stream)

    assert len(index.slots) == SLOT_COUNT
    assert region_stream.tell() == HEADER_BYTES

    origin = index.lookup(0, 0)
    assert origin.offset == 180224
    assert origin.offset % SECTOR_BYTES == 0
    assert origin.sector_count == 1
    assert origin.timestamp == 1383443712

    assert index.lookup(14, 10).timestamp == 1383443713
    assert index.lookup(1, 0).allocated_bytes == 2 * SECTOR_BYTES
    assert not index.lookup(15, 15).exists
    assert index.chunk_count == 5


def test_zero_sector_offset_marks_slot_unused() -> None:
    header = bytearray(HEADER_BYTES)
    # sector count and timestamp without an offset carry no meaning
    struct.pack_into(">I", header, 4 * 3, 0x00000005)
    struct.pack_into(">I", header, SECTOR_BYTES + 4 * 3, 99)

    index = RegionIndex.parse(io.BytesIO(bytes(header)))
    record = index.lookup(3, 0)
    assert record == SlotRecord(offset=0, sector_count=5, timestamp=99)
    assert not record.exists
    assert index.chunk_count == 0


def test_location_word_splits_24_and_8_bits() -> None:
    header = bytearray(HEADER_BYTES)
    struct.pack_into(">I", header, 4 * (7 + 2 * 32), (0xABCDEF << 8) | 0xFE)

    record = RegionIndex.parse(io.BytesIO(bytes(header))).lookup(7, 2)
    assert record.offset == 0xABCDEF * SECTOR_BYTES
    assert record.sector_count == 0xFE


@pytest.mark.parametrize("size", [0, 100, SECTOR_BYTES, HEADER_BYTES - 1])
def test_short_header_raises(size: int) -> None:
    with pytest.raises(RegionHeaderError) as excinfo:
        RegionIndex.parse(io.BytesIO(bytes(size)))
    assert excinfo.value.received == size
    assert isinstance(excinfo.value, EOFError)


def test_slot_index_is_x_major_within_rows() -> None:
    assert slot_index(0, 0) == 0
    assert slot_index(31, 0) == 31
    assert slot_index(0, 1) == 32
    assert slot_index(31, 31) == SLOT_COUNT - 1


@pytest.mark.parametrize("x, z", [(32, 0), (0, 32), (-1, 0), (100, 100)])
def test_out_of_range_coordinates_are_rejected(x: int, z: int) -> None:
    with pytest.raises(ChunkCoordinateError):
        slot_index(x, z)


def test_iter_slots_runs_x_outer_z_inner(region_stream: io.BytesIO) -> None:
    index = RegionIndex.parse(region_stream)
    order = [(x, z) for x, z, _ in index.iter_slots()]

    assert len(order) == SLOT_COUNT
    assert order[:3] == [(0, 0), (0, 1), (0, 2)]
    assert order[32] == (1, 0)
    assert [(x, z) for x, z, _ in index.existing()] == [(0, 0), (1, 0), (5, 7), (14, 10), (31, 31)]


def test_index_requires_every_slot() -> None:
    with pytest.raises(ValueError):
        RegionIndex(slots=(SlotRecord(0, 0, 0),))
