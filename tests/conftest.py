from __future__ import annotations

import io
import struct
import zlib
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Sequence

import pytest


SECTOR = 4096


@dataclass
class ChunkSpec:
    x: int
    z: int
    sector: int
    sectors: int = 1
    timestamp: int = 0
    data: bytes = b""
    compression: int = 2
    junk: bytes = b""
    level: int = 1
    declared_length: int | None = None


def _chunk_body(chunk: ChunkSpec) -> bytes:
    if chunk.compression == 2:
        payload = zlib.compress(chunk.data, chunk.level)
    else:
        payload = chunk.data
    length = chunk.declared_length if chunk.declared_length is not None else len(payload) + 1
    body = struct.pack(">IB", length, chunk.compression) + payload
    return body + chunk.junk


def build_region(chunks: Sequence[ChunkSpec]) -> bytes:
    last_sector = max((c.sector + c.sectors for c in chunks), default=2)
    data = bytearray(max(last_sector, 2) * SECTOR)
    for chunk in chunks:
        slot = chunk.x + chunk.z * 32
        struct.pack_into(">I", data, slot * 4, (chunk.sector << 8) | chunk.sectors)
        struct.pack_into(">I", data, SECTOR + slot * 4, chunk.timestamp)
        body = _chunk_body(chunk)
        start = chunk.sector * SECTOR
        data[start:start + len(body)] = body
    return bytes(data)


def sample_data(seed: int, size: int = 6000) -> bytes:
    words = [b"stone", b"dirt", b"grass", b"water", b"sand", b"log", b"leaves", b"air"]
    out = bytearray()
    state = seed
    while len(out) < size:
        state = (state * 1103515245 + 12345) & 0x7FFFFFFF
        out += words[state % len(words)] + bytes([state % 7])
    return bytes(out[:size])


JUNK = b"\xde\xad\xbe\xef" * 8


def fixture_chunks() -> list[ChunkSpec]:
    return [
        ChunkSpec(x=0, z=0, sector=44, timestamp=1383443712, data=sample_data(1)),
        ChunkSpec(x=14, z=10, sector=2, timestamp=1383443713, data=sample_data(2)),
        ChunkSpec(x=1, z=0, sector=3, sectors=2, timestamp=1383443714, data=sample_data(3, 9000), junk=JUNK),
        ChunkSpec(x=5, z=7, sector=5, timestamp=1383443715, data=sample_data(4), junk=b"\x00\x01"),
        ChunkSpec(x=31, z=31, sector=6, sectors=2, timestamp=1383443716, data=sample_data(5, 12000)),
    ]


@pytest.fixture
def region_bytes() -> bytes:
    return build_region(fixture_chunks())


@pytest.fixture
def region_stream(region_bytes: bytes) -> io.BytesIO:
    return io.BytesIO(region_bytes)


@pytest.fixture
def make_region() -> Callable[[Sequence[ChunkSpec]], io.BytesIO]:
    def factory(chunks: Sequence[ChunkSpec]) -> io.BytesIO:
        return io.BytesIO(build_region(chunks))

    return factory


@pytest.fixture
def region_dir(tmp_path: Path) -> Path:
    root = tmp_path / "world" / "region"
    root.mkdir(parents=True)
    (root / "r.0.0.mca").write_bytes(build_region(fixture_chunks()))
    (root / "r.0.1.mca").write_bytes(
        build_region([ChunkSpec(x=3, z=4, sector=2, timestamp=7, data=sample_data(9), junk=JUNK)])
    )
    (root / "r.1.1.mca").write_bytes(b"")
    (root / "notes.txt").write_text("not a region")
    return root


def relocate(stream: io.BytesIO, x: int, z: int, sector: int, sectors: int) -> io.BytesIO:
    """Return a copy of ``stream`` with one slot's location word rewritten."""

    raw = bytearray(stream.getvalue())
    struct.pack_into(">I", raw, 4 * (x + z * 32), (sector << 8) | sectors)
    return io.BytesIO(bytes(raw))
