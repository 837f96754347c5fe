"""Reading and writing fixed-size integers with a chosen byte order."""

from __future__ import annotations

import struct
from typing import BinaryIO


def _codec(code: str, big_endian: bool) -> struct.Struct:
    """Build the struct codec for one value of ``code`` in the given byte order."""
    return struct.Struct((">" if big_endian else "<") + code)


def _read_value(stream: BinaryIO, code: str, big_endian: bool) -> int:
    codec = _codec(code, big_endian)
    data = stream.read(codec.size)
    if len(data) != codec.size:
        raise EOFError(f"expected {codec.size} bytes, got {len(data)}")
    return codec.unpack(data)[0]


def read_int16(stream: BinaryIO, big_endian: bool = False) -> int:
    """Read a signed 16-bit integer."""
    return _read_value(stream, "h", big_endian)


def read_uint16(stream: BinaryIO, big_endian: bool = False) -> int:
    """Read an unsigned 16-bit integer."""
    return _read_value(stream, "H", big_endian)


def read_int32(stream: BinaryIO, big_endian: bool = False) -> int:
    """Read a signed 32-bit integer."""
    return _read_value(stream, "i", big_endian)


def read_int16_buffer(stream: BinaryIO, count: int, big_endian: bool = False) -> list[int]:
    """Read up to ``count`` signed 16-bit samples; fewer if the stream ends."""
    data = stream.read(2 * count)
    complete = len(data) // 2
    codec = _codec(f"{complete}h", big_endian)
    return list(codec.unpack(data[: 2 * complete]))


def write_int16(stream: BinaryIO, value: int, big_endian: bool = False) -> None:
    """Write the low 16 bits of ``value``."""
    stream.write(_codec("H", big_endian).pack(value & 0xFFFF))


def write_int32(stream: BinaryIO, value: int, big_endian: bool = False) -> None:
    """Write the low 32 bits of ``value``."""
    stream.write(_codec("I", big_endian).pack(value & 0xFFFFFFFF))