"""Flat memory images of diphone databases, for read-only storage.

An image holds the database name, magic and version, the header, the
diphone index, the information strings, the pitch marks, the silence
phoneme and the raw samples. Multi-byte values are little endian and
are aligned on 2 or 4 bytes relative to the start of the image.
"""

from __future__ import annotations

import os
import struct
from typing import BinaryIO

from .binio import read_int16_buffer, write_int16, write_int32
from .database import (
    DIPHONE_RAW,
    MAGIC,
    ROM_MASK,
    SYNTH_VERSION,
    Database,
    DatabaseError,
)
from .hash_tab import HashTable
from .zstring_list import ZStringList

# Number of database codings an image may carry (old, raw and two coders).
_ROM_TYPES = 4

_MAGIC_SIZE = 8
_VERSION_SIZE = 6


class RomReader:
    """Sequential reader over the bytes of an image."""

    def __init__(self, data: bytes) -> None:
        self.data = bytes(data)
        self.position = 0

    def __repr__(self) -> str:
        return f"RomReader(position={self.position}, size={len(self.data)})"

    def _take(self, size: int) -> bytes:
        end = self.position + size
        if size < 0 or end > len(self.data):
            raise EOFError(f"expected {size} bytes at offset {self.position}")
        chunk = self.data[self.position : end]
        self.position = end
        return chunk

    def uint8(self) -> int:
        """Read an unsigned byte."""
        return self._take(1)[0]

    def int16(self) -> int:
        """Read a signed 16-bit integer."""
        return struct.unpack("<h", self._take(2))[0]

    def int32(self) -> int:
        """Read a signed 32-bit integer."""
        return struct.unpack("<i", self._take(4))[0]

    def array(self, size: int) -> bytes:
        """Read ``size`` raw bytes."""
        return self._take(size)

    def zstring(self) -> str:
        """Read a zero-terminated string."""
        end = self.data.find(b"\0", self.position)
        if end < 0:
            raise EOFError(f"unterminated string at offset {self.position}")
        text = self.data[self.position : end].decode("latin-1")
        self.position = end + 1
        return text

    def align(self, boundary: int) -> None:
        """Skip forward to the next multiple of ``boundary``."""
        self.position += -self.position % boundary

    def remaining(self) -> bytes:
        """Return every byte not read yet and move to the end."""
        return self._take(len(self.data) - self.position)


class RomWriter:
    """Sequential writer of an image into a binary stream."""

    def __init__(self, stream: BinaryIO) -> None:
        self.stream = stream

    def __repr__(self) -> str:
        return f"RomWriter({self.stream!r})"

    def uint8(self, value: int) -> None:
        """Write the low byte of ``value``."""
        self.stream.write(bytes([value & 0xFF]))

    def int16(self, value: int) -> None:
        """Write the low 16 bits of ``value``."""
        write_int16(self.stream, value)

    def int32(self, value: int) -> None:
        """Write the low 32 bits of ``value``."""
        write_int32(self.stream, value)

    def array(self, data: bytes) -> None:
        """Write raw bytes."""
        self.stream.write(bytes(data))

    def zstring(self, text: str) -> None:
        """Write ``text`` followed by a zero byte."""
        self.stream.write(text.encode("latin-1") + b"\0")

    def align(self, boundary: int) -> None:
        """Pad with zero bytes up to the next multiple of ``boundary``."""
        self.stream.write(b"\0" * (-self.stream.tell() % boundary))


def _fixed(data: bytes, size: int) -> bytes:
    return data[:size].ljust(size, b"\0")


def _write_list(writer: RomWriter, strings: ZStringList) -> None:
    writer.align(2)
    writer.int16(len(strings))
    for text in strings:
        writer.zstring(text)


def _write_table(writer: RomWriter, table: HashTable) -> None:
    writer.align(2)
    writer.int16(table.size)
    writer.int16(len(table))
    writer.align(4)
    for info in table:
        writer.int32(info.pos_wave)
        writer.int32(info.pos_pm)
        writer.int16(info.left)
        writer.int16(info.right)
        writer.int16(info.halfseg)
        writer.uint8(info.nb_frame)
        writer.uint8(0)
    _write_list(writer, table.phonemes)


def _write_header(writer: RomWriter, db: Database, table: HashTable) -> None:
    writer.uint8(db.mbr_period)
    writer.align(4)
    writer.int16(db.freq)
    writer.int16(db.nb_diphone)
    writer.int32(db.size_mrk)
    writer.int32(db.size_raw)
    writer.int32(db.raw_offset)
    _write_table(writer, table)
    _write_list(writer, db.info)
    round_size = (db.size_mrk + 3) // 4
    writer.array(_fixed(db.pmrk, round_size))
    writer.uint8(db.max_frame)
    writer.zstring(db.sil_phon or "")


def _raw_samples(db: Database) -> list[int]:
    if db.rom_waves is not None:
        return list(db.rom_waves)
    if db.stream is None:
        raise DatabaseError(f"database {db.name} is closed")
    db.stream.seek(db.raw_offset)
    return read_int16_buffer(db.stream, db.size_raw // 2)


def write_rom_image(db: Database, path: str | os.PathLike[str]) -> None:
    """Dump a loaded raw database into an image file at ``path``."""
    table = db.diphone_table
    if table is None:
        raise DatabaseError("database index is not loaded")
    samples = _raw_samples(db)
    try:
        output = open(path, "wb")
    except OSError as exc:
        raise DatabaseError(f"FATAL ERROR : cannot save to file {os.fspath(path)} !") from exc
    with output:
        writer = RomWriter(output)
        writer.zstring(db.name)
        writer.align(4)
        writer.array(_fixed(db.magic or MAGIC, _MAGIC_SIZE))
        writer.array(_fixed(db.version.encode("latin-1")[: _VERSION_SIZE - 1], _VERSION_SIZE))
        writer.uint8(db.coding | ROM_MASK)
        _write_header(writer, db, table)
        writer.align(2)
        output.write(struct.pack(f"<{len(samples)}h", *samples))


def _read_list(reader: RomReader) -> ZStringList:
    reader.align(2)
    count = reader.int16()
    return ZStringList(reader.zstring() for _ in range(count))


def _read_table(reader: RomReader) -> HashTable:
    reader.align(2)
    size = reader.int16()
    count = reader.int16()
    reader.align(4)
    entries = []
    for _ in range(count):
        pos_wave = reader.int32()
        pos_pm = reader.int32()
        left = reader.int16()
        right = reader.int16()
        halfseg = reader.int16()
        nb_frame = reader.uint8()
        reader.uint8()
        entries.append((left, right, pos_wave, halfseg, pos_pm, nb_frame))
    phonemes = _read_list(reader)
    try:
        table = HashTable(size)
        for left, right, pos_wave, halfseg, pos_pm, nb_frame in entries:
            table.add(
                phonemes.decode(left),
                phonemes.decode(right),
                pos_wave,
                halfseg,
                pos_pm,
                nb_frame,
            )
    except (IndexError, ValueError, OverflowError) as exc:
        raise DatabaseError(f"corrupted diphone table in ROM image: {exc}") from exc
    return table


def _load(reader: RomReader) -> Database:
    db = Database(reader.zstring())
    reader.align(4)
    magic = reader.array(_MAGIC_SIZE)
    if magic[: len(MAGIC)] != MAGIC:
        raise DatabaseError(
            f"PANIC: Binary number format error\nYou are probably using a version of "
            f"{db.name} incompatible\nwith your machine architecture."
        )
    db.magic = MAGIC
    db.version = reader.array(_VERSION_SIZE).decode("latin-1").split("\0")[0]
    if db.version > SYNTH_VERSION:
        raise DatabaseError("PANIC: Can't cope with databases coming from the future")

    coding = reader.uint8()
    kind = coding & (ROM_MASK - 1)
    if kind >= _ROM_TYPES or kind != DIPHONE_RAW:
        raise DatabaseError(f"PANIC: This program can't decode your database {coding}")
    db.coding = coding

    db.mbr_period = reader.uint8()
    reader.align(4)
    db.freq = reader.int16()
    db.nb_diphone = reader.int16()
    db.size_mrk = reader.int32()
    db.size_raw = reader.int32()
    db.raw_offset = reader.int32()
    db.diphone_table = _read_table(reader)
    db.info = _read_list(reader)
    db.pmrk = reader.array((db.size_mrk + 3) // 4)
    db.max_frame = reader.uint8()
    db.sil_phon = reader.zstring() or None

    # Samples are served straight from the image: no buffer to allocate.
    db.max_samples = 0
    reader.align(2)
    waves = reader.remaining()
    count = len(waves) // 2
    db.rom_waves = list(struct.unpack(f"<{count}h", waves[: 2 * count]))
    return db


def load_rom_image(data: bytes) -> Database:
    """Build a database from the bytes of an image."""
    try:
        return _load(RomReader(data))
    except EOFError as exc:
        raise DatabaseError(f"truncated ROM image: {exc}") from exc