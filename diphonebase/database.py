"""Diphone database files: header, diphone index, pitch marks and samples."""

from __future__ import annotations

import copy as _copy
import warnings
from enum import IntEnum
from typing import BinaryIO

from .binio import read_int16, read_int16_buffer, read_int32, read_uint16
from .diphone_info import DiphoneInfo
from .hash_tab import HashTable
from .zstring_list import ZStringList

SYNTH_VERSION = "3.3"
MAGIC = b"MBROLA"

DIPHONE_RAW = 1
ROM_MASK = 128
INFO_ESCAPE = 0xFF

VOICING_MASK = 2
TRANSIT_MASK = 1

_LONG_PERIOD = 400


class DatabaseError(Exception):
    """Raised when a diphone database cannot be read or used."""


class FrameType(IntEnum):
    """Kind of an analysis frame, stored on two bits per pitch mark."""

    NV_REG = 0
    NV_TRA = TRANSIT_MASK
    V_REG = VOICING_MASK
    V_TRA = VOICING_MASK | TRANSIT_MASK

    @property
    def voiced(self) -> bool:
        return bool(self & VOICING_MASK)

    @property
    def transitory(self) -> bool:
        return bool(self & TRANSIT_MASK)


class DiphoneSynthesis:
    """A diphone to synthesize, linked to its descriptor and samples."""

    def __init__(self, left: str, right: str) -> None:
        self.left = left
        self.right = right
        self.descriptor: DiphoneInfo | None = None
        self.real_frame: list[int] = []
        self.tot_frame = 0
        self.buffer: list[int] = []
        self._pmrk = b""
        self._base = 0
        self._offset = 0

    def __repr__(self) -> str:
        return f"DiphoneSynthesis({self.left!r}, {self.right!r})"

    def _link(self, descriptor: DiphoneInfo, pmrk: bytes) -> None:
        self.descriptor = descriptor
        self._pmrk = pmrk
        self._base = descriptor.pos_pm // 4
        self._offset = descriptor.pos_pm % 4

    def pitch_mark(self, index: int) -> FrameType:
        """Return the type of frame ``index`` (counted from 1)."""
        if self.descriptor is None:
            raise ValueError("diphone is not attached to a database")
        position = index - 1 + self._offset
        byte = self._pmrk[self._base + position // 4]
        return FrameType((byte >> (2 * (position % 4))) & 0x3)

    def init_real_frame(self) -> None:
        """Map logical frames to physical frames.

        An unvoiced run is followed by an extra physical frame, both before
        a voiced frame and at the end of the diphone.
        """
        if self.descriptor is None:
            raise ValueError("diphone is not attached to a database")
        tot = 1
        real = [1]
        previous = FrameType.V_REG
        for index in range(1, self.descriptor.nb_frame + 1):
            current = self.pitch_mark(index)
            if not previous.voiced and current.voiced:
                tot += 1
            real.append(tot)
            previous = current
            tot += 1
        tot -= 1
        if not previous.voiced:
            tot += 1
        self.real_frame = real
        self.tot_frame = tot


class Database:
    """A diphone database and the state read from its file."""

    def __init__(self, name: str) -> None:
        self.name = name
        self.stream: BinaryIO | None = None
        self.rom_waves: list[int] | None = None
        self.magic = b""
        self.version = ""
        self.coding = 0
        self.freq = 0
        self.mbr_period = 0
        self.nb_diphone = 0
        self.size_mrk = 0
        self.size_raw = 0
        self.raw_offset = 0
        self.pmrk = b""
        self.max_frame = 0
        self.max_samples = 0
        self.sil_phon: str | None = None
        self.diphone_table: HashTable | None = None
        self.info = ZStringList()

    def __repr__(self) -> str:
        return f"Database({self.name!r}, version={self.version!r})"

    def __enter__(self) -> Database:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        """Close the underlying file, if any."""
        if self.stream is not None:
            self.stream.close()
            self.stream = None

    def copy(self) -> Database:
        """Return a database sharing all tables but with its own file handle."""
        clone = _copy.copy(self)
        clone.stream = None
        if self.rom_waves is None:
            try:
                clone.stream = open(self.name, "rb")
            except OSError as exc:
                raise DatabaseError(f"cannot find file {self.name} !") from exc
        return clone

    def get_info(self, index: int) -> str:
        """Return information message ``index``; escaped entries read as empty."""
        text = self._info_entry(index)
        if text and ord(text[0]) == INFO_ESCAPE:
            return ""
        return text

    def info_size(self, index: int) -> int:
        """Return the stored size of message ``index``, terminator included."""
        return len(self._info_entry(index).encode("latin-1")) + 1

    def _info_entry(self, index: int) -> str:
        if not 0 <= index < len(self.info):
            raise IndexError(f"no database information at index {index}")
        return self.info.decode(index)

    def attach(self, synth: DiphoneSynthesis) -> None:
        """Find the diphone of ``synth`` and link its pitch marks.

        Raises KeyError if the diphone is not in the database.
        """
        if self.diphone_table is None:
            raise DatabaseError("database index is not loaded")
        position = self.diphone_table.search(synth.left, synth.right)
        if position is None:
            raise KeyError(f"{synth.left}-{synth.right}")
        synth._link(self.diphone_table.get(position), self.pmrk)
        synth.init_real_frame()

    def load_diphone(self, synth: DiphoneSynthesis) -> list[int]:
        """Attach ``synth`` and read its samples into ``synth.buffer``."""
        self.attach(synth)
        assert synth.descriptor is not None
        count = synth.tot_frame * self.mbr_period
        start = synth.descriptor.pos_wave
        if self.rom_waves is not None:
            synth.buffer = self.rom_waves[start : start + count]
            return synth.buffer
        if self.stream is None:
            raise DatabaseError(f"database {self.name} is closed")
        if synth.tot_frame > self.max_frame:
            raise DatabaseError(
                f"PANIC: phone {synth.left}-{synth.right} -> "
                f"{synth.tot_frame} frames > Max={self.max_frame}"
            )
        self.stream.seek(start * 2 + self.raw_offset)
        samples = read_int16_buffer(self.stream, count)
        if len(samples) != count:
            raise DatabaseError(f"PANIC when reading phone {synth.left}-{synth.right}")
        synth.buffer = samples
        return samples


def _read_zstring(stream: BinaryIO) -> tuple[str, bool]:
    data = bytearray()
    while True:
        byte = stream.read(1)
        if not byte:
            return data.decode("latin-1"), True
        if byte == b"\0":
            return data.decode("latin-1"), False
        data += byte


def read_zstring(stream: BinaryIO) -> str:
    """Read a zero-terminated string; the end of the stream also ends it."""
    return _read_zstring(stream)[0]


def _read_byte(stream: BinaryIO) -> int:
    data = stream.read(1)
    if not data:
        raise EOFError("expected 1 byte, got 0")
    return data[0]


def _require_stream(db: Database) -> BinaryIO:
    if db.stream is None:
        raise DatabaseError(f"database {db.name} is not open")
    return db.stream


def read_header(db: Database) -> None:
    """Open the database file and read its header."""
    try:
        stream = open(db.name, "rb")
    except IsADirectoryError as exc:
        raise DatabaseError(
            f"Database format error\n{db.name} is an empty file (could be a directory)"
        ) from exc
    except OSError as exc:
        raise DatabaseError(f"FATAL ERROR : cannot find file {db.name} !") from exc
    db.stream = stream
    try:
        _parse_header(db, stream)
    except BaseException:
        db.close()
        raise


def _parse_header(db: Database, stream: BinaryIO) -> None:
    magic = stream.read(6)
    if not magic:
        raise DatabaseError(
            f"Database format error\n{db.name} is an empty file (could be a directory)"
        )
    if magic != MAGIC:
        raise DatabaseError(
            f"Binary number format error\nYou are probably using a version of "
            f"{db.name} incompatible\nwith your machine architecture."
        )
    db.magic = magic
    try:
        raw_version = stream.read(5)
        if len(raw_version) != 5:
            raise EOFError("truncated version")
        db.version = raw_version.decode("latin-1").split("\0")[0]
        db.nb_diphone = read_int16(stream)
        old_size_mrk = read_uint16(stream)
        db.size_mrk = read_int32(stream) if old_size_mrk == 0 else old_size_mrk
        db.size_raw = read_int32(stream)
        db.freq = read_int16(stream)
        db.mbr_period = _read_byte(stream)
        db.coding = _read_byte(stream)
    except EOFError as exc:
        raise DatabaseError(f"truncated header in {db.name}") from exc

    if db.version > SYNTH_VERSION:
        raise DatabaseError("This program is not compatible with your database")
    if db.mbr_period > _LONG_PERIOD:
        warnings.warn(f"Period {db.mbr_period} is really long", RuntimeWarning, stacklevel=3)
    if db.version < "2.05":
        db.coding = 0


def read_index(db: Database) -> None:
    """Read the diphone index and the replacement diphones into a hash table."""
    stream = _require_stream(db)
    try:
        _parse_index(db, stream)
    except EOFError as exc:
        raise DatabaseError(f"truncated diphone index in {db.name}") from exc


def _parse_index(db: Database, stream: BinaryIO) -> None:
    table = HashTable(db.nb_diphone + db.nb_diphone // 4)
    db.diphone_table = table
    indice_pm = 0
    indice_wav = 0
    i = 0
    while indice_pm != db.size_mrk and i < db.nb_diphone:
        left = read_zstring(stream)
        right = read_zstring(stream)
        halfseg = read_int16(stream)
        nb_frame = _read_byte(stream)
        nb_wframe = _read_byte(stream)

        pos_pm = indice_pm
        indice_pm += nb_frame
        if indice_pm == db.size_mrk:
            db.sil_phon = left

        pos_wave = indice_wav
        indice_wav += nb_wframe * db.mbr_period

        table.add(left, right, pos_wave, halfseg, pos_pm, nb_frame)
        db.max_frame = max(db.max_frame, nb_wframe)
        i += 1

    errors: list[str] = []
    for _ in range(i, db.nb_diphone):
        left = read_zstring(stream)
        right = read_zstring(stream)
        position = table.search(left, right)
        if position is None:
            message = f"Can't duplicate {left}-{right} segment"
            warnings.warn(message, RuntimeWarning, stacklevel=3)
            errors.append(message)
            continue
        source = table.get(position)
        left = read_zstring(stream)
        right = read_zstring(stream)
        if table.search(left, right) is not None:
            message = f"duplicate {left}-{right} segment allready exist"
            warnings.warn(message, RuntimeWarning, stacklevel=3)
            errors.append(message)
        table.add(left, right, source.pos_wave, source.halfseg, source.pos_pm, source.nb_frame)

    if errors:
        raise DatabaseError("No recovery: " + "; ".join(errors))

    db.max_samples = db.mbr_period * db.max_frame


def read_pitch_marks(db: Database) -> None:
    """Read the pitch marks, packed four to a byte, and locate the samples."""
    stream = _require_stream(db)
    round_size = (db.size_mrk + 3) // 4
    db.pmrk = stream.read(round_size)
    db.raw_offset = stream.tell()


def read_info(db: Database) -> None:
    """Read the information strings stored after the samples."""
    stream = _require_stream(db)
    stream.seek(db.raw_offset + db.size_raw)
    while True:
        text, at_end = _read_zstring(stream)
        db.info.append(text)
        if at_end:
            break