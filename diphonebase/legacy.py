"""Reader for the diphone database layouts that predate release 2.05."""

from __future__ import annotations

import struct
import warnings
from typing import BinaryIO

from .database import Database, DatabaseError, read_info, read_pitch_marks
from .hash_tab import HashTable

# Layout used before 2.02: names, wave position, half segment, pitch mark
# position and frame count, padded to 16 bytes.
_EVEN_OLDER_ENTRY = struct.Struct("<2s2sihHB3x")

# Layout used from 2.02 up to 2.05: names, half segment, frame counts.
_OLD_ENTRY = struct.Struct("<2s2shBB")

# A replacement diphone: new name pair, then the pair it copies.
_REPLACE_ENTRY = struct.Struct("<2s2s2s2s")


def _name(raw: bytes) -> str:
    return raw.split(b"\0", 1)[0].decode("latin-1")


def _read_entry(stream: BinaryIO, layout: struct.Struct, name: str) -> tuple:
    data = stream.read(layout.size)
    if len(data) != layout.size:
        raise DatabaseError(f"truncated diphone index in {name}")
    return layout.unpack(data)


def init_old(db: Database) -> Database:
    """Finish loading a database written in a layout older than 2.05.

    The header must already have been read. Afterwards the database works
    like a raw one.
    """
    warnings.warn("Think of upgrading your database!", UserWarning, stacklevel=2)
    stream = db.stream
    if stream is None:
        raise DatabaseError(f"database {db.name} is not open")

    even_older = db.version < "2.02"
    if even_older:
        db.nb_diphone = int(db.nb_diphone / _EVEN_OLDER_ENTRY.size)

    table = HashTable(db.nb_diphone)
    db.diphone_table = table

    indice_pm = 0
    indice_wav = 0
    left: str | None = None
    i = 0
    while indice_pm != db.size_mrk and i < db.nb_diphone:
        if even_older:
            raw_left, raw_right, pos_wave, halfseg, pos_pm, nb_frame = _read_entry(
                stream, _EVEN_OLDER_ENTRY, db.name
            )
        else:
            raw_left, raw_right, halfseg, nb_frame, nb_wframe = _read_entry(
                stream, _OLD_ENTRY, db.name
            )
            pos_pm = indice_pm
            indice_pm += nb_frame
            pos_wave = indice_wav
            indice_wav += nb_wframe * db.mbr_period

        left = _name(raw_left)
        right = _name(raw_right)
        table.add(left, right, pos_wave, halfseg, pos_pm, nb_frame)

        if nb_frame * 1.5 > db.max_frame:
            db.max_frame = int(nb_frame * 1.5)
        i += 1

    # The last diphone of the table is the silence one.
    if left is not None:
        db.sil_phon = left

    for _ in range(i, db.nb_diphone):
        new_left, new_right, src_left, src_right = (
            _name(raw) for raw in _read_entry(stream, _REPLACE_ENTRY, db.name)
        )
        position = table.search(src_left, src_right)
        if position is None:
            raise DatabaseError(
                f"Fatal error: Can't duplicate {src_left}-{src_right} segment"
            )
        source = table.get(position)
        if table.search(new_left, new_right) is not None:
            raise DatabaseError(
                f"Fatal error: duplicate {new_left}-{new_right} segment allready exist"
            )
        table.add(
            new_left, new_right, source.pos_wave, source.halfseg, source.pos_pm, source.nb_frame
        )

    if even_older:
        # One byte per pitch mark in this layout.
        db.pmrk = stream.read(db.size_mrk)
        db.raw_offset = stream.tell()
    else:
        read_pitch_marks(db)

    read_info(db)
    db.max_samples = db.mbr_period * db.max_frame
    return db