"""Opening diphone database files, with optional phoneme renaming and cloning."""

from __future__ import annotations

import os
from collections.abc import Callable

from .database import (
    DIPHONE_RAW,
    Database,
    DatabaseError,
    read_header,
    read_index,
    read_info,
    read_pitch_marks,
)
from .legacy import init_old
from .zstring_list import ZStringList


def init_basic(db: Database) -> Database:
    """Finish loading a database holding raw waveforms.

    The header must already have been read. The database is closed if
    anything goes wrong.
    """
    try:
        if db.coding != DIPHONE_RAW:
            raise DatabaseError("This program can't decode your database")
        read_index(db)
        read_pitch_marks(db)
        read_info(db)
    except BaseException:
        db.close()
        raise
    return db


_CONSTRUCTORS: tuple[Callable[[Database], Database], ...] = (
    init_old,  # type 0: layouts before 2.05
    init_basic,  # type 1: raw waveforms
    init_basic,  # type 2: no dedicated decoder
    init_basic,  # type 3: no dedicated decoder
)


def open_database(path: str | os.PathLike[str]) -> Database:
    """Open a database file and load it with the reader for its coding."""
    db = Database(os.fspath(path))
    read_header(db)
    try:
        if db.coding >= len(_CONSTRUCTORS):
            raise DatabaseError("This program can't decode your database")
        return _CONSTRUCTORS[db.coding](db)
    except BaseException:
        db.close()
        raise


def open_renamed_database(
    path: str | os.PathLike[str],
    rename: ZStringList | None = None,
    clone: ZStringList | None = None,
) -> Database:
    """Open a database, then rename and clone phonemes by ``old, new`` pairs.

    Renaming is applied first, and also to the silence phoneme.
    """
    db = open_database(path)
    if rename is not None and db.sil_phon is not None:
        new_sil = rename.find_rename(db.sil_phon)
        if new_sil is not None:
            db.sil_phon = new_sil
    if db.diphone_table is not None:
        if rename is not None:
            db.diphone_table = db.diphone_table.renamed(rename)
        if clone is not None:
            db.diphone_table = db.diphone_table.cloned(clone)
    return db


def open_database_with_strings(
    path: str | os.PathLike[str],
    rename_text: str | None = None,
    clone_text: str | None = None,
) -> Database:
    """Open a database with renaming and cloning pairs given as text.

    Renaming keys must be unique; cloning keys may repeat.
    """
    rename = None
    clone = None
    if rename_text is not None:
        rename = ZStringList()
        rename.parse(rename_text, False)
    if clone_text is not None:
        clone = ZStringList()
        clone.parse(clone_text, True)
    return open_renamed_database(path, rename, clone)