import struct

import pytest

from diphonebase.database import Database, DatabaseError, DiphoneSynthesis, read_header
from diphonebase.legacy import init_old

PERIOD = 4
SAMPLES = list(range(12))
ENTRIES = (("a", "b", 5, 2, 2), ("_", "_", 3, 1, 1))


def build_old(path, *, entries=ENTRIES, replacements=(), info=("old",)):
    size_mrk = sum(entry[3] for entry in entries)
    nb = len(entries) + len(replacements)
    out = bytearray(b"MBROLA" + b"2.030")
    out += struct.pack("<hHihBB", nb, size_mrk, len(SAMPLES) * 2, 16000, PERIOD, 1)
    for left, right, halfseg, nb_frame, nb_wframe in entries:
        out += struct.pack("<2s2shBB", left.encode(), right.encode(), halfseg, nb_frame, nb_wframe)
    for names in replacements:
        out += struct.pack("<2s2s2s2s", *(n.encode() for n in names))
    out += bytes([0x2A] * ((size_mrk + 3) // 4))
    out += struct.pack(f"<{len(SAMPLES)}h", *SAMPLES)
    out += b"".join(s.encode() + b"\0" for s in info)
    path.write_bytes(bytes(out))
    return path


def build_even_older(path):
    entries = (("a", "b", 100, 5, 0, 2), ("_", "_", 200, 3, 2, 1))
    size_mrk = 3
    out = bytearray(b"MBROLA" + b"2.010")
    out += struct.pack(
        "<hHihBB", len(entries) * 16, size_mrk, len(SAMPLES) * 2, 16000, PERIOD, 1
    )
    for left, right, pos_wave, halfseg, pos_pm, nb_frame in entries:
        out += struct.pack(
            "<2s2sihHB3x", left.encode(), right.encode(), pos_wave, halfseg, pos_pm, nb_frame
        )
    out += bytes([2, 2, 2])
    out += struct.pack(f"<{len(SAMPLES)}h", *SAMPLES)
    out += b"ancient\0"
    path.write_bytes(bytes(out))
    return path


def load(path):
    db = Database(str(path))
    read_header(db)
    with pytest.warns(UserWarning, match="upgrading"):
        init_old(db)
    return db


def test_header_of_old_version_selects_legacy_coding(tmp_path):
    db = Database(str(build_old(tmp_path / "old.dba")))
    read_header(db)
    assert db.coding == 0
    assert db.size_mrk == 3
    db.close()


def test_old_index_positions(tmp_path):
    db = load(build_old(tmp_path / "old.dba"))
    table = db.diphone_table
    ab = table.get(table.search("a", "b"))
    sil = table.get(table.search("_", "_"))
    assert (ab.pos_wave, ab.halfseg, ab.pos_pm, ab.nb_frame) == (0, 5, 0, 2)
    assert sil.pos_pm == ab.nb_frame
    assert sil.pos_wave == 2 * db.mbr_period
    db.close()


def test_old_silence_and_buffer_sizes(tmp_path):
    db = load(build_old(tmp_path / "old.dba"))
    assert db.sil_phon == "_"
    assert db.max_frame == 3
    assert db.max_samples == db.mbr_period * db.max_frame
    db.close()


def test_old_info_strings(tmp_path):
    db = load(build_old(tmp_path / "old.dba"))
    assert db.get_info(0) == "old"
    db.close()


def test_old_database_loads_samples(tmp_path):
    db = load(build_old(tmp_path / "old.dba"))
    synth = DiphoneSynthesis("a", "b")
    assert db.load_diphone(synth) == SAMPLES[:8]
    db.close()


def test_two_character_names(tmp_path):
    entries = (("ab", "cd", 5, 2, 2), ("_", "_", 3, 1, 1))
    db = load(build_old(tmp_path / "old.dba", entries=entries))
    assert db.diphone_table.search("ab", "cd") is not None
    assert db.diphone_table.search("a", "c") is None
    db.close()


def test_old_replacement_copies_source(tmp_path):
    db = load(build_old(tmp_path / "old.dba", replacements=[("c", "b", "a", "b")]))
    table = db.diphone_table
    copy = table.get(table.search("c", "b"))
    original = table.get(table.search("a", "b"))
    assert (copy.pos_wave, copy.halfseg, copy.pos_pm, copy.nb_frame) == (
        original.pos_wave,
        original.halfseg,
        original.pos_pm,
        original.nb_frame,
    )
    db.close()


def test_old_replacement_missing_source(tmp_path):
    db = Database(str(build_old(tmp_path / "old.dba", replacements=[("c", "b", "q", "q")])))
    read_header(db)
    with pytest.warns(UserWarning), pytest.raises(DatabaseError, match="Can't duplicate"):
        init_old(db)
    db.close()


def test_old_replacement_target_exists(tmp_path):
    db = Database(str(build_old(tmp_path / "old.dba", replacements=[("a", "b", "_", "_")])))
    read_header(db)
    with pytest.warns(UserWarning), pytest.raises(DatabaseError, match="allready exist"):
        init_old(db)
    db.close()


def test_even_older_layout(tmp_path):
    db = load(build_even_older(tmp_path / "ancient.dba"))
    assert db.nb_diphone == 2
    table = db.diphone_table
    ab = table.get(table.search("a", "b"))
    sil = table.get(table.search("_", "_"))
    assert (ab.pos_wave, ab.halfseg, ab.pos_pm, ab.nb_frame) == (100, 5, 0, 2)
    assert (sil.pos_wave, sil.pos_pm) == (200, 2)
    assert db.pmrk == bytes([2, 2, 2])
    assert db.get_info(0) == "ancient"
    assert db.sil_phon == "_"
    db.close()


def test_requires_open_stream(tmp_path):
    db = Database(str(tmp_path / "none.dba"))
    with pytest.warns(UserWarning), pytest.raises(DatabaseError):
        init_old(db)