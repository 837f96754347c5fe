import pytest

from diphonebase.hash_tab import HashTable, mix
from diphonebase.zstring_list import ZStringList


def _table(entries, size=None):
    table = HashTable(size if size is not None else len(entries))
    for number, (left, right) in enumerate(entries):
        table.add(left, right, number * 100, number * 10, number * 3, number + 1)
    return table


def _keys(table):
    return {table.names(info) for info in table}


def test_mix_of_zero_is_zero():
    assert mix(0, 50) == 0


@pytest.mark.parametrize("index", [1, 7, -5, 123456, -987654, 2**31 - 1])
def test_mix_stays_in_range(index):
    for size in (1, 13, 250):
        assert 0 <= mix(index, size) < size


def test_add_and_search_round_trip():
    entries = [("a", "b"), ("b", "a"), ("_", "_"), ("o~", "Z"), ("t", "t")]
    table = _table(entries)
    assert len(table) == len(entries)
    for number, (left, right) in enumerate(entries):
        index = table.search(left, right)
        assert index is not None
        info = table.get(index)
        assert table.names(info) == (left, right)
        assert info.pos_wave == number * 100
        assert info.halfseg == number * 10
        assert info.pos_pm == number * 3
        assert info.nb_frame == number + 1


def test_search_missing_returns_none():
    table = _table([("a", "b"), ("c", "d")])
    assert table.search("b", "a") is None
    assert table.search("x", "y") is None


def test_empty_table_search():
    assert HashTable(5).search("a", "b") is None


def test_full_table_with_collisions_is_searchable():
    entries = [(chr(ord("a") + i), chr(ord("a") + j)) for i in range(6) for j in range(6)]
    table = _table(entries)
    assert len(table) == table.size
    for left, right in entries:
        index = table.search(left, right)
        assert table.names(table.get(index)) == (left, right)


def test_overflow_raises():
    table = _table([("a", "b"), ("c", "d")])
    with pytest.raises(OverflowError):
        table.add("e", "f", 0, 0, 0, 1)


def test_zero_size_add_raises():
    with pytest.raises(OverflowError):
        HashTable(0).add("a", "b", 0, 0, 0, 1)


def test_get_empty_slot_raises():
    table = HashTable(4)
    table.add("a", "b", 0, 0, 0, 1)
    empty = next(i for i in range(4) if i != table.search("a", "b"))
    with pytest.raises(KeyError):
        table.get(empty)


def test_phonemes_are_shared():
    table = _table([("a", "b"), ("b", "a"), ("a", "a")])
    assert sorted(table.phonemes) == ["a", "b"]


def test_renamed_without_pairs_returns_same_table():
    table = _table([("a", "b")])
    assert table.renamed(None) is table
    assert table.renamed(ZStringList()) is table


def test_renamed_changes_names_and_keeps_data():
    table = _table([("a", "b"), ("b", "c"), ("_", "_")])
    rename = ZStringList()
    rename.parse("b B _ #")
    result = table.renamed(rename)
    assert result.size == table.size
    assert _keys(result) == {("a", "B"), ("B", "c"), ("#", "#")}
    assert result.search("a", "b") is None
    original = table.get(table.search("b", "c"))
    moved = result.get(result.search("B", "c"))
    assert (moved.pos_wave, moved.halfseg, moved.pos_pm, moved.nb_frame) == (
        original.pos_wave,
        original.halfseg,
        original.pos_pm,
        original.nb_frame,
    )


def test_clone_one_both_sides():
    table = _table([("t", "t"), ("a", "t"), ("b", "c")])
    result = table.clone_one("t", "t_h")
    assert result.size == table.size + 4
    assert len(result) == result.size
    assert _keys(result) == {
        ("t", "t"),
        ("t_h", "t"),
        ("t", "t_h"),
        ("t_h", "t_h"),
        ("a", "t"),
        ("a", "t_h"),
        ("b", "c"),
    }
    source = table.get(table.search("t", "t"))
    copy = result.get(result.search("t_h", "t_h"))
    assert (copy.pos_wave, copy.pos_pm, copy.nb_frame) == (
        source.pos_wave,
        source.pos_pm,
        source.nb_frame,
    )


def test_cloned_applies_pairs_in_order():
    table = _table([("a", "b")])
    clone = ZStringList()
    clone.parse("a x b y", multi=True)
    result = table.cloned(clone)
    assert ("x", "y") in _keys(result)
    assert ("a", "y") in _keys(result)
    assert ("x", "b") in _keys(result)
    assert table.cloned(None) is table
    assert len(table) == 1