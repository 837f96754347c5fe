import dataclasses

import pytest

from diphonebase.diphone_info import DiphoneInfo, hash_diphone


def test_empty_names_hash_to_zero():
    assert hash_diphone("", "") == 0


def test_single_character_is_its_code():
    assert hash_diphone("a", "") == ord("a")


def test_hash_only_depends_on_concatenation():
    assert hash_diphone("ab", "c") == hash_diphone("a", "bc")
    assert hash_diphone("o~", "Z") == hash_diphone("", "o~Z")


def test_hash_order_matters():
    assert hash_diphone("a", "b") != hash_diphone("b", "a")


def test_str_and_bytes_agree():
    assert hash_diphone("t_h", "a") == hash_diphone(b"t_h", b"a")


def test_high_bytes_are_signed():
    assert hash_diphone(b"\xff", b"") == -1


@pytest.mark.parametrize(
    "left,right",
    [("abcd", "efgh"), ("\xff\xff\xff", "\xff"), ("zzzzzzzz", "zzzzzzzzzz"), ("~~~~", "~~~~")],
)
def test_hash_stays_in_int32_range(left, right):
    value = hash_diphone(left, right)
    assert -(2**31) <= value < 2**31


def test_diphone_info_is_immutable_and_replaceable():
    info = DiphoneInfo(left=0, right=1, pos_wave=100, halfseg=40, pos_pm=3, nb_frame=7)
    with pytest.raises(dataclasses.FrozenInstanceError):
        info.left = 2  # type: ignore[misc]
    renamed = dataclasses.replace(info, left=2)
    assert renamed.left == 2
    assert (renamed.right, renamed.pos_wave, renamed.halfseg, renamed.pos_pm, renamed.nb_frame) == (
        1,
        100,
        40,
        3,
        7,
    )
    assert info.left == 0