"""Diphone descriptors and the hashing function used to index them."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class DiphoneInfo:
    """Where a diphone lives in the database.

    ``left`` and ``right`` are phoneme codes in the table's phoneme list.
    """

    left: int
    right: int
    pos_wave: int
    halfseg: int
    pos_pm: int
    nb_frame: int


def _as_bytes(name: str | bytes) -> bytes:
    if isinstance(name, (bytes, bytearray)):
        return bytes(name)
    try:
        return name.encode("latin-1")
    except UnicodeEncodeError:
        return name.encode("utf-8")


def _to_int32(value: int) -> int:
    value &= 0xFFFFFFFF
    return value - 0x100000000 if value & 0x80000000 else value


def hash_diphone(left: str | bytes, right: str | bytes) -> int:
    """Hash a diphone name pair into a signed 32-bit value.

    Characters are taken as signed bytes and summed, each shifted by a
    cycling 0/8/16/24 bit offset across both names.
    """
    total = 0
    shift = 0
    for byte in _as_bytes(left) + _as_bytes(right):
        signed = byte - 256 if byte >= 128 else byte
        total += signed << shift
        shift = (shift + 8) % 32
    return _to_int32(total)