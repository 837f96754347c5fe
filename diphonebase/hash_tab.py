"""Coalesced hash table indexing the diphones of a database."""

from __future__ import annotations

import math
from collections.abc import Iterator
from dataclasses import dataclass

from .diphone_info import DiphoneInfo, hash_diphone
from .zstring_list import ZStringList

# Multiplicative hashing constant, (sqrt(5) - 1) / 2.
_GOLDEN = 0.6180339887


def mix(index: int, size: int) -> int:
    """Spread a hash value over ``size`` slots by multiplicative hashing."""
    temp = index * _GOLDEN
    temp -= math.floor(temp)
    temp *= size
    return int(temp)


@dataclass
class _Slot:
    info: DiphoneInfo
    hits: int = 1
    next_one: int | None = None


class HashTable:
    """Fixed-size table of diphones keyed by (left, right) phoneme names.

    Collisions are chained through free slots taken from the end of the
    table. Phoneme names are stored once in :attr:`phonemes` and referred
    to by code.
    """

    def __init__(self, size: int) -> None:
        if size < 0:
            raise ValueError(f"negative hash table size {size}")
        self.size = size
        self._slots: list[_Slot | None] = [None] * size
        self._first_free = size - 1
        self.phonemes = ZStringList()

    def __len__(self) -> int:
        return sum(slot is not None for slot in self._slots)

    def __iter__(self) -> Iterator[DiphoneInfo]:
        """Yield the stored diphones in slot order."""
        for slot in self._slots:
            if slot is not None:
                yield slot.info

    def __repr__(self) -> str:
        return f"HashTable(size={self.size}, items={len(self)})"

    def add(
        self,
        left: str,
        right: str,
        pos_wave: int,
        halfseg: int,
        pos_pm: int,
        nb_frame: int,
    ) -> int:
        """Store a diphone and return the slot it was placed in."""
        if self.size == 0:
            raise OverflowError("hash table has no slot")
        hash_value = mix(hash_diphone(left, right), self.size)
        primary = self._slots[hash_value]
        if primary is None:
            chosen = hash_value
            next_one = None
        else:
            free = self._first_free
            while free >= 0 and self._slots[free] is not None:
                free -= 1
            if free < 0:
                raise OverflowError(f"hash table full, can't add {left}-{right}")
            chosen = free
            next_one = primary.next_one
            primary.next_one = chosen
            primary.hits += 1
            self._first_free = free - 1

        info = DiphoneInfo(
            left=self.phonemes.encode(left),
            right=self.phonemes.encode(right),
            pos_wave=pos_wave,
            halfseg=halfseg,
            pos_pm=pos_pm,
            nb_frame=nb_frame,
        )
        self._slots[chosen] = _Slot(info=info, next_one=next_one)
        return chosen

    def _matches(self, slot: _Slot, left: str, right: str) -> bool:
        return (
            self.phonemes.decode(slot.info.left) == left
            and self.phonemes.decode(slot.info.right) == right
        )

    def search(self, left: str, right: str) -> int | None:
        """Return the slot holding ``left-right``, or None if absent."""
        if self.size == 0:
            return None
        index: int | None = mix(hash_diphone(left, right), self.size)
        while index is not None:
            slot = self._slots[index]
            if slot is None:
                return None
            if self._matches(slot, left, right):
                return index
            index = slot.next_one
        return None

    def get(self, index: int) -> DiphoneInfo:
        """Return the diphone stored in slot ``index``."""
        slot = self._slots[index]
        if slot is None:
            raise KeyError(f"slot {index} is empty")
        return slot.info

    def names(self, info: DiphoneInfo) -> tuple[str, str]:
        """Return the (left, right) phoneme names of ``info``."""
        return self.phonemes.decode(info.left), self.phonemes.decode(info.right)

    def _copy_into(self, target: HashTable, info: DiphoneInfo, left: str, right: str) -> None:
        target.add(left, right, info.pos_wave, info.halfseg, info.pos_pm, info.nb_frame)

    def renamed(self, rename: ZStringList | None) -> HashTable:
        """Return a table where phonemes are renamed by ``old, new`` pairs.

        Without any pair the table itself is returned.
        """
        if not rename or len(rename) == 0:
            return self
        result = HashTable(self.size)
        for info in self:
            left, right = self.names(info)
            new_left = rename.find_rename(left)
            new_right = rename.find_rename(right)
            self._copy_into(
                result,
                info,
                left if new_left is None else new_left,
                right if new_right is None else new_right,
            )
        return result

    def clone_one(self, source: str, target: str) -> HashTable:
        """Return a table where every diphone using ``source`` is duplicated
        with ``target`` in its place, on either or both sides."""
        extra = 0
        for info in self:
            left, right = self.names(info)
            sides = (left == source) + (right == source)
            extra += sides + (1 if sides == 2 else 0)

        result = HashTable(self.size + extra)
        for info in self:
            left, right = self.names(info)
            self._copy_into(result, info, left, right)
            if left == source:
                self._copy_into(result, info, target, right)
            if right == source:
                self._copy_into(result, info, left, target)
            if left == source and right == source:
                self._copy_into(result, info, target, target)
        return result

    def cloned(self, clone: ZStringList | None) -> HashTable:
        """Apply :meth:`clone_one` for each ``source, target`` pair in order."""
        if clone is None:
            return self
        table = self
        for source, target in clone.pairs():
            table = table.clone_one(source, target)
        return table