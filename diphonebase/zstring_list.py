"""Ordered lists of zero-terminated strings: phoneme tables and renaming pairs."""

from __future__ import annotations

import re
from collections.abc import Iterable, Iterator

# The element count is stored on 16 bits.
_MAX_ENTRIES = 0xFFFF

# Renaming strings are split on blanks and newlines only.
_SEPARATORS = re.compile(r"[ \n]+")


class RenamingError(ValueError):
    """Raised when a renaming list is malformed or maps a name twice."""


class ZStringList:
    """A growable list of strings.

    Used as a phoneme encoding table (string <-> integer code) and as a
    list of renaming pairs stored as consecutive ``old, new`` entries.
    """

    def __init__(self, items: Iterable[str] = ()) -> None:
        self._items: list[str] = []
        for item in items:
            self.append(item)

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[str]:
        return iter(self._items)

    def __repr__(self) -> str:
        return f"ZStringList({self._items!r})"

    def find(self, text: str) -> int | None:
        """Return the code of ``text``, or None if it is not in the list."""
        try:
            return self._items.index(text)
        except ValueError:
            return None

    def append(self, text: str) -> int:
        """Add ``text`` at the end of the list and return its code."""
        if len(self._items) >= _MAX_ENTRIES:
            raise OverflowError(f"Too many phonemes in the dba {len(self._items)}!")
        self._items.append(text)
        return len(self._items) - 1

    def encode(self, text: str) -> int:
        """Return the code of ``text``, adding it first if it is missing."""
        code = self.find(text)
        if code is None:
            code = self.append(text)
        return code

    def decode(self, code: int) -> str:
        """Return the string stored under ``code``."""
        if code < 0:
            raise IndexError(f"invalid phoneme code {code}")
        return self._items[code]

    def append_rename(self, old_name: str, new_name: str, multi: bool = False) -> None:
        """Add an ``old_name -> new_name`` pair.

        Unless ``multi`` is true, a key that is already mapped raises
        :class:`RenamingError`.
        """
        if not multi:
            renamed = self.find_rename(old_name)
            if renamed is not None:
                raise RenamingError(
                    f"Can't map {old_name} to {new_name}. Already mapped to {renamed}"
                )
        self.append(old_name)
        self.append(new_name)

    def parse(self, text: str, multi: bool = False) -> None:
        """Read whitespace separated renaming pairs from ``text``.

        Pairs are added in order; a trailing name without a partner raises
        :class:`RenamingError` after the complete pairs have been added.
        """
        tokens = [token for token in _SEPARATORS.split(text) if token]
        words = iter(tokens)
        for old_name, new_name in zip(words, words):
            self.append_rename(old_name, new_name, multi)
        if len(tokens) % 2:
            raise RenamingError(f"Wrong renaming list at {tokens[-1]}")

    def find_rename(self, name: str) -> str | None:
        """Return the first translation of ``name``, or None."""
        for old_name, new_name in self.pairs():
            if old_name == name:
                return new_name
        return None

    def pairs(self) -> Iterator[tuple[str, str]]:
        """Yield the ``(old, new)`` renaming pairs in order."""
        words = iter(self._items)
        yield from zip(words, words)