#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Plugboard wiring: a compact pair list on one side, a 26-entry involution on the other.

The table form is what the machine consumes and what the hill-climber mutates;
pair lists are what a key sheet (and the command line output) shows.
"""
import string
from dataclasses import dataclass
from typing import Iterable, List, Sequence, Tuple, Union

from bombe.errors import ConfigurationError


ALPHABET = string.ascii_uppercase
A2I = {c: i for i, c in enumerate(ALPHABET)}
I2A = {i: c for i, c in enumerate(ALPHABET)}

Pair = Union[str, Tuple[str, str]]
Letter = Union[str, int]


def _index(letter: Letter) -> int:
    if isinstance(letter, int):
        if 0 <= letter < len(ALPHABET):
            return letter
        raise ConfigurationError(f"Plugboard index {letter} out of range 0-{len(ALPHABET) - 1}")
    try:
        return A2I[letter]
    except KeyError:
        raise ConfigurationError(f"Symbol {letter!r} not in alphabet") from None


@dataclass(frozen=True)
class Plugboard:
    table: Tuple[int, ...] = tuple(range(len(ALPHABET)))

    def __post_init__(self) -> None:
        if len(self.table) != len(ALPHABET):
            raise ConfigurationError(f"Plugboard table must have {len(ALPHABET)} entries")
        for i, j in enumerate(self.table):
            if not 0 <= j < len(ALPHABET) or self.table[j] != i:
                raise ConfigurationError("Plugboard table must be an involution")

    # ── construction ─────────────────────────────────────────────
    @classmethod
    def from_pairs(cls, pairs: Iterable[Pair]) -> "Plugboard":
        """Build the full table from pairs such as ["AZ", "BY"] or [("A", "Z")]."""
        table = list(range(len(ALPHABET)))
        used = set()

        for raw in pairs:
            if isinstance(raw, str) and len(raw) != 2:
                raise ConfigurationError(f"Pair {raw!r} must be exactly 2 letters")
            a, b = raw
            ia, ib = _index(a), _index(b)
            if ia == ib:
                raise ConfigurationError(f"Plugboard cannot map a letter to itself: {I2A[ia]}")
            if ia in used or ib in used:
                dup = ia if ia in used else ib
                raise ConfigurationError(f"Letter {I2A[dup]!r} already used in plugboard")

            table[ia], table[ib] = ib, ia
            used.update((ia, ib))

        return cls(tuple(table))

    @classmethod
    def from_wiring(cls, wiring: str) -> "Plugboard":
        return cls.from_pairs(pairs_from_wiring(wiring))

    # ── views ────────────────────────────────────────────────────
    @property
    def wiring(self) -> str:
        """Position i holds the letter that letter i is wired to."""
        return "".join(I2A[j] for j in self.table)

    def pairs(self) -> List[str]:
        return [I2A[i] + I2A[j] for i, j in enumerate(self.table) if i < j]

    def partner(self, letter: Letter) -> int:
        return self.table[_index(letter)]

    def is_plugged(self, letter: Letter) -> bool:
        i = _index(letter)
        return self.table[i] != i

    def __len__(self) -> int:
        return sum(1 for i, j in enumerate(self.table) if i < j)

    def __repr__(self) -> str:
        return f"<Plugboard {' '.join(self.pairs())}>"

    # ── edits (each returns a new Plugboard) ─────────────────────
    def release(self, *letters: Letter) -> "Plugboard":
        table = list(self.table)
        for letter in letters:
            i = _index(letter)
            j = table[i]
            table[i], table[j] = i, j
        return Plugboard(tuple(table))

    def connect(self, a: Letter, b: Letter) -> "Plugboard":
        """Wire a<->b, releasing whatever either letter was wired to before."""
        ia, ib = _index(a), _index(b)
        if ia == ib:
            return self.release(ia)
        table = list(self.release(ia, ib).table)
        table[ia], table[ib] = ib, ia
        return Plugboard(tuple(table))

    def toggle(self, a: Letter, b: Letter) -> "Plugboard":
        ia, ib = _index(a), _index(b)
        if ia == ib:
            return self
        if self.table[ia] == ib:
            return self.release(ia)
        return self.connect(ia, ib)


# ---------------------------
# Flat-string codec
# ---------------------------
def _check_wiring(wiring: str) -> None:
    if len(wiring) != len(ALPHABET):
        raise ConfigurationError(f"Wiring must have {len(ALPHABET)} letters, got {len(wiring)}")
    bad = [ch for ch in wiring if ch not in A2I]
    if bad:
        raise ConfigurationError(f"Symbol {bad[0]!r} not in alphabet")


def expand(pairs: Iterable[Pair]) -> str:
    """Pair list -> 26-letter wiring; unmentioned letters map to themselves."""
    return Plugboard.from_pairs(pairs).wiring


def pairs_from_wiring(wiring: str) -> List[str]:
    """26-letter wiring -> pair list, each letter reported in at most one pair."""
    _check_wiring(wiring)
    consumed = set()
    pairs = []
    for i, letter in enumerate(wiring):
        default = ALPHABET[i]
        if letter == default or default in consumed or letter in consumed:
            continue
        pairs.append(default + letter)
        consumed.update((default, letter))
    return pairs


def apply_swap(letter_a: str, letter_b: str, wiring: str) -> str:
    """Toggle the letter_a<->letter_b connection in a 26-letter wiring."""
    return Plugboard.from_wiring(wiring).toggle(letter_a, letter_b).wiring


def parse_pairs(text: str) -> Sequence[str]:
    """Split a key-sheet style "AZ BY" string into pairs."""
    return [token.upper() for token in text.split()]
