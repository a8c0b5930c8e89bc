#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Rotor cipher machine: key configuration types and the letter-for-letter simulator.

Signal path per key press: step rotors, plugboard, rotors right-to-left,
reflector, rotors left-to-right, plugboard. The plugboard is kept outside
the rotor stack, so the per-position scrambler tables only depend on the
rotors and are cached between calls that differ only in plugboard wiring.
"""
from dataclasses import dataclass, field, replace
from functools import lru_cache
from typing import Dict, List, Sequence, Tuple, Union

from bombe.errors import ConfigurationError, InvalidSymbolError
from bombe.plugboard import A2I, ALPHABET, I2A, Plugboard


# ---------------------------
# Wheel catalogue
# ---------------------------
ROTORS: Dict[str, Tuple[str, str]] = {
    "I":     ("EKMFLGDQVZNTOWYHXUSPAIBRCJ", "Q"),
    "II":    ("AJDKSIRUXBLHWTMCQGZNPYFVOE", "E"),
    "III":   ("BDFHJLCPRTXVZNYEIWGAKMUSQO", "V"),
    "IV":    ("ESOVPZJAYQUIRHXLNFTGKDCMWB", "J"),
    "V":     ("VZBRGITYUPSDNHLXAWMJQOFECK", "Z"),
    "VI":    ("JPGVOUMFYQBENHZRDKASXLICTW", "ZM"),
    "VII":   ("NZJHGRCXMYSWBOUFAIVLPEKQDT", "ZM"),
    "VIII":  ("FKQHTLXOCBJSPDZRAMEWNIUYGV", "ZM"),
    "Beta":  ("LEYJVCNIXWPBQMDRTAKZGFUHOS", ""),
    "Gamma": ("FSOKANUERHMBTIYCWLQPZXVGJD", ""),
}

REFLECTORS: Dict[str, str] = {
    "B":      "YRUHQSLDPXNGOKMIEBFZCWVJAT",
    "C":      "FVPJIAOYEDRZXWGCTKUQSBNMHL",
    "B-Thin": "ENKQAUYWJICOPBLMDXZVFTHRGS",
    "C-Thin": "RDOBJNTKVEHMLFCWZAXGYIPSUQ",
}
_REFLECTOR_NAMES = {name.upper(): name for name in REFLECTORS}

_FWD = {name: [A2I[c] for c in wiring] for name, (wiring, _) in ROTORS.items()}
_REV = {name: [wiring.index(c) for c in ALPHABET] for name, (wiring, _) in ROTORS.items()}
_NOTCHES = {name: frozenset(A2I[c] for c in notches) for name, (_, notches) in ROTORS.items()}
_REFLECT = {name: [A2I[c] for c in wiring] for name, wiring in REFLECTORS.items()}


def canonical_reflector(name: str) -> str:
    try:
        return _REFLECTOR_NAMES[name.upper()]
    except KeyError:
        raise ConfigurationError(f"Unknown reflector {name!r}; expected one of {list(REFLECTORS)}") from None


# ---------------------------
# Configuration values
# ---------------------------
@dataclass(frozen=True)
class RotorSlot:
    name: str
    ring: int = 1
    position: str = "A"

    def __post_init__(self) -> None:
        if self.name not in ROTORS:
            raise ConfigurationError(f"Unknown rotor {self.name!r}; expected one of {list(ROTORS)}")
        if isinstance(self.ring, bool) or not isinstance(self.ring, int) or not 1 <= self.ring <= len(ALPHABET):
            raise ConfigurationError(f"Ring setting {self.ring!r} out of range 1-{len(ALPHABET)}")
        if not isinstance(self.position, str) or self.position not in A2I:
            raise ConfigurationError(f"Start position {self.position!r} is not a single letter")


@dataclass(frozen=True)
class MachineConfig:
    """Rotor slots leftmost first, a reflector and a plugboard."""

    rotors: Tuple[RotorSlot, ...]
    reflector: str = "B"
    plugboard: Plugboard = field(default_factory=Plugboard)

    def __post_init__(self) -> None:
        rotors = tuple(self.rotors)
        if len(rotors) not in (3, 4):
            raise ConfigurationError(f"Machine needs 3 or 4 rotors, got {len(rotors)}")
        if not all(isinstance(slot, RotorSlot) for slot in rotors):
            raise ConfigurationError("Rotors must be RotorSlot values")
        if not isinstance(self.plugboard, Plugboard):
            raise ConfigurationError("Plugboard must be a Plugboard value")
        object.__setattr__(self, "rotors", rotors)
        object.__setattr__(self, "reflector", canonical_reflector(self.reflector))

    @classmethod
    def from_key_sheet(
        cls,
        rotors: Union[str, Sequence[str]],
        rings: Union[str, Sequence[int], None] = None,
        positions: Union[str, Sequence[str], None] = None,
        reflector: str = "B",
        plugboard: Union[str, Sequence[str], None] = None,
    ) -> "MachineConfig":
        """Build a config from key-sheet style values, e.g. "Beta II IV III", "1 1 1 16", "AABQ"."""
        names = rotors.split() if isinstance(rotors, str) else list(rotors)
        if rings is None:
            rings = [1] * len(names)
        elif isinstance(rings, str):
            try:
                rings = [int(r) for r in rings.split()]
            except ValueError:
                raise ConfigurationError(f"Ring settings {rings!r} must be numbers") from None
        if positions is None:
            positions = "A" * len(names)
        if isinstance(positions, str):
            positions = list(positions.replace(" ", "").upper())
        if not len(names) == len(rings) == len(positions):
            raise ConfigurationError("Rotors, rings and positions must have the same length")
        if isinstance(plugboard, str):
            plugboard = plugboard.upper().split()

        slots = tuple(RotorSlot(n, r, p) for n, r, p in zip(names, rings, positions))
        return cls(slots, reflector, Plugboard.from_pairs(plugboard or []))

    def names(self) -> List[str]:
        return [slot.name for slot in self.rotors]

    def positions(self) -> List[str]:
        return [slot.position for slot in self.rotors]

    def rings(self) -> List[int]:
        return [slot.ring for slot in self.rotors]

    def with_plugboard(self, plugboard: Plugboard) -> "MachineConfig":
        return replace(self, plugboard=plugboard)

    def with_slot(self, index: int, **changes) -> "MachineConfig":
        """Copy with one rotor slot changed, e.g. with_slot(0, name="I", position="C")."""
        rotors = list(self.rotors)
        rotors[index] = replace(rotors[index], **changes)
        return replace(self, rotors=tuple(rotors))


# ---------------------------
# Simulator
# ---------------------------
def _step(names: Sequence[str], pos: List[int]) -> None:
    # Only the rightmost three rotors step; a fourth slot stays put.
    right, middle, left = len(pos) - 1, len(pos) - 2, len(pos) - 3
    if pos[middle] in _NOTCHES[names[middle]]:
        pos[left] = (pos[left] + 1) % 26
        pos[middle] = (pos[middle] + 1) % 26
    elif pos[right] in _NOTCHES[names[right]]:
        pos[middle] = (pos[middle] + 1) % 26
    pos[right] = (pos[right] + 1) % 26


@lru_cache(maxsize=128)
def _scrambler(rotor_key: MachineConfig, length: int) -> Tuple[Tuple[int, ...], ...]:
    """Per key press, the 26-entry substitution of the rotor stack plus reflector."""
    names = rotor_key.names()
    fwd = [_FWD[n] for n in names]
    rev = [_REV[n] for n in names]
    rings = [r - 1 for r in rotor_key.rings()]
    pos = [A2I[p] for p in rotor_key.positions()]
    refl = _REFLECT[rotor_key.reflector]
    order = range(len(names))

    tables = []
    for _ in range(length):
        _step(names, pos)
        table = []
        for c in range(26):
            for k in reversed(order):
                c = (fwd[k][(c + pos[k] - rings[k]) % 26] - pos[k] + rings[k]) % 26
            c = refl[c]
            for k in order:
                c = (rev[k][(c + pos[k] - rings[k]) % 26] - pos[k] + rings[k]) % 26
            table.append(c)
        tables.append(tuple(table))
    return tuple(tables)


def decode(text: str, config: MachineConfig) -> str:
    """Run text through the machine. Encoding and decoding are the same operation."""
    try:
        signals = [A2I[ch] for ch in text]
    except KeyError as exc:
        raise InvalidSymbolError(f"Invalid character {exc.args[0]!r} for current alphabet.") from None

    plug = config.plugboard.table
    tables = _scrambler(config.with_plugboard(Plugboard()), len(signals))
    return "".join(I2A[plug[table[plug[c]]]] for c, table in zip(signals, tables))


encode = decode
