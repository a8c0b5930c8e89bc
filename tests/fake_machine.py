"""A stand-in rotor core small enough to follow the plugboard sweep by hand.

Each key press applies plugboard, a per-position involution ("core"),
plugboard again, exactly like the real machine. With the true rotor order
and start letters the cores are mostly identity; any other setting gets
ROT13 everywhere.
"""
from itertools import product

from bombe.machine import MachineConfig
from bombe.plugboard import A2I, ALPHABET, I2A
from bombe.scoring import TrigramScorer

PLAINTEXT = "ATTACKATDAWN"
TRUE_PAIRS = ["AZ", "BY"]
TRUE_ORDER = ["I", "II"]
TRUE_POSITIONS = ["C", "D"]


def swap(a, b):
    table = list(range(26))
    table[A2I[a]], table[A2I[b]] = A2I[b], A2I[a]
    return table


IDENTITY = list(range(26))
ROT13 = [(i + 13) % 26 for i in range(26)]
TRUE_CORES = {0: swap("Z", "Q"), 1: swap("Y", "T"), 3: swap("Z", "Q")}


def is_true_setting(config: MachineConfig) -> bool:
    return config.names()[:2] == TRUE_ORDER and config.positions()[:2] == TRUE_POSITIONS


def fake_decode(text: str, config: MachineConfig) -> str:
    plug = config.plugboard.table
    true_setting = is_true_setting(config)
    out = []
    for k, ch in enumerate(text):
        core = TRUE_CORES.get(k, IDENTITY) if true_setting else ROT13
        out.append(I2A[plug[core[plug[A2I[ch]]]]])
    return "".join(out)


def passthrough_decode(text: str, config: MachineConfig) -> str:
    return text


def strong_scorer(plaintext: str = PLAINTEXT) -> TrigramScorer:
    """Every trigram seen once, the plaintext's own trigrams seen very often."""
    counts = {"".join(gram): 1 for gram in product(ALPHABET, repeat=3)}
    for i in range(len(plaintext) - 2):
        counts[plaintext[i:i + 3]] = 100000
    return TrigramScorer.from_counts(counts)
