#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""Exhaustive search over two rotor slots and their start positions.

For every ordered pair of rotors from the pool (no rotor paired with itself)
and every pair of start letters, the plugboard is hill-climbed on the index
of coincidence and the resulting decode is scored by trigram log-likelihood.
The highest trigram score wins; on equal scores the first one found stays.
"""
import concurrent.futures
import itertools
import signal
import threading
from dataclasses import dataclass
from datetime import datetime
from typing import Callable, Iterator, List, Optional, Sequence, Tuple

import pandas as pd

from bombe import machine
from bombe.errors import ConfigurationError, DegenerateInputError, InvalidSymbolError
from bombe.hill_climb import Decoder, Fitness, climb_plugboard
from bombe.machine import ROTORS, MachineConfig
from bombe.plugboard import A2I, ALPHABET
from bombe.scoring import TrigramScorer, index_of_coincidence

MIN_CIPHERTEXT_LENGTH = 3
TRACE_COLUMNS = ["rotors", "positions", "plugboard", "fast_score", "slow_score", "timestamp"]

DEFAULT_BASE = MachineConfig.from_key_sheet(
    rotors="Beta II IV III",
    rings="1 1 1 16",
    positions="AABQ",
    reflector="C-Thin",
)
DEFAULT_ROTOR_POOL = ("I", "II", "V", "VI", "Beta", "Gamma")


def get_timestamp():
    return datetime.now().timestamp()


# ---------------------------
# Types
# ---------------------------
@dataclass(frozen=True)
class SearchSettings:
    base: MachineConfig = DEFAULT_BASE
    rotor_pool: Tuple[str, ...] = DEFAULT_ROTOR_POOL
    slots: Tuple[int, int] = (0, 1)
    positions: Tuple[str, str] = (ALPHABET, ALPHABET)
    workers: int = 1

    def __post_init__(self) -> None:
        object.__setattr__(self, "rotor_pool", tuple(self.rotor_pool))
        object.__setattr__(self, "slots", tuple(self.slots))
        object.__setattr__(self, "positions", tuple(self.positions))

        unknown = [name for name in self.rotor_pool if name not in ROTORS]
        if unknown:
            raise ConfigurationError(f"Unknown rotor(s) in pool: {', '.join(unknown)}")
        if len(set(self.rotor_pool)) != len(self.rotor_pool):
            raise ConfigurationError("Rotor pool lists a rotor twice")
        if len(self.slots) != 2 or self.slots[0] == self.slots[1]:
            raise ConfigurationError(f"Need two distinct searched slots, got {self.slots}")
        if any(not 0 <= s < len(self.base.rotors) for s in self.slots):
            raise ConfigurationError(f"Searched slots {self.slots} outside a {len(self.base.rotors)}-rotor machine")
        if len(self.positions) != 2 or any(not window for window in self.positions):
            raise ConfigurationError("Need a non-empty position window for each searched slot")
        for window in self.positions:
            if any(ch not in A2I for ch in window):
                raise ConfigurationError(f"Position window {window!r} must only hold letters")
        if self.workers < 1:
            raise ConfigurationError("workers must be at least 1")

    def rotor_orders(self) -> List[Tuple[str, str]]:
        return list(itertools.permutations(self.rotor_pool, 2))

    def space_size(self) -> int:
        return len(self.rotor_orders()) * len(self.positions[0]) * len(self.positions[1])

    def configs(self, order: Tuple[str, str], first_letter: str) -> Iterator[MachineConfig]:
        """Fresh configs for one rotor order and one first-slot letter."""
        s1, s2 = self.slots
        config = self.base.with_slot(s1, name=order[0], position=first_letter)
        for second_letter in self.positions[1]:
            yield config.with_slot(s2, name=order[1], position=second_letter)


@dataclass(frozen=True)
class CandidateResult:
    config: MachineConfig
    fast_score: float
    slow_score: float

    def beats(self, other: Optional["CandidateResult"]) -> bool:
        return other is None or self.slow_score > other.slow_score


class SearchState:
    """Best candidate seen so far; replaced only by a strictly higher score."""

    def __init__(self) -> None:
        self.best: Optional[CandidateResult] = None

    def offer(self, candidate: CandidateResult) -> bool:
        if candidate.beats(self.best):
            self.best = candidate
            return True
        return False


@dataclass
class SearchResult:
    best: Optional[CandidateResult]
    plaintext: str
    evaluated: int
    cancelled: bool
    trace: pd.DataFrame


# ---------------------------
# Candidate evaluation
# ---------------------------
def evaluate_candidate(
    ciphertext: str,
    config: MachineConfig,
    scorer: TrigramScorer,
    decode: Decoder = machine.decode,
    fitness: Fitness = index_of_coincidence,
) -> CandidateResult:
    climb = climb_plugboard(ciphertext, config, decode, fitness)
    config = config.with_plugboard(climb.plugboard)
    return CandidateResult(config, climb.score, scorer.score(decode(ciphertext, config)))


def check_ciphertext(ciphertext: str) -> None:
    if len(ciphertext) < MIN_CIPHERTEXT_LENGTH:
        raise DegenerateInputError(
            f"Ciphertext has {len(ciphertext)} letter(s); at least {MIN_CIPHERTEXT_LENGTH} are needed to score it"
        )
    bad = [ch for ch in ciphertext if ch not in A2I]
    if bad:
        raise InvalidSymbolError(f"Invalid character {bad[0]!r} for current alphabet.")


# Worker-process globals, set once per process by _init_worker.
_worker_args: Tuple = ()


def _init_worker(ciphertext, scorer, decode, fitness) -> None:
    global _worker_args
    # Ctrl-C is handled by the parent through its cancel event.
    signal.signal(signal.SIGINT, signal.SIG_IGN)
    _worker_args = (ciphertext, scorer, decode, fitness)


def _evaluate_chunk(configs: Sequence[MachineConfig]) -> List[CandidateResult]:
    ciphertext, scorer, decode, fitness = _worker_args
    return [evaluate_candidate(ciphertext, config, scorer, decode, fitness) for config in configs]


def _trace_row(candidate: CandidateResult) -> tuple:
    config = candidate.config
    return (
        " ".join(config.names()),
        " ".join(config.positions()),
        " ".join(config.plugboard.pairs()),
        candidate.fast_score,
        candidate.slow_score,
        get_timestamp(),
    )


# ---------------------------
# Key-space search
# ---------------------------
def search(
    ciphertext: str,
    scorer: TrigramScorer,
    settings: SearchSettings = SearchSettings(),
    decode: Decoder = machine.decode,
    fitness: Fitness = index_of_coincidence,
    cancel: Optional[threading.Event] = None,
    progress: Optional[Callable[[str], None]] = print,
    mp_context=None,
) -> SearchResult:
    """Walk the whole key space and return the best candidate and its plaintext.

    `decode` and `fitness` must be picklable module-level functions when
    settings.workers > 1. `cancel` is checked between candidates (serial) or
    after each merged chunk of one rotor order and first letter (parallel).
    `mp_context` picks the worker start method; None uses the platform default.
    """
    check_ciphertext(ciphertext)
    report = progress or (lambda message: None)

    state = SearchState()
    infos = []
    evaluated = 0
    cancelled = False
    initial_timestamp = get_timestamp()

    tasks = [
        (order, first_letter)
        for order in settings.rotor_orders()
        for first_letter in settings.positions[0]
    ]
    last_order = None

    def merge(order, candidates) -> None:
        nonlocal evaluated, last_order
        if order != last_order:
            report(f"Iteration: {order[0]} {order[1]}")
            last_order = order
        for candidate in candidates:
            evaluated += 1
            infos.append(_trace_row(candidate))
            state.offer(candidate)

    if settings.workers == 1:
        for order, first_letter in tasks:
            for config in settings.configs(order, first_letter):
                if cancel is not None and cancel.is_set():
                    cancelled = True
                    break
                merge(order, [evaluate_candidate(ciphertext, config, scorer, decode, fitness)])
            if cancelled:
                break
    else:
        with concurrent.futures.ProcessPoolExecutor(
            max_workers=settings.workers,
            mp_context=mp_context,
            initializer=_init_worker,
            initargs=(ciphertext, scorer, decode, fitness),
        ) as executor:
            chunks = [list(settings.configs(order, first_letter)) for order, first_letter in tasks]
            # map() yields in submission order, which keeps first-found-wins on ties.
            results = executor.map(_evaluate_chunk, chunks)
            for index, ((order, _), candidates) in enumerate(zip(tasks, results)):
                merge(order, candidates)
                if cancel is not None and cancel.is_set() and index < len(tasks) - 1:
                    cancelled = True
                    executor.shutdown(wait=False, cancel_futures=True)
                    break

    df = pd.DataFrame(infos, columns=TRACE_COLUMNS)
    df["elapsed_time"] = df["timestamp"] - initial_timestamp

    best = state.best
    plaintext = decode(ciphertext, best.config) if best is not None else ""
    return SearchResult(best, plaintext, evaluated, cancelled, df)
