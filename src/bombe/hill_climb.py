#!/usr/bin/env python3
# -*- coding: utf-8 -*-
import math
from dataclasses import dataclass
from typing import Callable, List

from bombe import machine
from bombe.machine import MachineConfig
from bombe.plugboard import ALPHABET, Plugboard
from bombe.scoring import index_of_coincidence

Decoder = Callable[[str, MachineConfig], str]
Fitness = Callable[[str], float]


@dataclass(frozen=True)
class ClimbResult:
    plugboard: Plugboard
    score: float
    evaluations: int


def rewire_candidates(baseline: Plugboard, i: int, j: int) -> List[Plugboard]:
    """keep-keep, break-i, break-j, break-both; in that order."""
    return [
        baseline,
        baseline.release(i),
        baseline.release(j),
        baseline.release(i, j),
    ]


def pick_candidate(scores: List[float]) -> int:
    """Index of the unique strict maximum; the last index when the top is shared."""
    top = max(scores)
    if scores.count(top) == 1:
        return scores.index(top)
    return len(scores) - 1


def climb_plugboard(
    ciphertext: str,
    config: MachineConfig,
    decode: Decoder = machine.decode,
    fitness: Fitness = index_of_coincidence,
) -> ClimbResult:
    """One left-to-right sweep over every letter pair (i, j), i < j.

    The rotors of `config` stay fixed; its plugboard is ignored and the sweep
    starts from the identity wiring. For each i the baseline is the best wiring
    found so far in the whole sweep. If j is already wired in the baseline the
    four rewire candidates are scored and one adopted, otherwise i<->j is tried.
    Any step whose score beats the best of the run (strictly) becomes the new best.
    """
    best = Plugboard()
    best_score = -math.inf
    evaluations = 0

    def evaluate(plugboard: Plugboard) -> float:
        nonlocal evaluations
        evaluations += 1
        return fitness(decode(ciphertext, config.with_plugboard(plugboard)))

    n = len(ALPHABET)
    for i in range(n):
        baseline = best
        for j in range(i + 1, n):
            if baseline.is_plugged(j):
                candidates = rewire_candidates(baseline, i, j)
                scores = [evaluate(candidate) for candidate in candidates]
                k = pick_candidate(scores)
                step, score = candidates[k], scores[k]
            else:
                step = baseline.connect(i, j)
                score = evaluate(step)

            if score > best_score:
                best, best_score = step, score

    return ClimbResult(best, best_score, evaluations)
