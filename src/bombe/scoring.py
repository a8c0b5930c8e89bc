#!/usr/bin/env python3
# -*- coding: utf-8 -*-
import math
from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Union

from bombe.errors import ResourceError
from bombe.get_trigrams import form_trigrams
from bombe.plugboard import ALPHABET


# ---------------------------
# Fast statistic: index of coincidence
# ---------------------------
def index_of_coincidence(text: str) -> float:
    """Sum of c*(c-1) over letter counts, divided by n*(n-1).

    Returns nan when the text has fewer than two letters.
    """
    n = len(text)
    if n <= 1:
        return math.nan

    counts = Counter(text)
    total = sum(counts[letter] * (counts[letter] - 1) for letter in ALPHABET)
    return total / (n * (n - 1))


# ---------------------------
# Slow statistic: trigram log-likelihood
# ---------------------------
@dataclass(frozen=True)
class TrigramScorer:
    log_probs: Dict[str, float] = field(default_factory=dict)

    @classmethod
    def from_counts(cls, counts: Dict[str, int]) -> "TrigramScorer":
        total = sum(counts.values())
        if total <= 0:
            raise ResourceError("trigram corpus is empty")
        log_probs = {gram: math.log(count / total) for gram, count in counts.items()}
        return cls(log_probs)

    @classmethod
    def from_file(cls, path: Union[str, Path]) -> "TrigramScorer":
        """Reads "<TRIGRAM> <count>" lines into natural-log probabilities."""
        counts: Dict[str, int] = {}
        try:
            with open(path, "r", encoding="utf-8") as f:
                for number, line in enumerate(f, 1):
                    parts = line.split()
                    if not parts:
                        continue
                    if len(parts) != 2:
                        raise ResourceError(f"{path}:{number}: expected '<trigram> <count>', got {line.strip()!r}")
                    gram, raw_count = parts[0].upper(), parts[1]
                    if len(gram) != 3 or any(ch not in ALPHABET for ch in gram):
                        raise ResourceError(f"{path}:{number}: {parts[0]!r} is not a trigram")
                    try:
                        count = int(raw_count)
                    except ValueError:
                        raise ResourceError(f"{path}:{number}: {raw_count!r} is not an integer") from None
                    if count <= 0:
                        raise ResourceError(f"{path}:{number}: count must be positive")
                    counts[gram] = counts.get(gram, 0) + count
        except OSError as exc:
            raise ResourceError(f"cannot read trigram corpus {path}: {exc}") from exc
        return cls.from_counts(counts)

    def score(self, text: str) -> float:
        # Unseen trigrams contribute 0, not a penalty.
        s = 0.0
        for gram in form_trigrams(text):
            s += self.log_probs.get(gram, 0.0)
        return s

    def __len__(self) -> int:
        return len(self.log_probs)
