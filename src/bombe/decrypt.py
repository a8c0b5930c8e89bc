#!/usr/bin/env python3
# -*- coding: utf-8 -*-
import argparse
import signal
import sys
import threading
from pathlib import Path
from typing import List, Optional

from bombe.config import load_settings
from bombe.errors import BombeError, ResourceError
from bombe.read import read_ciphertext
from bombe.scoring import TrigramScorer
from bombe.search import SearchResult, search


def format_result(result: SearchResult) -> str:
    """Plaintext, rotor names, start positions and plugboard pairs, one per line."""
    config = result.best.config
    return "\n".join([
        "Plain Text:",
        result.plaintext,
        " ".join(config.names()),
        " ".join(config.positions()),
        " ".join(config.plugboard.pairs()),
    ])


def save_trace(result: SearchResult, trace_dir: str) -> Path:
    filename = Path(trace_dir) / f"scores_{round(result.trace['timestamp'].min())}.csv"
    try:
        result.trace.to_csv(
            filename,
            index=False,
        )
    except OSError as exc:
        raise ResourceError(f"cannot write score trace {filename}: {exc}") from exc
    return filename


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        prog="bombe",
        description="Recover rotor order, start positions and plugboard from a rotor-machine ciphertext.",
    )
    parser.add_argument("ciphertext", help="file holding the ciphertext, letters A-Z only")
    args = parser.parse_args(argv)

    cancel = threading.Event()
    previous_handler = signal.signal(signal.SIGINT, lambda signum, frame: cancel.set())
    try:
        settings = load_settings()

        # 1) Trigram table: how "language-like" a decode is
        print("[1/3] Loading trigrams…")
        scorer = TrigramScorer.from_file(settings.trigrams_file_path)

        # 2) Ciphertext
        print("[2/3] Reading ciphertext…")
        ciphertext = read_ciphertext(args.ciphertext)
        print(f"Length (A-Z): {len(ciphertext)}")

        # 3) Rotor orders x start positions, plugboard climbed for each
        print(f"[3/3] Searching {settings.search.space_size()} configurations…")
        result = search(ciphertext, scorer, settings.search, cancel=cancel)
    except BombeError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    finally:
        signal.signal(signal.SIGINT, previous_handler)

    if result.cancelled:
        print(f"Search cancelled after {result.evaluated} configurations; best so far:")
    if result.best is None:
        print("No configuration evaluated.")
        return 1

    print(format_result(result))

    if settings.save_trace and not result.trace.empty:
        try:
            filename = save_trace(result, settings.trace_dir)
        except ResourceError as exc:
            print(f"error: {exc}", file=sys.stderr)
            return 1
        print(f"Scores saved to '{filename}'")
    return 0


if __name__ == "__main__":
    sys.exit(main())
