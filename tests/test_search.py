import concurrent.futures
import multiprocessing
import signal
import threading
import unittest as ut

from bombe.errors import ConfigurationError, DegenerateInputError, InvalidSymbolError
from bombe.machine import MachineConfig, decode
from bombe.plugboard import Plugboard
from bombe.scoring import TrigramScorer
from bombe.search import (
    DEFAULT_BASE,
    CandidateResult,
    SearchSettings,
    SearchState,
    _init_worker,
    search,
)

from tests.fake_machine import (
    PLAINTEXT,
    TRUE_ORDER,
    TRUE_PAIRS,
    TRUE_POSITIONS,
    fake_decode,
    passthrough_decode,
    strong_scorer,
)

TRUE_CONFIG = (
    DEFAULT_BASE
    .with_slot(0, name=TRUE_ORDER[0], position=TRUE_POSITIONS[0])
    .with_slot(1, name=TRUE_ORDER[1], position=TRUE_POSITIONS[1])
    .with_plugboard(Plugboard.from_pairs(TRUE_PAIRS))
)
WINDOW = SearchSettings(rotor_pool=("I", "II", "III"), positions=("BC", "CD"))


class SettingsTest(ut.TestCase):
    def test_defaults(self):
        settings = SearchSettings()
        self.assertEqual(settings.base.names(), ["Beta", "II", "IV", "III"])
        self.assertEqual(settings.base.positions(), ["A", "A", "B", "Q"])
        self.assertEqual(settings.base.rings(), [1, 1, 1, 16])
        self.assertEqual(settings.base.reflector, "C-Thin")
        self.assertEqual(settings.slots, (0, 1))
        self.assertEqual(settings.space_size(), 6 * 5 * 26 * 26)

    def test_rotor_orders_skip_self_pairs(self):
        self.assertEqual(
            WINDOW.rotor_orders(),
            [("I", "II"), ("I", "III"), ("II", "I"), ("II", "III"), ("III", "I"), ("III", "II")],
        )

    def test_configs_are_fresh_values(self):
        configs = list(WINDOW.configs(("III", "I"), "C"))
        self.assertEqual([c.positions()[:2] for c in configs], [["C", "C"], ["C", "D"]])
        self.assertTrue(all(c.names()[:2] == ["III", "I"] for c in configs))
        self.assertEqual(WINDOW.base, DEFAULT_BASE)

    def test_rejects_bad_settings(self):
        cases = [
            dict(rotor_pool=("I", "XI")),
            dict(rotor_pool=("I", "I", "II")),
            dict(slots=(1, 1)),
            dict(slots=(0, 4)),
            dict(slots=(0,)),
            dict(positions=("", "A")),
            dict(positions=("A1", "A")),
            dict(workers=0),
        ]
        for kwargs in cases:
            with self.subTest(**kwargs):
                with self.assertRaises(ConfigurationError):
                    SearchSettings(**kwargs)


class SearchStateTest(ut.TestCase):
    def test_first_found_wins_ties(self):
        first = CandidateResult(DEFAULT_BASE, 0.05, -10.0)
        second = CandidateResult(DEFAULT_BASE.with_slot(0, name="Gamma"), 0.07, -10.0)
        state = SearchState()
        self.assertTrue(state.offer(first))
        self.assertFalse(state.offer(second))
        self.assertIs(state.best, first)

    def test_strictly_better_replaces(self):
        state = SearchState()
        state.offer(CandidateResult(DEFAULT_BASE, 0.05, -10.0))
        better = CandidateResult(DEFAULT_BASE, 0.01, -9.5)
        self.assertTrue(state.offer(better))
        self.assertIs(state.best, better)


class SearchTest(ut.TestCase):
    def setUp(self):
        self.scorer = strong_scorer()
        self.ciphertext = fake_decode(PLAINTEXT, TRUE_CONFIG)

    def test_recovers_plaintext_and_plugboard(self):
        messages = []
        result = search(self.ciphertext, self.scorer, WINDOW, decode=fake_decode, progress=messages.append)

        self.assertEqual(result.plaintext, PLAINTEXT)
        self.assertEqual(set(result.best.config.plugboard.pairs()), {"AZ", "BY"})
        self.assertEqual(result.best.config.names()[:2], TRUE_ORDER)
        self.assertEqual(result.best.config.positions()[:2], TRUE_POSITIONS)
        self.assertAlmostEqual(result.best.fast_score, 18 / 132)
        self.assertAlmostEqual(result.best.slow_score, self.scorer.score(PLAINTEXT))
        self.assertEqual(result.evaluated, 6 * 2 * 2)
        self.assertFalse(result.cancelled)
        self.assertEqual(messages[0], "Iteration: I II")
        self.assertEqual(len(messages), 6)

    def test_trace_has_one_row_per_candidate(self):
        result = search(self.ciphertext, self.scorer, WINDOW, decode=fake_decode, progress=None)
        trace = result.trace
        self.assertEqual(len(trace), 24)
        for column in ("rotors", "positions", "plugboard", "fast_score", "slow_score", "elapsed_time"):
            self.assertIn(column, trace.columns)
        self.assertEqual(trace["slow_score"].max(), result.best.slow_score)
        winner = trace.loc[trace["slow_score"].idxmax()]
        self.assertEqual(winner["plugboard"], "AZ BY")
        self.assertTrue(winner["rotors"].startswith("I II "))

    def test_equal_scores_keep_the_first_configuration(self):
        result = search(self.ciphertext, self.scorer, WINDOW, decode=passthrough_decode, progress=None)
        self.assertEqual(result.best.config.names()[:2], ["I", "II"])
        self.assertEqual(result.best.config.positions()[:2], ["B", "C"])
        self.assertEqual(result.plaintext, self.ciphertext)

    def test_degenerate_ciphertext(self):
        for text in ("", "Q", "QB"):
            with self.subTest(text=text):
                with self.assertRaises(DegenerateInputError):
                    search(text, self.scorer, WINDOW, decode=fake_decode, progress=None)

    def test_invalid_ciphertext(self):
        with self.assertRaises(InvalidSymbolError):
            search("QBT Q", self.scorer, WINDOW, decode=fake_decode, progress=None)

    def test_cancelled_before_start(self):
        cancel = threading.Event()
        cancel.set()
        result = search(self.ciphertext, self.scorer, WINDOW, decode=fake_decode, cancel=cancel, progress=None)
        self.assertTrue(result.cancelled)
        self.assertIsNone(result.best)
        self.assertEqual(result.plaintext, "")
        self.assertEqual(result.evaluated, 0)
        self.assertTrue(result.trace.empty)

    def test_cancelled_between_candidates(self):
        cancel = threading.Event()

        def decode_then_cancel(text, config):
            cancel.set()
            return fake_decode(text, config)

        result = search(self.ciphertext, self.scorer, WINDOW, decode=decode_then_cancel, cancel=cancel, progress=None)
        self.assertTrue(result.cancelled)
        self.assertEqual(result.evaluated, 1)
        self.assertEqual(result.best.config.positions()[:2], ["B", "C"])


class ParallelSearchTest(ut.TestCase):
    def test_matches_serial_search(self):
        config = MachineConfig.from_key_sheet("II I III", "1 1 1", "BAC", "B", "QW")
        plaintext = "ATTACKATDAWNALONGTHEEASTERNRIDGE"
        ciphertext = decode(plaintext, config)
        scorer = TrigramScorer.from_counts({
            plaintext[i:i + 3]: 10 for i in range(len(plaintext) - 2)
        })
        base = MachineConfig.from_key_sheet("I II III", "1 1 1", "AAC", "B")
        serial = SearchSettings(base=base, rotor_pool=("I", "II"), positions=("AB", "AB"))
        parallel = SearchSettings(base=base, rotor_pool=("I", "II"), positions=("AB", "AB"), workers=2)

        expected = search(ciphertext, scorer, serial, progress=None)
        actual = search(ciphertext, scorer, parallel, progress=None)

        self.assertEqual(actual.best, expected.best)
        self.assertEqual(actual.plaintext, expected.plaintext)
        self.assertEqual(actual.evaluated, expected.evaluated)
        self.assertEqual(list(actual.trace["slow_score"]), list(expected.trace["slow_score"]))
        self.assertEqual(list(actual.trace["rotors"]), list(expected.trace["rotors"]))

    def test_spawned_workers_ignore_ctrl_c(self):
        context = multiprocessing.get_context("spawn")
        with concurrent.futures.ProcessPoolExecutor(
            max_workers=1,
            mp_context=context,
            initializer=_init_worker,
            initargs=("", None, None, None),
        ) as executor:
            handler = executor.submit(signal.getsignal, signal.SIGINT).result()
        self.assertEqual(handler, signal.SIG_IGN)

    def test_cancel_keeps_the_chunk_already_received(self):
        config = MachineConfig.from_key_sheet("II I III", "1 1 1", "BAC", "B", "QW")
        ciphertext = decode("ATTACKATDAWNALONGTHEEASTERNRIDGE", config)
        scorer = TrigramScorer.from_counts({"ATT": 1, "TAC": 1})
        base = MachineConfig.from_key_sheet("I II III", "1 1 1", "AAC", "B")
        settings = SearchSettings(base=base, rotor_pool=("I", "II"), positions=("AB", "AB"), workers=2)
        cancel = threading.Event()
        cancel.set()

        result = search(
            ciphertext, scorer, settings, cancel=cancel, progress=None,
            mp_context=multiprocessing.get_context("spawn"),
        )
        self.assertTrue(result.cancelled)
        self.assertEqual(result.evaluated, 2)
        self.assertEqual(len(result.trace), 2)
        self.assertEqual(result.best.config.names()[:2], ["I", "II"])
        self.assertEqual(result.best.config.positions()[0], "A")


if __name__ == '__main__':
    ut.main()
