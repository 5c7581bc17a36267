from __future__ import annotations

import logging
import unittest

import numpy as np

from timestack.dates import MS_PER_MINUTE, CalendarOptions, DateFormat
from timestack.defaults import make_default_generators
from timestack.measure import clear_label_caches
from timestack.selector import choose_generator, score_generators


CAL = CalendarOptions(zone="UTC", locale="en_US")
NINETY_MIN = 90 * MS_PER_MINUTE


class _CountingMeasurer:
    font = "4px counting"

    def measure(self, text: str) -> float:
        return len(text) * 4.0


def _generators():
    return [gen.patch_formats(DateFormat(hour12=False)) for gen in make_default_generators()]


class ChooseGeneratorTests(unittest.TestCase):
    def setUp(self) -> None:
        clear_label_caches()
        self.gens = _generators()
        self.measurer = _CountingMeasurer()

    def _choose(self, gens=None, range_ms: float = NINETY_MIN, width: float = 600.0, **kwargs):
        kwargs.setdefault("want_density", 0.5)
        kwargs.setdefault("max_density", 0.75)
        return choose_generator(self.gens if gens is None else gens, range_ms, width, self.measurer, CAL, **kwargs)

    def test_scores_follow_estimates(self) -> None:
        densities, counts = score_generators(self.gens, NINETY_MIN, 600.0, self.measurer, CAL)
        self.assertEqual(densities.shape, (len(self.gens),))
        # 5 minute ticks: 18 labels of "23:59" at 4 px per char
        self.assertAlmostEqual(densities[5], 18 * 20.0 / 600.0)
        self.assertAlmostEqual(counts[5], 18.0)
        self.assertAlmostEqual(densities[4], 90 * 20.0 / 600.0)
        self.assertTrue(np.all(np.diff(counts[:13]) <= 0))

    def test_picks_density_closest_to_wanted(self) -> None:
        gen = self._choose()
        self.assertIs(gen, self.gens[5])

    def test_tick_count_ceiling(self) -> None:
        gen = self._choose(max_tick_count=10)
        self.assertIs(gen, self.gens[6])

    def test_density_ceiling_excludes_closer_candidates(self) -> None:
        # 1 minute ticks sit at density 3.0; with want 2.9 they'd win if the ceiling allowed it
        gen = self._choose(want_density=2.9, max_density=1.0)
        self.assertIs(gen, self.gens[5])

    def test_first_generator_wins_ties(self) -> None:
        twin = self.gens[5]
        again = twin.patch_formats(DateFormat(hour12=False))
        self.assertEqual(again, twin)
        self.assertIsNot(again, twin)
        gen = self._choose(gens=[twin, again])
        self.assertIs(gen, twin)

    def test_returns_none_when_nothing_fits(self) -> None:
        with self.assertLogs("timestack.selector", logging.DEBUG) as logs:
            self.assertIsNotNone(self._choose())
        self.assertIn("chose periodic generator #5", logs.output[0])
        self.assertIsNone(self._choose(gens=self.gens[:5]))
        self.assertIsNone(self._choose(max_density=1e-9, want_density=1e-9))

    def test_degenerate_inputs(self) -> None:
        self.assertIsNone(self._choose(gens=[]))
        self.assertIsNone(self._choose(width=0.0))
        self.assertIsNone(self._choose(range_ms=0.0))


if __name__ == "__main__":
    unittest.main()
