from __future__ import annotations

import math
import unittest

from timestack.config import TimestackOptions
from timestack.dates import CalendarDateTime, CalendarOptions, DateFormat
from timestack.defaults import YEAR
from timestack.measure import clear_label_caches
from timestack.scale import TimestackScale
from timestack.ticks import ELLIPSIS, TopTickSpec, YearsTickGenerator


CAL = CalendarOptions(zone="UTC", locale="en_US")
# 2024-01-05 10:00:00 UTC
NOW_S = 1_704_448_800.0


def _ms(**fields: int) -> int:
    return CalendarDateTime.from_fields(CAL, **fields).to_millis()


class _CountingMeasurer:
    def __init__(self, px_per_char: float = 4.0) -> None:
        self.px_per_char = px_per_char
        self.font = f"{px_per_char:g}px counting"

    def measure(self, text: str) -> float:
        return len(text) * self.px_per_char


def _scale(**overrides) -> TimestackScale:
    overrides.setdefault("calendar", CAL)
    overrides.setdefault("format_style", DateFormat(hour12=False))
    return TimestackScale(TimestackOptions(**overrides), measurer=_CountingMeasurer(), clock=lambda: NOW_S)


class TimestackScaleTests(unittest.TestCase):
    def setUp(self) -> None:
        clear_label_caches()

    def test_default_generators_are_built_and_patched(self) -> None:
        scale = _scale()
        self.assertEqual(len(scale.generators), 27)
        self.assertIsInstance(scale.generators, tuple)
        for gen in scale.generators:
            for fmt in (gen.top.fmt, gen.top.maj_fmt):
                if fmt is not None and fmt.hour is not None:
                    self.assertIs(fmt.hour12, False)

    def test_build_ticks_over_ninety_minutes(self) -> None:
        scale = _scale()
        lo = _ms(year=2024, month=1, day=5, hour=10)
        hi = _ms(year=2024, month=1, day=5, hour=11, minute=30)
        ticks = scale.build_ticks(lo, hi, 600.0)
        self.assertIs(scale.ticks, ticks)
        self.assertEqual(len(ticks), 19)
        self.assertEqual(ticks[0].label, ("", ELLIPSIS + "Jan 5"))
        self.assertEqual(ticks[1].label, "10:00")
        self.assertTrue(ticks[1].major)
        self.assertEqual(ticks[2].label, "10:05")
        self.assertEqual(ticks[-1].label, "11:25")

    def test_max_ticks_limit_caps_tick_count(self) -> None:
        lo = _ms(year=2024, month=1, day=5, hour=10)
        hi = _ms(year=2024, month=1, day=5, hour=11, minute=30)

        ticks = _scale().build_ticks(lo, hi, 600.0, max_ticks_limit=10)
        self.assertEqual(len(ticks), 10)
        self.assertEqual(ticks[2].label, "10:10")

        ticks = _scale(max_ticks_limit=10).build_ticks(lo, hi, 600.0)
        self.assertEqual(len(ticks), 10)

    def test_non_finite_limits_fall_back_to_today(self) -> None:
        scale = _scale()
        lo, hi = scale.determine_data_limits(math.nan, math.inf)
        self.assertEqual(lo, _ms(year=2024, month=1, day=5))
        self.assertEqual(hi, _ms(year=2024, month=1, day=6))

    def test_degenerate_range_is_widened(self) -> None:
        scale = _scale()
        lo, hi = scale.determine_data_limits(5000.0, 5000.0)
        self.assertLess(lo, hi)

    def test_custom_generator_factory(self) -> None:
        def factory():
            return [YearsTickGenerator(by_years=10, top=TopTickSpec(fmt=YEAR))]

        scale = _scale(make_tick_generators=factory)
        self.assertEqual(len(scale.generators), 1)
        ticks = scale.build_ticks(_ms(year=2000), _ms(year=2050), 800.0)
        self.assertEqual([t.label for t in ticks], ["2000", "2010", "2020", "2030", "2040"])

    def test_empty_factory_rejected(self) -> None:
        with self.assertRaises(ValueError):
            _scale(make_tick_generators=list)

    def test_tooltip_label(self) -> None:
        scale = TimestackScale(TimestackOptions(calendar=CAL), measurer=_CountingMeasurer(), clock=lambda: NOW_S)
        text = scale.label_for_value(_ms(year=2024, month=1, day=5, hour=10))
        self.assertIn("January 5, 2024", text)
        self.assertIn("10:00:00", text)

    def test_now_uses_clock(self) -> None:
        self.assertEqual(_scale().now().to_millis(), int(NOW_S * 1000))

    def test_pixel_mapping(self) -> None:
        scale = _scale()
        scale.determine_data_limits(0.0, 1000.0)
        self.assertEqual(scale.pixel_for_value(250.0, 10.0, 400.0), 110.0)
        self.assertEqual(scale.value_for_pixel(110.0, 10.0, 400.0), 250.0)
        self.assertTrue(math.isnan(scale.pixel_for_value(None, 10.0, 400.0)))
        with self.assertRaises(ValueError):
            scale.value_for_pixel(0.0, 0.0, 0.0)

    def test_set_measurer_changes_choice(self) -> None:
        scale = _scale()
        lo = _ms(year=2024, month=1, day=5, hour=10)
        hi = _ms(year=2024, month=1, day=5, hour=11, minute=30)
        self.assertEqual(len(scale.build_ticks(lo, hi, 600.0)), 19)
        scale.set_measurer(_CountingMeasurer(6.0))
        # wider labels push the 5 minute cadence over the density ceiling
        ticks = scale.build_ticks(lo, hi, 600.0)
        self.assertEqual(len(ticks), 10)
        self.assertEqual(ticks[2].label, "10:10")


if __name__ == "__main__":
    unittest.main()
