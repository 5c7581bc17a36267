from __future__ import annotations

import unittest

from timestack.config import DEFAULT_OPTIONS, TimestackOptions, options_summary, validate_timestack_options
from timestack.dates import CalendarOptions, DateFormat
from timestack.defaults import DEFAULT_TOOLTIP_FORMAT, make_default_generators
from timestack.errors import UnknownLocaleError


class TimestackOptionsTests(unittest.TestCase):
    def test_package_import_builds_default_options(self) -> None:
        import timestack
        from timestack import config

        self.assertIsInstance(config.DEFAULT_OPTIONS, timestack.TimestackOptions)
        self.assertEqual(timestack.validate_timestack_options(), config.DEFAULT_OPTIONS)

    def test_defaults(self) -> None:
        options = validate_timestack_options()
        self.assertEqual(options, DEFAULT_OPTIONS)
        self.assertEqual(options.calendar, CalendarOptions(zone="UTC", locale="en_US"))
        self.assertEqual(options.density, 0.5)
        self.assertEqual(options.max_density, 0.75)
        self.assertIsNone(options.max_ticks_limit)
        self.assertEqual(options.tooltip_format, DEFAULT_TOOLTIP_FORMAT)
        self.assertEqual(options.left_floating_tick_thres, 0.33)
        self.assertIsNone(options.right_floating_tick_thres)

    def test_nested_mappings_are_coerced(self) -> None:
        options = validate_timestack_options(
            {
                "calendar": {"zone": "Europe/Berlin", "locale": "de-DE"},
                "format_style": {"hour12": False},
                "tooltip_format": {"year": "numeric", "month": "short"},
                "max_ticks_limit": 12,
            }
        )
        self.assertEqual(options.calendar.key, "de_DE/Europe/Berlin")
        self.assertEqual(options.format_style, DateFormat(hour12=False))
        self.assertEqual(options.tooltip_format, DateFormat(year="numeric", month="short"))
        self.assertEqual(options.max_ticks_limit, 12)

    def test_unknown_option_rejected(self) -> None:
        with self.assertRaisesRegex(ValueError, "Unknown timestack option"):
            validate_timestack_options({"tick_spacing": 10})

    def test_invalid_nested_fields_rejected(self) -> None:
        with self.assertRaises(ValueError):
            validate_timestack_options({"format_style": {"hours": "numeric"}})
        with self.assertRaises(UnknownLocaleError):
            validate_timestack_options({"calendar": {"locale": "xx_YY"}})

    def test_value_checks(self) -> None:
        with self.assertRaises(ValueError):
            TimestackOptions(density=0.9, max_density=0.75)
        with self.assertRaises(ValueError):
            TimestackOptions(density=-1.0)
        with self.assertRaises(ValueError):
            TimestackOptions(max_ticks_limit=0)
        with self.assertRaises(ValueError):
            TimestackOptions(max_ticks_limit=True)  # type: ignore[arg-type]
        with self.assertRaises(ValueError):
            TimestackOptions(left_floating_tick_thres=1.5)
        with self.assertRaises(ValueError):
            TimestackOptions(make_tick_generators="defaults")  # type: ignore[arg-type]
        with self.assertRaises(ValueError):
            TimestackOptions(calendar="UTC")  # type: ignore[arg-type]

    def test_floating_thresholds_may_be_disabled(self) -> None:
        options = TimestackOptions(left_floating_tick_thres=None, right_floating_tick_thres=0.5)
        self.assertIsNone(options.left_floating_tick_thres)
        self.assertEqual(options.right_floating_tick_thres, 0.5)

    def test_summary_is_plain_data(self) -> None:
        summary = options_summary(TimestackOptions(make_tick_generators=make_default_generators, format_style=DateFormat(hour12=True)))
        self.assertEqual(summary["calendar"], {"zone": "UTC", "locale": "en_US"})
        self.assertEqual(summary["format_style"], "hour12=True")
        self.assertTrue(summary["make_tick_generators"])
        self.assertEqual(summary["density"], 0.5)


if __name__ == "__main__":
    unittest.main()
