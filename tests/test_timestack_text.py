from __future__ import annotations

import logging
import unittest

from timestack.text import PillowTextMeasurer, _font_file_names, text_width


class PillowTextMeasurerTests(unittest.TestCase):
    def test_font_identity(self) -> None:
        self.assertEqual(PillowTextMeasurer().font, "12px DejaVu Sans")
        self.assertEqual(PillowTextMeasurer(font_family="Arial", font_size_px=10.5).font, "10.5px Arial")

    def test_wider_text_measures_wider(self) -> None:
        measurer = PillowTextMeasurer()
        self.assertEqual(measurer.measure(""), 0.0)
        short = measurer.measure("Jan 5")
        long = measurer.measure("September 25, 2024")
        self.assertGreater(short, 0.0)
        self.assertGreater(long, short)

    def test_larger_font_measures_wider(self) -> None:
        small = text_width("Wednesday", font_size_px=10.0)
        large = text_width("Wednesday", font_size_px=30.0)
        self.assertGreater(large, small)

    def test_unknown_family_falls_back(self) -> None:
        measurer = PillowTextMeasurer(font_family="No Such Font Family")
        self.assertGreater(measurer.measure("12:00"), 0.0)

    def test_missing_family_logs_default_font(self) -> None:
        with self.assertLogs("timestack.text", logging.DEBUG) as logs:
            width = text_width("12:00", font_family="Missing Family 7f3a", font_size_px=14.0)
        self.assertGreater(width, 0)
        self.assertIn("using Pillow's default font", logs.output[0])

    def test_font_file_names(self) -> None:
        self.assertEqual(_font_file_names("DejaVu Sans"), ("DejaVuSans", "DejaVuSans-Regular"))

    def test_validation(self) -> None:
        with self.assertRaises(ValueError):
            PillowTextMeasurer(font_size_px=0)
        with self.assertRaises(ValueError):
            PillowTextMeasurer(font_family="  ")


if __name__ == "__main__":
    unittest.main()
