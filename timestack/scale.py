from __future__ import annotations

import logging
import math
import time
from typing import Callable

from timestack.builder import TickBuildRequest, build_ticks
from timestack.config import DEFAULT_OPTIONS, TimestackOptions, options_summary
from timestack.dates import CalendarDateTime, CalendarOptions, Duration
from timestack.defaults import make_default_generators
from timestack.text import PillowTextMeasurer, TextMeasurer
from timestack.ticks import Tick, TickGenerator


LOGGER = logging.getLogger(__name__)


class TimestackScale:
    """Time axis with density-driven tick selection.

    The generator set is built once at construction; `format_style` is applied to every
    generator then. Label-width caches are keyed by the measurer's font, so swapping the
    measurer needs no explicit invalidation.
    """

    def __init__(
        self,
        options: TimestackOptions | None = None,
        measurer: TextMeasurer | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.options = options if options is not None else DEFAULT_OPTIONS
        self.measurer: TextMeasurer = measurer if measurer is not None else PillowTextMeasurer()
        self._clock = clock

        factory = self.options.make_tick_generators
        gens = list(factory()) if factory is not None else make_default_generators()
        if not gens:
            raise ValueError("tick generator factory returned no generators")
        if self.options.format_style is not None:
            gens = [gen.patch_formats(self.options.format_style) for gen in gens]
        self.generators: tuple[TickGenerator, ...] = tuple(gens)

        self.min = 0.0
        self.max = 1.0
        self.ticks: list[Tick] = []
        LOGGER.debug("timestack scale with %d generators: %s", len(self.generators), options_summary(self.options))

    @property
    def calendar(self) -> CalendarOptions:
        return self.options.calendar

    def now(self) -> CalendarDateTime:
        return CalendarDateTime.now(self.calendar, clock=self._clock)

    def set_measurer(self, measurer: TextMeasurer) -> None:
        self.measurer = measurer

    def determine_data_limits(self, data_min: float, data_max: float) -> tuple[float, float]:
        """Resolve the visible range; non-finite bounds fall back to today."""
        if not math.isfinite(data_min):
            data_min = self.now().start_of("day").to_millis()
        if not math.isfinite(data_max):
            data_max = self.now().start_of("day").plus(Duration(days=1)).to_millis()
        self.min = min(data_min, data_max - 1)
        self.max = max(data_min + 1, data_max)
        return (self.min, self.max)

    def build_ticks(
        self,
        range_min: float,
        range_max: float,
        axis_width_px: float,
        max_ticks_limit: int | None = None,
    ) -> list[Tick]:
        range_min, range_max = self.determine_data_limits(range_min, range_max)
        limit = max_ticks_limit if max_ticks_limit is not None else self.options.max_ticks_limit
        request = TickBuildRequest(
            range_min=range_min,
            range_max=range_max,
            axis_width_px=axis_width_px,
            want_density=self.options.density,
            max_density=self.options.max_density,
            max_tick_count=math.inf if limit is None else limit,
            left_floating_tick_thres=self.options.left_floating_tick_thres,
            right_floating_tick_thres=self.options.right_floating_tick_thres,
        )
        self.ticks = build_ticks(self.generators, request, self.measurer, self.calendar, self.now())
        return self.ticks

    def label_for_value(self, value: float) -> str:
        return CalendarDateTime.from_millis(value, self.calendar).to_locale_string(self.options.tooltip_format)

    def pixel_for_value(self, value: float | None, left: float, width: float) -> float:
        if value is None:
            return math.nan
        pos = (value - self.min) / (self.max - self.min)
        return left + pos * width

    def value_for_pixel(self, pixel: float, left: float, width: float) -> float:
        if width <= 0:
            raise ValueError("width must be > 0")
        pos = (pixel - left) / width
        return self.min + pos * (self.max - self.min)
