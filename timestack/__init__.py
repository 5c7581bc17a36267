from timestack.builder import TickBuildRequest, build_ticks
from timestack.config import TimestackOptions, validate_timestack_options
from timestack.dates import CalendarDateTime, CalendarOptions, DateFormat, Duration
from timestack.defaults import DEFAULT_TOOLTIP_FORMAT, HM, HMS, MD, MDAY, MON, YEAR, YM, YMD, make_default_generators
from timestack.errors import InvalidCalendarValueError, TimestackError, UnknownLocaleError
from timestack.measure import clear_label_caches, invalidate_label_caches, measure_max_label_width
from timestack.scale import TimestackScale
from timestack.selector import choose_generator
from timestack.text import PillowTextMeasurer, TextMeasurer
from timestack.ticks import (
    BottomTickSpec,
    DaysTickGenerator,
    PeriodicTickGenerator,
    Tick,
    TickGenerator,
    TopTickSpec,
    YearsTickGenerator,
    has_bottom,
)

__all__ = [
    "BottomTickSpec",
    "CalendarDateTime",
    "CalendarOptions",
    "DEFAULT_TOOLTIP_FORMAT",
    "DateFormat",
    "DaysTickGenerator",
    "Duration",
    "HM",
    "HMS",
    "InvalidCalendarValueError",
    "MD",
    "MDAY",
    "MON",
    "PeriodicTickGenerator",
    "PillowTextMeasurer",
    "TextMeasurer",
    "Tick",
    "TickBuildRequest",
    "TickGenerator",
    "TimestackError",
    "TimestackOptions",
    "TimestackScale",
    "TopTickSpec",
    "UnknownLocaleError",
    "YEAR",
    "YM",
    "YMD",
    "YearsTickGenerator",
    "build_ticks",
    "choose_generator",
    "clear_label_caches",
    "has_bottom",
    "invalidate_label_caches",
    "make_default_generators",
    "measure_max_label_width",
    "validate_timestack_options",
]
