"""Worst-case label widths for date formats.

Localized labels only vary in width through month and weekday names; the time of day is
pinned to 23:59:59 (two digits per field, no narrow 1's). The widest short and long month
names are found by looping over the 12 months, then the widest weekday names (short, long,
narrow) are searched within days 22-28 of those months, which cover every weekday once.
The resulting samples stay the widest even when the month is rendered as a number.
"""

from __future__ import annotations

from collections import OrderedDict
from collections.abc import Hashable, Iterable, Iterator
from typing import Callable, Generic, TypeVar

from timestack.dates import CalendarDateTime, CalendarOptions, DateFormat
from timestack.errors import InvalidCalendarValueError
from timestack.text import TextMeasurer


K = TypeVar("K", bound=Hashable)
V = TypeVar("V")

LABEL_CACHE_SIZE = 4096
SAMPLE_CACHE_SIZE = 64

_REFERENCE_FIELDS = {"year": 2024, "month": 12, "day": 22, "hour": 23, "minute": 59, "second": 59}
_WEEKDAY_WINDOW = range(22, 29)

SampleTable = dict[tuple[str | None, str | None], CalendarDateTime]


class LRUCache(Generic[K, V]):
    def __init__(self, maxsize: int) -> None:
        if maxsize <= 0:
            raise ValueError("maxsize must be > 0")
        self.maxsize = maxsize
        self._data: OrderedDict[K, V] = OrderedDict()

    def __len__(self) -> int:
        return len(self._data)

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def get(self, key: K) -> V | None:
        try:
            value = self._data[key]
        except KeyError:
            return None
        self._data.move_to_end(key)
        return value

    def put(self, key: K, value: V) -> None:
        self._data[key] = value
        self._data.move_to_end(key)
        while len(self._data) > self.maxsize:
            self._data.popitem(last=False)

    def discard_if(self, predicate: Callable[[K], bool]) -> int:
        stale = [key for key in self._data if predicate(key)]
        for key in stale:
            del self._data[key]
        return len(stale)

    def clear(self) -> None:
        self._data.clear()


# (calendar key, font) -> sample table
_widest_dates_cache: LRUCache[tuple[str, str], SampleTable] = LRUCache(SAMPLE_CACHE_SIZE)
# (calendar key, font, format key) -> width
_widest_labels_cache: LRUCache[tuple[str, str, str], float] = LRUCache(LABEL_CACHE_SIZE)


def invalidate_label_caches(*, font: str | None = None, calendar_key: str | None = None) -> int:
    """Drop cached samples and widths for a font and/or calendar; both None drops everything."""

    def stale(key: tuple[str, ...]) -> bool:
        if font is not None and key[1] != font:
            return False
        if calendar_key is not None and key[0] != calendar_key:
            return False
        return True

    return _widest_dates_cache.discard_if(stale) + _widest_labels_cache.discard_if(stale)


def clear_label_caches() -> None:
    _widest_dates_cache.clear()
    _widest_labels_cache.clear()


def _pick_widest_sample(measurer: TextMeasurer, samples: Iterable[CalendarDateTime], fmt: DateFormat) -> CalendarDateTime:
    widest: CalendarDateTime | None = None
    widest_w = 0.0
    for dt in samples:
        width = measurer.measure(dt.to_locale_string(fmt))
        if widest is None or width > widest_w:
            widest, widest_w = dt, width
    if widest is None:
        raise InvalidCalendarValueError("no calendar samples to measure")
    return widest


def _month_candidates(base: CalendarDateTime) -> Iterator[CalendarDateTime]:
    for month in range(1, 13):
        yield base.with_fields(month=month)


def _weekday_candidates(base: CalendarDateTime) -> Iterator[CalendarDateTime]:
    for day in _WEEKDAY_WINDOW:
        yield base.with_fields(day=day)


def _build_sample_table(measurer: TextMeasurer, calendar: CalendarOptions) -> SampleTable:
    num = CalendarDateTime.from_fields(calendar, **_REFERENCE_FIELDS)

    sm = _pick_widest_sample(measurer, _month_candidates(num), DateFormat(month="short"))
    lm = _pick_widest_sample(measurer, _month_candidates(num), DateFormat(month="long"))

    widest_weekdays: dict[tuple[str, str], CalendarDateTime] = {}
    for month_style, base in (("short", sm), ("long", lm)):
        for weekday_style in ("short", "long", "narrow"):
            widest_weekdays[(month_style, weekday_style)] = _pick_widest_sample(
                measurer, _weekday_candidates(base), DateFormat(weekday=weekday_style)
            )

    table: SampleTable = {}
    # Digits do not vary by locale the way names do, so numeric months share the short-month row.
    for month_style in (None, "numeric", "2-digit", "narrow"):
        table[(month_style, None)] = sm if month_style == "narrow" else num
        for weekday_style in ("short", "long", "narrow"):
            table[(month_style, weekday_style)] = widest_weekdays[("short", weekday_style)]
    for month_style, base in (("short", sm), ("long", lm)):
        table[(month_style, None)] = base
        for weekday_style in ("short", "long", "narrow"):
            table[(month_style, weekday_style)] = widest_weekdays[(month_style, weekday_style)]
    return table


def find_widest_local_date(fmt: DateFormat, measurer: TextMeasurer, calendar: CalendarOptions) -> CalendarDateTime:
    key = (calendar.key, measurer.font)
    table = _widest_dates_cache.get(key)
    if table is None:
        table = _build_sample_table(measurer, calendar)
        _widest_dates_cache.put(key, table)
    return table[(fmt.month, fmt.weekday)]


def measure_max_label_width(fmt: DateFormat, measurer: TextMeasurer, calendar: CalendarOptions) -> float:
    label_key = (calendar.key, measurer.font, fmt.key())
    cached = _widest_labels_cache.get(label_key)
    if cached is not None:
        return cached

    widest_date = find_widest_local_date(fmt, measurer, calendar)
    width = measurer.measure(widest_date.to_locale_string(fmt))
    _widest_labels_cache.put(label_key, width)
    return width
