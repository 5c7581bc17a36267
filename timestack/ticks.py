from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterator
from dataclasses import dataclass, replace
from datetime import MINYEAR
from typing import Callable, ClassVar, Literal, Union

from timestack.dates import MS_PER_DAY, CalendarDateTime, CalendarOptions, DateFormat, Duration, TimeUnit
from timestack.measure import measure_max_label_width
from timestack.text import TextMeasurer


ELLIPSIS = "…"

TickLabel = Union[str, tuple[str, str]]
FloatingSide = Literal["left", "right"]
PreferLongBottom = Callable[[CalendarDateTime], bool]


@dataclass(frozen=True)
class TopTickSpec:
    fmt: DateFormat
    maj_fmt: DateFormat | None = None

    def patched(self, patch: DateFormat) -> TopTickSpec:
        return TopTickSpec(
            fmt=self.fmt.patched(patch),
            maj_fmt=self.maj_fmt.patched(patch) if self.maj_fmt is not None else None,
        )


@dataclass(frozen=True)
class BottomTickSpec:
    short_fmt: DateFormat
    long_fmt: DateFormat | None = None

    def patched(self, patch: DateFormat) -> BottomTickSpec:
        return BottomTickSpec(
            short_fmt=self.short_fmt.patched(patch),
            long_fmt=self.long_fmt.patched(patch) if self.long_fmt is not None else None,
        )

    def format_for(self, prefer_long: bool) -> DateFormat:
        if prefer_long and self.long_fmt is not None:
            return self.long_fmt
        return self.short_fmt


@dataclass(frozen=True)
class SeqTick:
    instant: CalendarDateTime
    is_major: bool = False
    with_bottom: bool = False


@dataclass(frozen=True)
class Tick:
    value: int
    label: TickLabel
    major: bool = False


@dataclass(frozen=True)
class RowEstimate:
    nticks: float
    label_width: float


@dataclass(frozen=True)
class TickEstimate:
    top: RowEstimate
    bottom: RowEstimate | None = None


def has_bottom(tick: Tick) -> bool:
    return isinstance(tick.label, tuple) and len(tick.label) > 1


@dataclass(frozen=True, kw_only=True)
class TickGenerator(ABC):
    """One cadence policy of the time axis.

    Concrete generators define `seq`, an endless run of candidate ticks in time order, and the
    nominal tick spacing used for density estimation. Everything else is shared.
    """

    kind: ClassVar[str]

    top: TopTickSpec
    bottom: BottomTickSpec | None = None

    @property
    @abstractmethod
    def top_size(self) -> int:
        raise NotImplementedError

    @property
    def bottom_size(self) -> int | None:
        return None

    @abstractmethod
    def seq(self, start: CalendarDateTime) -> Iterator[SeqTick]:
        """Yield ticks forward from `start`; the first ones may precede it."""
        raise NotImplementedError

    def estimate(
        self,
        range_ms: float,
        measurer: TextMeasurer,
        calendar: CalendarOptions,
        allow_long: bool = True,
    ) -> TickEstimate:
        top = self.top
        normal = measure_max_label_width(top.fmt, measurer, calendar)
        major = measure_max_label_width(top.maj_fmt, measurer, calendar) if top.maj_fmt is not None else 0.0
        top_est = RowEstimate(nticks=range_ms / self.top_size, label_width=max(normal, major))

        bottom = self.bottom
        bottom_size = self.bottom_size
        if bottom is None or bottom_size is None:
            return TickEstimate(top=top_est)

        short = measure_max_label_width(bottom.short_fmt, measurer, calendar)
        long = (
            measure_max_label_width(bottom.long_fmt, measurer, calendar)
            if allow_long and bottom.long_fmt is not None
            else 0.0
        )
        bottom_est = RowEstimate(nticks=range_ms / bottom_size, label_width=max(short, long))
        return TickEstimate(top=top_est, bottom=bottom_est)

    def format(self, dt: CalendarDateTime, is_major: bool, with_bottom: bool, prefer_long_bottom: bool) -> TickLabel:
        top_fmt = self.top.maj_fmt if is_major and self.top.maj_fmt is not None else self.top.fmt
        top = dt.to_locale_string(top_fmt)
        if not with_bottom or self.bottom is None:
            return top
        return (top, dt.to_locale_string(self.bottom.format_for(prefer_long_bottom)))

    def create(self, start: CalendarDateTime, end: CalendarDateTime, prefer_long_bottom: PreferLongBottom) -> list[Tick]:
        """Ticks of the half-open range [start, end)."""
        ticks: list[Tick] = []
        for tick in self.seq(start):
            dt = tick.instant
            if dt < start:
                continue
            if dt >= end:
                break
            ticks.append(
                Tick(
                    value=dt.to_millis(),
                    major=tick.is_major,
                    label=self.format(dt, tick.is_major, tick.with_bottom, prefer_long_bottom(dt)),
                )
            )
        return ticks

    def create_floating(self, dt: CalendarDateTime, side: FloatingSide, prefer_long_bottom: PreferLongBottom) -> Tick:
        if side not in ("left", "right"):
            raise ValueError(f"side must be 'left' or 'right', got {side!r}")
        text = dt.to_locale_string(self.bottom.format_for(prefer_long_bottom(dt))) if self.bottom is not None else ""
        label = ELLIPSIS + text if side == "left" else text + ELLIPSIS
        return Tick(value=dt.to_millis(), label=("", label))

    def patch_formats(self, patch: DateFormat) -> TickGenerator:
        """Return a copy with `patch` applied to every owned format (see `DateFormat.patched`)."""
        return replace(
            self,
            top=self.top.patched(patch),
            bottom=self.bottom.patched(patch) if self.bottom is not None else None,
        )


@dataclass(frozen=True, kw_only=True)
class PeriodicTickGenerator(TickGenerator):
    """Fixed calendar step from a start snapped to `align`.

    A tick is major when it sits on a `maj_unit` boundary and carries a bottom label when it sits
    on a `bottom_unit` boundary.
    """

    kind: ClassVar[str] = "periodic"

    step: Duration
    align: TimeUnit
    maj_unit: TimeUnit | None = None
    bottom_unit: TimeUnit | None = None

    def __post_init__(self) -> None:
        if self.step.to_millis() <= 0:
            raise ValueError("step must be a positive duration")
        if (self.bottom is None) != (self.bottom_unit is None):
            raise ValueError("bottom spec and bottom_unit must be given together")

    @property
    def top_size(self) -> int:
        return self.step.to_millis()

    @property
    def bottom_size(self) -> int | None:
        if self.bottom_unit is None:
            return None
        return Duration.of_unit(self.bottom_unit).to_millis()

    def seq(self, start: CalendarDateTime) -> Iterator[SeqTick]:
        dt = start.start_of(self.align)
        while True:
            with_bottom = self.bottom_unit is not None and dt.start_of(self.bottom_unit) == dt
            is_major = self.maj_unit is not None and dt.start_of(self.maj_unit) == dt
            yield SeqTick(instant=dt, is_major=is_major, with_bottom=with_bottom)
            try:
                dt = dt.plus(self.step)
            except OverflowError:
                # end of the representable calendar
                return


@dataclass(frozen=True, kw_only=True)
class DaysTickGenerator(TickGenerator):
    """Ticks on fixed days of every month, e.g. the 1st, 10th and 20th."""

    kind: ClassVar[str] = "days"

    days: tuple[int, ...]
    step: int
    maj_days: tuple[int, ...] = (1,)
    bottom_days: tuple[int, ...] = (1,)

    def __post_init__(self) -> None:
        if not self.days:
            raise ValueError("days must be non-empty")
        if any(not 1 <= d <= 31 for d in self.days):
            raise ValueError("days must be in [1, 31]")
        if list(self.days) != sorted(set(self.days)):
            raise ValueError("days must be strictly ascending")
        if self.step <= 0:
            raise ValueError("step must be > 0")

    @property
    def top_size(self) -> int:
        return self.step * MS_PER_DAY

    @property
    def bottom_size(self) -> int | None:
        return 30 * MS_PER_DAY if self.bottom is not None else None

    def seq(self, start: CalendarDateTime) -> Iterator[SeqTick]:
        month = start.start_of("month")
        bottom_days = self.bottom_days if self.bottom is not None else ()
        while True:
            last_day = month.days_in_month
            for day in self.days:
                if day > last_day:
                    continue
                yield SeqTick(
                    instant=month.with_fields(day=day),
                    is_major=day in self.maj_days,
                    with_bottom=day in bottom_days,
                )
            try:
                month = month.plus(Duration(months=1))
            except OverflowError:
                return


@dataclass(frozen=True, kw_only=True)
class YearsTickGenerator(TickGenerator):
    """Ticks on every `by_years`-th year, aligned to multiples of `by_years`."""

    kind: ClassVar[str] = "years"

    by_years: int

    def __post_init__(self) -> None:
        if self.by_years <= 0:
            raise ValueError("by_years must be > 0")
        if self.bottom is not None:
            raise ValueError("YearsTickGenerator has no bottom row")

    @property
    def top_size(self) -> int:
        # Nominal only: leap days are ignored.
        return self.by_years * 365 * MS_PER_DAY

    def seq(self, start: CalendarDateTime) -> Iterator[SeqTick]:
        first = start.year // self.by_years * self.by_years
        if first < MINYEAR:
            first += self.by_years
        dt = start.start_of("year").with_fields(year=first)
        step = Duration(years=self.by_years)
        while True:
            yield SeqTick(instant=dt)
            try:
                dt = dt.plus(step)
            except OverflowError:
                return
