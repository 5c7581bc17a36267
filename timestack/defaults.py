from __future__ import annotations

from timestack.dates import DateFormat, Duration
from timestack.ticks import (
    BottomTickSpec,
    DaysTickGenerator,
    PeriodicTickGenerator,
    TickGenerator,
    TopTickSpec,
    YearsTickGenerator,
)


HMS = DateFormat(hour="numeric", minute="numeric", second="numeric")
HM = DateFormat(hour="numeric", minute="numeric")
MDAY = DateFormat(day="numeric")
MON = DateFormat(month="short")
YEAR = DateFormat(year="numeric")
YMD = DateFormat(year="numeric", month="short", day="numeric")
YM = DateFormat(year="numeric", month="short")
MD = DateFormat(month="short", day="numeric")

DEFAULT_TOOLTIP_FORMAT = DateFormat(
    year="numeric",
    month="long",
    day="numeric",
    hour="numeric",
    minute="numeric",
    second="numeric",
)

_DAY_BOTTOM = BottomTickSpec(short_fmt=MD, long_fmt=YMD)
_MONTH_BOTTOM = BottomTickSpec(short_fmt=MON, long_fmt=YM)
_YEAR_BOTTOM = BottomTickSpec(short_fmt=YEAR)


def _seconds(step: int, align: str) -> PeriodicTickGenerator:
    return PeriodicTickGenerator(
        step=Duration(seconds=step),
        align=align,
        maj_unit="minute",
        top=TopTickSpec(fmt=HMS, maj_fmt=HM),
        bottom=_DAY_BOTTOM,
        bottom_unit="day",
    )


def _minutes(step: int, align: str) -> PeriodicTickGenerator:
    return PeriodicTickGenerator(
        step=Duration(minutes=step),
        align=align,
        maj_unit="hour",
        top=TopTickSpec(fmt=HM),
        bottom=_DAY_BOTTOM,
        bottom_unit="day",
    )


def _hours(step: int, align: str) -> PeriodicTickGenerator:
    return PeriodicTickGenerator(
        step=Duration(hours=step),
        align=align,
        maj_unit="day",
        top=TopTickSpec(fmt=HM),
        bottom=_DAY_BOTTOM,
        bottom_unit="day",
    )


def _month_days(days: tuple[int, ...], step: int) -> DaysTickGenerator:
    return DaysTickGenerator(days=days, step=step, top=TopTickSpec(fmt=MDAY), bottom=_MONTH_BOTTOM)


def _months(step: int, align: str) -> PeriodicTickGenerator:
    # Nominal month size is 30 days.
    return PeriodicTickGenerator(
        step=Duration(months=step),
        align=align,
        maj_unit="year",
        top=TopTickSpec(fmt=MON),
        bottom=_YEAR_BOTTOM,
        bottom_unit="year",
    )


def _years(by_years: int) -> YearsTickGenerator:
    return YearsTickGenerator(by_years=by_years, top=TopTickSpec(fmt=YEAR))


def make_default_generators() -> list[TickGenerator]:
    """Stock cadences from one second to a thousand years, finest first."""
    return [
        _seconds(1, "second"),
        _seconds(5, "minute"),
        _seconds(10, "minute"),
        _seconds(30, "minute"),
        _minutes(1, "minute"),
        _minutes(5, "hour"),
        _minutes(10, "hour"),
        _minutes(15, "hour"),
        _minutes(30, "hour"),
        _hours(1, "hour"),
        _hours(3, "day"),
        _hours(6, "day"),
        _hours(12, "day"),
        PeriodicTickGenerator(
            step=Duration(days=1),
            align="day",
            maj_unit="month",
            top=TopTickSpec(fmt=MDAY),
            bottom=_MONTH_BOTTOM,
            bottom_unit="month",
        ),
        _month_days((1, 5, 10, 15, 20, 25), 5),
        _month_days((1, 10, 20), 10),
        _month_days((1, 15), 15),
        _months(1, "month"),
        _months(3, "year"),
        _months(6, "year"),
        _years(1),
        _years(5),
        _years(10),
        _years(25),
        _years(50),
        _years(100),
        _years(1000),
    ]
