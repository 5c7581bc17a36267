from __future__ import annotations

from calendar import monthrange
from dataclasses import dataclass, fields, replace
from datetime import MAXYEAR, MINYEAR, datetime, timedelta, timezone
from functools import lru_cache, total_ordering
import time
from typing import Any, Callable, Literal
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from babel import Locale
from babel import UnknownLocaleError as BabelUnknownLocaleError
from babel.dates import format_datetime, match_skeleton, tokenize_pattern, untokenize_pattern

from timestack.errors import InvalidCalendarValueError, UnknownLocaleError


TimeUnit = Literal["second", "minute", "hour", "day", "week", "month", "quarter", "year"]
NumericStyle = Literal["numeric", "2-digit"]
MonthStyle = Literal["numeric", "2-digit", "short", "long", "narrow"]
WeekdayStyle = Literal["short", "long", "narrow"]

MS_PER_SECOND = 1000
MS_PER_MINUTE = 60 * MS_PER_SECOND
MS_PER_HOUR = 60 * MS_PER_MINUTE
MS_PER_DAY = 24 * MS_PER_HOUR

# Casual conversion used for nominal sizes: a month is 30 days, a year 365.
_CASUAL_MS = {
    "years": 365 * MS_PER_DAY,
    "months": 30 * MS_PER_DAY,
    "weeks": 7 * MS_PER_DAY,
    "days": MS_PER_DAY,
    "hours": MS_PER_HOUR,
    "minutes": MS_PER_MINUTE,
    "seconds": MS_PER_SECOND,
    "milliseconds": 1,
}

_UNIT_DURATION: dict[str, tuple[str, int]] = {
    "second": ("seconds", 1),
    "minute": ("minutes", 1),
    "hour": ("hours", 1),
    "day": ("days", 1),
    "week": ("weeks", 1),
    "month": ("months", 1),
    "quarter": ("months", 3),
    "year": ("years", 1),
}

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

_NUMERIC_STYLES = ("numeric", "2-digit")
_MONTH_STYLES = ("numeric", "2-digit", "short", "long", "narrow")
_WEEKDAY_STYLES = ("short", "long", "narrow")

_MONTH_WIDTH = {"numeric": 1, "2-digit": 2, "short": 3, "long": 4, "narrow": 5}
_WEEKDAY_WIDTH = {"short": 3, "long": 4, "narrow": 5}
_NUMERIC_WIDTH = {"numeric": 1, "2-digit": 2}

_DATE_FIELDS = "yMEd"
_TIME_FIELDS = "hHms"
# Pattern characters whose width follows the requested format rather than the locale pattern.
_FIELD_FAMILY = {
    "y": "y",
    "M": "M",
    "L": "M",
    "E": "E",
    "c": "E",
    "e": "E",
    "d": "d",
    "h": "h",
    "H": "h",
    "K": "h",
    "k": "h",
}


@lru_cache(maxsize=64)
def _zone(name: str) -> ZoneInfo:
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise InvalidCalendarValueError(f"unknown time zone: {name!r}") from exc


@lru_cache(maxsize=64)
def _locale(identifier: str) -> Locale:
    try:
        return Locale.parse(identifier)
    except (BabelUnknownLocaleError, ValueError) as exc:
        raise UnknownLocaleError(f"unknown locale: {identifier!r}") from exc


@dataclass(frozen=True)
class CalendarOptions:
    """Time zone and locale every calendar value of an axis is created with."""

    zone: str = "UTC"
    locale: str = "en_US"

    def __post_init__(self) -> None:
        if not self.zone.strip():
            raise InvalidCalendarValueError("CalendarOptions `zone` must be non-empty")
        if not self.locale.strip():
            raise UnknownLocaleError("CalendarOptions `locale` must be non-empty")
        object.__setattr__(self, "locale", self.locale.strip().replace("-", "_"))
        _zone(self.zone)
        _locale(self.locale)

    @property
    def key(self) -> str:
        return f"{self.locale}/{self.zone}"

    @property
    def tzinfo(self) -> ZoneInfo:
        return _zone(self.zone)

    @property
    def babel_locale(self) -> Locale:
        return _locale(self.locale)


@dataclass(frozen=True)
class DateFormat:
    """Display format of a date/time label.

    Fields mirror the familiar `Intl.DateTimeFormat` options; unset fields are not displayed.
    Rendering goes through the CLDR skeleton of the set fields, so field order and separators
    follow the locale.
    """

    weekday: WeekdayStyle | None = None
    year: NumericStyle | None = None
    month: MonthStyle | None = None
    day: NumericStyle | None = None
    hour: NumericStyle | None = None
    minute: NumericStyle | None = None
    second: NumericStyle | None = None
    hour12: bool | None = None

    def __post_init__(self) -> None:
        if self.weekday is not None and self.weekday not in _WEEKDAY_STYLES:
            raise ValueError(f"DateFormat `weekday` must be one of {_WEEKDAY_STYLES}")
        if self.month is not None and self.month not in _MONTH_STYLES:
            raise ValueError(f"DateFormat `month` must be one of {_MONTH_STYLES}")
        for name in ("year", "day", "hour", "minute", "second"):
            value = getattr(self, name)
            if value is not None and value not in _NUMERIC_STYLES:
                raise ValueError(f"DateFormat `{name}` must be one of {_NUMERIC_STYLES}")
        if self.hour12 is not None and not isinstance(self.hour12, bool):
            raise ValueError("DateFormat `hour12` must be a bool")

    def key(self) -> str:
        return ",".join(f"{f.name}={getattr(self, f.name)}" for f in fields(self) if getattr(self, f.name) is not None)

    def patched(self, patch: DateFormat) -> DateFormat:
        """Override the fields this format already displays with the ones set in `patch`.

        `hour12` is only taken over when the format shows an hour.
        """
        changes: dict[str, Any] = {}
        for f in fields(patch):
            value = getattr(patch, f.name)
            if value is None:
                continue
            if f.name == "hour12":
                if self.hour is not None:
                    changes[f.name] = value
            elif getattr(self, f.name) is not None:
                changes[f.name] = value
        if not changes:
            return self
        return replace(self, **changes)

    def skeleton(self, locale: Locale) -> str:
        parts: list[str] = []
        if self.year is not None:
            parts.append("y" * _NUMERIC_WIDTH[self.year])
        if self.month is not None:
            parts.append("M" * _MONTH_WIDTH[self.month])
        if self.weekday is not None:
            parts.append("E" * _WEEKDAY_WIDTH[self.weekday])
        if self.day is not None:
            parts.append("d" * _NUMERIC_WIDTH[self.day])
        if self.hour is not None:
            char = "h" if _uses_12_hour_clock(self.hour12, locale) else "H"
            parts.append(char * _NUMERIC_WIDTH[self.hour])
        if self.minute is not None:
            parts.append("m" * _NUMERIC_WIDTH[self.minute])
        if self.second is not None:
            parts.append("s" * _NUMERIC_WIDTH[self.second])
        return "".join(parts) or "yMd"


def _pattern_text(pattern: Any) -> str:
    return str(getattr(pattern, "pattern", pattern))


def _uses_12_hour_clock(hour12: bool | None, locale: Locale) -> bool:
    if hour12 is not None:
        return hour12
    return "h" in _pattern_text(locale.time_formats["short"])


def _match_pattern(skeleton: str, locale: Locale) -> str | None:
    skeletons = locale.datetime_skeletons
    if skeleton not in skeletons:
        skeleton = match_skeleton(skeleton, skeletons)
        if skeleton is None:
            return None
    return _pattern_text(skeletons[skeleton])


def _is_text_field(char: str, width: int) -> bool:
    if char == "E":
        return True
    return char in "MLce" and width >= 3


def _adjust_widths(pattern: str, skeleton: str) -> str:
    wanted: dict[str, tuple[str, int]] = {}
    for char, width in (value for kind, value in tokenize_pattern(skeleton) if kind == "field"):
        family = _FIELD_FAMILY.get(char)
        if family is not None:
            wanted[family] = (char, width)
    tokens = []
    for kind, value in tokenize_pattern(pattern):
        if kind == "field":
            char, width = value
            family = _FIELD_FAMILY.get(char)
            if family is not None and family in wanted:
                wanted_char, wanted_width = wanted[family]
                if family == "h":
                    # Hours only widen: a locale "HH" stays two digits for a numeric hour.
                    value = (char, max(width, wanted_width))
                elif _is_text_field(char, width) == _is_text_field(wanted_char, wanted_width):
                    # A numeric field never turns into a name (ja "M月" stays "3月").
                    value = (char, wanted_width)
        tokens.append((kind, value))
    return untokenize_pattern(tokens)


@lru_cache(maxsize=1024)
def _resolve_pattern(fmt: DateFormat, locale_id: str) -> str | tuple[str, str]:
    locale = _locale(locale_id)
    skeleton = fmt.skeleton(locale)
    pattern = _match_pattern(skeleton, locale)
    if pattern is not None:
        return _adjust_widths(pattern, skeleton)

    date_skeleton = "".join(ch for ch in skeleton if ch in _DATE_FIELDS)
    time_skeleton = "".join(ch for ch in skeleton if ch in _TIME_FIELDS)
    date_pattern = _match_pattern(date_skeleton, locale) if date_skeleton else None
    time_pattern = _match_pattern(time_skeleton, locale) if time_skeleton else None
    if date_pattern is not None and time_pattern is not None:
        return (_adjust_widths(date_pattern, date_skeleton), _adjust_widths(time_pattern, time_skeleton))
    # No locale pattern covers these fields; render them in skeleton order.
    return " ".join(ch * width for ch, width in (value for kind, value in tokenize_pattern(skeleton) if kind == "field"))


@dataclass(frozen=True)
class Duration:
    years: int = 0
    months: int = 0
    weeks: int = 0
    days: int = 0
    hours: int = 0
    minutes: int = 0
    seconds: int = 0
    milliseconds: int = 0

    @classmethod
    def of_unit(cls, unit: TimeUnit, count: int = 1) -> Duration:
        try:
            name, per_unit = _UNIT_DURATION[unit]
        except KeyError as exc:
            raise ValueError(f"unknown time unit: {unit!r}") from exc
        return cls(**{name: per_unit * count})

    def to_millis(self) -> int:
        return sum(getattr(self, name) * per_ms for name, per_ms in _CASUAL_MS.items())


@total_ordering
@dataclass(frozen=True, eq=False)
class CalendarDateTime:
    """Zone- and locale-aware instant; ordering and equality follow the instant alone."""

    moment: datetime
    options: CalendarOptions

    @classmethod
    def from_millis(cls, millis: int | float, options: CalendarOptions) -> CalendarDateTime:
        moment = (_EPOCH + timedelta(milliseconds=millis)).astimezone(options.tzinfo)
        return cls(moment=moment, options=options)

    @classmethod
    def from_fields(
        cls,
        options: CalendarOptions,
        *,
        year: int,
        month: int = 1,
        day: int = 1,
        hour: int = 0,
        minute: int = 0,
        second: int = 0,
        millisecond: int = 0,
    ) -> CalendarDateTime:
        try:
            wall = datetime(year, month, day, hour, minute, second, millisecond * 1000)
        except (TypeError, ValueError) as exc:
            raise InvalidCalendarValueError(
                f"invalid calendar fields: {year}-{month}-{day} {hour}:{minute}:{second}.{millisecond}"
            ) from exc
        return cls._from_wall(wall, options)

    @classmethod
    def now(cls, options: CalendarOptions, clock: Callable[[], float] = time.time) -> CalendarDateTime:
        return cls.from_millis(int(clock() * MS_PER_SECOND), options)

    @classmethod
    def _from_wall(cls, wall: datetime, options: CalendarOptions, fold: int = 0) -> CalendarDateTime:
        local = wall.replace(tzinfo=options.tzinfo, fold=fold)
        # Round-trip through UTC so wall times inside a DST gap resolve to a real instant.
        return cls(moment=local.astimezone(timezone.utc).astimezone(options.tzinfo), options=options)

    @property
    def year(self) -> int:
        return self.moment.year

    @property
    def month(self) -> int:
        return self.moment.month

    @property
    def day(self) -> int:
        return self.moment.day

    @property
    def days_in_month(self) -> int:
        return monthrange(self.moment.year, self.moment.month)[1]

    def to_millis(self) -> int:
        return (self.moment - _EPOCH) // timedelta(milliseconds=1)

    def with_fields(self, **changes: int) -> CalendarDateTime:
        m = self.moment
        values = {
            "year": m.year,
            "month": m.month,
            "day": m.day,
            "hour": m.hour,
            "minute": m.minute,
            "second": m.second,
            "millisecond": m.microsecond // 1000,
        }
        unknown = set(changes) - set(values)
        if unknown:
            raise InvalidCalendarValueError(f"unknown calendar fields: {sorted(unknown)}")
        values.update(changes)
        return CalendarDateTime.from_fields(self.options, **values)

    def start_of(self, unit: TimeUnit) -> CalendarDateTime:
        wall = self.moment.replace(tzinfo=None, microsecond=0)
        fold = self.moment.fold
        if unit == "second":
            pass
        elif unit == "minute":
            wall = wall.replace(second=0)
        elif unit == "hour":
            wall = wall.replace(minute=0, second=0)
        else:
            fold = 0
            wall = wall.replace(hour=0, minute=0, second=0)
            if unit == "week":
                wall -= timedelta(days=wall.isoweekday() - 1)
            elif unit == "month":
                wall = wall.replace(day=1)
            elif unit == "quarter":
                wall = wall.replace(month=(wall.month - 1) // 3 * 3 + 1, day=1)
            elif unit == "year":
                wall = wall.replace(month=1, day=1)
            elif unit != "day":
                raise ValueError(f"unknown time unit: {unit!r}")
        return CalendarDateTime._from_wall(wall, self.options, fold=fold)

    def plus(self, duration: Duration) -> CalendarDateTime:
        """Add calendar units on the wall clock, then time units on the absolute timeline."""
        moment = self.moment
        if duration.years or duration.months or duration.weeks or duration.days:
            wall = moment.replace(tzinfo=None)
            if duration.years or duration.months:
                total = wall.year * 12 + (wall.month - 1) + duration.years * 12 + duration.months
                year, month0 = divmod(total, 12)
                if not MINYEAR <= year <= MAXYEAR:
                    raise OverflowError(f"year {year} is out of range")
                day = min(wall.day, monthrange(year, month0 + 1)[1])
                wall = wall.replace(year=year, month=month0 + 1, day=day)
            if duration.weeks or duration.days:
                wall += timedelta(days=duration.days + 7 * duration.weeks)
            moment = CalendarDateTime._from_wall(wall, self.options, fold=moment.fold).moment
        elapsed = timedelta(
            hours=duration.hours,
            minutes=duration.minutes,
            seconds=duration.seconds,
            milliseconds=duration.milliseconds,
        )
        if elapsed:
            moment = (moment.astimezone(timezone.utc) + elapsed).astimezone(self.options.tzinfo)
        return CalendarDateTime(moment=moment, options=self.options)

    def has_same(self, other: CalendarDateTime, unit: TimeUnit) -> bool:
        other = CalendarDateTime.from_millis(other.to_millis(), self.options)
        return self.start_of(unit) == other.start_of(unit)

    def to_locale_string(self, fmt: DateFormat) -> str:
        locale = self.options.babel_locale
        pattern = _resolve_pattern(fmt, self.options.locale)
        if isinstance(pattern, tuple):
            date_text = format_datetime(self.moment, pattern[0], locale=locale)
            time_text = format_datetime(self.moment, pattern[1], locale=locale)
            glue = _pattern_text(locale.datetime_formats["medium"])
            return glue.replace("'", "").replace("{0}", time_text).replace("{1}", date_text)
        return format_datetime(self.moment, pattern, locale=locale)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CalendarDateTime):
            return NotImplemented
        # Same-tzinfo datetime comparison ignores `fold`; compare instants instead.
        return self.to_millis() == other.to_millis()

    def __lt__(self, other: CalendarDateTime) -> bool:
        if not isinstance(other, CalendarDateTime):
            return NotImplemented
        return self.to_millis() < other.to_millis()

    def __hash__(self) -> int:
        return hash(self.to_millis())
