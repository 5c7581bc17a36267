from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import asdict, dataclass, field, fields
from typing import Any, Callable

from timestack.dates import CalendarOptions, DateFormat
from timestack.defaults import DEFAULT_TOOLTIP_FORMAT
from timestack.ticks import TickGenerator


GeneratorFactory = Callable[[], Sequence[TickGenerator]]


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


@dataclass(frozen=True)
class TimestackOptions:
    """Construction-time options of a time axis.

    `density` is the wanted ratio of total label width to axis width, `max_density` its ceiling.
    A floating-tick threshold is the fraction of the axis width that may pass without a bottom
    label before an edge tick is added; None disables that edge.
    """

    calendar: CalendarOptions = field(default_factory=CalendarOptions)
    density: float = 0.5
    max_density: float = 0.75
    max_ticks_limit: int | None = None
    tooltip_format: DateFormat = DEFAULT_TOOLTIP_FORMAT
    left_floating_tick_thres: float | None = 0.33
    right_floating_tick_thres: float | None = None
    make_tick_generators: GeneratorFactory | None = None
    format_style: DateFormat | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.calendar, CalendarOptions):
            raise ValueError("Option `calendar` must be CalendarOptions")
        if not _is_number(self.density) or self.density <= 0:
            raise ValueError("Option `density` must be a positive number")
        if not _is_number(self.max_density) or self.max_density <= 0:
            raise ValueError("Option `max_density` must be a positive number")
        if self.density > self.max_density:
            raise ValueError("Option `density` must not exceed `max_density`")
        if self.max_ticks_limit is not None and (
            isinstance(self.max_ticks_limit, bool) or not isinstance(self.max_ticks_limit, int) or self.max_ticks_limit <= 0
        ):
            raise ValueError("Option `max_ticks_limit` must be a positive integer or None")
        if not isinstance(self.tooltip_format, DateFormat):
            raise ValueError("Option `tooltip_format` must be DateFormat")
        for name in ("left_floating_tick_thres", "right_floating_tick_thres"):
            value = getattr(self, name)
            if value is not None and (not _is_number(value) or not 0 <= value <= 1):
                raise ValueError(f"Option `{name}` must be in [0, 1] or None")
        if self.make_tick_generators is not None and not callable(self.make_tick_generators):
            raise ValueError("Option `make_tick_generators` must be callable")
        if self.format_style is not None and not isinstance(self.format_style, DateFormat):
            raise ValueError("Option `format_style` must be DateFormat or None")


DEFAULT_OPTIONS = TimestackOptions()


def _coerce(value: Any, cls: type) -> Any:
    if isinstance(value, Mapping):
        try:
            return cls(**value)
        except TypeError as exc:
            raise ValueError(f"invalid {cls.__name__} fields: {sorted(value)}") from exc
    return value


def validate_timestack_options(overrides: Mapping[str, Any] | None = None) -> TimestackOptions:
    """Merge user overrides onto the defaults; nested formats and calendar may be plain mappings."""

    raw: dict[str, Any] = {f.name: getattr(DEFAULT_OPTIONS, f.name) for f in fields(TimestackOptions)}
    if overrides:
        for key, value in overrides.items():
            if key not in raw:
                raise ValueError(f"Unknown timestack option: {key}")
            raw[key] = value

    raw["calendar"] = _coerce(raw["calendar"], CalendarOptions)
    raw["tooltip_format"] = _coerce(raw["tooltip_format"], DateFormat)
    if raw["format_style"] is not None:
        raw["format_style"] = _coerce(raw["format_style"], DateFormat)
    return TimestackOptions(**raw)


def options_summary(options: TimestackOptions) -> dict[str, Any]:
    out = {f.name: getattr(options, f.name) for f in fields(options)}
    out["calendar"] = asdict(options.calendar)
    out["tooltip_format"] = options.tooltip_format.key()
    out["format_style"] = options.format_style.key() if options.format_style is not None else None
    out["make_tick_generators"] = options.make_tick_generators is not None
    return out
