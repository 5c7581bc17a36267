from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
import logging
import math

from timestack.dates import CalendarDateTime, CalendarOptions
from timestack.selector import choose_generator
from timestack.text import TextMeasurer
from timestack.ticks import PreferLongBottom, Tick, TickGenerator, has_bottom


LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class TickBuildRequest:
    range_min: float
    range_max: float
    axis_width_px: float
    want_density: float = 0.5
    max_density: float = 0.75
    max_tick_count: float = math.inf
    left_floating_tick_thres: float | None = 0.33
    right_floating_tick_thres: float | None = None

    def __post_init__(self) -> None:
        if not self.range_max > self.range_min:
            raise ValueError("range_max must be > range_min")

    @property
    def span(self) -> float:
        return self.range_max - self.range_min


def prefer_long_bottom_for(now: CalendarDateTime) -> PreferLongBottom:
    """Long bottom labels (with the year) for instants outside the current year."""

    def prefer_long(dt: CalendarDateTime) -> bool:
        return not dt.has_same(now, "year")

    return prefer_long


def build_ticks(
    generators: Sequence[TickGenerator],
    request: TickBuildRequest,
    measurer: TextMeasurer,
    calendar: CalendarOptions,
    now: CalendarDateTime,
) -> list[Tick]:
    gen = choose_generator(
        generators,
        request.span,
        request.axis_width_px,
        measurer,
        calendar,
        want_density=request.want_density,
        max_density=request.max_density,
        max_tick_count=request.max_tick_count,
    )
    if gen is None:
        LOGGER.warning(
            "failed to choose the tick generator (range %.0f ms, width %.1f px)",
            request.span,
            request.axis_width_px,
        )
        return []

    min_dt = CalendarDateTime.from_millis(request.range_min, calendar)
    max_dt = CalendarDateTime.from_millis(request.range_max, calendar)
    prefer_long = prefer_long_bottom_for(now)

    ticks = gen.create(min_dt, max_dt, prefer_long)
    if gen.bottom is None:
        return ticks

    with_bottoms = [t for t in ticks if has_bottom(t)]

    if _need_floating_tick(with_bottoms, request, side="left"):
        tick = gen.create_floating(min_dt, "left", prefer_long)
        if with_bottoms:
            gap = (with_bottoms[0].value - request.range_min) * request.axis_width_px / request.span
            tick = _fitting(tick, gap, measurer)
        if tick is not None:
            ticks.insert(0, tick)

    if _need_floating_tick(with_bottoms, request, side="right"):
        tick = gen.create_floating(max_dt, "right", prefer_long)
        if with_bottoms:
            gap = (request.range_max - with_bottoms[-1].value) * request.axis_width_px / request.span
            tick = _fitting(tick, gap, measurer)
        if tick is not None:
            ticks.append(tick)

    return ticks


def _need_floating_tick(with_bottoms: Sequence[Tick], request: TickBuildRequest, *, side: str) -> bool:
    thres = request.left_floating_tick_thres if side == "left" else request.right_floating_tick_thres
    if thres is None:
        return False
    if not with_bottoms:
        return True
    if side == "left":
        distance = with_bottoms[0].value - request.range_min
    else:
        distance = request.range_max - with_bottoms[-1].value
    return distance / request.span > thres


def _fitting(tick: Tick, gap_px: float, measurer: TextMeasurer) -> Tick | None:
    # Margins are not laid out yet, so the gap is an estimate; keep a 2x safety factor.
    width = measurer.measure(tick.label[1])
    if width * 2 > gap_px:
        LOGGER.debug("dropping floating tick %r: %.1f px label, %.1f px gap", tick.label[1], width, gap_px)
        return None
    return tick
