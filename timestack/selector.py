from __future__ import annotations

from collections.abc import Sequence
import logging
import math

import numpy as np

from timestack.dates import CalendarOptions
from timestack.text import TextMeasurer
from timestack.ticks import TickGenerator


LOGGER = logging.getLogger(__name__)


def score_generators(
    generators: Sequence[TickGenerator],
    range_ms: float,
    axis_width_px: float,
    measurer: TextMeasurer,
    calendar: CalendarOptions,
) -> tuple[np.ndarray, np.ndarray]:
    """Label density and tick count each generator would produce over `range_ms`.

    Density is the total estimated label width over the axis width, taken from the busier
    of the top and bottom rows.
    """
    densities = np.empty(len(generators), dtype=np.float64)
    counts = np.empty(len(generators), dtype=np.float64)
    for idx, gen in enumerate(generators):
        est = gen.estimate(range_ms, measurer, calendar)
        top_density = est.top.nticks * est.top.label_width / axis_width_px
        bottom_density = 0.0
        bottom_nticks = 0.0
        if est.bottom is not None:
            bottom_density = est.bottom.nticks * est.bottom.label_width / axis_width_px
            bottom_nticks = est.bottom.nticks
        densities[idx] = max(top_density, bottom_density)
        counts[idx] = max(est.top.nticks, bottom_nticks)
    return densities, counts


def choose_generator(
    generators: Sequence[TickGenerator],
    range_ms: float,
    axis_width_px: float,
    measurer: TextMeasurer,
    calendar: CalendarOptions,
    *,
    want_density: float,
    max_density: float,
    max_tick_count: float = math.inf,
) -> TickGenerator | None:
    """Generator whose density is closest to `want_density` within both ceilings, or None."""
    if not generators or axis_width_px <= 0 or range_ms <= 0:
        return None

    densities, counts = score_generators(generators, range_ms, axis_width_px, measurer, calendar)
    fits = (densities <= max_density) & (counts <= max_tick_count)
    if not np.any(fits):
        return None

    distance = np.where(fits, np.abs(densities - want_density), np.inf)
    # argmin returns the first minimum, so earlier generators win ties.
    best = int(np.argmin(distance))
    LOGGER.debug(
        "chose %s generator #%d (density %.3f, %.1f ticks)",
        generators[best].kind,
        best,
        densities[best],
        counts[best],
    )
    return generators[best]
