"""Holt's linear-trend (double exponential smoothing) forecast over aggregated bins.

Only complete bins feed the fit: a bin whose period is still running holds a
partial count and would drag the trend down. The forecast targets the first
period after the last complete bin that has not started yet.
"""
from __future__ import annotations
from typing import List, Optional, Sequence, Tuple
from datetime import datetime
import logging
import math
from passings.completeness import is_incomplete
from passings.schemas import AggregatedBin, ForecastBin
from passings.windowing import Granularity, display_label, next_key

log = logging.getLogger(__name__)

def holt_linear(series: Sequence[float], alpha: float = 0.5, beta: float = 0.5) -> Tuple[float, float]:
    """Return the final (level, trend) after smoothing ``series``.

    level_1 = s_1, trend_1 = s_2 - s_1, then for each later observation
    level_t = a*s_t + (1-a)*(level_{t-1} + trend_{t-1}) and
    trend_t = b*(level_t - level_{t-1}) + (1-b)*trend_{t-1}.
    """
    if not series:
        raise ValueError("cannot smooth an empty series")
    level = float(series[0])
    trend = float(series[1] - series[0]) if len(series) > 1 else 0.0
    for value in series[1:]:
        prev_level = level
        level = alpha * value + (1 - alpha) * (prev_level + trend)
        trend = beta * (level - prev_level) + (1 - beta) * trend
    return level, trend

def _round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))

def forecast(
    bins: Sequence[AggregatedBin],
    granularity: Granularity,
    categories: Sequence[str],
    alpha: float = 0.5,
    beta: float = 0.5,
    now: Optional[datetime] = None,
) -> Optional[ForecastBin]:
    g = Granularity.parse(granularity)
    complete: List[AggregatedBin] = sorted(
        (b for b in bins if not is_incomplete(b.bin_key, g, now)), key=lambda b: b.bin_key
    )
    if len(complete) < 2:
        log.debug("forecast unavailable: %d complete %s bins", len(complete), g.value)
        return None

    counts = {}
    for cat in categories:
        series = [b.counts.get(cat, 0) for b in complete]
        level, trend = holt_linear(series, alpha, beta)
        counts[cat] = max(0, _round_half_up(level + trend))

    target = next_key(complete[-1].bin_key, g)
    while is_incomplete(target, g, now):
        target = next_key(target, g)

    return ForecastBin(bin_key=target, label=display_label(target, g), counts=counts)
