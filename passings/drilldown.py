from __future__ import annotations
from typing import Iterable, List
from passings.aggregate import aggregate
from passings.schemas import AggregatedBin, Event
from passings.windowing import Granularity, finer, period_bounds

def events_in_bin(parent_key: str, parent_granularity: Granularity, events: Iterable[Event]) -> List[Event]:
    start, end = period_bounds(parent_key, parent_granularity)
    return [e for e in events if start <= e.timestamp < end]

def drill_down(parent_key: str, parent_granularity: Granularity, base_events: Iterable[Event]) -> List[AggregatedBin]:
    """Re-aggregate one parent bin at the next finer granularity.

    ``base_events`` are expected to be filtered already; the parent bin's own
    extent replaces any date-range filter.
    """
    g = Granularity.parse(parent_granularity)
    return aggregate(events_in_bin(parent_key, g, base_events), finer(g))
