from __future__ import annotations
from typing import Dict, Iterable, List, Optional, Sequence
from datetime import date
from passings.schemas import AggregatedBin, Event
from passings.windowing import Granularity, bin_key_of, display_label

def categories_of(events: Iterable[Event]) -> List[str]:
    return sorted({e.category for e in events})

def aggregate(events: Sequence[Event], granularity: Granularity) -> List[AggregatedBin]:
    g = Granularity.parse(granularity)
    categories = categories_of(events)

    counts: Dict[str, Dict[str, int]] = {}
    for e in events:
        key = bin_key_of(e.timestamp, g)
        cell = counts.get(key)
        if cell is None:
            cell = dict.fromkeys(categories, 0)
            counts[key] = cell
        cell[e.category] += 1

    return [
        AggregatedBin(bin_key=key, label=display_label(key, g), counts=counts[key])
        for key in sorted(counts)
    ]

def filter_events(
    events: Iterable[Event],
    camera: Optional[str] = None,
    categories: Optional[Iterable[str]] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
) -> List[Event]:
    """Apply the dashboard filters. Date bounds are inclusive UTC calendar dates."""
    wanted = set(categories or ())
    out = []
    for e in events:
        if camera and camera != "all" and e.camera != camera:
            continue
        if wanted and e.category not in wanted:
            continue
        day = e.timestamp.date()
        if start_date is not None and day < start_date:
            continue
        if end_date is not None and day > end_date:
            continue
        out.append(e)
    return out
