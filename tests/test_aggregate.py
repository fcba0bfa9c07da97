from datetime import date, datetime, timezone
from passings.aggregate import aggregate, categories_of, filter_events
from passings.schemas import Event
from passings.windowing import Granularity

def _evt(i, ts, category, camera="cam-1"):
    return Event(id=i, timestamp=ts, category=category, camera=camera)

def _events():
    utc = timezone.utc
    return [
        _evt(1, datetime(2025, 1, 2, 9, tzinfo=utc), "car"),
        _evt(2, datetime(2025, 1, 1, 8, tzinfo=utc), "truck", "cam-2"),
        _evt(3, datetime(2025, 1, 2, 23, tzinfo=utc), "car"),
        _evt(4, datetime(2025, 1, 1, 7, tzinfo=utc), "car", "cam-2"),
        _evt(5, datetime(2025, 1, 6, 1, tzinfo=utc), "bus"),
    ]

def test_aggregate_counts_and_order():
    bins = aggregate(_events(), Granularity.DAY)
    assert [b.bin_key for b in bins] == ["2025-01-01", "2025-01-02", "2025-01-06"]
    assert bins[0].counts == {"bus": 0, "car": 1, "truck": 1}
    assert bins[1].counts == {"bus": 0, "car": 2, "truck": 0}
    assert bins[2].counts == {"bus": 1, "car": 0, "truck": 0}
    assert bins[0].label == "1 Jan 2025"

def test_aggregate_is_rectangular():
    for g in Granularity:
        bins = aggregate(_events(), g)
        keysets = {tuple(sorted(b.counts)) for b in bins}
        assert keysets == {("bus", "car", "truck")}
        assert sum(sum(b.counts.values()) for b in bins) == 5

def test_aggregate_week_spans_year_boundary():
    bins = aggregate(_events(), Granularity.WEEK)
    assert [b.bin_key for b in bins] == ["2024-12-30", "2025-01-06"]
    assert bins[0].label == "Week 1, 2025"
    assert sum(bins[0].counts.values()) == 4

def test_aggregate_empty():
    assert aggregate([], Granularity.DAY) == []
    assert categories_of([]) == []

def test_filter_events():
    evts = _events()
    assert {e.id for e in filter_events(evts, camera="cam-2")} == {2, 4}
    assert len(filter_events(evts, camera="all")) == 5
    assert {e.id for e in filter_events(evts, categories=["car"])} == {1, 3, 4}
    assert {e.id for e in filter_events(evts, start_date=date(2025, 1, 2), end_date=date(2025, 1, 2))} == {1, 3}
    assert {e.id for e in filter_events(evts, end_date=date(2025, 1, 1))} == {2, 4}
