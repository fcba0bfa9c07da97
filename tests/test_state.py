from datetime import datetime, timezone
import pytest
from passings.state import EventStore

def _rec(i, ts="2025-01-01T10:00:00Z", category="car", **kw):
    return {"id": i, "creationTime": ts, "vehicleType": category, **kw}

def test_snapshot_absorbs_wire_records(records):
    st = EventStore()
    res = st.absorb_snapshot(records)
    assert res == {"applied": 4, "dropped": 0}
    assert len(st) == 4
    assert st.get(1).timestamp == datetime(2025, 1, 1, 8, 15, tzinfo=timezone.utc)
    assert st.categories() == ["bus", "car", "truck"]
    assert st.cameras() == ["cam-1", "cam-2"]

def test_snapshot_twice_is_idempotent(records):
    once = EventStore()
    once.absorb_snapshot(records)
    twice = EventStore()
    twice.absorb_snapshot(records)
    twice.absorb_snapshot(records)
    assert twice.events == once.events

def test_same_id_from_both_sources_is_stored_once():
    st = EventStore()
    st.absorb_snapshot([_rec(1)])
    st.absorb_stream(_rec(1))
    assert len(st.merged_events()) == 1

    st.absorb_stream(_rec(1, category="truck"))
    assert len(st.merged_events()) == 1
    assert st.get(1).category == "truck"

def test_last_applied_wins_regardless_of_source():
    a = EventStore()
    a.absorb_stream(_rec(7, category="bus"))
    a.absorb_snapshot([_rec(7, category="car")])
    assert a.get(7).category == "car"

    b = EventStore()
    b.absorb_snapshot([_rec(7, category="car")])
    b.absorb_stream(_rec(7, category="bus"))
    assert b.get(7).category == "bus"

def test_malformed_records_are_dropped_not_fatal():
    st = EventStore()
    res = st.absorb_snapshot([
        _rec(1),
        {"creationTime": "2025-01-01T10:00:00Z", "vehicleType": "car"},
        {"id": 3, "vehicleType": "car"},
        {"id": 4, "creationTime": "not a date", "vehicleType": "car"},
        {"id": 5, "creationTime": "2025-01-01T10:00:00Z", "vehicleType": "  "},
        "garbage",
        _rec(6),
    ])
    assert res == {"applied": 2, "dropped": 5}
    assert sorted(e.id for e in st.merged_events()) == [1, 6]
    assert st.absorb_stream({"id": 9}) is False
    assert st.dropped == 6

def test_stream_absorption_is_timestamped():
    st = EventStore()
    assert st.last_stream_at is None
    st.absorb_snapshot([_rec(1)])
    assert st.last_stream_at is None
    seen = datetime(2025, 1, 1, 12, tzinfo=timezone.utc)
    st.absorb_stream(_rec(2), now=seen)
    assert st.last_stream_at == seen

def test_correction_updates_in_place():
    st = EventStore()
    st.absorb_snapshot([_rec(1, camera="cam-1")])
    updated = st.apply_correction(1, {"vehicleType": "van"})
    assert updated.category == "van"
    assert updated.camera == "cam-1"
    assert st.get(1).category == "van"
    assert len(st) == 1

def test_correction_rejects_unknown_id_and_fields():
    st = EventStore()
    st.absorb_snapshot([_rec(1)])
    with pytest.raises(KeyError):
        st.apply_correction(2, {"category": "van"})
    with pytest.raises(ValueError):
        st.apply_correction(1, {"id": 99})
    with pytest.raises(ValueError):
        st.apply_correction(1, {"category": " "})

def test_clear():
    st = EventStore()
    st.absorb_stream(_rec(1))
    st.clear()
    assert len(st) == 0
    assert st.last_stream_at is None
