from datetime import datetime, timezone
from freezegun import freeze_time
from passings.completeness import is_incomplete
from passings.windowing import Granularity

@freeze_time("2025-03-26T11:30:00Z")
def test_day_bin_for_today_is_incomplete_yesterday_complete():
    assert is_incomplete("2025-03-26", Granularity.DAY)
    assert not is_incomplete("2025-03-25", Granularity.DAY)

@freeze_time("2025-03-26T11:30:00Z")
def test_hour_week_month_use_their_own_period():
    assert is_incomplete("2025-03-26T11", Granularity.HOUR)
    assert not is_incomplete("2025-03-26T10", Granularity.HOUR)
    assert is_incomplete("2025-03-24", Granularity.WEEK)
    assert not is_incomplete("2025-03-17", Granularity.WEEK)
    assert is_incomplete("2025-03", Granularity.MONTH)
    assert not is_incomplete("2025-02", Granularity.MONTH)

def test_explicit_now():
    now = datetime(2025, 1, 1, 0, 5, tzinfo=timezone.utc)
    assert is_incomplete("2024-12-30", Granularity.WEEK, now=now)
    assert not is_incomplete("2024-12", Granularity.MONTH, now=now)

def test_reads_the_clock_on_every_call():
    with freeze_time("2025-03-26T23:59:00Z") as frozen:
        assert is_incomplete("2025-03-26", Granularity.DAY)
        frozen.move_to("2025-03-27T00:01:00Z")
        assert not is_incomplete("2025-03-26", Granularity.DAY)
