from __future__ import annotations
from typing import Tuple
from datetime import date, datetime, timezone, timedelta
from enum import Enum
import re

class Granularity(str, Enum):
    HOUR = "hour"
    DAY = "day"
    WEEK = "week"
    MONTH = "month"

    @classmethod
    def parse(cls, value) -> "Granularity":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError(f"unknown granularity: {value!r}") from None

    @property
    def rank(self) -> int:
        return _RANK[self]

    # ordered by coarseness
    def __lt__(self, other):
        if not isinstance(other, Granularity):
            return NotImplemented
        return self.rank < other.rank

    def __le__(self, other):
        if not isinstance(other, Granularity):
            return NotImplemented
        return self.rank <= other.rank

    def __gt__(self, other):
        if not isinstance(other, Granularity):
            return NotImplemented
        return self.rank > other.rank

    def __ge__(self, other):
        if not isinstance(other, Granularity):
            return NotImplemented
        return self.rank >= other.rank

_RANK = {Granularity.HOUR: 0, Granularity.DAY: 1, Granularity.WEEK: 2, Granularity.MONTH: 3}

_FINER = {
    Granularity.MONTH: Granularity.WEEK,
    Granularity.WEEK: Granularity.DAY,
    Granularity.DAY: Granularity.HOUR,
    Granularity.HOUR: Granularity.HOUR,
}

_MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")

_HOUR_RE = re.compile(r"(\d{4})-(\d{2})-(\d{2})T(\d{2})")
_DAY_RE = re.compile(r"(\d{4})-(\d{2})-(\d{2})")
_MONTH_RE = re.compile(r"(\d{4})-(\d{2})")

def _to_utc(ts: datetime) -> datetime:
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc)

def iso_week(d: date) -> Tuple[date, int, int]:
    """Return (monday, iso_year, iso_week) for the ISO-8601 week containing ``d``.

    The week belongs to the year of its Thursday, so 2024-12-31 maps to
    (2024-12-30, 2025, 1).
    """
    thursday = d + timedelta(days=4 - d.isoweekday())
    monday = thursday - timedelta(days=3)
    week = (thursday.timetuple().tm_yday - 1) // 7 + 1
    return monday, thursday.year, week

def bin_key_of(ts: datetime, granularity: Granularity) -> str:
    g = Granularity.parse(granularity)
    ts = _to_utc(ts)
    if g is Granularity.HOUR:
        return f"{ts.year:04d}-{ts.month:02d}-{ts.day:02d}T{ts.hour:02d}"
    if g is Granularity.DAY:
        return f"{ts.year:04d}-{ts.month:02d}-{ts.day:02d}"
    if g is Granularity.WEEK:
        monday, _, _ = iso_week(ts.date())
        return monday.isoformat()
    return f"{ts.year:04d}-{ts.month:02d}"

def bin_start(key: str, granularity: Granularity) -> datetime:
    g = Granularity.parse(granularity)
    if g is Granularity.HOUR:
        m = _HOUR_RE.fullmatch(key)
    elif g is Granularity.MONTH:
        m = _MONTH_RE.fullmatch(key)
    else:
        m = _DAY_RE.fullmatch(key)
    if m is None:
        raise ValueError(f"malformed {g.value} bin key: {key!r}")

    parts = [int(p) for p in m.groups()]
    if g is Granularity.MONTH:
        parts.append(1)
    start = datetime(*parts, tzinfo=timezone.utc)
    if g is Granularity.WEEK and start.isoweekday() != 1:
        raise ValueError(f"week bin key must be a Monday: {key!r}")
    return start

def _advance(start: datetime, g: Granularity) -> datetime:
    if g is Granularity.HOUR:
        return start + timedelta(hours=1)
    if g is Granularity.DAY:
        return start + timedelta(days=1)
    if g is Granularity.WEEK:
        return start + timedelta(days=7)
    year, month = divmod(start.month, 12)
    return start.replace(year=start.year + year, month=month + 1, day=1)

def period_bounds(key: str, granularity: Granularity) -> Tuple[datetime, datetime]:
    g = Granularity.parse(granularity)
    start = bin_start(key, g)
    return start, _advance(start, g)

def next_key(key: str, granularity: Granularity) -> str:
    g = Granularity.parse(granularity)
    _, end = period_bounds(key, g)
    return bin_key_of(end, g)

def display_label(key: str, granularity: Granularity) -> str:
    g = Granularity.parse(granularity)
    s = bin_start(key, g)
    if g is Granularity.HOUR:
        return f"{s.day} {_MONTHS[s.month - 1]} {s.year}, {s.hour:02d}:00"
    if g is Granularity.DAY:
        return f"{s.day} {_MONTHS[s.month - 1]} {s.year}"
    if g is Granularity.WEEK:
        _, iso_year, week = iso_week(s.date())
        return f"Week {week}, {iso_year}"
    return f"{_MONTHS[s.month - 1]} {s.year}"

def finer(granularity: Granularity) -> Granularity:
    return _FINER[Granularity.parse(granularity)]
