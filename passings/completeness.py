from __future__ import annotations
from typing import Optional
from datetime import datetime, timezone
from passings.windowing import Granularity, bin_key_of, bin_start

def _now_utc() -> datetime:
    return datetime.now(timezone.utc)

def is_incomplete(bin_key: str, granularity: Granularity, now: Optional[datetime] = None) -> bool:
    """True while the bin's period is still open, i.e. it shares its period with ``now``.

    ``now`` defaults to the wall clock read at call time.
    """
    g = Granularity.parse(granularity)
    if now is None:
        now = _now_utc()
    return bin_key_of(bin_start(bin_key, g), g) == bin_key_of(now, g)
