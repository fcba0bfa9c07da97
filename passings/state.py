from __future__ import annotations
from typing import Any, Dict, Iterable, List, Optional
from datetime import datetime, timezone
import logging
from passings.errors import MalformedEvent
from passings.schemas import Event, EventPatch, parse_event

log = logging.getLogger(__name__)

def _now_utc() -> datetime:
    return datetime.now(timezone.utc)

class EventStore:
    """Session-scoped id -> Event map fed by the bulk snapshot and the push stream.

    Every write is an insert-or-replace keyed on the event id, so the last
    applied write wins regardless of which source it came from.
    """

    def __init__(self):
        self.events: Dict[int, Event] = {}
        self.last_stream_at: Optional[datetime] = None
        self.dropped = 0

    def __len__(self) -> int:
        return len(self.events)

    def __contains__(self, event_id: object) -> bool:
        return event_id in self.events

    def get(self, event_id: int) -> Optional[Event]:
        return self.events.get(event_id)

    def _upsert(self, raw: Any) -> bool:
        try:
            evt = parse_event(raw)
        except MalformedEvent as e:
            self.dropped += 1
            log.warning("dropping malformed record: %s", e)
            return False
        self.events[evt.id] = evt
        return True

    def absorb_snapshot(self, records: Iterable[Any]) -> Dict[str, int]:
        applied = dropped = 0
        for raw in records:
            if self._upsert(raw):
                applied += 1
            else:
                dropped += 1
        log.info("snapshot absorbed: applied=%d dropped=%d total=%d", applied, dropped, len(self.events))
        return {"applied": applied, "dropped": dropped}

    def absorb_stream(self, record: Any, now: Optional[datetime] = None) -> bool:
        ok = self._upsert(record)
        if ok:
            self.last_stream_at = now or _now_utc()
        return ok

    def apply_correction(self, event_id: int, patch: EventPatch | Dict[str, Any]) -> Event:
        current = self.events.get(event_id)
        if current is None:
            raise KeyError(event_id)
        if not isinstance(patch, EventPatch):
            patch = EventPatch.model_validate(patch)
        updated = current.model_copy(update=patch.changes())
        self.events[event_id] = updated
        return updated

    def merged_events(self) -> List[Event]:
        return list(self.events.values())

    def categories(self) -> List[str]:
        return sorted({e.category for e in self.events.values()})

    def cameras(self) -> List[str]:
        return sorted({e.camera for e in self.events.values() if e.camera})

    def clear(self) -> None:
        self.events.clear()
        self.last_stream_at = None
        self.dropped = 0
