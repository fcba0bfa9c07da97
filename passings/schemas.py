from __future__ import annotations
from typing import Any, Dict, Optional
from datetime import datetime, timezone
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from passings.errors import MalformedEvent

def _as_utc(ts: datetime) -> datetime:
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc)

class Event(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: int
    timestamp: datetime = Field(alias="creationTime")
    category: str = Field(alias="vehicleType")
    camera: Optional[str] = None
    reception_time: Optional[datetime] = Field(default=None, alias="receptionTime")

    @field_validator("timestamp", "reception_time")
    @classmethod
    def _utc(cls, v: Optional[datetime]) -> Optional[datetime]:
        return _as_utc(v) if v is not None else None

    @field_validator("category")
    @classmethod
    def _non_empty(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("category must not be empty")
        return v

class EventPatch(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    category: Optional[str] = Field(default=None, alias="vehicleType")
    camera: Optional[str] = None

    @field_validator("category")
    @classmethod
    def _non_empty(cls, v: Optional[str]) -> Optional[str]:
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("category must not be empty")
        return v

    def changes(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)

class AggregatedBin(BaseModel):
    bin_key: str
    label: str
    counts: Dict[str, int] = Field(default_factory=dict)

class ForecastBin(AggregatedBin):
    pass

def parse_event(raw: Any) -> Event:
    if isinstance(raw, Event):
        return raw
    if not isinstance(raw, dict):
        raise MalformedEvent(f"expected an object, got {type(raw).__name__}", raw)
    try:
        return Event.model_validate(raw)
    except ValidationError as e:
        fields = sorted({".".join(str(p) for p in err["loc"]) for err in e.errors()})
        raise MalformedEvent(f"invalid event record: {', '.join(fields)}", raw) from e
