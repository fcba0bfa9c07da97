from __future__ import annotations
from typing import List, Optional
from datetime import date, datetime
from pydantic import BaseModel, Field
from passings.aggregate import aggregate, categories_of, filter_events
from passings.config import settings
from passings.forecast import forecast
from passings.schemas import AggregatedBin, Event, ForecastBin
from passings.windowing import Granularity

class SeriesFilter(BaseModel):
    camera: Optional[str] = None
    categories: List[str] = Field(default_factory=list)
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    def apply(self, events: List[Event]) -> List[Event]:
        return filter_events(
            events,
            camera=self.camera,
            categories=self.categories,
            start_date=self.start_date,
            end_date=self.end_date,
        )

class SeriesView(BaseModel):
    granularity: Granularity
    categories: List[str]
    bins: List[AggregatedBin]
    forecast: Optional[ForecastBin] = None

def compute_series(
    events: List[Event],
    granularity: Granularity,
    filters: Optional[SeriesFilter] = None,
    with_forecast: bool = True,
    now: Optional[datetime] = None,
) -> SeriesView:
    # full recompute on every call: filter -> aggregate -> completeness -> forecast
    g = Granularity.parse(granularity)
    selected = (filters or SeriesFilter()).apply(events)
    categories = categories_of(selected)
    bins = aggregate(selected, g)
    fc = None
    if with_forecast:
        fc = forecast(bins, g, categories, alpha=settings.forecast_alpha, beta=settings.forecast_beta, now=now)
    return SeriesView(granularity=g, categories=categories, bins=bins, forecast=fc)
