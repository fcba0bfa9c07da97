from __future__ import annotations
from typing import Any, Dict, List, Optional
from datetime import date
from fastapi import Body, FastAPI, HTTPException, Query
from pydantic import BaseModel
from passings.config import settings
from passings.drilldown import drill_down
from passings.errors import TransientFetchError
from passings.runner import LiveSession, build_session
from passings.series import SeriesFilter, compute_series
from passings.windowing import Granularity, finer

class LiveToggle(BaseModel):
    enabled: bool

def _granularity(value: str) -> Granularity:
    try:
        return Granularity.parse(value)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))

def create_app(session: Optional[LiveSession] = None) -> FastAPI:
    app = FastAPI(title="Passings Analytics API", version="1.0.0")
    if session is None:
        session = build_session(settings)
    app.state.session = session

    @app.on_event("startup")
    async def _startup():
        await session.refresh_if_empty()

    @app.on_event("shutdown")
    async def _shutdown():
        await session.close()

    def _filters(camera, category, start_date, end_date) -> SeriesFilter:
        return SeriesFilter(camera=camera, categories=category or [], start_date=start_date, end_date=end_date)

    @app.get("/v1/series")
    async def series(
        granularity: str = Query("day"),
        camera: Optional[str] = Query(None),
        category: List[str] = Query(default=[]),
        start_date: Optional[date] = Query(None),
        end_date: Optional[date] = Query(None),
        forecast: bool = Query(True),
    ):
        view = compute_series(
            session.store.merged_events(),
            _granularity(granularity),
            _filters(camera, category, start_date, end_date),
            with_forecast=forecast,
        )
        return view.model_dump(mode="json")

    @app.get("/v1/drilldown")
    async def drilldown(
        parent_key: str = Query(...),
        granularity: str = Query(...),
        camera: Optional[str] = Query(None),
        category: List[str] = Query(default=[]),
        start_date: Optional[date] = Query(None),
        end_date: Optional[date] = Query(None),
    ):
        g = _granularity(granularity)
        base = _filters(camera, category, start_date, end_date).apply(session.store.merged_events())
        try:
            bins = drill_down(parent_key, g, base)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        return {
            "parent_key": parent_key,
            "parent_granularity": g.value,
            "granularity": finer(g).value,
            "bins": [b.model_dump(mode="json") for b in bins],
        }

    @app.get("/v1/events")
    async def events():
        return [e.model_dump(mode="json") for e in session.store.merged_events()]

    @app.patch("/v1/events/{event_id}")
    async def correct_event(event_id: int, changes: Dict[str, Any] = Body(...)):
        try:
            evt = await session.correct(event_id, changes)
        except KeyError:
            raise HTTPException(status_code=404, detail=f"event {event_id} not found")
        except ValueError as e:
            raise HTTPException(status_code=422, detail=str(e))
        except TransientFetchError as e:
            raise HTTPException(status_code=502, detail=str(e))
        return evt.model_dump(mode="json")

    @app.get("/v1/status")
    async def status():
        return session.status()

    @app.post("/v1/refresh")
    async def refresh():
        ok = await session.refresh()
        return {"ok": ok, "error": session.error, "events": len(session.store)}

    @app.post("/v1/live")
    async def live(toggle: LiveToggle):
        if toggle.enabled:
            await session.start_live()
        else:
            await session.stop_live()
        return session.status()

    return app

app = create_app()
