from __future__ import annotations
import argparse, asyncio, logging
from datetime import date
import orjson
import uvicorn
from passings.config import settings, Settings
from passings.logging_config import configure_logging
from passings.runner import build_session
from passings.series import SeriesFilter, compute_series
from passings.windowing import Granularity

log = logging.getLogger("passings.cli")

def _settings(args) -> Settings:
    return settings.model_copy(update={
        "api_url": args.api_url,
        "domain": args.domain,
        "kafka_bootstrap": args.kafka_bootstrap,
    })

def _filters(args) -> SeriesFilter:
    return SeriesFilter(
        camera=args.camera,
        categories=args.category or [],
        start_date=date.fromisoformat(args.start_date) if args.start_date else None,
        end_date=date.fromisoformat(args.end_date) if args.end_date else None,
    )

def cmd_series(args):
    s = _settings(args)

    async def _main() -> int:
        session = build_session(s)
        try:
            if not await session.refresh():
                log.error("could not load %s: %s", s.domain, session.error)
                return 1
            view = compute_series(session.store.merged_events(), Granularity.parse(args.granularity), _filters(args))
            print(orjson.dumps(view.model_dump(mode="json"), option=orjson.OPT_INDENT_2).decode())
            return 0
        finally:
            await session.close()

    raise SystemExit(asyncio.run(_main()))

def cmd_live(args):
    s = _settings(args)
    g = Granularity.parse(args.granularity)

    async def _main():
        session = build_session(s)
        try:
            await session.refresh()
            await session.start_live()
            while True:
                await asyncio.sleep(args.report_interval_seconds)
                view = compute_series(session.store.merged_events(), g, _filters(args))
                latest = view.bins[-1] if view.bins else None
                log.info(
                    "events=%d bins=%d latest=%s forecast=%s error=%s",
                    len(session.store), len(view.bins),
                    latest.counts if latest else None,
                    view.forecast.counts if view.forecast else None,
                    session.error,
                )
        finally:
            await session.close()

    try:
        asyncio.run(_main())
    except KeyboardInterrupt:
        log.info("stopped")

def cmd_api(args):
    uvicorn.run("passings.api:app", host=args.host, port=args.port, reload=False)

def _add_source_args(p):
    p.add_argument("--api-url", default=settings.api_url)
    p.add_argument("--domain", default=settings.domain)
    p.add_argument("--kafka-bootstrap", default=settings.kafka_bootstrap)
    p.add_argument("--granularity", choices=[g.value for g in Granularity], default="day")
    p.add_argument("--camera")
    p.add_argument("--category", action="append")
    p.add_argument("--start-date", help="YYYY-MM-DD, inclusive")
    p.add_argument("--end-date", help="YYYY-MM-DD, inclusive")

def main():
    p = argparse.ArgumentParser(prog="passings")
    p.add_argument("--log-level", default=settings.log_level)
    sub = p.add_subparsers(dest="cmd", required=True)

    s = sub.add_parser("series")
    _add_source_args(s)
    s.set_defaults(fn=cmd_series)

    lv = sub.add_parser("live")
    _add_source_args(lv)
    lv.add_argument("--report-interval-seconds", type=float, default=5.0)
    lv.set_defaults(fn=cmd_live)

    a = sub.add_parser("api")
    a.add_argument("--host", default="0.0.0.0")
    a.add_argument("--port", type=int, default=8000)
    a.set_defaults(fn=cmd_api)

    args = p.parse_args()
    configure_logging(args.log_level)
    args.fn(args)

if __name__ == "__main__":
    main()
