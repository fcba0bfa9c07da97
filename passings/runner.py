from __future__ import annotations
import asyncio
from typing import Any, Callable, Dict, Optional
import logging

from passings.config import Settings
from passings.errors import StreamError, TransientFetchError
from passings.schemas import Event, EventPatch
from passings.state import EventStore
from passings.transport.fetch import SnapshotClient
from passings.transport.push import ERROR, INITIAL_DATA, KafkaPushChannel, decode_message

log = logging.getLogger(__name__)

class LiveSession:
    """Owns one domain's EventStore and the two feeds that write into it.

    Live subscriptions are tagged with ``epoch``. Stopping live mode bumps the
    epoch, so a message delivered after teardown started is dropped instead of
    applied.
    """

    def __init__(self, domain: str, fetcher, channel_factory: Optional[Callable[[str], Any]] = None,
                 store: Optional[EventStore] = None):
        self.domain = domain
        self.fetcher = fetcher
        self.channel_factory = channel_factory
        self.store = store if store is not None else EventStore()

        self.loading = False
        self.error: Optional[str] = None
        self.live = False
        self.epoch = 0

        self._channel = None
        self._task: Optional[asyncio.Task] = None

    async def refresh(self) -> bool:
        self.loading = True
        try:
            records = await self.fetcher.fetch(self.domain)
        except TransientFetchError as e:
            log.warning("bulk fetch for %s failed: %s", self.domain, e)
            self.error = str(e)
            return False
        finally:
            self.loading = False
        self.store.absorb_snapshot(records)
        self.error = None
        return True

    async def refresh_if_empty(self) -> bool:
        if self.live or len(self.store) > 0:
            return False
        return await self.refresh()

    async def start_live(self) -> None:
        if self.live:
            return
        if self.channel_factory is None:
            raise RuntimeError("no push channel configured")

        self.epoch += 1
        epoch = self.epoch
        channel = self.channel_factory(self.domain)
        try:
            await channel.start()
        except Exception as e:
            log.warning("push subscription for %s failed: %s", self.domain, e)
            self.error = f"push subscription failed: {e}"
            await channel.stop()
            return

        self._channel = channel
        self.live = True
        self.loading = True
        self._task = asyncio.create_task(self._consume(channel, epoch))
        log.info("live mode on for %s (epoch=%d)", self.domain, epoch)

    async def _consume(self, channel, epoch: int) -> None:
        try:
            async for raw in channel.messages():
                if not self.apply_message(raw, epoch):
                    if epoch != self.epoch:
                        break
        except asyncio.CancelledError:
            raise
        except Exception as e:
            if epoch == self.epoch:
                log.warning("push channel for %s failed: %s", self.domain, e)
                self.error = f"push channel failed: {e}"

    def apply_message(self, raw: Any, epoch: int) -> bool:
        if epoch != self.epoch:
            log.debug("discarding push message from stale epoch %d (current %d)", epoch, self.epoch)
            return False
        try:
            msg = decode_message(raw)
        except StreamError as e:
            log.warning("bad push message for %s: %s", self.domain, e)
            self.error = str(e)
            return False

        if msg.kind == ERROR:
            detail = msg.data.get("message") if isinstance(msg.data, dict) else msg.data
            err = StreamError(str(detail or "stream error"))
            log.warning("push channel for %s reported: %s", self.domain, err)
            self.error = str(err)
            return False

        if msg.kind == INITIAL_DATA:
            if not isinstance(msg.data, list):
                self.error = "initialData payload is not an array"
                return False
            self.store.absorb_snapshot(msg.data)
            self.loading = False
            self.error = None
            return True

        return self.store.absorb_stream(msg.data)

    async def stop_live(self) -> None:
        if not self.live and self._task is None:
            return
        self.epoch += 1
        self.live = False
        self.loading = False
        task, channel = self._task, self._channel
        self._task = None
        self._channel = None
        if task is not None:
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        if channel is not None:
            await channel.stop()
        log.info("live mode off for %s (epoch=%d)", self.domain, self.epoch)

    async def correct(self, event_id: int, changes: Dict[str, Any]) -> Event:
        patch = EventPatch.model_validate(changes)
        if event_id not in self.store:
            raise KeyError(event_id)
        await self.fetcher.patch_event(self.domain, event_id, patch.model_dump(by_alias=True, exclude_none=True))
        return self.store.apply_correction(event_id, patch)

    def status(self) -> Dict[str, Any]:
        last = self.store.last_stream_at
        return {
            "domain": self.domain,
            "loading": self.loading,
            "error": self.error,
            "live": self.live,
            "epoch": self.epoch,
            "events": len(self.store),
            "dropped": self.store.dropped,
            "last_stream_at": last.isoformat() if last else None,
        }

    async def close(self) -> None:
        await self.stop_live()
        await self.fetcher.aclose()

def build_session(s: Settings) -> LiveSession:
    fetcher = SnapshotClient(s.api_url, timeout=s.fetch_timeout_seconds)
    return LiveSession(
        domain=s.domain,
        fetcher=fetcher,
        channel_factory=lambda domain: KafkaPushChannel(s.kafka_bootstrap, s.push_topic_prefix, domain),
    )
