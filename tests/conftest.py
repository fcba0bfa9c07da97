import asyncio
import pytest
from passings.errors import TransientFetchError

class FakeFetcher:
    def __init__(self, records=None, fail=False):
        self.records = list(records or [])
        self.fail = fail
        self.calls = 0
        self.patches = []
        self.closed = False

    async def fetch(self, domain):
        self.calls += 1
        if self.fail:
            raise TransientFetchError("GET /%s returned HTTP 503" % domain, status_code=503)
        return list(self.records)

    async def patch_event(self, domain, event_id, changes):
        if self.fail:
            raise TransientFetchError("PATCH failed")
        self.patches.append((domain, event_id, changes))
        return None

    async def aclose(self):
        self.closed = True

class FakeChannel:
    def __init__(self, domain):
        self.domain = domain
        self.queue = asyncio.Queue()
        self.started = False
        self.stopped = False

    async def start(self):
        self.started = True

    async def messages(self):
        while True:
            yield await self.queue.get()

    async def stop(self):
        self.stopped = True

@pytest.fixture
def records():
    return [
        {"id": 1, "creationTime": "2025-01-01T08:15:00Z", "vehicleType": "car", "camera": "cam-1"},
        {"id": 2, "creationTime": "2025-01-01T09:40:00Z", "vehicleType": "truck", "camera": "cam-2"},
        {"id": 3, "creationTime": "2025-01-02T10:00:00Z", "vehicleType": "car", "camera": "cam-1"},
        {"id": 4, "creationTime": "2025-01-03T23:59:59Z", "vehicleType": "bus", "camera": "cam-1"},
    ]

@pytest.fixture
def fetcher(records):
    return FakeFetcher(records)

@pytest.fixture
def channels():
    opened = []

    def factory(domain):
        ch = FakeChannel(domain)
        opened.append(ch)
        return ch

    factory.opened = opened
    return factory
