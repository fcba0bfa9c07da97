from __future__ import annotations
from typing import Any, Dict, List, Optional
import logging
import httpx
import orjson
from passings.errors import TransientFetchError

log = logging.getLogger(__name__)

class SnapshotClient:
    """REST side of the data feed: one-shot bulk snapshot plus per-id corrections."""

    def __init__(self, base_url: str, timeout: float = 10.0, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.base_url = base_url
        self._client = httpx.AsyncClient(base_url=base_url, timeout=timeout, transport=transport)

    def _decode(self, resp: httpx.Response, what: str) -> Any:
        if not resp.is_success:
            raise TransientFetchError(f"{what} returned HTTP {resp.status_code}", status_code=resp.status_code)
        if not resp.content:
            return None
        try:
            return orjson.loads(resp.content)
        except orjson.JSONDecodeError as e:
            raise TransientFetchError(f"{what} returned invalid JSON: {e}", status_code=resp.status_code) from e

    async def fetch(self, domain: str) -> List[Any]:
        what = f"GET /{domain}"
        try:
            resp = await self._client.get(f"/{domain}")
        except httpx.HTTPError as e:
            raise TransientFetchError(f"{what} failed: {e}") from e
        data = self._decode(resp, what)
        if not isinstance(data, list):
            raise TransientFetchError(f"{what} did not return a JSON array", status_code=resp.status_code)
        log.debug("fetched %d records for %s", len(data), domain)
        return data

    async def patch_event(self, domain: str, event_id: int, changes: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        what = f"PATCH /{domain}/{event_id}"
        try:
            resp = await self._client.patch(
                f"/{domain}/{event_id}",
                content=orjson.dumps(changes),
                headers={"content-type": "application/json"},
            )
        except httpx.HTTPError as e:
            raise TransientFetchError(f"{what} failed: {e}") from e
        data = self._decode(resp, what)
        return data if isinstance(data, dict) else None

    async def aclose(self) -> None:
        await self._client.aclose()
