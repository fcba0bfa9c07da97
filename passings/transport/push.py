from __future__ import annotations
from typing import Any, AsyncIterator, Optional
from dataclasses import dataclass
import logging
from aiokafka import AIOKafkaConsumer, AIOKafkaProducer
import orjson
from passings.errors import StreamError

log = logging.getLogger(__name__)

INITIAL_DATA = "initialData"
NEW_DATA = "newData"
ERROR = "error"
KINDS = (INITIAL_DATA, NEW_DATA, ERROR)

@dataclass
class PushMessage:
    kind: str
    data: Any = None

def decode_message(raw: bytes | str | dict) -> PushMessage:
    if isinstance(raw, dict):
        payload = raw
    else:
        try:
            payload = orjson.loads(raw)
        except orjson.JSONDecodeError as e:
            raise StreamError(f"undecodable push message: {e}") from e
    if not isinstance(payload, dict):
        raise StreamError("push message is not an object")
    kind = payload.get("event")
    if kind not in KINDS:
        raise StreamError(f"unknown push message type: {kind!r}")
    return PushMessage(kind=kind, data=payload.get("data"))

class KafkaPushChannel:
    """Per-domain push subscription over Kafka.

    Subscribing publishes a ``requestData`` message; the server answers on the
    domain topic with one ``initialData`` snapshot and then one ``newData``
    message per new record.
    """

    def __init__(self, bootstrap: str, topic_prefix: str, domain: str):
        self.bootstrap = bootstrap
        self.domain = domain
        self.topic = f"{topic_prefix}.{domain}"
        self.request_topic = f"{topic_prefix}.requests"
        self._consumer: Optional[AIOKafkaConsumer] = None
        self._producer: Optional[AIOKafkaProducer] = None

    async def start(self) -> None:
        self._consumer = AIOKafkaConsumer(
            self.topic,
            bootstrap_servers=self.bootstrap,
            group_id=None,
            enable_auto_commit=False,
            auto_offset_reset="latest",
        )
        await self._consumer.start()
        # pin positions before asking for the snapshot so the reply is not skipped
        for tp in self._consumer.assignment():
            await self._consumer.position(tp)

        self._producer = AIOKafkaProducer(bootstrap_servers=self.bootstrap)
        await self._producer.start()
        await self._producer.send_and_wait(
            self.request_topic, orjson.dumps({"event": "requestData", "domain": self.domain})
        )
        log.info("subscribed to %s", self.topic)

    async def messages(self) -> AsyncIterator[bytes]:
        assert self._consumer is not None
        async for msg in self._consumer:
            yield msg.value

    async def stop(self) -> None:
        if self._producer:
            await self._producer.stop()
            self._producer = None
        if self._consumer:
            await self._consumer.stop()
            self._consumer = None
        log.info("unsubscribed from %s", self.topic)
