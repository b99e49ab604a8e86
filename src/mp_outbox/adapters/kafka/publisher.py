"""Kafka adapter – KafkaPublisher."""
from __future__ import annotations

import asyncio
from collections.abc import Sequence
from typing import Any

from mp_outbox.kernel.errors import OversizedBatchError, PublishError
from mp_outbox.kernel.messaging import OutboundMessage, Publisher
from mp_outbox.observability.logging import get_logger

logger = get_logger(__name__)


def _require_aiokafka() -> Any:
    try:
        import aiokafka  # type: ignore[import-untyped]
        import aiokafka.errors  # noqa: F401
        import aiokafka.partitioner  # noqa: F401
        return aiokafka
    except ImportError as exc:
        raise ImportError("Install 'aiokafka' to use the Kafka publisher") from exc


def _encode(value: str | None) -> bytes | None:
    return value.encode() if value is not None else None


class KafkaPublisher(Publisher):
    """aiokafka-backed :class:`Publisher` with a blocking ``publish``.

    Each instance owns a private event loop, so one publisher must only be
    used from one thread at a time; the relay launcher gives every relay its
    own. ``publish`` returns once every message in the batch is acknowledged.

    When the producer buffer overflows, the producer is restarted and the rest
    of the batch is resent in groups a tenth the size, down to single messages.
    """

    def __init__(self, bootstrap_servers: str, **producer_kwargs: Any) -> None:
        self._aiokafka = _require_aiokafka()
        self._loop = asyncio.new_event_loop()
        self._bootstrap_servers = bootstrap_servers
        self._producer_kwargs = producer_kwargs
        self._producer: Any = None
        self._partitioner = self._aiokafka.partitioner.DefaultPartitioner()

    def publish(self, messages: Sequence[OutboundMessage]) -> None:
        if not messages:
            return
        topic = messages[0].topic
        errors = self._aiokafka.errors
        group_size = len(messages)
        sent = 0
        while sent < len(messages):
            group = messages[sent : sent + group_size]
            try:
                self._loop.run_until_complete(self._publish(group))
            except errors.MessageSizeTooLargeError as exc:
                raise OversizedBatchError(topic, batch_size=len(messages), cause=exc) from exc
            except errors.KafkaTimeoutError as exc:
                # The producer buffer filled up before the group was accepted.
                self._reset_producer()
                if group_size == 1:
                    raise PublishError(topic, str(exc) or None, batch_size=len(messages), cause=exc) from exc
                group_size = 1 if group_size < 10 else group_size // 10
                logger.error(
                    "kafka.buffer_overflow",
                    topic=topic,
                    count=len(messages),
                    sent=sent,
                    group_size=group_size,
                )
                continue
            except errors.KafkaError as exc:
                self._reset_producer()
                raise PublishError(topic, str(exc) or None, batch_size=len(messages), cause=exc) from exc
            sent += len(group)
        logger.debug("kafka.published", topic=topic, count=len(messages))

    def close(self) -> None:
        if self._loop.is_closed():
            return
        if self._producer is not None:
            self._loop.run_until_complete(self._producer.stop())
            self._producer = None
        self._loop.close()

    def _reset_producer(self) -> None:
        """Drop the producer so the next send starts a fresh one."""
        producer, self._producer = self._producer, None
        if producer is None:
            return
        try:
            self._loop.run_until_complete(producer.stop())
        except self._aiokafka.errors.KafkaError:
            logger.warning("kafka.producer_stop_failed", exc_info=True)

    async def _ensure_started(self) -> Any:
        if self._producer is None:
            # AIOKafkaProducer binds to the running loop at construction
            producer = self._aiokafka.AIOKafkaProducer(
                bootstrap_servers=self._bootstrap_servers, **self._producer_kwargs
            )
            await producer.start()
            self._producer = producer
        return self._producer

    async def _publish(self, messages: Sequence[OutboundMessage]) -> None:
        producer = await self._ensure_started()
        pending = []
        try:
            for message in messages:
                partition = await self._partition_for(producer, message)
                pending.append(
                    await producer.send(
                        message.topic,
                        value=message.payload,
                        key=_encode(message.key),
                        partition=partition,
                    )
                )
        except Exception:
            # Collect what was already handed to the producer before giving up.
            await asyncio.gather(*pending, return_exceptions=True)
            raise
        for result in await asyncio.gather(*pending, return_exceptions=True):
            if isinstance(result, BaseException):
                raise result

    async def _partition_for(self, producer: Any, message: OutboundMessage) -> int | None:
        if message.partition_key is None or message.partition_key == message.key:
            return None
        partitions = sorted(await producer.partitions_for(message.topic))
        return self._partitioner(_encode(message.partition_key), partitions, partitions)


__all__ = ["KafkaPublisher"]
