"""Relay – OutboxRelay, the worker loop that drains the outbox into Kafka."""
from __future__ import annotations

import re
import threading
import uuid
from collections.abc import Iterable, Sequence
from datetime import timedelta

from tenacity import RetryCallState, Retrying, retry_if_exception, stop_after_attempt, wait_fixed

from mp_outbox.config.relay import RelaySettings, topic_selected
from mp_outbox.config.validation import InvalidSettingValueError
from mp_outbox.kernel.errors import DeleteRetryExhaustedError, OversizedBatchError
from mp_outbox.kernel.messaging import OutboxMessage, OutboxStore, Publisher, TopicCoordinator
from mp_outbox.kernel.time import Clock, SystemClock
from mp_outbox.observability.logging import get_logger
from mp_outbox.observability.metrics import Metrics, NoopMetrics
from mp_outbox.relay.compaction import compact_messages
from mp_outbox.relay.metrics import PendingMetricsReporter

BATCH_SIZE = 1000
DELETE_BATCH_SIZE = 10
MAX_DELETE_ATTEMPTS = 3
DELETE_RETRY_WAIT = 1.0
POLL_INTERVAL = 0.5

_TRANSIENT_DELETE_ERRORS = re.compile(r"lock wait|lost connection", re.IGNORECASE)


def is_transient_delete_error(exc: BaseException) -> bool:
    return bool(_TRANSIENT_DELETE_ERRORS.search(str(exc)))


def _chunks(messages: Sequence[OutboxMessage], size: int) -> Iterable[Sequence[OutboxMessage]]:
    for start in range(0, len(messages), size):
        yield messages[start:start + size]


class OutboxRelay:
    """Moves outbox rows to the broker, one locked topic at a time.

    Any number of relays, in any number of processes, can share one outbox:
    a topic is only touched after :meth:`TopicCoordinator.lock` succeeds, so
    per-topic order is kept. Delivery is at-least-once; rows whose delete
    fails after publishing are sent again on a later pass.

    A failing topic is quarantined through ``register_error`` and the relay
    moves on; one bad topic never stalls the others.
    """

    def __init__(
        self,
        store: OutboxStore,
        coordinator: TopicCoordinator,
        publisher: Publisher,
        *,
        batch_size: int = BATCH_SIZE,
        delete_batch_size: int = DELETE_BATCH_SIZE,
        max_delete_attempts: int = MAX_DELETE_ATTEMPTS,
        delete_retry_wait: float = DELETE_RETRY_WAIT,
        compact_topics: Iterable[str] = (),
        log_topics: Iterable[str] = (),
        heartbeat_interval: timedelta = timedelta(seconds=15),
        poll_interval: float = POLL_INTERVAL,
        metrics: Metrics | None = None,
        clock: Clock | None = None,
        relay_id: str | None = None,
    ) -> None:
        if heartbeat_interval * 2 > coordinator.lock_staleness:
            raise InvalidSettingValueError(
                "heartbeat_interval",
                heartbeat_interval,
                f"must be at most half of the lock staleness window ({coordinator.lock_staleness})",
            )
        self.id = relay_id or str(uuid.uuid4())
        self.current_topic: str | None = None
        self._store = store
        self._coordinator = coordinator
        self._publisher = publisher
        self._batch_size = batch_size
        self._delete_batch_size = delete_batch_size
        self._max_delete_attempts = max_delete_attempts
        self._delete_retry_wait = delete_retry_wait
        self._compact_topics = list(compact_topics)
        self._log_topics = list(log_topics)
        self._heartbeat_interval = heartbeat_interval
        self._poll_interval = poll_interval
        self._clock = clock or SystemClock()
        self._stop_event = threading.Event()
        self._logger = get_logger(__name__, relay_id=self.id)

        metrics = metrics or NoopMetrics()
        self._processed = metrics.counter("outbox.process", "Outbox rows relayed and deleted")
        self._published = metrics.counter("publish", "Messages published to the broker")
        self._pending_metrics = PendingMetricsReporter(store, coordinator, metrics, self._clock)

    @classmethod
    def from_settings(
        cls,
        store: OutboxStore,
        coordinator: TopicCoordinator,
        publisher: Publisher,
        settings: RelaySettings,
        **kwargs: object,
    ) -> "OutboxRelay":
        return cls(
            store,
            coordinator,
            publisher,
            batch_size=settings.batch_size,
            delete_batch_size=settings.delete_batch_size,
            max_delete_attempts=settings.max_delete_attempts,
            compact_topics=settings.compact_topics,
            log_topics=settings.log_topics,
            heartbeat_interval=settings.heartbeat_interval,
            poll_interval=settings.poll_interval_seconds,
            **kwargs,  # type: ignore[arg-type]
        )

    # ------------------------------------------------------------------
    # Runner
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Poll until :meth:`stop` is called.

        The stop flag is never cleared here: a stop that races a restart after
        a crash must still win.
        """
        self._logger.info("outbox.relay_starting")
        self._store.revalidate()
        while not self._stop_event.is_set():
            self._pending_metrics.report()
            self.process_next_messages()
        self._logger.info("outbox.relay_stopped")

    def stop(self) -> None:
        self._logger.info("outbox.relay_stop_requested")
        self._stop_event.set()

    @property
    def stopped(self) -> bool:
        return self._stop_event.is_set()

    # ------------------------------------------------------------------
    # Processing
    # ------------------------------------------------------------------

    def process_next_messages(self) -> None:
        """One pass over every topic with pending rows."""
        topics = self._store.list_topics()
        self._logger.info("outbox.topics_found", topics=topics)
        for topic in topics:
            self.process_topic(topic)
        self._coordinator.ping_empty_topics(topics)
        self._stop_event.wait(self._poll_interval)

    def process_topic(self, topic: str) -> bool:
        """Drain *topic* if it can be locked; return whether it was drained cleanly."""
        try:
            locked = self._coordinator.lock(topic, self.id)
        except Exception:
            # never owned, so nothing to quarantine
            self._logger.exception("outbox.lock_failed", topic=topic)
            return False
        if not locked:
            self._logger.debug("outbox.lock_skipped", topic=topic)
            return False
        self.current_topic = topic
        try:
            while self.process_topic_batch(topic):
                pass
            self._coordinator.clear_lock(topic, self.id)
        except Exception:
            self._logger.exception("outbox.topic_failed", topic=topic)
            self._coordinator.register_error(topic, self.id)
            return False
        finally:
            self.current_topic = None
        return True

    def process_topic_batch(self, topic: str) -> bool:
        """Publish and delete one batch; return whether more may be pending."""
        started = self._clock.now()
        messages = self._store.fetch_batch(topic, self._batch_size)
        if not messages:
            return False

        batch = compact_messages(messages) if topic_selected(self._compact_topics, topic) else messages
        self._log_messages(topic, batch)
        try:
            self.publish_messages(topic, batch)
        except OversizedBatchError:
            # It will never fit; keeping it would block the topic forever.
            self._logger.error("outbox.batch_too_large", topic=topic, batch_size=len(messages))
            self.delete_messages(topic, messages)
            raise
        self.delete_messages(topic, messages)
        self._processed.add(len(messages), {"topic": topic})

        if len(messages) < self._batch_size:
            return False

        elapsed = self._clock.now() - started
        if elapsed > self._heartbeat_interval:
            self._logger.warning(
                "outbox.heartbeat_late",
                topic=topic,
                elapsed_seconds=elapsed.total_seconds(),
                heartbeat_interval_seconds=self._heartbeat_interval.total_seconds(),
            )
        self._coordinator.heartbeat(topic, self.id)
        self._pending_metrics.report()
        return True

    def publish_messages(self, topic: str, batch: Sequence[OutboxMessage]) -> None:
        self._logger.debug("outbox.publishing", topic=topic, count=len(batch))
        self._publisher.publish([message.to_outbound() for message in batch])
        self._published.add(len(batch), {"topic": topic, "status": "success"})
        self._logger.info("outbox.published", topic=topic, count=len(batch))

    def delete_messages(self, topic: str, messages: Sequence[OutboxMessage]) -> None:
        """Delete *messages* in small chunks, retrying lock waits and lost connections."""
        attempts = self._max_delete_attempts + 1

        def _before_sleep(state: RetryCallState) -> None:
            self._logger.warning(
                "outbox.delete_retry",
                topic=topic,
                attempt=state.attempt_number,
                exc_info=state.outcome.exception() if state.outcome else None,
            )
            self._store.revalidate()

        retrying = Retrying(
            stop=stop_after_attempt(attempts),
            wait=wait_fixed(self._delete_retry_wait),
            retry=retry_if_exception(is_transient_delete_error),
            before_sleep=_before_sleep,
            sleep=self._clock.sleep,
            reraise=True,
        )
        try:
            for attempt in retrying:
                with attempt:
                    for chunk in _chunks(messages, self._delete_batch_size):
                        self._store.delete(topic, [message.id for message in chunk])
        except Exception as exc:
            if is_transient_delete_error(exc):
                raise DeleteRetryExhaustedError(topic, attempts, cause=exc) from exc
            raise

    def _log_messages(self, topic: str, batch: Sequence[OutboxMessage]) -> None:
        if not topic_selected(self._log_topics, topic):
            return
        self._logger.debug(
            "outbox.producing_messages",
            topic=topic,
            messages=[
                {"id": m.id, "key": m.key, "partition_key": m.partition_key, "payload": m.payload}
                for m in batch
            ],
        )


__all__ = ["BATCH_SIZE", "DELETE_BATCH_SIZE", "MAX_DELETE_ATTEMPTS", "OutboxRelay", "is_transient_delete_error"]
