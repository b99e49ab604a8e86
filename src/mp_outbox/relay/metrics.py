"""Relay – backlog and liveness gauges."""
from __future__ import annotations

from mp_outbox.kernel.messaging import OutboxStore, TopicCoordinator
from mp_outbox.kernel.time import Clock, SystemClock
from mp_outbox.observability.metrics import Metrics

MAX_WAIT_GAUGE = "pending_db_messages_max_wait"
COUNT_GAUGE = "pending_db_messages_count"


class PendingMetricsReporter:
    """Publishes per-topic backlog gauges.

    The wait for a topic is measured from the later of its last clean drain
    and its oldest pending row, so a topic that keeps up reads close to zero
    even if it always has a few rows queued. Informational only; the relay
    never branches on these values.
    """

    def __init__(
        self,
        store: OutboxStore,
        coordinator: TopicCoordinator,
        metrics: Metrics,
        clock: Clock | None = None,
    ) -> None:
        self._store = store
        self._coordinator = coordinator
        self._clock = clock or SystemClock()
        self._max_wait = metrics.gauge(MAX_WAIT_GAUGE, "Seconds the oldest pending message has waited", "s")
        self._count = metrics.gauge(COUNT_GAUGE, "Pending outbox rows")

    def report(self) -> None:
        now = self._clock.now()
        stats = self._store.pending_stats()
        for lock in self._coordinator.list_locks():
            labels = {"topic": lock.topic}
            pending = stats.get(lock.topic)
            if pending is None:
                self._max_wait.set(0, labels)
                self._count.set(0, labels)
                continue
            earliest = pending.earliest
            if lock.last_processed_at is not None and lock.last_processed_at > earliest:
                earliest = lock.last_processed_at
            self._max_wait.set(max((now - earliest).total_seconds(), 0.0), labels)
            self._count.set(pending.count, labels)


__all__ = ["COUNT_GAUGE", "MAX_WAIT_GAUGE", "PendingMetricsReporter"]
