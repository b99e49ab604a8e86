"""Testing fakes – InMemoryTopicCoordinator."""
from __future__ import annotations

import dataclasses
import threading
from collections.abc import Iterable
from datetime import timedelta

from mp_outbox.kernel.messaging import TopicCoordinator, TopicLock
from mp_outbox.kernel.time import Clock, FrozenClock


class InMemoryTopicCoordinator(TopicCoordinator):
    """Dict-backed topic coordinator with the same takeover rules as the SQL one.

    Every operation holds one mutex, which stands in for the row-level
    atomicity of a conditional UPDATE.
    """

    def __init__(
        self,
        clock: Clock | None = None,
        *,
        lock_staleness: timedelta = timedelta(minutes=1),
        error_quarantine: timedelta = timedelta(minutes=1),
    ) -> None:
        self._clock = clock or FrozenClock()
        self._locks: dict[str, TopicLock] = {}
        self._mutex = threading.Lock()
        self.lock_staleness = lock_staleness
        self.error_quarantine = error_quarantine
        self.heartbeats: list[tuple[str, str]] = []
        self.errors: list[tuple[str, str]] = []

    def lock(self, topic: str, worker_id: str) -> bool:
        now = self._clock.now()
        with self._mutex:
            row = self._locks.setdefault(topic, TopicLock(topic=topic))
            takeable = (
                (row.locked_by is None and not row.error)
                or (row.locked_by is not None and row.locked_at is not None
                    and row.locked_at < now - self.lock_staleness)
                or (row.error and row.locked_at is not None
                    and row.locked_at < now - self.error_quarantine)
            )
            if takeable:
                row = dataclasses.replace(row, locked_by=worker_id, locked_at=now, error=False)
                self._locks[topic] = row
            return row.locked_by == worker_id

    def heartbeat(self, topic: str, worker_id: str) -> None:
        self.heartbeats.append((topic, worker_id))
        self._update_owned(topic, worker_id, locked_at=self._clock.now())

    def clear_lock(self, topic: str, worker_id: str) -> None:
        self._update_owned(
            topic, worker_id,
            locked_by=None, locked_at=None, error=False, retries=0,
            last_processed_at=self._clock.now(),
        )

    def register_error(self, topic: str, worker_id: str) -> None:
        self.errors.append((topic, worker_id))
        with self._mutex:
            row = self._locks.get(topic)
            if row is None or row.locked_by != worker_id:
                return
            self._locks[topic] = dataclasses.replace(
                row, locked_by=None, locked_at=self._clock.now(), error=True, retries=row.retries + 1
            )

    def ping_empty_topics(self, exclude: Iterable[str]) -> None:
        excluded = set(exclude)
        now = self._clock.now()
        with self._mutex:
            for topic, row in list(self._locks.items()):
                if topic not in excluded and row.locked_by is None and not row.error:
                    self._locks[topic] = dataclasses.replace(row, last_processed_at=now)

    def list_locks(self) -> list[TopicLock]:
        with self._mutex:
            return [self._locks[topic] for topic in sorted(self._locks)]

    def get(self, topic: str) -> TopicLock | None:
        with self._mutex:
            return self._locks.get(topic)

    def _update_owned(self, topic: str, worker_id: str, **values: object) -> None:
        with self._mutex:
            row = self._locks.get(topic)
            if row is not None and row.locked_by == worker_id:
                self._locks[topic] = dataclasses.replace(row, **values)  # type: ignore[arg-type]


__all__ = ["InMemoryTopicCoordinator"]
