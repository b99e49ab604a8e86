"""SQLAlchemy adapter – SqlAlchemyTopicCoordinator."""
from __future__ import annotations

import contextlib
from collections.abc import Iterable
from datetime import timedelta
from typing import Any

from sqlalchemy import Connection, Engine, and_, insert, or_, select, update
from sqlalchemy.exc import IntegrityError

from mp_outbox.adapters.sqlalchemy.models import TopicLockModel
from mp_outbox.adapters.sqlalchemy.transaction import TransactionGuard
from mp_outbox.kernel.messaging import TopicCoordinator, TopicLock
from mp_outbox.kernel.time import Clock, SystemClock, as_utc
from mp_outbox.observability.logging import get_logger

logger = get_logger(__name__)
L = TopicLockModel


class SqlAlchemyTopicCoordinator(TopicCoordinator):
    """Topic ownership backed by the ``kafka_topic_info`` table.

    A topic can be taken when it is idle, when its owner has not heartbeated
    within ``lock_staleness`` (the owner probably crashed), or when it errored
    more than ``error_quarantine`` ago.
    """

    def __init__(
        self,
        engine: Engine,
        *,
        guard: TransactionGuard | None = None,
        clock: Clock | None = None,
        lock_staleness: timedelta = timedelta(minutes=1),
        error_quarantine: timedelta = timedelta(minutes=1),
    ) -> None:
        self._engine = engine
        self._guard = guard or TransactionGuard(engine)
        self._clock = clock or SystemClock()
        self.lock_staleness = lock_staleness
        self.error_quarantine = error_quarantine

    def lock(self, topic: str, worker_id: str) -> bool:
        # Losing the insert race to another worker is fine.
        with contextlib.suppress(IntegrityError):
            self._guard.wrap(
                lambda conn: conn.execute(insert(L).values(topic=topic, error=False, retries=0)),
                tags={"topic": topic},
            )

        now = self._clock.now()
        takeable = or_(
            and_(L.locked_by.is_(None), L.error.is_(False)),
            and_(L.locked_by.is_not(None), L.locked_at < now - self.lock_staleness),
            and_(L.error.is_(True), L.locked_at < now - self.error_quarantine),
        )
        claim = (
            update(L)
            .where(L.topic == topic, takeable)
            .values(locked_by=worker_id, locked_at=now, error=False)
        )

        def _work(conn: Connection) -> bool:
            conn.execute(claim)
            owner = conn.execute(select(L.locked_by).where(L.topic == topic)).scalar_one_or_none()
            return owner == worker_id

        return self._guard.wrap(_work, tags={"topic": topic})

    def heartbeat(self, topic: str, worker_id: str) -> None:
        self._update_owned(topic, worker_id, locked_at=self._clock.now())

    def clear_lock(self, topic: str, worker_id: str) -> None:
        self._update_owned(
            topic,
            worker_id,
            locked_by=None,
            locked_at=None,
            error=False,
            retries=0,
            last_processed_at=self._clock.now(),
        )

    def register_error(self, topic: str, worker_id: str) -> None:
        updated = self._update_owned(
            topic,
            worker_id,
            locked_by=None,
            locked_at=self._clock.now(),
            error=True,
            retries=L.retries + 1,
        )
        if not updated:
            logger.warning("topic_lock.register_error_not_owner", topic=topic, worker_id=worker_id)

    def ping_empty_topics(self, exclude: Iterable[str]) -> None:
        excluded = list(exclude)
        stmt = (
            update(L)
            .where(L.locked_by.is_(None), L.error.is_(False), L.topic.not_in(excluded))
            .values(last_processed_at=self._clock.now())
        )
        self._guard.wrap(lambda conn: conn.execute(stmt))

    def list_locks(self) -> list[TopicLock]:
        with self._engine.connect() as conn:
            rows = conn.execute(select(L).order_by(L.topic)).all()
        return [
            TopicLock(
                topic=row.topic,
                locked_by=row.locked_by,
                locked_at=as_utc(row.locked_at) if row.locked_at else None,
                error=bool(row.error),
                retries=row.retries,
                last_processed_at=as_utc(row.last_processed_at) if row.last_processed_at else None,
            )
            for row in rows
        ]

    def _update_owned(self, topic: str, worker_id: str, **values: Any) -> int:
        stmt = update(L).where(L.topic == topic, L.locked_by == worker_id).values(**values)
        return self._guard.wrap(lambda conn: conn.execute(stmt).rowcount, tags={"topic": topic})


__all__ = ["SqlAlchemyTopicCoordinator"]
