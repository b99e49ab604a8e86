"""SQLAlchemy adapter – SqlAlchemyOutboxStore."""
from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import datetime
from typing import Any

from sqlalchemy import Engine, delete, func, insert, select, text
from sqlalchemy.exc import DBAPIError

from mp_outbox.adapters.sqlalchemy.models import OutboxMessageModel
from mp_outbox.adapters.sqlalchemy.transaction import TransactionGuard
from mp_outbox.kernel.messaging import OutboundMessage, OutboxMessage, OutboxStore, PendingStats, partition_key_for
from mp_outbox.kernel.time import Clock, SystemClock, as_utc
from mp_outbox.observability.logging import get_logger

logger = get_logger(__name__)
M = OutboxMessageModel


class SqlAlchemyOutboxStore(OutboxStore):
    """Outbox table access; writes go through a :class:`TransactionGuard`."""

    def __init__(
        self,
        engine: Engine,
        *,
        guard: TransactionGuard | None = None,
        clock: Clock | None = None,
    ) -> None:
        self._engine = engine
        self._guard = guard or TransactionGuard(engine)
        self._clock = clock or SystemClock()

    def enqueue(self, messages: Iterable[OutboundMessage]) -> int:
        now = self._clock.now()
        rows = [
            {
                "topic": m.topic,
                "key": m.key,
                "partition_key": partition_key_for(m.key, m.partition_key),
                "message": m.payload,
                "created_at": now,
            }
            for m in messages
        ]
        if not rows:
            return 0
        self._guard.wrap(lambda conn: conn.execute(insert(M), rows))
        return len(rows)

    def list_topics(self) -> list[str]:
        with self._engine.connect() as conn:
            result = conn.execute(select(M.topic).distinct().order_by(M.topic))
            return [row[0] for row in result]

    def fetch_batch(self, topic: str, limit: int) -> list[OutboxMessage]:
        stmt = select(M).where(M.topic == topic).order_by(M.id).limit(limit)
        with self._engine.connect() as conn:
            return [self._row_to_message(row) for row in conn.execute(stmt)]

    def delete(self, topic: str, ids: Sequence[int]) -> int:
        if not ids:
            return 0
        stmt = delete(M).where(M.topic == topic, M.id.in_(list(ids)))
        return self._guard.wrap(lambda conn: conn.execute(stmt).rowcount, tags={"topic": topic})

    def pending_stats(self) -> dict[str, PendingStats]:
        stmt = select(M.topic, func.count(M.id), func.min(M.created_at)).group_by(M.topic)
        with self._engine.connect() as conn:
            return {
                topic: PendingStats(topic=topic, count=count, earliest=_parse_datetime(earliest))
                for topic, count, earliest in conn.execute(stmt)
            }

    def revalidate(self) -> None:
        try:
            self._ping()
        except DBAPIError:
            logger.warning("outbox_store.reconnecting", exc_info=True)
            self._engine.dispose()
            self._ping()

    def _ping(self) -> None:
        with self._engine.connect() as conn:
            conn.execute(text("SELECT 1"))

    @staticmethod
    def _row_to_message(row: Any) -> OutboxMessage:
        return OutboxMessage(
            id=row.id,
            topic=row.topic,
            key=row.key,
            partition_key=row.partition_key,
            payload=bytes(row.message) if row.message is not None else None,
            created_at=as_utc(row.created_at),
        )


def _parse_datetime(value: datetime | str) -> datetime:
    # SQLite may hand aggregates back as strings
    if isinstance(value, str):
        value = datetime.fromisoformat(value)
    return as_utc(value)


__all__ = ["SqlAlchemyOutboxStore"]
