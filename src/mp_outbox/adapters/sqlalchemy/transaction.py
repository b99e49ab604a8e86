"""SQLAlchemy adapter – TransactionGuard, deadlock-aware transaction retry."""
from __future__ import annotations

import time
from collections.abc import Callable, Mapping
from typing import TypeVar

from sqlalchemy import Connection, Engine
from sqlalchemy.exc import DBAPIError
from tenacity import RetryCallState, Retrying, retry_if_exception, stop_after_attempt, wait_random

from mp_outbox.observability.logging import get_logger
from mp_outbox.observability.metrics import Metrics, NoopMetrics

T = TypeVar("T")
logger = get_logger(__name__)

# Retries after the first attempt.
RETRY_COUNT = 2

# Matched against the driver message; exception classes differ per driver.
DEADLOCK_MESSAGES = (
    # MySQL
    "Deadlock found when trying to get lock",
    "Lock wait timeout exceeded",
    # Postgres
    "deadlock detected",
)


def is_deadlock(exc: BaseException) -> bool:
    """Whether *exc* is a database error reporting a deadlock or lock timeout."""
    if not isinstance(exc, DBAPIError):
        return False
    message = str(exc)
    return any(pattern in message for pattern in DEADLOCK_MESSAGES)


class TransactionGuard:
    """Run a unit of work in a transaction, retrying it on deadlock.

    The whole transaction is rolled back and re-run, so *work* must not have
    side effects outside the connection it is given. Between attempts the
    guard sleeps a random 0.5–5.5s so competing transactions do not retry in
    lock-step. Any other error, or the last deadlock, propagates unchanged.

    Example::

        guard = TransactionGuard(engine)
        guard.wrap(lambda conn: conn.execute(stmt), tags={"topic": "orders"})
    """

    def __init__(
        self,
        engine: Engine,
        *,
        retry_count: int = RETRY_COUNT,
        min_wait: float = 0.5,
        max_wait: float = 5.5,
        sleep: Callable[[float], None] = time.sleep,
        metrics: Metrics | None = None,
    ) -> None:
        self._engine = engine
        self._retry_count = retry_count
        self._min_wait = min_wait
        self._max_wait = max_wait
        self._sleep = sleep
        self._deadlocks = (metrics or NoopMetrics()).counter("deadlock", "Deadlocked transactions retried")

    @property
    def engine(self) -> Engine:
        return self._engine

    def wrap(self, work: Callable[[Connection], T], *, tags: Mapping[str, str] | None = None) -> T:
        labels = dict(tags or {})

        def _before_sleep(state: RetryCallState) -> None:
            remaining = self._retry_count + 1 - state.attempt_number
            logger.warning(
                "transaction.deadlock_retry",
                remaining_attempts=remaining,
                exc_info=state.outcome.exception() if state.outcome else None,
                **labels,
            )
            self._deadlocks.add(1, labels)

        retrying = Retrying(
            stop=stop_after_attempt(self._retry_count + 1),
            wait=wait_random(self._min_wait, self._max_wait),
            retry=retry_if_exception(is_deadlock),
            before_sleep=_before_sleep,
            sleep=self._sleep,
            reraise=True,
        )
        for attempt in retrying:
            with attempt:
                with self._engine.begin() as conn:
                    result = work(conn)
        return result


__all__ = ["DEADLOCK_MESSAGES", "RETRY_COUNT", "TransactionGuard", "is_deadlock"]
