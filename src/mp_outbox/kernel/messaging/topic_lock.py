"""Kernel messaging – per-topic ownership state and the TopicCoordinator port."""
from __future__ import annotations

import abc
import dataclasses
from collections.abc import Iterable
from datetime import datetime, timedelta
from enum import Enum


class LockState(str, Enum):
    IDLE = "IDLE"
    OWNED = "OWNED"
    ERRORED = "ERRORED"


@dataclasses.dataclass(frozen=True)
class TopicLock:
    """Snapshot of one row of the topic lock table."""

    topic: str
    locked_by: str | None = None
    locked_at: datetime | None = None
    error: bool = False
    retries: int = 0
    last_processed_at: datetime | None = None

    @property
    def state(self) -> LockState:
        if self.locked_by is not None:
            return LockState.OWNED
        if self.error:
            return LockState.ERRORED
        return LockState.IDLE


class TopicCoordinator(abc.ABC):
    """Port: cross-worker topic ownership.

    Every mutation is a single conditional update; implementations must never
    read a row and write it back unguarded.
    """

    lock_staleness: timedelta = timedelta(minutes=1)
    error_quarantine: timedelta = timedelta(minutes=1)

    @abc.abstractmethod
    def lock(self, topic: str, worker_id: str) -> bool:
        """Try to take ownership of *topic*; return whether *worker_id* owns it."""

    @abc.abstractmethod
    def heartbeat(self, topic: str, worker_id: str) -> None:
        """Refresh ``locked_at`` if *worker_id* still owns *topic*."""

    @abc.abstractmethod
    def clear_lock(self, topic: str, worker_id: str) -> None:
        """Release *topic* after a clean drain."""

    @abc.abstractmethod
    def register_error(self, topic: str, worker_id: str) -> None:
        """Release *topic* into quarantine after a failed drain."""

    @abc.abstractmethod
    def ping_empty_topics(self, exclude: Iterable[str]) -> None:
        """Touch ``last_processed_at`` on idle topics not in *exclude*."""

    @abc.abstractmethod
    def list_locks(self) -> list[TopicLock]: ...


__all__ = ["LockState", "TopicCoordinator", "TopicLock"]
