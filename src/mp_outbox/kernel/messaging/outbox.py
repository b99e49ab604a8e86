"""Kernel messaging – outbox rows and the OutboxStore port."""
from __future__ import annotations

import abc
import dataclasses
from collections.abc import Iterable, Sequence
from datetime import datetime

from mp_outbox.kernel.messaging.publisher import OutboundMessage


@dataclasses.dataclass(frozen=True)
class OutboxMessage:
    """A pending row in the outbox table.

    Within one topic ascending ``id`` is the production order.
    """

    id: int
    topic: str
    key: str | None
    partition_key: str | None
    payload: bytes | None
    created_at: datetime

    @property
    def is_tombstone(self) -> bool:
        return self.payload is None

    def to_outbound(self) -> OutboundMessage:
        return OutboundMessage(
            topic=self.topic,
            payload=self.payload,
            key=self.key,
            partition_key=self.partition_key,
        )


@dataclasses.dataclass(frozen=True)
class PendingStats:
    """Backlog summary for one topic."""

    topic: str
    count: int
    earliest: datetime


class OutboxStore(abc.ABC):
    """Port: persistence for pending outbox rows."""

    @abc.abstractmethod
    def enqueue(self, messages: Iterable[OutboundMessage]) -> int:
        """Persist *messages*; return the number of rows written."""

    @abc.abstractmethod
    def list_topics(self) -> list[str]:
        """Distinct topics with at least one pending row."""

    @abc.abstractmethod
    def fetch_batch(self, topic: str, limit: int) -> list[OutboxMessage]:
        """Oldest *limit* rows for *topic*, ordered by ``id``."""

    @abc.abstractmethod
    def delete(self, topic: str, ids: Sequence[int]) -> int:
        """Delete the given rows; return the number removed."""

    @abc.abstractmethod
    def pending_stats(self) -> dict[str, PendingStats]: ...

    def revalidate(self) -> None:
        """Re-check the underlying connection after a transient failure."""


__all__ = ["OutboxMessage", "OutboxStore", "PendingStats"]
