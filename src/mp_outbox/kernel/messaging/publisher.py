"""Kernel messaging – broker-facing message and Publisher port."""
from __future__ import annotations

import abc
import dataclasses
from collections.abc import Sequence


@dataclasses.dataclass(frozen=True)
class OutboundMessage:
    """A message as handed to the broker.

    ``payload=None`` is a tombstone.
    """

    topic: str
    payload: bytes | None
    key: str | None = None
    partition_key: str | None = None


def partition_key_for(key: str | None, partition_key: str | None) -> str | None:
    """Resolve the partition key: explicit value first, then the message key."""
    if partition_key:
        return partition_key
    if key:
        return key
    return None


class Publisher(abc.ABC):
    """Port: synchronous batch publish to the broker.

    Implementations raise :class:`~mp_outbox.kernel.errors.OversizedBatchError`
    when the broker reports a message/batch-too-large condition, and
    :class:`~mp_outbox.kernel.errors.PublishError` for every other failure.
    """

    @abc.abstractmethod
    def publish(self, messages: Sequence[OutboundMessage]) -> None: ...

    def close(self) -> None:
        """Release broker connections. Default: nothing to release."""


__all__ = ["OutboundMessage", "Publisher", "partition_key_for"]
