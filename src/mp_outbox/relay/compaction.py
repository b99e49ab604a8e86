"""Relay – per-key compaction of a fetched batch."""
from __future__ import annotations

from collections.abc import Sequence

from mp_outbox.kernel.messaging import OutboxMessage


def compact_messages(batch: Sequence[OutboxMessage]) -> list[OutboxMessage]:
    """Keep only the last message for each key, in their original order.

    Batches whose first message has no key are returned untouched: unkeyed
    topics have nothing to compact.
    """
    if not batch or not batch[0].key:
        return list(batch)
    last_index = {message.key: index for index, message in enumerate(batch)}
    return [message for index, message in enumerate(batch) if last_index[message.key] == index]


__all__ = ["compact_messages"]
