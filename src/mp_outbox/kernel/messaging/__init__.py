"""Kernel messaging – outbox rows, topic locks, publisher (ports only)."""
from mp_outbox.kernel.messaging.publisher import OutboundMessage, Publisher, partition_key_for
from mp_outbox.kernel.messaging.outbox import OutboxMessage, OutboxStore, PendingStats
from mp_outbox.kernel.messaging.topic_lock import LockState, TopicCoordinator, TopicLock

__all__ = [
    "LockState",
    "OutboundMessage",
    "OutboxMessage",
    "OutboxStore",
    "PendingStats",
    "Publisher",
    "TopicCoordinator",
    "TopicLock",
    "partition_key_for",
]
