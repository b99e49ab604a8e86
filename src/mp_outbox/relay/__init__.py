"""Relay – outbox drain loop, compaction, backlog metrics and launcher."""
from mp_outbox.relay.compaction import compact_messages
from mp_outbox.relay.metrics import COUNT_GAUGE, MAX_WAIT_GAUGE, PendingMetricsReporter
from mp_outbox.relay.relay import BATCH_SIZE, DELETE_BATCH_SIZE, MAX_DELETE_ATTEMPTS, OutboxRelay

__all__ = [
    "BATCH_SIZE",
    "COUNT_GAUGE",
    "DELETE_BATCH_SIZE",
    "MAX_DELETE_ATTEMPTS",
    "MAX_WAIT_GAUGE",
    "OutboxRelay",
    "PendingMetricsReporter",
    "compact_messages",
]
