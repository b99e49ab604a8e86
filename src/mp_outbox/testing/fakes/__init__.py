"""Testing fakes – in-memory doubles for kernel ports."""
from mp_outbox.kernel.time import FrozenClock
from mp_outbox.testing.fakes.metrics import FakeMetricsRegistry
from mp_outbox.testing.fakes.outbox import InMemoryOutboxStore
from mp_outbox.testing.fakes.publisher import RecordingPublisher
from mp_outbox.testing.fakes.topic_lock import InMemoryTopicCoordinator

__all__ = [
    "FakeMetricsRegistry",
    "FrozenClock",
    "InMemoryOutboxStore",
    "InMemoryTopicCoordinator",
    "RecordingPublisher",
]
