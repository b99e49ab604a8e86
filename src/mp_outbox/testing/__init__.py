"""Testing support – in-memory fakes for the outbox ports.

Example::

    from mp_outbox.testing import InMemoryOutboxStore, RecordingPublisher
"""

from mp_outbox.testing.fakes import (
    FakeMetricsRegistry,
    FrozenClock,
    InMemoryOutboxStore,
    InMemoryTopicCoordinator,
    RecordingPublisher,
)

__all__ = [
    "FakeMetricsRegistry",
    "FrozenClock",
    "InMemoryOutboxStore",
    "InMemoryTopicCoordinator",
    "RecordingPublisher",
]
