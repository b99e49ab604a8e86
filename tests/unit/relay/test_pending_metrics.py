"""Unit tests for PendingMetricsReporter gauges."""
from __future__ import annotations

import pytest

from mp_outbox.kernel.messaging import OutboundMessage
from mp_outbox.relay import COUNT_GAUGE, MAX_WAIT_GAUGE, PendingMetricsReporter
from mp_outbox.testing import (
    FakeMetricsRegistry,
    FrozenClock,
    InMemoryOutboxStore,
    InMemoryTopicCoordinator,
)


@pytest.fixture()
def clock() -> FrozenClock:
    return FrozenClock()


@pytest.fixture()
def env(clock):
    store = InMemoryOutboxStore(clock)
    coordinator = InMemoryTopicCoordinator(clock)
    metrics = FakeMetricsRegistry()
    reporter = PendingMetricsReporter(store, coordinator, metrics, clock)
    return store, coordinator, metrics, reporter


class TestPendingMetricsReporter:
    def test_wait_measured_from_oldest_row(self, env, clock) -> None:
        store, coordinator, metrics, reporter = env
        coordinator.lock("orders", "A")
        store.enqueue([OutboundMessage("orders", b"1"), OutboundMessage("orders", b"2")])
        clock.advance(seconds=30)

        reporter.report()

        assert metrics.gauge(MAX_WAIT_GAUGE).value(topic="orders") == 30.0
        assert metrics.gauge(COUNT_GAUGE).value(topic="orders") == 2

    def test_wait_measured_from_last_drain_when_later(self, env, clock) -> None:
        store, coordinator, metrics, reporter = env
        store.enqueue([OutboundMessage("orders", b"1")])
        clock.advance(seconds=10)
        coordinator.lock("orders", "A")
        coordinator.clear_lock("orders", "A")
        clock.advance(seconds=5)

        reporter.report()

        assert metrics.gauge(MAX_WAIT_GAUGE).value(topic="orders") == 5.0

    def test_topic_without_backlog_reports_zero(self, env) -> None:
        _, coordinator, metrics, reporter = env
        coordinator.lock("idle", "A")
        coordinator.clear_lock("idle", "A")

        reporter.report()

        assert metrics.gauge(MAX_WAIT_GAUGE).value(topic="idle") == 0
        assert metrics.gauge(COUNT_GAUGE).value(topic="idle") == 0

    def test_topics_without_lock_row_are_not_reported(self, env) -> None:
        store, _, metrics, reporter = env
        store.enqueue([OutboundMessage("new", b"1")])
        reporter.report()
        assert metrics.gauge(COUNT_GAUGE).value(topic="new") is None
