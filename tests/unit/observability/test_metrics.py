"""Unit tests for metrics ports and the fake registry."""

from __future__ import annotations

import pytest

from mp_outbox.observability.metrics import Counter, Gauge, Metrics, NoopMetrics
from mp_outbox.testing import FakeMetricsRegistry


class TestNoopMetrics:
    def test_instruments_accept_calls(self) -> None:
        metrics = NoopMetrics()
        counter = metrics.counter("outbox.process")
        gauge = metrics.gauge("pending_db_messages_count")
        counter.add(3, {"topic": "orders"})
        gauge.set(1.5, {"topic": "orders"})
        assert isinstance(metrics, Metrics)
        assert isinstance(counter, Counter)
        assert isinstance(gauge, Gauge)

    def test_instruments_are_shared(self) -> None:
        metrics = NoopMetrics()
        assert metrics.counter("publish") is NoopMetrics().counter("deadlock")
        assert metrics.gauge("a") is metrics.gauge("b")


class TestFakeMetricsRegistry:
    def test_counter_totals_by_label(self) -> None:
        metrics = FakeMetricsRegistry()
        metrics.counter("publish").add(2, {"topic": "a"})
        metrics.counter("publish").add(3, {"topic": "b"})
        assert metrics.counter("publish").total_for(topic="a") == 2
        metrics.assert_counter_total("publish", 5)

    def test_gauge_keeps_latest_per_label(self) -> None:
        metrics = FakeMetricsRegistry()
        gauge = metrics.gauge("pending_db_messages_count")
        gauge.set(4, {"topic": "a"})
        gauge.set(1, {"topic": "a"})
        assert gauge.value(topic="a") == 1
        assert gauge.value(topic="b") is None

    def test_assert_counter_total_fails_for_unknown(self) -> None:
        with pytest.raises(AssertionError):
            FakeMetricsRegistry().assert_counter_total("missing", 1)
