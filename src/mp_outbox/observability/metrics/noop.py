"""Observability – NoopMetrics, the default when a relay is built without metrics."""
from __future__ import annotations

from mp_outbox.observability.metrics.ports import Counter, Gauge, Metrics


class _DiscardCounter(Counter):
    def add(self, value: float = 1.0, labels: dict[str, str] | None = None) -> None:
        return None


class _DiscardGauge(Gauge):
    def set(self, value: float, labels: dict[str, str] | None = None) -> None:
        return None


class NoopMetrics(Metrics):
    """Hands out shared instruments that drop every measurement."""

    _counter = _DiscardCounter()
    _gauge = _DiscardGauge()

    def counter(self, name: str, description: str = "", unit: str = "") -> Counter:
        return self._counter

    def gauge(self, name: str, description: str = "", unit: str = "") -> Gauge:
        return self._gauge


__all__ = ["NoopMetrics"]
