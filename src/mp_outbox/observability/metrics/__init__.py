"""Observability – metrics ports and the no-op sink."""
from mp_outbox.observability.metrics.noop import NoopMetrics
from mp_outbox.observability.metrics.ports import Counter, Gauge, Metrics

__all__ = ["Counter", "Gauge", "Metrics", "NoopMetrics"]
