"""Observability – metric ports the relay reports through.

The relay only needs two instrument kinds: counters for rows published,
processed and deadlocks retried, and gauges for the pending-row backlog.
Adapters for a concrete backend implement :class:`Metrics`.
"""
from __future__ import annotations

import abc


class Counter(abc.ABC):
    @abc.abstractmethod
    def add(self, value: float = 1.0, labels: dict[str, str] | None = None) -> None: ...


class Gauge(abc.ABC):
    """Last reported value wins, per label set."""

    @abc.abstractmethod
    def set(self, value: float, labels: dict[str, str] | None = None) -> None: ...


class Metrics(abc.ABC):
    """Creates named instruments; asking twice for one name may return a new object."""

    @abc.abstractmethod
    def counter(self, name: str, description: str = "", unit: str = "") -> Counter: ...

    @abc.abstractmethod
    def gauge(self, name: str, description: str = "", unit: str = "") -> Gauge: ...


__all__ = ["Counter", "Gauge", "Metrics"]
