"""Resilience – jitter strategies."""
from __future__ import annotations

import abc
import random


class JitterStrategy(abc.ABC):
    """Apply randomness to a backoff delay to spread restarts apart."""

    @abc.abstractmethod
    def apply(self, delay: float) -> float: ...


class NoJitter(JitterStrategy):
    def apply(self, delay: float) -> float:
        return delay


class RandomizedJitter(JitterStrategy):
    """Uniform random in ``[delay * (1 - factor), delay * (1 + factor)]``.

    ``factor`` defaults to a random value in ``[0, 1)`` picked once per
    instance, so two pools started together drift apart.
    """

    def __init__(self, factor: float | None = None) -> None:
        self.factor = random.random() if factor is None else factor
        if not 0 <= self.factor <= 1:
            raise ValueError("factor must be within [0, 1]")

    def apply(self, delay: float) -> float:
        spread = delay * self.factor
        return random.uniform(delay - spread, delay + spread)


__all__ = ["JitterStrategy", "NoJitter", "RandomizedJitter"]
