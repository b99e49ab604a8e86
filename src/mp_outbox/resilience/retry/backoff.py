"""Resilience – backoff strategies."""
from __future__ import annotations

import abc


class BackoffStrategy(abc.ABC):
    """Compute wait duration (seconds) after the *attempt*-th failure (0-based)."""

    @abc.abstractmethod
    def compute(self, attempt: int) -> float: ...


class ConstantBackoff(BackoffStrategy):
    """Fixed delay between attempts."""

    def __init__(self, delay: float = 1.0) -> None:
        self._delay = delay

    def compute(self, attempt: int) -> float:  # noqa: ARG002
        return self._delay


class ExponentialBackoff(BackoffStrategy):
    """Delay grows exponentially: ``min_delay * 2^attempt``, capped at ``max_delay``."""

    def __init__(self, min_delay: float = 1.0, max_delay: float = 60.0) -> None:
        if min_delay < 0 or max_delay < min_delay:
            raise ValueError("require 0 <= min_delay <= max_delay")
        self._min = min_delay
        self._max = max_delay

    def compute(self, attempt: int) -> float:
        # cap the exponent; 2**attempt overflows float for very long crash loops
        return min(self._min * (2 ** min(attempt, 62)), self._max)


__all__ = ["BackoffStrategy", "ConstantBackoff", "ExponentialBackoff"]
