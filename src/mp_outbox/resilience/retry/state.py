"""Resilience – RestartState, explicit retry bookkeeping for crash loops."""
from __future__ import annotations

import dataclasses

from mp_outbox.resilience.retry.backoff import BackoffStrategy, ExponentialBackoff
from mp_outbox.resilience.retry.jitter import JitterStrategy, RandomizedJitter


@dataclasses.dataclass
class RestartState:
    """Attempt counter plus the strategies that turn it into a delay.

    The caller owns the loop and the sleep; this object only answers
    "how long until the next attempt".
    """

    backoff: BackoffStrategy = dataclasses.field(default_factory=ExponentialBackoff)
    jitter: JitterStrategy = dataclasses.field(default_factory=RandomizedJitter)
    attempt: int = 0

    def next_delay(self) -> float:
        return round(max(self.jitter.apply(self.backoff.compute(self.attempt)), 0.0), 2)

    def record_failure(self) -> None:
        self.attempt += 1

    def reset(self) -> None:
        self.attempt = 0


__all__ = ["RestartState"]
