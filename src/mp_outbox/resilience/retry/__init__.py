"""Resilience – backoff and jitter strategies, explicit restart state."""
from mp_outbox.resilience.retry.backoff import BackoffStrategy, ConstantBackoff, ExponentialBackoff
from mp_outbox.resilience.retry.jitter import JitterStrategy, NoJitter, RandomizedJitter
from mp_outbox.resilience.retry.state import RestartState

__all__ = [
    "BackoffStrategy", "ConstantBackoff", "ExponentialBackoff",
    "JitterStrategy", "NoJitter", "RandomizedJitter", "RestartState",
]
