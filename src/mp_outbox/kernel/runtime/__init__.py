"""Kernel runtime – supervised runner interface."""
from mp_outbox.kernel.runtime.runner import Runner

__all__ = ["Runner"]
