"""Kernel runtime – Runner protocol."""
from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class Runner(Protocol):
    """A long-lived loop that can be supervised.

    ``start`` blocks until the loop finishes; returning normally means the
    runner decided to stop. ``stop`` is called from another thread and must
    only request a cooperative shutdown.
    """

    @property
    def id(self) -> str: ...

    def start(self) -> None: ...

    def stop(self) -> None: ...


__all__ = ["Runner"]
