"""Runtime – ShutdownController, turns termination signals into ``stop()``.

The signal trap only writes a byte to a self-pipe and records the signal
name; everything else (logging, stopping runners, database and broker calls)
happens on the supervising loop after it wakes from ``select``.
"""
from __future__ import annotations

import atexit
import collections
import contextlib
import os
import select
import signal
from collections.abc import Iterable
from types import FrameType
from typing import Any

from mp_outbox.kernel.runtime import Runner
from mp_outbox.observability.logging import get_logger

logger = get_logger(__name__)

DEFAULT_SIGNALS: tuple[signal.Signals, ...] = (signal.SIGINT, signal.SIGTERM, signal.SIGQUIT)


class ShutdownController:
    """Owns process signal handling for one runner (usually a WorkerPool).

    Construct once, from the main thread, at process start::

        ShutdownController(WorkerPool(relays)).run()

    :meth:`run` starts the runner, blocks until one of *signals* arrives,
    then calls ``runner.stop()`` and restores the previous handlers.
    Handlers that were installed before are still invoked after ours.
    """

    def __init__(self, runner: Runner, signals: Iterable[int] = DEFAULT_SIGNALS) -> None:
        self._runner = runner
        self._signals = tuple(signal.Signals(s) for s in signals)
        self._names = frozenset(s.name for s in self._signals)
        self._queue: collections.deque[str] = collections.deque()
        self._previous: dict[signal.Signals, Any] = {}
        self._previous_wakeup_fd = -1
        self._reader = -1
        self._writer = -1
        self._installed = False
        self._stopped = False

    @property
    def installed(self) -> bool:
        return self._installed

    def install(self) -> None:
        """Create the self-pipe and trap the configured signals."""
        if self._installed:
            return
        self._reader, self._writer = os.pipe()
        os.set_blocking(self._reader, False)
        os.set_blocking(self._writer, False)
        # wakes select() even when the OS delivers the signal to another thread
        self._previous_wakeup_fd = signal.set_wakeup_fd(self._writer, warn_on_full_buffer=False)
        for sig in self._signals:
            self._previous[sig] = signal.signal(sig, self._trap)
        atexit.register(self._stop_at_exit)
        self._installed = True

    def uninstall(self) -> None:
        """Restore previous handlers and close the pipe."""
        if not self._installed:
            return
        for sig, previous in self._previous.items():
            signal.signal(sig, previous if previous is not None else signal.SIG_DFL)
        self._previous.clear()
        signal.set_wakeup_fd(self._previous_wakeup_fd)
        if self._stopped:
            atexit.unregister(self._stop_at_exit)
        os.close(self._reader)
        os.close(self._writer)
        self._reader = self._writer = -1
        self._installed = False

    def run(self) -> str:
        """Start the runner and block until shutdown; return the signal name."""
        self.install()
        try:
            self._runner.start()
            return self.wait()
        finally:
            self.uninstall()

    def wait(self) -> str:
        """Block until a termination signal is recorded, then stop the runner."""
        while True:
            received = self._drain_queue()
            if received is not None:
                logger.info("shutdown.signal_received", signal=received, runner_id=self._runner.id)
                self._runner.stop()
                self._stopped = True
                return received
            select.select([self._reader], [], [])
            self._drain_pipe()

    def _trap(self, signum: int, frame: FrameType | None) -> None:
        # Nothing here may log, lock or touch the database.
        with contextlib.suppress(BlockingIOError):
            os.write(self._writer, b".")
        self._queue.append(signal.Signals(signum).name)
        previous = self._previous.get(signal.Signals(signum))
        # default_int_handler would raise KeyboardInterrupt past the orderly stop
        if callable(previous) and previous is not signal.default_int_handler:
            previous(signum, frame)

    def _drain_queue(self) -> str | None:
        found = None
        while self._queue:
            name = self._queue.popleft()
            if found is None and name in self._names:
                found = name
        return found

    def _drain_pipe(self) -> None:
        with contextlib.suppress(BlockingIOError):
            while os.read(self._reader, 4096):
                pass

    def _stop_at_exit(self) -> None:
        if not self._stopped:
            self._stopped = True
            self._runner.stop()


__all__ = ["DEFAULT_SIGNALS", "ShutdownController"]
