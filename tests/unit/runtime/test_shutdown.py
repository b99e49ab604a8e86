"""Unit tests for ShutdownController – signal trap, self-pipe, teardown."""
from __future__ import annotations

import os
import signal
import threading

import pytest

from mp_outbox.runtime import DEFAULT_SIGNALS, ShutdownController


class _Runner:
    id = "fake"

    def __init__(self) -> None:
        self.start_count = 0
        self.stop_count = 0

    def start(self) -> None:
        self.start_count += 1

    def stop(self) -> None:
        self.stop_count += 1


@pytest.fixture()
def usr1_handler():
    """Install a recording Python handler for SIGUSR1; restore afterwards."""
    received: list[int] = []
    original = signal.signal(signal.SIGUSR1, lambda signum, frame: received.append(signum))
    yield received
    signal.signal(signal.SIGUSR1, original)


# ---------------------------------------------------------------------------
# run()
# ---------------------------------------------------------------------------


class TestShutdownControllerRun:
    def test_default_signals(self) -> None:
        assert DEFAULT_SIGNALS == (signal.SIGINT, signal.SIGTERM, signal.SIGQUIT)

    def test_signal_stops_runner(self, usr1_handler) -> None:
        runner = _Runner()
        controller = ShutdownController(runner, signals=[signal.SIGUSR1])
        timer = threading.Timer(0.1, os.kill, (os.getpid(), signal.SIGUSR1))
        timer.start()
        try:
            received = controller.run()
        finally:
            timer.cancel()

        assert received == "SIGUSR1"
        assert runner.start_count == 1
        assert runner.stop_count == 1
        assert not controller.installed

    def test_previous_handler_is_chained_and_restored(self, usr1_handler) -> None:
        previous = signal.getsignal(signal.SIGUSR1)
        controller = ShutdownController(_Runner(), signals=[signal.SIGUSR1])
        timer = threading.Timer(0.1, os.kill, (os.getpid(), signal.SIGUSR1))
        timer.start()
        try:
            controller.run()
        finally:
            timer.cancel()

        assert usr1_handler == [signal.SIGUSR1]
        assert signal.getsignal(signal.SIGUSR1) is previous


# ---------------------------------------------------------------------------
# Trap and wait
# ---------------------------------------------------------------------------


class TestShutdownControllerTrap:
    def test_unrelated_names_in_queue_are_ignored(self, usr1_handler) -> None:
        runner = _Runner()
        controller = ShutdownController(runner, signals=[signal.SIGUSR1])
        controller.install()
        try:
            controller._queue.append("SIGHUP")
            controller._trap(signal.SIGUSR1, None)
            assert controller.wait() == "SIGUSR1"
        finally:
            controller.uninstall()
        assert runner.stop_count == 1

    def test_default_int_handler_is_not_chained(self) -> None:
        original = signal.signal(signal.SIGINT, signal.default_int_handler)
        controller = ShutdownController(_Runner(), signals=[signal.SIGINT])
        controller.install()
        try:
            # would raise KeyboardInterrupt if chained
            controller._trap(signal.SIGINT, None)
        finally:
            controller._stop_at_exit()
            controller.uninstall()
            signal.signal(signal.SIGINT, original)

    def test_install_is_idempotent(self, usr1_handler) -> None:
        controller = ShutdownController(_Runner(), signals=[signal.SIGUSR1])
        controller.install()
        controller.install()
        try:
            assert controller.installed
        finally:
            controller._stop_at_exit()
            controller.uninstall()
        assert not controller.installed

    def test_exit_hook_stops_runner_once(self, usr1_handler) -> None:
        runner = _Runner()
        controller = ShutdownController(runner, signals=[signal.SIGUSR1])
        controller.install()
        try:
            controller._stop_at_exit()
            controller._stop_at_exit()
        finally:
            controller.uninstall()
        assert runner.stop_count == 1

    def test_wakeup_fd_restored(self, usr1_handler) -> None:
        before = signal.set_wakeup_fd(-1)
        signal.set_wakeup_fd(before)
        controller = ShutdownController(_Runner(), signals=[signal.SIGUSR1])
        controller.install()
        controller._stop_at_exit()
        controller.uninstall()
        # set_wakeup_fd returns the fd it replaces
        assert signal.set_wakeup_fd(before) == before
