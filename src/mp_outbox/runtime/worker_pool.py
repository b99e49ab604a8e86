"""Runtime – WorkerPool, a fixed thread pool that keeps runners alive."""
from __future__ import annotations

import threading
from collections.abc import Callable, Sequence
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Any

from mp_outbox.kernel.errors import BaseError
from mp_outbox.kernel.runtime import Runner
from mp_outbox.observability.logging import get_logger
from mp_outbox.resilience.retry import RestartState

logger = get_logger(__name__)


def _error_metadata(exc: BaseException) -> dict[str, Any]:
    metadata: dict[str, Any] = {"exception_class": type(exc).__name__, "exception_message": str(exc)}
    if isinstance(exc, BaseError):
        metadata.update(exc.log_fields())
    return metadata


class WorkerPool:
    """Runs each runner on its own thread and restarts it when it crashes.

    A crashed runner is restarted in place after an exponential, jittered
    delay (1s doubling to 60s by default), indefinitely, until :meth:`stop`.
    A runner whose ``start`` returns normally is not restarted.

    The pool itself is a :class:`Runner`, so it can be handed straight to a
    :class:`~mp_outbox.runtime.ShutdownController`.
    """

    id = "worker-pool"

    def __init__(
        self,
        runners: Sequence[Runner],
        *,
        restart_state: Callable[[], RestartState] = RestartState,
    ) -> None:
        if not runners:
            raise ValueError("WorkerPool needs at least one runner")
        self.runners = list(runners)
        self._restart_state = restart_state
        self._executor: ThreadPoolExecutor | None = None
        self._futures: list[Future[None]] = []
        self._lock = threading.Lock()
        self._stopping = False
        self._wakeup = threading.Event()

    @property
    def futures(self) -> list[Future[None]]:
        return list(self._futures)

    def start(self) -> None:
        """Launch one thread per runner; returns immediately."""
        logger.info("worker_pool.starting", runners=len(self.runners))
        with self._lock:
            self._stopping = False
            self._wakeup.clear()
            self._executor = ThreadPoolExecutor(
                max_workers=len(self.runners), thread_name_prefix="worker-pool"
            )
            self._futures = [self._executor.submit(self._run_runner, runner) for runner in self.runners]

    def stop(self) -> None:
        """Stop every runner and wait for their threads. Safe to call twice."""
        with self._lock:
            if self._stopping:
                return
            self._stopping = True
            executor = self._executor

        logger.info("worker_pool.stopping")
        for runner in self.runners:
            runner.stop()
        # wake threads sleeping in a crash backoff
        self._wakeup.set()
        if executor is not None:
            executor.shutdown(wait=True)
        logger.info("worker_pool.stopped")

    def join(self, timeout: float | None = None) -> None:
        """Wait for every runner thread to finish."""
        for future in self._futures:
            future.exception(timeout=timeout)

    def _run_runner(self, runner: Runner) -> None:
        state = self._restart_state()
        log = logger.bind(runner_id=runner.id)
        try:
            while not self._stopping:
                try:
                    log.info("worker_pool.runner_starting", retry_count=state.attempt)
                    runner.start()
                    state.reset()
                    return
                except Exception as exc:
                    if self._stopping:
                        log.warning("worker_pool.runner_failed_during_stop", **_error_metadata(exc))
                        return
                    self._handle_crashed_runner(log, state, exc)
                    state.record_failure()
        except BaseException as exc:
            log.error("worker_pool.runner_failed", exc_info=exc, **_error_metadata(exc))
            raise

    def _handle_crashed_runner(self, log: Any, state: RestartState, exc: Exception) -> None:
        interval = state.next_delay()
        log.error(
            "worker_pool.runner_crashed",
            retry_count=state.attempt,
            waiting_time=interval,
            exc_info=exc,
            **_error_metadata(exc),
        )
        self._wakeup.wait(interval)


__all__ = ["WorkerPool"]
