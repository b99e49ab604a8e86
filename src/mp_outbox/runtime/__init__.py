"""Runtime – worker pool supervision and signal-driven shutdown."""
from mp_outbox.runtime.shutdown import DEFAULT_SIGNALS, ShutdownController
from mp_outbox.runtime.worker_pool import WorkerPool

__all__ = ["DEFAULT_SIGNALS", "ShutdownController", "WorkerPool"]
