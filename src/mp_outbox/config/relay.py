"""Config – RelaySettings for the outbox relay process."""
from __future__ import annotations

import dataclasses
import signal
from datetime import timedelta

from mp_outbox.config.settings.base import Settings
from mp_outbox.config.validation import InvalidSettingValueError

ALL_TOPICS = "*"


def topic_selected(topics: list[str], topic: str) -> bool:
    """Whether *topic* is named in a ``compact_topics``-style list (``*`` = all)."""
    return ALL_TOPICS in topics or topic in topics


@dataclasses.dataclass
class RelaySettings(Settings):
    """Settings read by the relay; loaded from ``OUTBOX_*`` variables."""

    _prefix = "OUTBOX"
    _url_fields = ("database_url",)

    database_url: str = "sqlite:///outbox.db"
    bootstrap_servers: str = "localhost:9092"
    batch_size: int = 1000
    delete_batch_size: int = 10
    max_delete_attempts: int = 3
    compact_topics: list[str] = dataclasses.field(default_factory=list)
    log_topics: list[str] = dataclasses.field(default_factory=list)
    lock_staleness_seconds: float = 60.0
    error_quarantine_seconds: float = 60.0
    heartbeat_interval_seconds: float = 15.0
    poll_interval_seconds: float = 0.5
    worker_count: int = 1
    shutdown_signals: list[str] = dataclasses.field(default_factory=lambda: ["INT", "TERM", "QUIT"])

    def _validate(self) -> None:
        for name in ("batch_size", "delete_batch_size", "worker_count"):
            if getattr(self, name) < 1:
                raise InvalidSettingValueError(name, getattr(self, name), "must be >= 1")
        if self.max_delete_attempts < 0:
            raise InvalidSettingValueError("max_delete_attempts", self.max_delete_attempts, "must be >= 0")
        for name in ("lock_staleness_seconds", "error_quarantine_seconds", "heartbeat_interval_seconds"):
            if getattr(self, name) <= 0:
                raise InvalidSettingValueError(name, getattr(self, name), "must be > 0")
        if self.poll_interval_seconds < 0:
            raise InvalidSettingValueError("poll_interval_seconds", self.poll_interval_seconds, "must be >= 0")
        if self.heartbeat_interval_seconds * 2 > self.lock_staleness_seconds:
            raise InvalidSettingValueError(
                "heartbeat_interval_seconds",
                self.heartbeat_interval_seconds,
                f"must be at most half of lock_staleness_seconds ({self.lock_staleness_seconds})",
            )
        self.signals()

    @property
    def lock_staleness(self) -> timedelta:
        return timedelta(seconds=self.lock_staleness_seconds)

    @property
    def error_quarantine(self) -> timedelta:
        return timedelta(seconds=self.error_quarantine_seconds)

    @property
    def heartbeat_interval(self) -> timedelta:
        return timedelta(seconds=self.heartbeat_interval_seconds)

    def signals(self) -> tuple[signal.Signals, ...]:
        """Resolve ``shutdown_signals`` names (``TERM`` or ``SIGTERM``)."""
        resolved = []
        for name in self.shutdown_signals:
            full = name.upper() if name.upper().startswith("SIG") else f"SIG{name.upper()}"
            try:
                resolved.append(signal.Signals[full])
            except KeyError as exc:
                raise InvalidSettingValueError("shutdown_signals", name, "unknown signal") from exc
        return tuple(resolved)


__all__ = ["ALL_TOPICS", "RelaySettings", "topic_selected"]
