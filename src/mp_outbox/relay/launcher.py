"""Relay – process entry point wiring relays, pool and shutdown handling."""
from __future__ import annotations

from collections.abc import Callable

from mp_outbox.adapters.kafka import KafkaPublisher
from mp_outbox.adapters.sqlalchemy import (
    SqlAlchemyEngineFactory,
    SqlAlchemyOutboxStore,
    SqlAlchemyTopicCoordinator,
    TransactionGuard,
)
from mp_outbox.config import DotenvSettingsLoader, EnvSettingsLoader, RelaySettings
from mp_outbox.kernel.messaging import OutboxStore, Publisher, TopicCoordinator
from mp_outbox.kernel.time import Clock
from mp_outbox.observability.logging import configure_logging, get_logger
from mp_outbox.observability.metrics import Metrics
from mp_outbox.relay.relay import OutboxRelay
from mp_outbox.runtime import ShutdownController, WorkerPool

logger = get_logger(__name__)

PublisherFactory = Callable[[], Publisher]


def build_relays(
    settings: RelaySettings,
    store: OutboxStore,
    coordinator: TopicCoordinator,
    publishers: list[Publisher],
    *,
    metrics: Metrics | None = None,
    clock: Clock | None = None,
) -> list[OutboxRelay]:
    """One relay per publisher; publishers are not shared between threads."""
    return [
        OutboxRelay.from_settings(store, coordinator, publisher, settings, metrics=metrics, clock=clock)
        for publisher in publishers
    ]


def start_outbox_relays(
    settings: RelaySettings | None = None,
    *,
    publisher_factory: PublisherFactory | None = None,
    metrics: Metrics | None = None,
) -> None:
    """Run ``settings.worker_count`` relays until a shutdown signal arrives.

    Must be called from the main thread (signal handlers are installed).
    """
    settings = settings or EnvSettingsLoader().load(RelaySettings)
    engine_factory = SqlAlchemyEngineFactory(settings.database_url)
    engine = engine_factory.engine
    guard = TransactionGuard(engine, metrics=metrics)
    store = SqlAlchemyOutboxStore(engine, guard=guard)
    coordinator = SqlAlchemyTopicCoordinator(
        engine,
        guard=guard,
        lock_staleness=settings.lock_staleness,
        error_quarantine=settings.error_quarantine,
    )
    factory = publisher_factory or (lambda: KafkaPublisher(settings.bootstrap_servers))
    publishers = [factory() for _ in range(settings.worker_count)]
    relays = build_relays(settings, store, coordinator, publishers, metrics=metrics)
    logger.info("outbox.launching", worker_count=len(relays), settings=settings.log_fields())
    try:
        ShutdownController(WorkerPool(relays), signals=settings.signals()).run()
    finally:
        for publisher in publishers:
            publisher.close()
        engine_factory.dispose()


def main() -> None:
    """Console entry point: settings from `.env` plus the environment, JSON logs."""
    configure_logging()
    start_outbox_relays(DotenvSettingsLoader().load(RelaySettings))


__all__ = ["PublisherFactory", "build_relays", "main", "start_outbox_relays"]
