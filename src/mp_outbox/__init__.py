"""
mp_outbox – transactional outbox relay and worker supervision.

Import path convention::

    from mp_outbox.relay import OutboxRelay
    from mp_outbox.runtime import ShutdownController, WorkerPool
    from mp_outbox.adapters.sqlalchemy import SqlAlchemyOutboxStore, TransactionGuard
    from mp_outbox.adapters.kafka import KafkaPublisher
"""

__version__ = "0.1.0"
__all__ = ["__version__"]
