"""SQLAlchemy adapter – outbox store, topic coordinator, transaction guard."""
from mp_outbox.adapters.sqlalchemy.models import Base, OutboxMessageModel, TopicLockModel, create_schema
from mp_outbox.adapters.sqlalchemy.outbox_store import SqlAlchemyOutboxStore
from mp_outbox.adapters.sqlalchemy.session import SqlAlchemyEngineFactory
from mp_outbox.adapters.sqlalchemy.topic_coordinator import SqlAlchemyTopicCoordinator
from mp_outbox.adapters.sqlalchemy.transaction import DEADLOCK_MESSAGES, TransactionGuard, is_deadlock

__all__ = [
    "Base",
    "DEADLOCK_MESSAGES",
    "OutboxMessageModel",
    "SqlAlchemyEngineFactory",
    "SqlAlchemyOutboxStore",
    "SqlAlchemyTopicCoordinator",
    "TopicLockModel",
    "TransactionGuard",
    "create_schema",
    "is_deadlock",
]
