"""SQLAlchemy ORM models – outbox rows and topic locks."""
from __future__ import annotations

import datetime
from typing import Any

from sqlalchemy import BigInteger, Boolean, DateTime, Index, Integer, LargeBinary, String, false
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


class OutboxMessageModel(Base):
    """Pending message; ``message`` NULL is a tombstone."""

    __tablename__ = "kafka_messages"
    __table_args__ = (Index("ix_kafka_messages_topic_id", "topic", "id"),)

    id: Mapped[int] = mapped_column(
        BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True
    )
    topic: Mapped[str] = mapped_column(String(255), nullable=False)
    key: Mapped[str | None] = mapped_column(String(255), nullable=True)
    partition_key: Mapped[str | None] = mapped_column(String(255), nullable=True)
    message: Mapped[bytes | None] = mapped_column(LargeBinary, nullable=True)
    created_at: Mapped[datetime.datetime] = mapped_column(DateTime(timezone=True), nullable=False)


class TopicLockModel(Base):
    """One row per topic; the ownership record shared by all relays."""

    __tablename__ = "kafka_topic_info"

    topic: Mapped[str] = mapped_column(String(255), primary_key=True)
    locked_by: Mapped[str | None] = mapped_column(String(255), nullable=True, index=True)
    locked_at: Mapped[datetime.datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    error: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default=false())
    retries: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    last_processed_at: Mapped[datetime.datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )


def create_schema(engine: Any) -> None:
    """Create both tables if they do not exist (tests, local development)."""
    Base.metadata.create_all(engine)


__all__ = ["Base", "OutboxMessageModel", "TopicLockModel", "create_schema"]
