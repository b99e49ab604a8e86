"""SQLAlchemy adapter – SqlAlchemyEngineFactory."""
from __future__ import annotations

from typing import Any

from sqlalchemy import Engine, create_engine
from sqlalchemy.pool import StaticPool


class SqlAlchemyEngineFactory:
    """Creates a sync SQLAlchemy engine shared by every relay thread.

    ``pool_pre_ping`` is on so connections dropped by the server are replaced
    before use. In-memory SQLite gets a single shared connection so all
    threads see the same database.
    """

    def __init__(self, database_url: str, **engine_kwargs: Any) -> None:
        engine_kwargs.setdefault("pool_pre_ping", True)
        if database_url in ("sqlite://", "sqlite:///:memory:"):
            engine_kwargs.setdefault("poolclass", StaticPool)
            engine_kwargs.setdefault("connect_args", {"check_same_thread": False})
        self._engine = create_engine(database_url, **engine_kwargs)

    @property
    def engine(self) -> Engine:
        return self._engine

    def __call__(self) -> Engine:
        return self._engine

    def dispose(self) -> None:
        self._engine.dispose()


__all__ = ["SqlAlchemyEngineFactory"]
