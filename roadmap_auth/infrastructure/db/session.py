# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""Engine construction and the explicitly owned database handle."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker
from sqlalchemy.pool import StaticPool

from roadmap_auth.infrastructure.unit_of_work import unit_of_work_scope
from roadmap_auth.shared.config import DatabaseConfig
from roadmap_auth.shared.logging import logger


class Base(DeclarativeBase):
    pass


def _is_sqlite_memory(url: str) -> bool:
    return url in ("sqlite://", "sqlite:///:memory:") or "mode=memory" in url


def _set_sqlite_pragmas(dbapi_conn, _) -> None:
    cur = dbapi_conn.cursor()
    try:
        cur.execute("PRAGMA journal_mode=WAL;")
        cur.execute("PRAGMA synchronous=NORMAL;")
        cur.execute("PRAGMA foreign_keys=ON;")
        cur.execute("PRAGMA busy_timeout=30000;")
    except Exception:
        logger.exception("Failed to apply SQLite PRAGMAs")
    finally:
        cur.close()


def create_db_engine(config: DatabaseConfig) -> Engine:
    connect_args: dict[str, object] = {}
    engine_kwargs: dict[str, Any] = {}
    if config.is_sqlite():
        connect_args = {
            "check_same_thread": False,
            "timeout": int(config.pool_timeout),
        }
    if _is_sqlite_memory(config.url):
        # one shared connection, otherwise every checkout sees an empty database
        engine_kwargs["poolclass"] = StaticPool
    else:
        engine_kwargs.update(
            pool_size=config.pool_size,
            max_overflow=config.max_overflow,
            pool_timeout=config.pool_timeout,
        )

    engine = create_engine(
        config.url,
        echo=config.echo,
        pool_pre_ping=True,
        connect_args=connect_args,
        **engine_kwargs,
    )
    if config.is_sqlite():
        event.listen(engine, "connect", _set_sqlite_pragmas)
    return engine


class Database:
    """Owns the engine and session factory handed to the stores."""

    def __init__(self, config: DatabaseConfig, *, engine: Engine | None = None) -> None:
        self.config = config
        self.engine = engine or create_db_engine(config)
        self.session_factory = sessionmaker(
            bind=self.engine, autoflush=False, autocommit=False, expire_on_commit=False
        )

    @contextmanager
    def session_scope(self) -> Iterator[Session]:
        with unit_of_work_scope(self.session_factory) as session:
            yield session

    def init_schema(self) -> None:
        from roadmap_auth.infrastructure.db import models  # noqa: F401

        Base.metadata.create_all(bind=self.engine)
        logger.info("Database schema ensured")

    def drop_schema(self) -> None:
        from roadmap_auth.infrastructure.db import models  # noqa: F401

        Base.metadata.drop_all(bind=self.engine)
        logger.info("Database schema dropped")

    def dispose(self) -> None:
        self.engine.dispose()
        logger.debug("db: engine disposed")
