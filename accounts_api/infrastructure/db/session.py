# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, scoped_session, sessionmaker
from sqlalchemy.pool import StaticPool

from accounts_api.shared.config import AppConfig, DatabaseConfig, load_config
from accounts_api.shared.logging import logger


class Base(DeclarativeBase):
    pass


def _engine_kwargs(database: DatabaseConfig) -> dict[str, object]:
    if not database.url.startswith("sqlite"):
        return {
            "pool_size": database.pool_size,
            "max_overflow": database.max_overflow,
            "pool_timeout": database.pool_timeout,
        }
    kwargs: dict[str, object] = {
        "connect_args": {
            "check_same_thread": False,
            "timeout": int(database.pool_timeout),
        }
    }
    if database.url in ("sqlite://", "sqlite:///:memory:"):
        # A single shared connection keeps the in-memory database alive.
        kwargs["poolclass"] = StaticPool
    return kwargs


def _create_engine(database: DatabaseConfig) -> Engine:
    return create_engine(
        database.url,
        echo=False,
        future=True,
        pool_pre_ping=True,
        **_engine_kwargs(database),
    )


_database = load_config().database
ENGINE: Engine = _create_engine(_database)


SessionLocal = scoped_session(
    sessionmaker(bind=ENGINE, autoflush=False, autocommit=False, expire_on_commit=False)
)


def get_engine() -> Engine:
    return ENGINE


def bind_engine(database: DatabaseConfig) -> Engine:
    """Point ``ENGINE`` and ``SessionLocal`` at ``database``.

    Nothing changes when the section is the one already bound.
    """
    global ENGINE, _database
    if database == _database:
        return ENGINE

    SessionLocal.remove()
    ENGINE.dispose()
    ENGINE = _create_engine(database)
    _database = database
    SessionLocal.configure(bind=ENGINE)
    logger.info("db.session: engine rebound to configured database")
    return ENGINE


@contextmanager
def session_scope() -> Iterator[Session]:
    session = SessionLocal()
    logger.debug("db.session: opened scoped session")
    try:
        yield session
        session.commit()
        logger.debug("db.session: committed scoped session")
    except Exception as exc:
        logger.warning(f"db.session: rolling back after {type(exc).__name__}")
        session.rollback()
        raise
    finally:
        session.close()
        SessionLocal.remove()
        logger.debug("db.session: closed scoped session")


def init_db(config: AppConfig | None = None) -> None:
    from . import models  # noqa: F401

    engine = bind_engine((config or load_config()).database)
    Base.metadata.create_all(bind=engine)
    logger.info("Database schema ensured")
