"""
Database configuration and session management for the QR Inventory service.

The engine (and its connection pool) is created once at application startup,
kept on ``app.state`` and disposed at shutdown. Route handlers receive a
session per request through the ``get_db`` dependency.
"""
import logging
from typing import Iterator

from fastapi import FastAPI, Request
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from .config import Settings

logger = logging.getLogger(__name__)

# Base class for declarative models
Base = declarative_base()


def make_engine(settings: Settings) -> Engine:
    """
    Create a SQLAlchemy engine for the configured database URL.

    PostgreSQL gets a bounded ``QueuePool`` with pre-ping and a connect
    timeout. SQLite is supported for local runs and tests; an in-memory
    database shares a single connection so every session sees the same data.

    Args:
        settings: Application settings

    Returns:
        Engine bound to ``settings.database_url``
    """
    url = settings.database_url
    if url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if url in ("sqlite://", "sqlite:///:memory:"):
            kwargs["poolclass"] = StaticPool
        return create_engine(url, echo=settings.database_echo, **kwargs)

    return create_engine(
        url,
        echo=settings.database_echo,
        pool_size=settings.pool_size,
        max_overflow=settings.max_overflow,
        pool_timeout=settings.pool_timeout,
        pool_pre_ping=True,
        connect_args={"connect_timeout": settings.connect_timeout},
    )


def init_db(app: FastAPI, settings: Settings) -> None:
    """Create the engine and session factory and make sure tables exist."""
    from . import models  # noqa: F401  registers tables on Base.metadata

    engine = make_engine(settings)
    Base.metadata.create_all(bind=engine)
    app.state.engine = engine
    app.state.session_factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    logger.info(f"Database initialised ({engine.url.render_as_string(hide_password=True)})")


def close_db(app: FastAPI) -> None:
    """Dispose of the connection pool created by ``init_db``."""
    engine = getattr(app.state, "engine", None)
    if engine is not None:
        engine.dispose()
        logger.info("Database connection pool disposed")


def get_db(request: Request) -> Iterator[Session]:
    """
    Dependency function that provides a database session.

    Yields:
        Session: SQLAlchemy session checked out from the application's pool;
        it is closed on every exit path.
    """
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()
