import os
from typing import Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import NullPool, StaticPool


engine: Optional[Engine] = None
SessionLocal: Optional[sessionmaker] = None
Base = declarative_base()


def get_engine() -> Engine:
    """Return a lazily created SQLAlchemy engine.

    The engine is created on first use using the ``DATABASE_URL`` environment
    variable. Importing this module has no side effects so tests can set the
    environment variable at runtime. A ``RuntimeError`` is raised only if the
    function is called without ``DATABASE_URL`` being configured.
    """

    global engine, SessionLocal

    if engine is None:
        database_url = os.getenv("DATABASE_URL")
        if not database_url:
            raise RuntimeError("DATABASE_URL environment variable is required")

        if database_url.startswith("postgresql+asyncpg://"):
            database_url = database_url.replace(
                "postgresql+asyncpg://", "postgresql://", 1
            )
        if database_url.startswith("sqlite+aiosqlite://"):
            database_url = database_url.replace("sqlite+aiosqlite://", "sqlite://", 1)

        engine_kwargs = {"echo": False}

        if database_url.startswith("sqlite://"):
            # In-memory SQLite must reuse the same connection to persist schema/data.
            if ":memory:" in database_url or database_url == "sqlite://":
                engine_kwargs["poolclass"] = StaticPool
                engine_kwargs["connect_args"] = {"check_same_thread": False}
            else:
                engine_kwargs["poolclass"] = NullPool
        else:
            engine_kwargs["pool_pre_ping"] = True

        engine = create_engine(database_url, **engine_kwargs)
        SessionLocal = sessionmaker(engine, class_=Session, expire_on_commit=False)

    return engine


def get_session() -> Session:
    """Open a new session bound to the lazily created engine."""

    if SessionLocal is None:
        get_engine()

    assert SessionLocal is not None  # for type checkers
    return SessionLocal()


def create_all() -> None:
    """Create every table registered on ``Base`` if it does not exist yet."""

    from . import models  # noqa: F401

    Base.metadata.create_all(get_engine())


def dispose() -> None:
    global engine, SessionLocal

    if engine is not None:
        engine.dispose()
    engine = None
    SessionLocal = None
