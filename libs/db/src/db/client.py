"""SQLAlchemy engine/session helpers for the ledger database.

Usage
-----
from db.client import create_db_engine, make_session_factory, session_scope

engine = create_db_engine("sqlite+pysqlite:///money.db")
factory = make_session_factory(engine)
with session_scope(factory) as s:
    s.execute(...)

Engines and session factories are created once by the host process and passed
down explicitly; this module keeps no module-level state.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from .models.ledger import Base


def create_db_engine(database_url: str, *, echo: bool = False) -> Engine:
    """Create an engine for ``database_url``.

    SQLite connections get ``PRAGMA foreign_keys = ON`` so the same-user
    category constraint on transactions is enforced there too.
    """

    if not database_url:
        raise RuntimeError("database URL is empty; cannot initialize database client")
    engine = create_engine(database_url, pool_pre_ping=True, echo=echo)

    if engine.dialect.name == "sqlite":

        @event.listens_for(engine, "connect")
        def _enable_sqlite_fks(dbapi_conn, _):  # pragma: no cover - tiny bridge
            cur = dbapi_conn.cursor()
            cur.execute("PRAGMA foreign_keys = ON")
            cur.close()

    return engine


def make_session_factory(engine: Engine) -> sessionmaker[Session]:
    """Return a session factory bound to ``engine``."""

    return sessionmaker(bind=engine, expire_on_commit=False, class_=Session)


def init_schema(engine: Engine) -> None:
    """Create all ledger tables that do not exist yet."""

    Base.metadata.create_all(bind=engine)


@contextmanager
def session_scope(factory: sessionmaker[Session]) -> Iterator[Session]:
    """Provide a transactional scope around a series of operations."""

    session = factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


__all__ = [
    "create_db_engine",
    "make_session_factory",
    "init_schema",
    "session_scope",
]
