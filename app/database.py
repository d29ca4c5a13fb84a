# app/database.py
"""
Engine, sessions and schema creation.

PostgreSQL in production. SQLite URLs are accepted too (local runs, tests):
they get check_same_thread disabled and, for in-memory databases, a single
shared connection so every session sees the same tables.
"""

from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool
from app.config import settings

Base = declarative_base()


def make_engine(url: str, echo: bool = False) -> Engine:
    if make_url(url).get_backend_name() == "sqlite":
        options = {"connect_args": {"check_same_thread": False}}
        if make_url(url).database in (None, "", ":memory:"):
            options["poolclass"] = StaticPool
        return create_engine(url, echo=echo, **options)

    return create_engine(
        url,
        pool_pre_ping=True,          # Reconnect if the DB connection drops
        pool_size=10,
        max_overflow=20,
        echo=echo,
    )


engine = make_engine(settings.DATABASE_URL, settings.DATABASE_ECHO)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    """FastAPI dependency: one session per request, closed afterwards."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def session_scope():
    """Session for work outside a request (scheduler, scripts)."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def create_tables(bind: Engine = None):
    """Create any missing tables. Safe to call on every startup."""
    import app.models  # noqa: F401  registers every mapped class on Base

    Base.metadata.create_all(bind=bind or engine)
