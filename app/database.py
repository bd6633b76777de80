"""
SQLAlchemy engine, session factory and declarative base.

``get_db`` is the per-request session dependency used by every router.
SQLite URLs (used by the test-suite) get ``check_same_thread=False`` because
FastAPI runs sync endpoints in a worker thread pool.
"""

from __future__ import annotations

from collections.abc import Generator

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from app.config import get_settings

settings = get_settings()

_connect_args: dict = {}
if settings.DATABASE_URL.startswith("sqlite"):
    _connect_args["check_same_thread"] = False

engine = create_engine(
    settings.DATABASE_URL,
    pool_pre_ping=True,
    connect_args=_connect_args,
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db() -> Generator[Session, None, None]:
    """FastAPI dependency that yields a session and always closes it."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def create_tables() -> None:
    """Create every mapped table. Production deployments use Alembic instead."""
    import app.models  # noqa: F401

    Base.metadata.create_all(bind=engine)
