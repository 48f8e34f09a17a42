from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Session, declared_attr, sessionmaker

from .config import settings


logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    # 테이블명 = 클래스명 소문자 (user, expense, recurringrule, ...)
    @declared_attr.directive
    def __tablename__(cls) -> str:  # type: ignore[override]
        return cls.__name__.lower()


def _is_sqlite(url: str) -> bool:
    return url.startswith("sqlite")


def build_engine(url: str) -> Engine:
    """Create an engine for ``url``; SQLite connections get FK enforcement and WAL."""
    eng = create_engine(url, connect_args={"check_same_thread": False} if _is_sqlite(url) else {})
    if _is_sqlite(url):
        @event.listens_for(eng, "connect")
        def _sqlite_pragmas(dbapi_connection, connection_record):  # type: ignore[override]
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.execute("PRAGMA journal_mode=WAL")
            cursor.close()
    return eng


engine = build_engine(settings.DATABASE_URL)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Iterator[Session]:
    """FastAPI dependency: one session per request."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def session_scope(factory: sessionmaker = SessionLocal) -> Iterator[Session]:
    """Commit on success, roll back and re-raise on error (scripts and seeding)."""
    db = factory()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def init_db(bind: Engine | None = None) -> None:
    """Create missing tables without Alembic (local demo databases)."""
    target = bind if bind is not None else engine
    Base.metadata.create_all(target)
    logger.info("Ensured schema on %s", target.url.render_as_string(hide_password=True))
