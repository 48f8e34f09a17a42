from __future__ import annotations

import os
import tempfile
from typing import Generator, Any

import pytest
from sqlalchemy.orm import sessionmaker

from spendtrack.core.database import Base, build_engine, get_db, init_db
from spendtrack.main import app
from spendtrack import models


@pytest.fixture(scope="session")
def test_db_url() -> Generator[str, Any, Any]:
    # 사용자 환경을 건드리지 않도록 임시 파일 SQLite 사용
    fd, path = tempfile.mkstemp(prefix="spendtrack_test_", suffix=".sqlite3")
    os.close(fd)
    url = f"sqlite:///{path}"
    yield url
    try:
        os.remove(path)
    except OSError:
        pass


@pytest.fixture(scope="session")
def engine(test_db_url: str):
    eng = build_engine(test_db_url)
    init_db(eng)
    return eng


@pytest.fixture(scope="function")
def db_session(engine) -> Generator[Any, Any, Any]:
    TestingSessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    session = TestingSessionLocal()
    # 간단 시드: demo user(1)
    session.add(models.User(email="demo@example.com", is_active=True))
    session.commit()

    try:
        yield session
    finally:
        session.close()
        # 테이블 데이터 정리 (SQLAlchemy 2.x 스타일)
        with engine.begin() as conn:
            if engine.dialect.name == "sqlite":
                conn.exec_driver_sql("PRAGMA foreign_keys=OFF")
            for tbl in reversed(Base.metadata.sorted_tables):
                conn.execute(tbl.delete())
            if engine.dialect.name == "sqlite":
                conn.exec_driver_sql("PRAGMA foreign_keys=ON")


@pytest.fixture()
def demo_user(db_session) -> models.User:
    return db_session.query(models.User).filter_by(email="demo@example.com").one()


@pytest.fixture(autouse=True)
def override_dependency(db_session):
    # FastAPI DI override
    def _get_db_override():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = _get_db_override
    yield
    app.dependency_overrides.clear()


@pytest.fixture()
def client(db_session):
    from fastapi.testclient import TestClient
    with TestClient(app) as c:
        yield c
