from __future__ import annotations

import os

# Keep the module-level engine off the working directory
os.environ.setdefault("DATABASE_URL", "sqlite://")

from typing import Callable, Iterator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from reading_builder.db import Base, get_db
from reading_builder.dependencies import get_orchestrator, get_text_generator
from reading_builder.main import app
from reading_builder.orchestrator import RetryOrchestrator

from fakes import ScriptedGenerator, SleepRecorder


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def sleeper() -> SleepRecorder:
    return SleepRecorder()


@pytest.fixture
def db_session() -> Iterator[Session]:
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


@pytest.fixture
def api(db_session: Session, sleeper: SleepRecorder) -> Iterator[Callable[[ScriptedGenerator], TestClient]]:
    """Build a TestClient wired to a scripted generator and the in-memory database.

    The client is not entered as a context manager, so the startup hook
    (table creation on the real engine, cleanup watcher) does not run.
    """

    def _override_db() -> Iterator[Session]:
        yield db_session

    def _build(generator: ScriptedGenerator) -> TestClient:
        app.dependency_overrides[get_db] = _override_db
        app.dependency_overrides[get_text_generator] = lambda: generator
        app.dependency_overrides[get_orchestrator] = lambda: RetryOrchestrator(generator, sleep=sleeper)
        return TestClient(app)

    yield _build
    app.dependency_overrides.clear()
