"""Pytest fixtures and configuration for calboard tests."""

import os

# Keep the module-level engine and the gateway away from real resources
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ["LLM_MOCK"] = "true"

import pytest
from datetime import datetime, timedelta
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient

from calboard.database.database import Base
from calboard.database.repository import EventRepository, TaskRepository
from calboard.integrations.cache import InMemoryResponseCache
from calboard.integrations.llm_client import GenerationGateway
from calboard.models.event import Event, EventCreate


# Use in-memory SQLite database for tests
TEST_DATABASE_URL = "sqlite:///:memory:"


@pytest.fixture(scope="function")
def db_session():
    """Create a database session for testing.

    Uses an in-memory SQLite database that is created fresh for each test.
    """
    from sqlalchemy import event
    from calboard.database import models  # noqa: F401

    # Create engine with StaticPool for in-memory database
    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False
    )

    # Enable SQLite foreign keys so tasks cascade with their event
    @event.listens_for(engine, "connect")
    def set_sqlite_pragmas(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    Base.metadata.create_all(bind=engine)

    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()

    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def event_repository(db_session: Session):
    """Create an EventRepository instance for testing."""
    return EventRepository(db_session)


@pytest.fixture
def task_repository(db_session: Session):
    """Create a TaskRepository instance for testing."""
    return TaskRepository(db_session)


@pytest.fixture
def now():
    """A fixed Wednesday mid-morning used as the reference clock."""
    return datetime(2024, 1, 10, 10, 0)


@pytest.fixture
def make_event():
    """Factory for canonical Event objects.

    Returns a callable taking a start time, a duration in minutes and any
    field overrides.
    """
    counter = {"n": 0}

    def _make(start: datetime, minutes: int = 60, **overrides) -> Event:
        counter["n"] += 1
        data = {
            "id": f"event-{counter['n']}",
            "title": f"Event {counter['n']}",
            "start_time": start,
            "end_time": start + timedelta(minutes=minutes),
        }
        data.update(overrides)
        return Event(**data)

    return _make


@pytest.fixture
def sample_event_create():
    """A plain one-hour event."""
    return EventCreate(
        title="Team sync",
        description="Weekly planning",
        start_time=datetime(2024, 1, 10, 14, 0),
        end_time=datetime(2024, 1, 10, 15, 0),
        location="Room 4",
    )


@pytest.fixture
def mock_gateway():
    """Gateway in permanent mock mode with its own cache."""
    return GenerationGateway(mock_mode=True, cache=InMemoryResponseCache())


@pytest.fixture
def test_client(db_session: Session, mock_gateway):
    """Create a FastAPI test client with overridden database and gateway dependencies."""
    from calboard.api.app import app
    from calboard.database.database import get_db
    from calboard.integrations.llm_client import get_gateway

    # Override the get_db dependency to use our test database session
    def override_get_db():
        try:
            yield db_session
        finally:
            pass  # Don't close the session here, let the fixture handle it

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_gateway] = lambda: mock_gateway

    # Unhandled errors must reach the error handler instead of the test
    with TestClient(app, raise_server_exceptions=False) as client:
        yield client

    # Clean up dependency overrides
    app.dependency_overrides.clear()
