"""Engine and session setup for the calboard event/task store.

Events and their tasks live in two tables. SQLite is the default store for a
single-user install; set `DATABASE_URL` to a PostgreSQL URL to run against a
server instead. Tasks reference their event with ON DELETE CASCADE, which
SQLite only honours when foreign keys are switched on per connection.
"""

import os
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session, declarative_base
from dotenv import load_dotenv

load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./calboard.db")


def _is_sqlite_url(database_url: str) -> bool:
    return "sqlite" in (database_url or "")


def get_engine_kwargs(database_url: str) -> dict:
    """Build create_engine options for a store URL without connecting.

    SQLite gets a shared-thread connection for the FastAPI worker threads and
    no pool sizing. Server databases read their pool limits from
    DB_POOL_SIZE, DB_MAX_OVERFLOW and DB_POOL_TIMEOUT_SEC. DEBUG=true turns on
    SQL echo for either.
    """
    kwargs: dict = {
        "echo": os.getenv("DEBUG", "False").lower() == "true",
        "pool_pre_ping": True,
    }

    if _is_sqlite_url(database_url):
        kwargs["connect_args"] = {"check_same_thread": False}
        return kwargs

    kwargs.update(
        pool_size=int(os.getenv("DB_POOL_SIZE", "5")),
        max_overflow=int(os.getenv("DB_MAX_OVERFLOW", "5")),
        pool_timeout=int(os.getenv("DB_POOL_TIMEOUT_SEC", "30")),
    )
    return kwargs


def build_engine(database_url: str) -> Engine:
    return create_engine(database_url, **get_engine_kwargs(database_url))


engine = build_engine(DATABASE_URL)


@event.listens_for(Engine, "connect")
def set_sqlite_pragmas(dbapi_conn, connection_record):
    """Turn on foreign keys so deleting an event removes its tasks."""
    if _is_sqlite_url(DATABASE_URL):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.close()


SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db() -> Session:
    """Request-scoped session for the event and task repositories (FastAPI dependency)."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db():
    """Create the events and tasks tables if they do not exist yet."""
    # Registers EventDB and TaskDB on Base.metadata
    from calboard.database import models  # noqa: F401

    Base.metadata.create_all(bind=engine)
