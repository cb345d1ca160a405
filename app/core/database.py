"""Database configuration and session management for SQLite.

This module configures the SQLite database engine with settings suited to
a small web application: WAL mode for concurrent access and foreign key
enforcement so assignments cannot point at missing users or checklists.

SQLite Configuration Choices:
    - **WAL (Write-Ahead Logging)**: Allows concurrent readers while writing.
      Login requests read the active assignment while submissions write
      completion state, so readers must not block on writers.

    - **Foreign Keys**: Disabled by default in SQLite. Enabled here so that
      Assignment.user_id / checklist_id are enforced.

    - **check_same_thread=False**: Required for FastAPI. Sessions created in
      a dependency may be used from a different worker thread.
"""

from sqlalchemy import event as sa_event
from sqlmodel import Session, SQLModel, create_engine

from app.core.config import settings

connect_args = (
    {"check_same_thread": False}
    if settings.database_url.startswith("sqlite")
    else {}
)

engine = create_engine(
    settings.database_url,
    connect_args=connect_args,
    echo=settings.debug,  # Log SQL statements when DEBUG=true
)


@sa_event.listens_for(engine, "connect")
def set_sqlite_pragma(dbapi_connection, connection_record):
    """Configure SQLite pragmas on each new connection.

    These settings are connection-level, not database-level, so they must
    be set each time a new connection is established from the pool.
    """
    if not settings.database_url.startswith("sqlite"):
        return
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_db_and_tables():
    """Create all database tables."""
    # Import models so their tables are registered on the metadata
    import app.models  # noqa: F401

    SQLModel.metadata.create_all(engine)


def get_session():
    """Dependency for getting database session."""
    with Session(engine) as session:
        yield session
