"""Database engine and session management."""

import os
from pathlib import Path
from typing import Any

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from car_admin.models.db_models import Base

# Default database path
DEFAULT_DB_PATH = Path(__file__).parent.parent.parent.parent / "data" / "car_admin.db"


def _get_db_path() -> Path:
    """Get database path from environment variable or default."""
    env_path = os.environ.get("CAR_ADMIN_DB_PATH")
    if env_path:
        return Path(env_path)
    return DEFAULT_DB_PATH


def get_database_url(db_path: Path | None = None) -> str:
    """Get database URL from environment or construct from path.

    Args:
        db_path: Optional path to SQLite database file.

    Returns:
        Database URL string (e.g., "sqlite:///..." or "postgresql://...").

    Priority:
        1. DATABASE_URL environment variable (for PostgreSQL/external databases)
        2. Explicit db_path argument
        3. CAR_ADMIN_DB_PATH environment variable
        4. Default path (data/car_admin.db)
    """
    if url := os.environ.get("DATABASE_URL"):
        return url
    path = db_path or _get_db_path()
    return f"sqlite:///{path}"


def _set_sqlite_pragmas(dbapi_conn: Any, connection_record: Any) -> None:
    """Enable WAL and foreign key enforcement on every new SQLite connection.

    PRAGMAs are per-connection, so they must be set on connect rather than once.
    """
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_db_engine(database_url: str, echo: bool = False) -> Engine:
    """Create a configured engine for the given URL and create missing tables.

    Args:
        database_url: SQLAlchemy database URL.
        echo: Whether to echo SQL statements.

    Returns:
        SQLAlchemy Engine instance.
    """
    engine_kwargs: dict[str, object] = {"echo": echo}

    if database_url.startswith("sqlite"):
        # Gateway work runs in worker threads
        engine_kwargs["connect_args"] = {
            "check_same_thread": False,
            "timeout": 30,  # SQLite busy timeout in seconds
        }
    else:
        engine_kwargs["pool_size"] = 5
        engine_kwargs["pool_recycle"] = 3600

    engine = create_engine(database_url, **engine_kwargs)

    if database_url.startswith("sqlite"):
        event.listen(engine, "connect", _set_sqlite_pragmas)

    # Auto-create tables (idempotent - safe to call on every startup)
    Base.metadata.create_all(engine)
    return engine


_engine: Engine | None = None


def get_engine(db_path: Path | str | None = None, echo: bool = False) -> Engine:
    """Get or create the process-wide SQLAlchemy engine.

    Args:
        db_path: Path to SQLite database file. Defaults to data/car_admin.db.
        echo: Whether to echo SQL statements.

    Returns:
        SQLAlchemy Engine instance.
    """
    global _engine

    if _engine is None:
        path_obj = Path(db_path) if db_path else None
        database_url = get_database_url(db_path=path_obj)

        # Ensure parent directory exists for SQLite
        if database_url.startswith("sqlite") and not os.environ.get("DATABASE_URL"):
            (path_obj or _get_db_path()).parent.mkdir(parents=True, exist_ok=True)

        _engine = create_db_engine(database_url, echo=echo)

    return _engine


def make_session_factory(engine: Engine) -> sessionmaker[Session]:
    """Build a session factory bound to ``engine``.

    ``expire_on_commit`` is off so rows stay readable after the session closes.
    """
    return sessionmaker(autoflush=False, expire_on_commit=False, bind=engine)


def init_db(db_path: Path | str | None = None, echo: bool = False) -> Engine:
    """Initialize the database, creating all tables.

    Args:
        db_path: Path to SQLite database file.
        echo: Whether to echo SQL statements.

    Returns:
        SQLAlchemy Engine instance.
    """
    return get_engine(db_path, echo)


def reset_engine() -> None:
    """Reset the global engine. Useful for testing."""
    global _engine
    if _engine is not None:
        _engine.dispose()
    _engine = None
