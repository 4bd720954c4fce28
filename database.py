import logging
from typing import Any, Dict, Generator, Iterable, Type

from fastapi import Request
from sqlalchemy import create_engine, event
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.engine import Engine
from sqlalchemy.ext.declarative import declarative_base
from sqlalchemy.orm import Session, sessionmaker, configure_mappers
from sqlalchemy.pool import StaticPool

logger = logging.getLogger(__name__)


def build_engine(database_url: str, echo: bool = False) -> Engine:
    """
    Create the engine for the given database URL.

    SQLite connections get foreign key enforcement switched on so that
    ``ON DELETE CASCADE`` behaves the same as on a server database.
    In-memory SQLite shares a single connection across sessions.
    """
    kwargs: Dict[str, Any] = {"echo": echo, "pool_pre_ping": True}
    is_sqlite = database_url.startswith("sqlite")
    if is_sqlite:
        kwargs["connect_args"] = {"check_same_thread": False}
        if ":memory:" in database_url or database_url == "sqlite://":
            kwargs["poolclass"] = StaticPool

    engine = create_engine(database_url, **kwargs)

    if is_sqlite:
        @event.listens_for(engine, "connect")
        def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return engine


def build_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


# Base model with common functionality
class BaseModel:
    """Base model with common functionality."""

    def to_dict(self) -> Dict[str, Any]:
        """Convert model instance to dictionary."""
        return {
            c.name: getattr(self, c.name)
            for c in self.__table__.columns  # type: ignore
        }


# Create declarative base with our custom BaseModel
Base = declarative_base(cls=BaseModel)


def init_models():
    """Import all models and configure mappers."""
    import models  # noqa: F401

    try:
        configure_mappers()
    except Exception as e:
        logger.error(f"Error configuring mappers: {e}", exc_info=True)
        raise


def insert_or_ignore(
    db: Session,
    model: Type[Any],
    values: Dict[str, Any],
    conflict_columns: Iterable[str],
) -> bool:
    """
    Insert a row unless it collides with the unique key on ``conflict_columns``.

    Runs as a single statement inside the session's current transaction.
    Returns True if a row was inserted, False if an existing row was kept.
    """
    dialect = db.get_bind().dialect.name
    if dialect == "postgresql":
        stmt = postgresql.insert(model).values(**values)
    elif dialect == "sqlite":
        stmt = sqlite.insert(model).values(**values)
    else:
        raise NotImplementedError(f"insert_or_ignore is not supported on {dialect}")

    stmt = stmt.on_conflict_do_nothing(index_elements=list(conflict_columns))
    result = db.execute(stmt)
    return result.rowcount == 1


def get_db(request: Request) -> Generator[Session, None, None]:
    """FastAPI dependency opening one session per request."""
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()
