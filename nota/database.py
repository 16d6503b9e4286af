"""Database engine and schema management."""

from sqlalchemy.engine import Engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, create_engine

from nota.config import settings


def build_engine(database_url: str | None = None, echo: bool | None = None) -> Engine:
    """
    Create a SQLite engine usable from worker threads.

    In-memory URLs share a single connection so every thread sees the same data.
    """
    url = database_url or settings.database_url
    kwargs: dict = {
        "echo": settings.db_echo if echo is None else echo,
        "connect_args": {"check_same_thread": False},
    }
    if url in ("sqlite://", "sqlite:///:memory:"):
        kwargs["poolclass"] = StaticPool
    return create_engine(url, **kwargs)


def create_db_and_tables(engine: Engine) -> None:
    """Create all database tables."""
    # Import models so their tables register on the metadata
    import nota.models  # noqa: F401

    SQLModel.metadata.create_all(engine)
