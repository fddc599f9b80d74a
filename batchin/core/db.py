"""Database connection and session management."""

from collections.abc import Generator
from contextlib import contextmanager

from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker

from batchin.core.config import Settings


def create_catalog_engine(settings: Settings) -> Engine:
    """Create the catalog engine.

    A run reads over a single connection, so the pool holds exactly one.

    Args:
        settings: Application settings

    Returns:
        Engine bound to the catalog database
    """
    return create_engine(
        settings.database_url,
        pool_size=1,
        max_overflow=0,
        pool_pre_ping=True,
        echo=False,
    )


@contextmanager
def catalog_session(
    settings: Settings, engine: Engine | None = None
) -> Generator[Session, None, None]:
    """Get a read-only catalog session for the duration of a run.

    Args:
        settings: Application settings
        engine: Optional pre-built engine; created from settings otherwise

    Yields:
        Session: Database session
    """
    owns_engine = engine is None
    if engine is None:
        engine = create_catalog_engine(settings)

    session_factory = sessionmaker(
        engine,
        class_=Session,
        expire_on_commit=False,
        autoflush=False,
    )

    try:
        with session_factory() as session:
            try:
                yield session
            finally:
                # Nothing is written; discard any implicit transaction
                session.rollback()
    finally:
        if owns_engine:
            engine.dispose()
