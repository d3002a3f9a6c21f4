"""
Database Connection
===================

Synchronous database access for the worker. Jobs share the API's ORM
models so the transfer history and player rules stay in one place.
"""

from contextlib import contextmanager
from typing import Generator

from rich.console import Console
from sqlalchemy import create_engine, text
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import NullPool

from worker.config import settings

console = Console()


def _engine_options() -> dict:
    if settings.is_sqlite:
        return {"poolclass": NullPool}
    return {
        "pool_pre_ping": True,
        "pool_size": settings.db_pool_size,
        "max_overflow": settings.db_max_overflow,
    }


sync_engine = create_engine(
    settings.sync_database_url,
    echo=False,
    **_engine_options(),
)

SyncSessionLocal = sessionmaker(
    bind=sync_engine,
    autocommit=False,
    autoflush=False,
    expire_on_commit=False,
)


@contextmanager
def get_sync_session() -> Generator[Session, None, None]:
    """Get a synchronous database session."""
    session = SyncSessionLocal()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


# =============================================================================
# HEALTH CHECK
# =============================================================================

def check_database_connection() -> bool:
    """Check if database is accessible."""
    try:
        with get_sync_session() as session:
            session.execute(text("SELECT 1"))
        return True
    except Exception as e:
        console.print(f"[red]Database connection failed: {e}[/red]")
        return False
