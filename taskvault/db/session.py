"""Async Session Factory — provides async DB sessions outside FastAPI.

Invariants:
    - Meant for scripts (seed) and test fixtures
    - SQLite engines get foreign key enforcement, like the app engine

Design Decisions:
    - Separate from infrastructure/database.py: no pooling knobs, no error mapping
"""

from sqlalchemy.ext.asyncio import (
    AsyncEngine, AsyncSession, create_async_engine, async_sessionmaker,
)

from taskvault.infrastructure.database import enable_sqlite_foreign_keys


def create_engine(database_url: str, **kwargs) -> AsyncEngine:
    engine = create_async_engine(database_url, echo=False, **kwargs)
    enable_sqlite_foreign_keys(engine)
    return engine


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create an async session factory bound to engine."""
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
