"""
Credit API - Database Session Management
=========================================

What:  Async SQLAlchemy engine, session factory, declarative base, and the
       FastAPI session dependency.
How:   One engine per process; one AsyncSession per request that commits on
       success and rolls back on error.
Who:   Route handlers receive sessions through Depends(get_db_session) and
       pass them to the service layer.

Connection Pooling:
    PostgreSQL (asyncpg): pool_size / max_overflow / pre_ping from settings,
    connections recycled hourly.
    SQLite (aiosqlite): SQLAlchemy picks its own pool; sizing options are not
    passed, and foreign keys are switched on per connection so ON DELETE
    clauses behave the same as on PostgreSQL.
"""

from typing import Any, AsyncGenerator, Dict

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from credit_api.config import settings


def build_engine(database_url: str) -> AsyncEngine:
    """
    Create an async engine for the given URL.

    Factored out of module import so tests can build an engine against a
    temporary SQLite file with the same SQLite tweaks as the application.
    """
    options: Dict[str, Any] = {"echo": settings.log_level == "DEBUG"}
    if not database_url.startswith("sqlite"):
        options.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_pre_ping=settings.db_pool_pre_ping,
            pool_recycle=3600,
        )

    new_engine = create_async_engine(database_url, **options)

    if database_url.startswith("sqlite"):
        @event.listens_for(new_engine.sync_engine, "connect")
        def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return new_engine


# ── Engine & Session Factory ──────────────────────────────────────────────
engine = build_engine(settings.database_url)

# expire_on_commit=False: response models are built from ORM objects after
# the commit in get_db_session; expired attributes would trigger lazy IO.
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Shares one metadata object between the models and Alembic.
    """
    pass


# ── Session Dependency ────────────────────────────────────────────────────
async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    How it works:
        1. Creates a new session from the factory
        2. Yields it to the route handler
        3. On success: commits the transaction
        4. On error: rolls back, then re-raises for the global handlers
        5. Always: closes the session (returns connection to pool)

    Example usage in a route:
        @router.get("/Users")
        async def list_users(db: AsyncSession = Depends(get_db_session)):
            return await user_service.list_users(db)
    """
    async with async_session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


# ── Lifecycle Helpers ─────────────────────────────────────────────────────
async def dispose_engine() -> None:
    """Closes all pooled connections. Called from the application lifespan on shutdown."""
    await engine.dispose()
