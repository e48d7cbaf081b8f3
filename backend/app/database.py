"""
Patient Notes Backend — Database Engine and Session Management
===============================================================

What:  Async SQLAlchemy engine construction, session factory, declarative
       Base and schema creation for the relational backend.
How:   build_engine() creates an async engine from Settings (or a raw URL);
       the SqlNoteRepository owns that engine and disposes it on shutdown.
Who:   Used by app.repositories.sql, Alembic (Base.metadata) and the tests.
When:  Only when STORAGE_BACKEND=postgres, or in tests against aiosqlite.
       The in-memory backend never touches this module's engine functions.

Connection Pooling Strategy (PostgreSQL):
    pool_size / max_overflow come from Settings (DB_POOL_SIZE, DB_MAX_OVERFLOW)
    pool_pre_ping:    validates connections before use
    pool_recycle=3600: recycles connections every hour
    SQLite URLs (tests) skip the pool arguments, which SQLite pools reject.
"""

from typing import Optional

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from app.config import Settings


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    Shares a single metadata object between the models, create_schema()
    and Alembic's --autogenerate.
    """
    pass


# ── Engine Configuration ──────────────────────────────────────────────────
def build_engine(settings: Settings, url: Optional[str] = None) -> AsyncEngine:
    """
    Create the async engine for the relational backend.

    Args:
        settings: Application settings (pool tuning, log level, URL parts)
        url:      Explicit URL; defaults to settings.sqlalchemy_url
    """
    target = url or settings.sqlalchemy_url
    kwargs = {
        # Echo SQL queries in DEBUG mode for development visibility
        "echo": settings.log_level == "DEBUG",
    }
    if not target.startswith("sqlite"):
        kwargs.update(
            pool_size=settings.db_pool_size,
            max_overflow=settings.db_max_overflow,
            pool_pre_ping=settings.db_pool_pre_ping,
            pool_recycle=3600,
        )
    return create_async_engine(target, **kwargs)


# ── Session Factory ───────────────────────────────────────────────────────
# expire_on_commit=False: rows stay readable after the transaction commits,
# so repositories can map them to Note entities outside the session block
def build_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory bound to `engine`; one session per repository call."""
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


# ── Lifecycle Helpers ─────────────────────────────────────────────────────
async def create_schema(engine: AsyncEngine) -> None:
    """
    What:  Creates the patients and notes tables if they do not exist.
    When:  Tests, and startup when DB_CREATE_SCHEMA=true. Deployments
           normally run `alembic upgrade head` instead.
    """
    # Import registers the tables on Base.metadata
    from app.models import note  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def dispose_engine(engine: AsyncEngine) -> None:
    """
    What:  Gracefully closes all connections in the pool.
    When:  Called when the SQL repository is closed during app shutdown.
    """
    await engine.dispose()
