"""
Database configuration and session management.

This module contains the SQLAlchemy async engine, the session factory
and table creation helpers.
"""

from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from horizon_api.config import settings

database_url = settings.SQLALCHEMY_DATABASE_URI
if database_url.startswith("postgresql://"):
    database_url = database_url.replace("postgresql://", "postgresql+asyncpg://")

# A single shared connection keeps in-memory/file SQLite usable across sessions
engine_kwargs = {"echo": settings.DB_ECHO, "future": True}
if database_url.startswith("sqlite"):
    engine_kwargs["poolclass"] = StaticPool
    engine_kwargs["connect_args"] = {"check_same_thread": False}

engine = create_async_engine(database_url, **engine_kwargs)

async_session = sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)

# Base class for all database models
Base = declarative_base()


_models_configured = False


def _configure_models():
    """Import all models so their tables are registered on Base.metadata."""
    global _models_configured
    if _models_configured:
        return
    import horizon_api.models  # noqa: F401
    from sqlalchemy.orm import configure_mappers
    configure_mappers()
    _models_configured = True


async def get_db() -> AsyncSession:
    """
    Dependency function to get database session.

    Commits when the request succeeds and rolls back on any error.
    """
    _configure_models()

    async with async_session() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def create_tables():
    """
    Create all database tables.

    Called during application startup; Alembic owns schema changes after that.
    """
    _configure_models()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def drop_tables():
    """
    Drop all database tables.

    WARNING: This will delete all data. Used by the import script's --reset.
    """
    _configure_models()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
