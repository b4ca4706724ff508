"""Database configuration and async SQLAlchemy setup."""
from typing import Any, Dict

from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession
from sqlalchemy.orm import sessionmaker, declarative_base
from app.config import settings


def engine_options(database_url: str) -> Dict[str, Any]:
    """Engine keyword arguments for ``database_url``.

    Server databases get a sized, recycled connection pool. SQLite (local
    runs and tests) keeps SQLAlchemy's default pool.
    """
    options: Dict[str, Any] = {"echo": settings.DATABASE_ECHO, "future": True}
    if database_url.startswith("sqlite"):
        return options
    options.update(
        pool_pre_ping=True,
        pool_recycle=1800,
        pool_size=settings.DATABASE_POOL_SIZE,
        max_overflow=settings.DATABASE_MAX_OVERFLOW,
    )
    return options


engine = create_async_engine(settings.DATABASE_URL, **engine_options(settings.DATABASE_URL))

AsyncSessionLocal = sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    future=True,
)

# Base class for models
Base = declarative_base()


async def get_db():
    """Dependency to get a database session. Rolls back on any error."""
    async with AsyncSessionLocal() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
