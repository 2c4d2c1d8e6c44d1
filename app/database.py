"""
Async SQLAlchemy setup for the pricing store (PostgreSQL via asyncpg).

Rule tables are read once per request to build an immutable snapshot;
quote locks are written with a single insert. ``session_scope`` is the
commit-or-rollback unit shared by request handlers, Celery tasks and
scripts.
"""

from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from app.config import settings

engine = create_async_engine(
    settings.DATABASE_URL,
    pool_size=settings.DATABASE_POOL_SIZE,
    pool_pre_ping=True,
    echo=settings.DEBUG and settings.APP_ENV == "development",
)

async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


class Base(DeclarativeBase):
    """Declarative base for pricing rules, FX rules and quote locks."""
    pass


@asynccontextmanager
async def session_scope(factory=None) -> AsyncIterator[AsyncSession]:
    """Open a session, commit on success and roll back on any error."""
    factory = factory or async_session
    async with factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def get_db() -> AsyncIterator[AsyncSession]:
    """FastAPI dependency yielding a session committed at request end."""
    async with session_scope() as session:
        yield session
