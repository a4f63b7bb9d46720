"""Database setup with SQLAlchemy async."""

from collections.abc import AsyncGenerator

from fastapi import Request
from sqlalchemy import inspect, text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


def create_engine_from_url(database_url: str, echo: bool = False) -> AsyncEngine:
    """Create the async engine, with pooling options for server databases."""
    if database_url.startswith("sqlite"):
        return create_async_engine(database_url, echo=echo)

    return create_async_engine(
        database_url,
        echo=echo,
        pool_pre_ping=True,
        pool_size=5,
        max_overflow=10,
    )


def create_session_maker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create a session factory bound to the engine."""
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )


async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """Dependency to get database session."""
    session_maker = request.app.state.services.session_maker
    async with session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def init_db(engine: AsyncEngine) -> None:
    """Create tables that do not exist yet."""
    # Import models so they register with the metadata
    from defrost import models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def check_db_ready(engine: AsyncEngine) -> None:
    """
    Verify database connectivity and expected schema.

    Checks that the reports table exists.
    """
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))

        has_reports = await conn.run_sync(
            lambda sync_conn: inspect(sync_conn).has_table("reports")
        )
        if not has_reports:
            raise RuntimeError(
                "Database schema is missing tables: reports "
                "(run database init or check migrations)."
            )
