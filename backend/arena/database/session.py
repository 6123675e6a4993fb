"""
Engine and session factory construction.

Nothing here is global: callers build an engine from settings and hand the
session factory to a SqlLedgerStore.
"""

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from arena.config import Settings
from arena.database.base import Base


def create_engine_from_settings(settings: Settings) -> AsyncEngine:
    """Create the async engine for the configured database URL."""
    url = settings.database_url
    if url.startswith("sqlite"):
        return create_async_engine(url)

    return create_async_engine(
        url,
        pool_size=5,
        max_overflow=10,
        pool_pre_ping=True,
        pool_recycle=3600,
    )


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        autoflush=False,
        expire_on_commit=False,
    )


async def init_models(engine: AsyncEngine) -> None:
    """Create all tables that do not exist yet."""
    import arena.models  # noqa: F401  registers tables on Base.metadata

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
