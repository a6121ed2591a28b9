from typing import AsyncGenerator

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

from app.core.config import settings


def build_engine(database_url: str, echo: bool = False) -> AsyncEngine:
    """Async engine for the ledger database. Pool tuning applies to server databases only."""
    options = {"echo": echo, "future": True}
    if not make_url(database_url).get_backend_name().startswith("sqlite"):
        # pool_pre_ping: check connection is alive before use.
        # pool_recycle: discard connections after this many seconds to avoid stale connections.
        options.update(pool_pre_ping=True, pool_recycle=300)
    return create_async_engine(database_url, **options)


engine = build_engine(settings.database_url, echo=settings.sql_echo)

# Payout responses are built from rows after commit, so keep them loaded.
AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
)

Base = declarative_base()


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with AsyncSessionLocal() as session:
        yield session
