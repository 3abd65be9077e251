from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from .config import settings

# Create Async Engine
engine = create_async_engine(
    settings.DATABASE_URL, echo=settings.LOG_LEVEL == "DEBUG", future=True, pool_pre_ping=True
)

# Async Session Factory. Storage commits per write, so nothing should expire on commit.
AsyncSessionLocal = async_sessionmaker(
    bind=engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
)


class Base(DeclarativeBase):
    pass


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Dependency for getting a request-scoped async session."""
    async with AsyncSessionLocal() as session:
        yield session


async def dispose_engine() -> None:
    """Close pooled connections on shutdown."""
    await engine.dispose()
