from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from config.settings import settings

engine: AsyncEngine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
    pool_size=20,
    max_overflow=10,
)

async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_db_session() -> AsyncGenerator[AsyncSession | None, None]:
    """FastAPI dependency: yields an AsyncSession, auto-closes after request.

    Yields None when BOARD_STORE=memory so handlers can run without Postgres.
    """
    if settings.BOARD_STORE == "memory":
        yield None
        return
    async with async_session_factory() as session:
        yield session
