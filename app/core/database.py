from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine, async_sessionmaker
from fastapi import Request
from typing import Any, AsyncGenerator, Optional
import logging

from .config import Settings

logger = logging.getLogger(__name__)


class Database:
    """Async engine plus session factory, owned by the application context"""

    def __init__(self, url: str, *, echo: bool = False, **engine_options: Any):
        self.url = url
        self.engine: AsyncEngine = create_async_engine(url, echo=echo, **engine_options)
        self.session_factory: async_sessionmaker[AsyncSession] = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> Optional["Database"]:
        if not settings.database_url:
            logger.warning("DATABASE_URL not set, database features are disabled")
            return None
        return cls(
            settings.database_url,
            echo=settings.database_echo,
            pool_pre_ping=True,
            pool_recycle=300,
        )

    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        async with self.session_factory() as session:
            try:
                yield session
            finally:
                await session.close()

    async def init_db(self) -> None:
        """Initialize database tables"""
        async with self.engine.begin() as conn:
            # Import all models to ensure they are registered
            from app.models import Base
            await conn.run_sync(Base.metadata.create_all)

    async def ping(self) -> bool:
        """Check connectivity by reading one row of system_settings"""
        try:
            async with self.session_factory() as session:
                await session.execute(text("SELECT id FROM system_settings LIMIT 1"))
            return True
        except Exception as e:
            logger.error(f"Database health check failed: {e}")
            return False

    async def dispose(self) -> None:
        await self.engine.dispose()
        logger.info("Database connection closed")


async def get_db(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """Dependency to get database session"""
    database: Optional[Database] = request.app.state.context.database
    if database is None:
        raise RuntimeError(
            "Database not configured. Please set DATABASE_URL in your .env file. "
            "Get it from Supabase Dashboard → Settings → Database → Connection string"
        )
    async for session in database.session():
        yield session
