import asyncio
import logging

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker

from .config import Settings
from .models import Base

logger = logging.getLogger(__name__)

MAX_RETRIES = 3
RETRY_DELAY = 5


def create_engine(settings: Settings) -> AsyncEngine:
    """Create the shared async engine; it pools connections for all requests"""
    if settings.is_sqlite:
        return create_async_engine(settings.database_url, future=True)

    return create_async_engine(
        settings.database_url,
        echo=False,
        future=True,
        pool_pre_ping=True,  # Verify connections before use
        pool_size=settings.db_pool_size,
        max_overflow=settings.db_max_overflow,
        pool_timeout=20,
        pool_recycle=300,
        connect_args={"server_settings": {"application_name": "taskboard"}},
    )


def create_session_factory(engine: AsyncEngine) -> sessionmaker:
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def init_db(engine: AsyncEngine, retry_delay: float = RETRY_DELAY) -> None:
    """Create all tables, retrying while the database comes up"""
    for attempt in range(MAX_RETRIES):
        try:
            logger.info("Database connection attempt %d/%d", attempt + 1, MAX_RETRIES)
            async with engine.begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
            logger.info("Database tables created successfully")
            return
        except Exception as e:
            logger.warning("Database connection attempt %d failed: %s", attempt + 1, e)
            if attempt < MAX_RETRIES - 1:
                logger.info("Retrying in %s seconds...", retry_delay)
                await asyncio.sleep(retry_delay)
            else:
                logger.error("All database connection attempts failed")
                raise


async def close_db(engine: AsyncEngine) -> None:
    """Close database connections"""
    await engine.dispose()
    logger.info("Database connections closed")
