"""
Database engine and session management
"""

from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker
from sqlmodel.ext.asyncio.session import AsyncSession
import structlog

from churchflow.core.config import get_settings

logger = structlog.get_logger(__name__)
settings = get_settings()


def async_database_url(url: str) -> str:
    """Force the asyncpg driver onto plain postgres URLs"""
    if url.startswith("postgres://"):
        url = "postgresql://" + url[len("postgres://"):]
    if url.startswith("postgresql://"):
        url = "postgresql+asyncpg://" + url[len("postgresql://"):]
    return url


def _engine_options() -> dict:
    options = {"echo": settings.DEBUG, "future": True}
    if not settings.DATABASE_URL.startswith("sqlite"):
        options.update(
            pool_size=settings.DATABASE_POOL_SIZE,
            max_overflow=settings.DATABASE_MAX_OVERFLOW,
            pool_pre_ping=True,
        )
    return options


async_engine = create_async_engine(async_database_url(settings.DATABASE_URL), **_engine_options())

# expire_on_commit=False: routers return rows after ChurchScope.atomic commits
async_session_maker = async_sessionmaker(
    bind=async_engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def dispose_engine():
    """Close pooled connections on shutdown"""
    await async_engine.dispose()
    logger.info("Database connections closed")


async def get_session():
    """Dependency to get database session"""
    async with async_session_maker() as session:
        yield session
