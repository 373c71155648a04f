import logging
from typing import AsyncGenerator
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from seat_booking.core.config import get_settings
from seat_booking.db.base import Base
from seat_booking.crud.seat_store import seat_store
from seat_booking.services.pricing import PriceTable

logger = logging.getLogger(__name__)

settings = get_settings()

engine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DB_ECHO,
    future=True
)

async_session = async_sessionmaker(
    bind=engine,
    autoflush=False,
    autocommit=False,
    expire_on_commit=False
)


async def getDB_session() -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides an async DB session
    and ensures it's closed after the request.
    """
    async with async_session() as session:
        yield session


async def init_db() -> None:
    """
    Create all tables based on models.
    """
    import seat_booking.models  # noqa: F401  registers the tables on Base.metadata

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("created all tables")


async def provision_venue(session_factory: async_sessionmaker = async_session) -> int:
    """Create the venue's seats and default prices if they are missing."""
    async with session_factory() as session:
        async with session.begin():
            created = await seat_store.provision(
                session,
                seat_count=settings.SEAT_COUNT,
                prices=PriceTable.from_settings(settings).as_dict(),
            )
    logger.info(f"provisioned {created} new seats ({settings.SEAT_COUNT} in total)")
    return created
