import asyncio
import logging

from seat_booking.core.config import settings
from seat_booking.core.logging import configure_logging
from seat_booking.db.session import engine, init_db, provision_venue

logger = logging.getLogger(__name__)


async def main():
    configure_logging(settings.LOG_LEVEL)
    await init_db()
    created = await provision_venue()
    logger.info(f"venue ready: {settings.SEAT_COUNT} seats, {created} created, "
                f"child={settings.CHILD_PRICE} adult={settings.ADULT_PRICE}")
    await engine.dispose()


if __name__ == "__main__":
    asyncio.run(main())
