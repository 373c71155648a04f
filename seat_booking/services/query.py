import logging
from typing import List, Optional

from sqlalchemy.engine import Row
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from seat_booking.crud.seat_store import SeatStore, seat_store
from seat_booking.exceptions import StoreUnavailableError
from seat_booking.schemas.booking import BookingInfo

logger = logging.getLogger(__name__)


class QueryService:
    def __init__(self, store: SeatStore = seat_store):
        self.store = store

    async def available_seats(self, db: AsyncSession) -> List[int]:
        """Free seat numbers, ascending. An empty list when the venue is full."""
        try:
            return await self.store.query_free_seats(db)
        except SQLAlchemyError as e:
            logger.error(f"failed to read free seats: {e}", exc_info=True)
            raise StoreUnavailableError("failed to read free seats") from e

    async def booking_info(self, db: AsyncSession, customer: Optional[str] = None) -> Optional[BookingInfo]:
        """
        Snapshot of the latest order of `customer`, or of the most recent
        order of any customer when no customer is given.
        """
        try:
            order = await self.store.get_order(db, customer)
            if order is None:
                return None
            held = await self.store.seats_for_customer(db, order.customer)
        except SQLAlchemyError as e:
            logger.error(f"failed to read booking info for {customer}: {e}", exc_info=True)
            raise StoreUnavailableError("failed to read booking info") from e
        return BookingInfo(
            customer=order.customer,
            amount=order.amount,
            date=order.order_date,
            seats=tuple(row.seat_number for row in held),
        )

    async def seat_map(self, db: AsyncSession) -> List[Row]:
        try:
            return await self.store.seat_map(db)
        except SQLAlchemyError as e:
            logger.error(f"failed to read seat map: {e}", exc_info=True)
            raise StoreUnavailableError("failed to read seat map") from e


query_service = QueryService()
