import logging
from datetime import datetime, timezone

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from seat_booking.crud.seat_store import SeatStore, seat_store
from seat_booking.exceptions import BookingError, InvalidRequestError, NoAvailabilityError, SeatConflictError, StoreUnavailableError
from seat_booking.models.seat import PriceClass
from seat_booking.schemas.booking import BookingInfo
from seat_booking.services.allocation import select_seats
from seat_booking.services.pricing import PriceTable

logger = logging.getLogger(__name__)


def validate_customer(customer: str | None) -> str:
    if customer is None or not customer.strip():
        raise InvalidRequestError("Customer must be specified")
    return customer


class BookingService:
    def __init__(self, store: SeatStore = seat_store):
        self.store = store

    # 1. read the free seats, locking them for the rest of the transaction
    # 2. allocate, nothing is written when allocation fails
    # 3. assign every seat with a guarded update, a short row count means a stale snapshot
    # 4. recompute the customer's order total from the seats they now hold
    # 5. commit, or roll everything back on any error
    async def book(self, db: AsyncSession, customer: str, child_count: int, adult_count: int, grouped: bool, prices: PriceTable) -> BookingInfo:
        validate_customer(customer)
        if child_count < 0 or adult_count < 0:
            raise InvalidRequestError(
                f"Seat counts must not be negative (child={child_count}, adult={adult_count})")
        try:
            async with db.begin():
                free_seats = await self.store.query_free_seats(db, for_update=True)
                if not free_seats:
                    raise NoAvailabilityError()

                allocation = select_seats(free_seats, child_count, adult_count, grouped)
                now = datetime.now(timezone.utc)
                if allocation.is_empty:
                    return BookingInfo(customer=customer, amount=0, date=now, seats=())

                assigned = await self.store.assign_seats(db, customer, PriceClass.CHILD, allocation.child_seats)
                assigned += await self.store.assign_seats(db, customer, PriceClass.ADULT, allocation.adult_seats)
                if assigned != len(allocation):
                    raise SeatConflictError()

                held = await self.store.seats_for_customer(db, customer)
                await self.store.upsert_order_amount(
                    db, customer, prices.amount_for(row.price_class for row in held), now)
        except BookingError as e:
            logger.warning(f"booking rejected for {customer}: {e}")
            raise
        except IntegrityError as e:
            # two first bookings of the same customer raced on the order row
            logger.warning(f"booking for {customer} conflicted: {e}")
            raise SeatConflictError() from e
        except SQLAlchemyError as e:
            logger.error(f"failed to book seats for {customer}: {e}", exc_info=True)
            raise StoreUnavailableError("failed to book seats") from e

        logger.info(f"booked seats {list(allocation.seats)} for {customer}")
        return BookingInfo(
            customer=customer,
            amount=prices.total(child_count, adult_count),
            date=now,
            seats=allocation.seats,
        )


booking_service = BookingService()
