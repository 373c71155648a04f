import logging
from datetime import datetime, timezone

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from seat_booking.crud.seat_store import SeatStore, seat_store
from seat_booking.exceptions import BookingError, BookingNotFoundError, InvalidRequestError, OverRefundError, StoreUnavailableError
from seat_booking.models.seat import PriceClass
from seat_booking.schemas.booking import BookingInfo
from seat_booking.services.booking import validate_customer
from seat_booking.services.pricing import PriceTable

logger = logging.getLogger(__name__)

CANCEL_ALL = -1


class CancellationService:
    def __init__(self, store: SeatStore = seat_store):
        self.store = store

    async def cancel(self, db: AsyncSession, customer: str, child_count: int, adult_count: int, prices: PriceTable) -> BookingInfo:
        """
        Cancel some or all of a customer's seats.

        A count of -1 cancels every seat the customer holds in that class and
        is refunded from the seats actually held. Explicit counts are refunded
        as requested; the request is rejected with OverRefundError when the
        refund exceeds what the customer owes, before anything is cleared.
        """
        validate_customer(customer)
        if child_count < CANCEL_ALL or adult_count < CANCEL_ALL:
            raise InvalidRequestError(
                f"Seat counts must be -1 or more (child={child_count}, adult={adult_count})")
        try:
            async with db.begin():
                order = await self.store.get_order(db, customer, for_update=True)
                if order is None:
                    raise BookingNotFoundError(f"No booking found for {customer}")

                held = await self.store.seats_for_customer(db, customer)
                held_child = sum(1 for row in held if row.price_class == PriceClass.CHILD)
                held_adult = len(held) - held_child
                child_to_cancel = held_child if child_count == CANCEL_ALL else child_count
                adult_to_cancel = held_adult if adult_count == CANCEL_ALL else adult_count

                refund = prices.total(child_to_cancel, adult_to_cancel)
                if order.amount < refund:
                    raise OverRefundError(refund=refund, amount=order.amount)

                cleared = await self.store.clear_seats_for_customer(
                    db, customer, PriceClass.CHILD, None if child_count == CANCEL_ALL else child_count)
                cleared += await self.store.clear_seats_for_customer(
                    db, customer, PriceClass.ADULT, None if adult_count == CANCEL_ALL else adult_count)

                remaining = await self.store.seats_for_customer(db, customer)
                now = datetime.now(timezone.utc)
                amount = prices.amount_for(row.price_class for row in remaining)
                await self.store.upsert_order_amount(db, customer, amount, now)
        except BookingError as e:
            logger.warning(f"cancellation rejected for {customer}: {e}")
            raise
        except SQLAlchemyError as e:
            logger.error(f"failed to cancel seats for {customer}: {e}", exc_info=True)
            raise StoreUnavailableError("failed to cancel seats") from e

        logger.info(f"cancelled seats {sorted(cleared)} for {customer}, refund {refund}")
        return BookingInfo(
            customer=customer,
            amount=amount,
            date=now,
            seats=tuple(row.seat_number for row in remaining),
        )


cancellation_service = CancellationService()
