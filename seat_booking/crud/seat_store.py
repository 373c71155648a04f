from collections import defaultdict
from datetime import datetime
from typing import Iterable, List, Optional

from sqlalchemy import select, update
from sqlalchemy.engine import Row
from sqlalchemy.ext.asyncio import AsyncSession

from seat_booking.models import Order, Price, PriceClass, Seat


class SeatStore:
    """
    Persistence of the venue: seats, per-customer orders and unit prices.

    Methods never commit. The services open the transaction (async with db.begin())
    so a whole booking or cancellation is written all or nothing.
    Seat reads select columns instead of entities, bulk updates below skip the
    identity map and column rows are always fresh.
    """

    async def query_free_seats(self, db: AsyncSession, for_update: bool = False) -> List[int]:
        stmt = (select(Seat.seat_number)
                .where(Seat.customer.is_(None))
                .order_by(Seat.seat_number))
        if for_update:
            stmt = stmt.with_for_update()  # pessimistic locking
        result = await db.scalars(stmt)
        return list(result.all())

    async def assign_seats(self, db: AsyncSession, customer: str, price_class: PriceClass, seat_numbers: Iterable[int]) -> int:
        """Assign the seats that are still free, returns how many rows changed."""
        seat_numbers = sorted(seat_numbers)
        if not seat_numbers:
            return 0
        result = await db.execute(
            update(Seat)
            .where(Seat.seat_number.in_(seat_numbers))
            .where(Seat.customer.is_(None))
            .values(price_class=price_class, customer=customer)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

    async def clear_seats_for_customer(self, db: AsyncSession, customer: str, price_class: PriceClass, limit: Optional[int] = None) -> List[int]:
        """
        Free the customer's seats of one class.
        limit=None clears all of them, otherwise at most `limit` seats, highest numbers first.
        """
        if limit is not None and limit <= 0:
            return []
        stmt = (select(Seat.seat_number)
                .where(Seat.customer == customer)
                .where(Seat.price_class == price_class)
                .order_by(Seat.seat_number.desc())
                .with_for_update())
        if limit is not None:
            stmt = stmt.limit(limit)
        seat_numbers = list((await db.scalars(stmt)).all())
        if not seat_numbers:
            return []
        await db.execute(
            update(Seat)
            .where(Seat.seat_number.in_(seat_numbers))
            .where(Seat.customer == customer)
            .values(price_class=None, customer=None)
            .execution_options(synchronize_session=False)
        )
        return sorted(seat_numbers)

    async def seats_for_customer(self, db: AsyncSession, customer: str) -> List[Row]:
        """Rows of (seat_number, price_class) held by the customer, ascending."""
        result = await db.execute(
            select(Seat.seat_number, Seat.price_class)
            .where(Seat.customer == customer)
            .order_by(Seat.seat_number)
        )
        return list(result.all())

    async def seat_map(self, db: AsyncSession) -> List[Row]:
        result = await db.execute(
            select(Seat.seat_number, Seat.price_class, Seat.customer)
            .order_by(Seat.seat_number)
        )
        return list(result.all())

    async def get_order(self, db: AsyncSession, customer: Optional[str] = None, for_update: bool = False) -> Optional[Order]:
        """The customer's order, or the most recent order of any customer when customer is None."""
        stmt = select(Order).execution_options(populate_existing=True)
        if customer is not None:
            stmt = stmt.where(Order.customer == customer)
        else:
            stmt = stmt.order_by(Order.order_date.desc(), Order.updated_at.desc()).limit(1)
        if for_update:
            stmt = stmt.with_for_update()
        result = await db.execute(stmt)
        return result.scalar_one_or_none()

    async def upsert_order_amount(self, db: AsyncSession, customer: str, amount: int, order_date: datetime) -> Order:
        """Store the recomputed total of the customer's order, creating the row on first booking."""
        order = await self.get_order(db, customer, for_update=True)
        if order is None:
            order = Order(customer=customer, amount=amount, order_date=order_date)
            db.add(order)
        else:
            order.amount = amount
            order.order_date = order_date
        await db.flush()
        return order

    async def load_prices(self, db: AsyncSession) -> dict[PriceClass, int]:
        result = await db.execute(select(Price.price_class, Price.unit_price))
        return {price_class: unit_price for price_class, unit_price in result.all()}

    async def set_prices(self, db: AsyncSession, prices: dict[PriceClass, int]) -> None:
        for price_class, unit_price in prices.items():
            price = await db.get(Price, price_class, with_for_update=True, populate_existing=True)
            if price is None:
                db.add(Price(price_class=price_class, unit_price=unit_price))
            else:
                price.unit_price = unit_price
        await db.flush()

    async def reprice_orders(self, db: AsyncSession, prices: dict[PriceClass, int]) -> int:
        """Recompute every order total from the seats its customer holds. Returns the number of orders."""
        held = await db.execute(
            select(Seat.customer, Seat.price_class).where(Seat.customer.is_not(None)))
        totals: dict[str, int] = defaultdict(int)
        for customer, price_class in held.all():
            totals[customer] += prices[price_class]
        orders = (await db.scalars(
            select(Order).with_for_update().execution_options(populate_existing=True))).all()
        for order in orders:
            order.amount = totals.get(order.customer, 0)
        await db.flush()
        return len(orders)

    async def provision(self, db: AsyncSession, seat_count: int, prices: dict[PriceClass, int]) -> int:
        """
        Create the seats 0..seat_count-1 and the price rows that do not exist yet.
        Existing rows are left untouched so provisioning can run at every startup.
        Returns the number of seats created.
        """
        existing_seats = set((await db.scalars(select(Seat.seat_number))).all())
        new_seats = [Seat(seat_number=number)
                     for number in range(seat_count) if number not in existing_seats]
        db.add_all(new_seats)

        existing_prices = await self.load_prices(db)
        db.add_all([Price(price_class=price_class, unit_price=unit_price)
                    for price_class, unit_price in prices.items()
                    if price_class not in existing_prices])
        await db.flush()
        return len(new_seats)


seat_store = SeatStore()
