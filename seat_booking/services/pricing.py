import logging
from dataclasses import dataclass
from typing import Iterable, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from seat_booking.core.config import Settings, settings
from seat_booking.crud.seat_store import SeatStore, seat_store
from seat_booking.exceptions import InvalidRequestError, StoreUnavailableError
from seat_booking.models.seat import PriceClass

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PriceTable:
    child: int
    adult: int

    @classmethod
    def from_settings(cls, config: Settings) -> "PriceTable":
        return cls(child=config.CHILD_PRICE, adult=config.ADULT_PRICE)

    def unit_price(self, price_class: PriceClass) -> int:
        return self.child if price_class == PriceClass.CHILD else self.adult

    def total(self, child_count: int, adult_count: int) -> int:
        return child_count * self.child + adult_count * self.adult

    def amount_for(self, price_classes: Iterable[PriceClass]) -> int:
        """Amount owed for a set of assigned seats, given their classes."""
        return sum(self.unit_price(price_class) for price_class in price_classes)

    def as_dict(self) -> dict[PriceClass, int]:
        return {PriceClass.CHILD: self.child, PriceClass.ADULT: self.adult}


class PriceTableProvider:
    """
    Holds the current PriceTable. The value is never mutated: refresh() and
    update() build a new table and swap the reference.
    """

    def __init__(self, defaults: PriceTable, store: SeatStore = seat_store):
        self.defaults = defaults
        self.store = store
        self._table: Optional[PriceTable] = None

    @property
    def current(self) -> PriceTable:
        if self._table is None:
            raise StoreUnavailableError("Price table has not been loaded")
        return self._table

    async def load(self, db: AsyncSession) -> PriceTable:
        if self._table is None:
            return await self.refresh(db)
        return self._table

    async def refresh(self, db: AsyncSession) -> PriceTable:
        try:
            rows = await self.store.load_prices(db)
        except SQLAlchemyError as e:
            logger.error(f"failed to load prices: {e}", exc_info=True)
            raise StoreUnavailableError("failed to load prices") from e
        table = PriceTable(
            child=rows.get(PriceClass.CHILD, self.defaults.child),
            adult=rows.get(PriceClass.ADULT, self.defaults.adult),
        )
        self._table = table
        logger.info(f"price table loaded: child={table.child} adult={table.adult}")
        return table

    async def update(self, db: AsyncSession, table: PriceTable) -> PriceTable:
        if table.child < 0 or table.adult < 0:
            raise InvalidRequestError("Prices must not be negative")
        try:
            async with db.begin():
                await self.store.set_prices(db, table.as_dict())
                # order totals always match the held seats at the current prices
                repriced = await self.store.reprice_orders(db, table.as_dict())
        except SQLAlchemyError as e:
            logger.error(f"failed to update prices: {e}", exc_info=True)
            raise StoreUnavailableError("failed to update prices") from e
        self._table = table
        logger.info(f"price table updated: child={table.child} adult={table.adult}, {repriced} orders repriced")
        return table


price_table_provider = PriceTableProvider(PriceTable.from_settings(settings))


async def get_price_table() -> PriceTable:
    """FastAPI dependency returning the price table loaded at startup."""
    return price_table_provider.current
