from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from seat_booking.db.session import getDB_session
from seat_booking.schemas.price import PriceTableResponse, PriceTableUpdate
from seat_booking.services.pricing import PriceTable, get_price_table, price_table_provider

router = APIRouter(
    prefix="/prices"
)


@router.get("/", response_model=PriceTableResponse)
async def get_prices(prices: PriceTable = Depends(get_price_table)):
    return prices


@router.put("/", response_model=PriceTableResponse)
async def update_prices(data: PriceTableUpdate, db: AsyncSession = Depends(getDB_session)):
    return await price_table_provider.update(db, PriceTable(child=data.child, adult=data.adult))


@router.post("/refresh", response_model=PriceTableResponse)
async def refresh_prices(db: AsyncSession = Depends(getDB_session)):
    return await price_table_provider.refresh(db)
