from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from seat_booking.db.session import getDB_session
from seat_booking.schemas.seat import AvailableSeatsResponse, SeatResponse
from seat_booking.services.query import query_service

router = APIRouter(
    prefix="/seats"
)


@router.get("/available", response_model=AvailableSeatsResponse)
async def get_available_seats(db: AsyncSession = Depends(getDB_session)):
    seats = await query_service.available_seats(db)
    return AvailableSeatsResponse(seats=seats)


@router.get("/", response_model=list[SeatResponse])
async def get_seat_map(db: AsyncSession = Depends(getDB_session)):
    rows = await query_service.seat_map(db)
    return [SeatResponse.model_validate(row) for row in rows]
