from typing import Optional

from fastapi import APIRouter, Depends, Request
from redis.asyncio import Redis
from sqlalchemy.ext.asyncio import AsyncSession

from seat_booking.core.idempotency import check_idempotency, compute_request_hash, save_idempotent_response
from seat_booking.db.session import getDB_session
from seat_booking.exceptions import BookingNotFoundError
from seat_booking.redis import get_redis
from seat_booking.schemas.booking import BookingInfo, BookingRequest, CancelRequest
from seat_booking.services.booking import booking_service
from seat_booking.services.cancellation import cancellation_service
from seat_booking.services.pricing import PriceTable, get_price_table
from seat_booking.services.query import query_service

router = APIRouter(
    prefix="/bookings"
)


@router.post("/", response_model=BookingInfo)
async def book_seats(
        data: BookingRequest,
        request: Request,
        db: AsyncSession = Depends(getDB_session),
        redis: Redis = Depends(get_redis),
        prices: PriceTable = Depends(get_price_table)):
    request_hash = compute_request_hash(data.model_dump())
    idem_key, cached, is_repeat = await check_idempotency(request, redis, "book", request_hash)
    if is_repeat:
        return cached
    booking = await booking_service.book(
        db, data.customer, data.child_count, data.adult_count, data.grouped, prices)
    await save_idempotent_response(redis, "book", idem_key, request_hash, booking)
    return booking


@router.post("/{customer}/cancel", response_model=BookingInfo)
async def cancel_seats(
        customer: str,
        data: CancelRequest,
        request: Request,
        db: AsyncSession = Depends(getDB_session),
        redis: Redis = Depends(get_redis),
        prices: PriceTable = Depends(get_price_table)):
    scope = f"cancel:{customer}"
    request_hash = compute_request_hash(data.model_dump())
    idem_key, cached, is_repeat = await check_idempotency(request, redis, scope, request_hash)
    if is_repeat:
        return cached
    booking = await cancellation_service.cancel(
        db, customer, data.child_count, data.adult_count, prices)
    await save_idempotent_response(redis, scope, idem_key, request_hash, booking)
    return booking


@router.get("/", response_model=BookingInfo)
async def find_booking(customer: Optional[str] = None, db: AsyncSession = Depends(getDB_session)):
    """Booking of `customer`, or the most recent booking of anyone without the query parameter."""
    result = await query_service.booking_info(db, customer)
    if result is None:
        raise BookingNotFoundError("No booking found")
    return result


@router.get("/{customer}", response_model=BookingInfo)
async def get_booking(customer: str, db: AsyncSession = Depends(getDB_session)):
    result = await query_service.booking_info(db, customer)
    if result is None:
        raise BookingNotFoundError(f"No booking found for {customer}")
    return result
