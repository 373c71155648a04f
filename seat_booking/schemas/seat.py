from typing import List, Optional
from pydantic import BaseModel

from seat_booking.models.seat import PriceClass


class AvailableSeatsResponse(BaseModel):
    seats: List[int]


class SeatResponse(BaseModel):
    seat_number: int
    price_class: Optional[PriceClass] = None
    customer: Optional[str] = None

    class Config:
        from_attributes = True
