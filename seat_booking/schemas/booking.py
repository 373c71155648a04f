from datetime import datetime
from typing import Tuple
from pydantic import BaseModel, Field


class BookingRequest(BaseModel):
    customer: str = Field(min_length=1, max_length=255)
    child_count: int = Field(default=0, ge=0)
    adult_count: int = Field(default=0, ge=0)
    grouped: bool = False


class CancelRequest(BaseModel):
    # -1 cancels every seat of the class
    child_count: int = Field(default=0, ge=-1)
    adult_count: int = Field(default=0, ge=-1)


class BookingInfo(BaseModel):
    customer: str
    amount: int
    date: datetime
    seats: Tuple[int, ...] = ()

    class Config:
        frozen = True
