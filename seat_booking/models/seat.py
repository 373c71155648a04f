from enum import Enum
from typing import Optional
from sqlalchemy import CheckConstraint, Integer, String, Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column
from seat_booking.db.base import Base
from seat_booking.models import TimestampMixin


class PriceClass(str, Enum):
    CHILD = "CHILD"
    ADULT = "ADULT"


class Seat(Base, TimestampMixin):
    # a seat is either free (no class, no customer) or fully assigned
    __table_args__ = (
        CheckConstraint(
            "(price_class IS NULL) = (customer IS NULL)",
            name="ck_seat_class_matches_customer"),
    )
    seat_number: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=False)
    price_class: Mapped[Optional[PriceClass]] = mapped_column(
        SAEnum(PriceClass, name="price_class_enum"), nullable=True)
    customer: Mapped[Optional[str]] = mapped_column(String(255), nullable=True, index=True)
