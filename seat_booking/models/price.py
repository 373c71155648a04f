from sqlalchemy import Integer, Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column
from seat_booking.db.base import Base
from seat_booking.models import TimestampMixin
from seat_booking.models.seat import PriceClass


class Price(Base, TimestampMixin):
    price_class: Mapped[PriceClass] = mapped_column(
        SAEnum(PriceClass, name="price_class_enum"), primary_key=True)
    unit_price: Mapped[int] = mapped_column(Integer, nullable=False)
