from datetime import datetime
from sqlalchemy import DateTime, Integer, String
from sqlalchemy.orm import Mapped, mapped_column
from seat_booking.db.base import Base
from seat_booking.models import TimestampMixin


class Order(Base, TimestampMixin):
    """
    Running total of one customer's active seat assignments.
    Rows are never deleted, a customer who cancelled everything keeps an order with amount 0.
    """
    customer: Mapped[str] = mapped_column(String(255), primary_key=True)
    amount: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    order_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)
