from .base import BookingError, StoreUnavailableError
from .allocation import InsufficientSeatsError, NoAvailabilityError, NoContiguousBlockError, SeatConflictError
from .request import BookingNotFoundError, IdempotencyConflictError, InvalidRequestError, OverRefundError

__all__ = [
    "BookingError",
    "StoreUnavailableError",
    "NoAvailabilityError",
    "InsufficientSeatsError",
    "NoContiguousBlockError",
    "SeatConflictError",
    "InvalidRequestError",
    "BookingNotFoundError",
    "OverRefundError",
    "IdempotencyConflictError",
]
