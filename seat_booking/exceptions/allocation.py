from .base import BookingError


class NoAvailabilityError(BookingError):
    message = "No seat is available"
    status_code = 409


class InsufficientSeatsError(BookingError):
    status_code = 409

    def __init__(self, requested: int, available: int):
        self.requested = requested
        self.available = available
        super().__init__(f"Requested {requested} seats but only {available} are available")


class NoContiguousBlockError(BookingError):
    status_code = 409

    def __init__(self, requested: int):
        self.requested = requested
        super().__init__(f"No block of {requested} consecutive seats is available")


class SeatConflictError(BookingError):
    message = "Seats were taken by a concurrent request, please retry"
    status_code = 409
