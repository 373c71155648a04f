from .base import BookingError


class InvalidRequestError(BookingError):
    message = "Invalid request"
    status_code = 400


class BookingNotFoundError(BookingError):
    message = "Booking not found"
    status_code = 404


class OverRefundError(BookingError):
    status_code = 422

    def __init__(self, refund: int, amount: int):
        self.refund = refund
        self.amount = amount
        super().__init__(f"Refund of {refund} exceeds the amount paid ({amount})")


class IdempotencyConflictError(BookingError):
    message = "Idempotency key was already used for a different request"
    status_code = 409
