class BookingError(Exception):
    """Base class of every failure reported by the booking services.

    Business-rule rejections (no seats, over refund, ...) and store failures
    share this root so the HTTP layer can render them with one handler, but
    they stay distinct types: callers that only care about connectivity catch
    StoreUnavailableError.
    """
    message = "Booking request failed"
    status_code = 400

    def __init__(self, message: str | None = None, status_code: int | None = None):
        self.message = message or self.message
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)

    def __str__(self):
        return self.message


class StoreUnavailableError(BookingError):
    message = "Seat store unavailable"
    status_code = 503
