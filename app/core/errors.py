class BookingError(Exception):
    """
    Base class for failures of a booking operation.
    Each subclass knows the HTTP status and the message shown to the client.
    """
    status_code: int = 500
    message: str = "booking error"

    def __init__(self, detail: str = None):
        super().__init__(detail or self.message)
        self.detail = detail or self.message


class InvalidPayload(BookingError):
    status_code = 400
    message = "invalid payload"


class MissingIdError(BookingError):
    status_code = 400
    message = "id not specified"


class NotFoundError(BookingError):
    status_code = 404
    message = "record not found"


class StorageError(BookingError):
    """The bookings document could not be read or written."""
    status_code = 500
    message = "storage failure"


class PayloadTooLarge(Exception):
    """Request body went over the size cap; the connection gets dropped."""

    def __init__(self, limit: int):
        super().__init__(f"Request body exceeds {limit} bytes")
        self.limit = limit
