"""
Error types for the reception workflow and their mapping to HTTP responses.
Routes stay thin: they call the service layer and convert failures with
reception_error_to_http().
"""
from fastapi import HTTPException

STATUS_BAD_REQUEST = 400
STATUS_NOT_FOUND = 404
STATUS_BAD_GATEWAY = 502
STATUS_INTERNAL_ERROR = 500


class ReceptionError(Exception):
    """Base class for errors raised by the reception workflow"""


class BookingNotFoundError(ReceptionError):
    """Booking ID is not present in the reservations sheet"""

    def __init__(self, booking_id: str):
        self.booking_id = booking_id
        super().__init__(f"Booking ID {booking_id} not found")


class InvalidStatusError(ReceptionError):
    """Requested status is not one of the known reservation statuses"""

    def __init__(self, status):
        self.status = status
        super().__init__(f"Invalid status: {status!r}")


class RowStoreError(ReceptionError):
    """The row store could not be read"""


class StoreWriteError(RowStoreError):
    """The row store rejected a write"""


class EmailSendError(ReceptionError):
    """A single, directly requested email could not be sent"""


# First match wins.
ERROR_STATUS_CODES: list[tuple[type[Exception], int]] = [
    (BookingNotFoundError, STATUS_NOT_FOUND),
    (InvalidStatusError, STATUS_BAD_REQUEST),
    (RowStoreError, STATUS_BAD_GATEWAY),
    (EmailSendError, STATUS_BAD_GATEWAY),
]


def reception_error_to_http(exc: Exception) -> HTTPException:
    """
    Map an exception from the service layer into an HTTPException.
    Unknown exceptions become 500 with the exception message.
    """
    for exc_type, status_code in ERROR_STATUS_CODES:
        if isinstance(exc, exc_type):
            return HTTPException(status_code=status_code, detail=str(exc))
    return HTTPException(status_code=STATUS_INTERNAL_ERROR, detail=str(exc))
