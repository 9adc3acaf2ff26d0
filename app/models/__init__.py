from app.models.reservation import Reservation, ReservationFlags, ReservationStatus
from app.models.guest_response import FieldChange, GuestAnswers, ResponseRecord
from app.models.email_record import EmailRecord, EmailType, SendResult

__all__ = [
    "Reservation",
    "ReservationFlags",
    "ReservationStatus",
    "FieldChange",
    "GuestAnswers",
    "ResponseRecord",
    "EmailRecord",
    "EmailType",
    "SendResult",
]
