from datetime import date
from enum import Enum
from typing import Literal

from pydantic import BaseModel

from app.services.cell_codec import parse_bool, parse_date, parse_int

# Sheet column names
COL_BOOKING_ID = "booking_id"
COL_GUEST_NAME = "guest_name"
COL_EMAIL = "email"
COL_CHECKIN_DATE = "checkin_date"
COL_NIGHTS = "nights"
COL_OTA_NAME = "ota_name"
COL_DINNER_INCLUDED = "dinner_included"
COL_INITIAL_EMAIL_SENT = "initial_email_sent"
COL_EMAIL_SENT_AT = "email_sent_at"
COL_FORM_RESPONDED = "form_responded"
COL_QUESTIONING = "questioning"
COL_RECEPTION_COMPLETED = "reception_completed"
COL_NOTES = "notes"
COL_EMAIL_HISTORY = "email_history"

FLAG_COLUMNS = (
    COL_INITIAL_EMAIL_SENT,
    COL_FORM_RESPONDED,
    COL_QUESTIONING,
    COL_RECEPTION_COMPLETED,
)

DINNER_CHOICES = ("Yes", "No", "Unknown")


class ReservationStatus(str, Enum):
    """Lifecycle stage shown to staff"""

    PENDING = "pending"
    EMAIL_SENT = "email_sent"
    RESPONDED = "responded"
    QUESTIONING = "questioning"
    COMPLETED = "completed"


class ReservationFlags(BaseModel):
    """The four persisted booleans a status is derived from"""

    initial_email_sent: bool = False
    form_responded: bool = False
    questioning: bool = False
    reception_completed: bool = False

    @classmethod
    def from_row(cls, row: dict) -> "ReservationFlags":
        return cls(**{column: parse_bool(row.get(column)) for column in FLAG_COLUMNS})


class Reservation(BaseModel):
    """One booking, decoded from a sheet row"""

    booking_id: str
    guest_name: str = ""
    email: str = ""
    checkin_date: date | None = None
    checkin_date_raw: str = ""
    nights: int = 0
    ota_name: str = ""
    dinner_included: Literal["Yes", "No", "Unknown"] = "Unknown"
    initial_email_sent: bool = False
    form_responded: bool = False
    questioning: bool = False
    reception_completed: bool = False
    email_sent_at: str | None = None
    notes: str = ""
    email_history: str = ""

    @classmethod
    def from_row(cls, row: dict) -> "Reservation":
        dinner = (row.get(COL_DINNER_INCLUDED) or "").strip()
        raw_checkin = (row.get(COL_CHECKIN_DATE) or "").strip()
        return cls(
            booking_id=(row.get(COL_BOOKING_ID) or "").strip(),
            guest_name=row.get(COL_GUEST_NAME) or "",
            email=(row.get(COL_EMAIL) or "").strip(),
            checkin_date=parse_date(raw_checkin),
            checkin_date_raw=raw_checkin,
            nights=parse_int(row.get(COL_NIGHTS)),
            ota_name=row.get(COL_OTA_NAME) or "",
            dinner_included=dinner if dinner in DINNER_CHOICES else "Unknown",
            email_sent_at=row.get(COL_EMAIL_SENT_AT) or None,
            notes=row.get(COL_NOTES) or "",
            email_history=row.get(COL_EMAIL_HISTORY) or "",
            **ReservationFlags.from_row(row).model_dump(),
        )

    @property
    def flags(self) -> ReservationFlags:
        return ReservationFlags(
            initial_email_sent=self.initial_email_sent,
            form_responded=self.form_responded,
            questioning=self.questioning,
            reception_completed=self.reception_completed,
        )

    @property
    def status(self) -> ReservationStatus:
        from app.services.status_service import derive_status

        return derive_status(self.flags)

    def summary(self) -> dict:
        """Public view used by the API (raw JSON blobs left out)"""
        data = self.model_dump(mode="json", exclude={"notes", "email_history", "checkin_date_raw"})
        data["checkin_date"] = self.checkin_date.isoformat() if self.checkin_date else self.checkin_date_raw
        data["status"] = self.status.value
        return data
