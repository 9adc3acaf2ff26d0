"""
Reminder scheduling: which bookings get a follow-up email today.

Reminders go out only on exact day counts before check-in, so each
threshold produces at most one reminder per booking.
"""
import logging
from datetime import date, datetime
from typing import Iterable, NamedTuple

from app.config import settings
from app.models.reservation import Reservation, ReservationStatus

logger = logging.getLogger(__name__)

DEFAULT_THRESHOLDS = (30, 21, 14, 7)


class DueReminder(NamedTuple):
    reservation: Reservation
    days_until: int


def _resolve_thresholds(thresholds: Iterable[int] | None) -> Iterable[int]:
    # An explicit empty list turns reminders off
    if thresholds is not None:
        return thresholds
    if settings.reminder_thresholds is not None:
        return settings.reminder_thresholds
    return DEFAULT_THRESHOLDS


def _as_date(value: date | datetime) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


def days_until_checkin(reservation: Reservation, today: date | datetime) -> int | None:
    """
    Whole days from today to check-in (negative once check-in has passed).
    Returns None when the check-in date is missing or unparseable.
    """
    if reservation.checkin_date is None:
        return None
    return (_as_date(reservation.checkin_date) - _as_date(today)).days


def is_reminder_due(
    reservation: Reservation,
    today: date | datetime,
    already_processed: Iterable[str] = (),
    thresholds: Iterable[int] | None = None,
) -> bool:
    if reservation.status != ReservationStatus.EMAIL_SENT:
        return False
    if reservation.booking_id in set(already_processed):
        return False
    days = days_until_checkin(reservation, today)
    if days is None:
        return False
    return days in set(_resolve_thresholds(thresholds))


def collect_due_reminders(
    reservations: Iterable[Reservation],
    today: date | datetime,
    processed: set[str] | None = None,
    thresholds: Iterable[int] | None = None,
) -> tuple[list[DueReminder], set[str]]:
    """
    Pick the reservations that need a reminder in this pass.

    processed holds booking IDs already handled in the current pass; the
    updated set is returned so the caller can carry it along. Nothing is
    kept between calls.
    """
    processed = set(processed or ())
    thresholds = tuple(_resolve_thresholds(thresholds))
    due = []
    for reservation in reservations:
        if not reservation.email:
            continue
        if not is_reminder_due(reservation, today, processed, thresholds):
            continue
        due.append(DueReminder(reservation, days_until_checkin(reservation, today)))
        processed.add(reservation.booking_id)

    logger.debug("%s reminders due on %s", len(due), _as_date(today))
    return due, processed
