"""
Status derivation and status transition write-plans.

A reservation's status is never stored; it is derived from four flag
columns. Changing a status means computing the smallest set of cell writes
that makes the derived status land on the target.
"""
import logging
from datetime import datetime

from app.errors import InvalidStatusError
from app.models.reservation import (
    COL_EMAIL_SENT_AT,
    COL_FORM_RESPONDED,
    COL_INITIAL_EMAIL_SENT,
    COL_NOTES,
    COL_QUESTIONING,
    COL_RECEPTION_COMPLETED,
    FLAG_COLUMNS,
    ReservationFlags,
    ReservationStatus,
)
from app.services.cell_codec import format_bool, format_timestamp, parse_bool, utc_now

logger = logging.getLogger(__name__)

# Highest priority first. The first raised flag decides the status.
STATUS_PRIORITY: list[tuple[str, ReservationStatus]] = [
    (COL_RECEPTION_COMPLETED, ReservationStatus.COMPLETED),
    (COL_QUESTIONING, ReservationStatus.QUESTIONING),
    (COL_FORM_RESPONDED, ReservationStatus.RESPONDED),
    (COL_INITIAL_EMAIL_SENT, ReservationStatus.EMAIL_SENT),
]


def derive_status(flags: ReservationFlags | None) -> ReservationStatus:
    """Map the four flags to a single status; missing flags count as false"""
    if flags is None:
        return ReservationStatus.PENDING
    for column, status in STATUS_PRIORITY:
        if getattr(flags, column, False):
            return status
    return ReservationStatus.PENDING


def coerce_status(value) -> ReservationStatus:
    if isinstance(value, ReservationStatus):
        return value
    try:
        return ReservationStatus(value)
    except ValueError:
        raise InvalidStatusError(value)


def plan_cells(current_row: dict, desired: dict) -> dict:
    """
    Reduce desired column values to the cells that actually change.

    Columns missing from the row are skipped. Flag columns are compared on
    their decoded value, so "true" and "TRUE" count as equal.
    """
    plan = {}
    for column, value in desired.items():
        if column not in current_row:
            logger.debug("Skipping write to unknown column %s", column)
            continue
        current = current_row.get(column) or ""
        if column in FLAG_COLUMNS:
            if parse_bool(current) == parse_bool(value):
                continue
        elif current == value:
            continue
        plan[column] = value
    return plan


def plan_transition(
    target,
    current_row: dict,
    now: datetime | None = None,
    reset: bool = False,
) -> dict:
    """
    Compute the write-plan that moves a row to the target status.

    The target's own flag is raised and every flag that outranks it is
    lowered; lower-ranked flags are left alone, so questioning keeps
    form_responded. email_sent_at is only filled when empty.

    reset=True (only meaningful for pending) also clears email_sent_at and
    the stored guest response. Email history is never cleared.
    """
    target = coerce_status(target)
    desired = {}

    for column, status in STATUS_PRIORITY:
        if status == target:
            desired[column] = format_bool(True)
            break
        desired[column] = format_bool(False)

    if target == ReservationStatus.EMAIL_SENT and not (current_row.get(COL_EMAIL_SENT_AT) or "").strip():
        desired[COL_EMAIL_SENT_AT] = format_timestamp(now or utc_now())

    if reset and target == ReservationStatus.PENDING:
        desired[COL_EMAIL_SENT_AT] = ""
        desired[COL_NOTES] = ""

    return plan_cells(current_row, desired)
