"""
Reservation workflow operations.

Each operation is one read of the sheet followed by at most one batch
write per booking. Write-plans are computed completely before anything is
written, and only changed cells are sent.
"""
import logging
from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo

from app.config import settings
from app.errors import BookingNotFoundError, EmailSendError
from app.models.email_record import EmailRecord, EmailType
from app.models.guest_response import GuestAnswers
from app.models.reservation import (
    COL_BOOKING_ID,
    COL_EMAIL_HISTORY,
    COL_EMAIL_SENT_AT,
    COL_FORM_RESPONDED,
    COL_INITIAL_EMAIL_SENT,
    COL_NOTES,
    Reservation,
    ReservationStatus,
)
from app.services.cell_codec import format_bool, format_timestamp, utc_now
from app.services.email_history import append_email, read_history
from app.services.email_templates import render_email
from app.services.reminder_service import collect_due_reminders, days_until_checkin, is_reminder_due
from app.services.revision_service import classify_submission, parse_response_record, revision_changes
from app.services.status_service import coerce_status, plan_cells, plan_transition

logger = logging.getLogger(__name__)

EMAIL_KINDS = ("initial", "reminder", "reception")


def local_today() -> date:
    """Today's date in the property's timezone"""
    return datetime.now(ZoneInfo(settings.timezone)).date()


def _rows_with_booking_id(store) -> list[dict]:
    return [row for row in store.list_rows() if (row.get(COL_BOOKING_ID) or "").strip()]


def find_row(store, booking_id: str) -> dict:
    for row in store.list_rows():
        if (row.get(COL_BOOKING_ID) or "").strip() == booking_id.strip():
            return row
    raise BookingNotFoundError(booking_id)


def list_reservations(store) -> list[Reservation]:
    return [Reservation.from_row(row) for row in _rows_with_booking_id(store)]


def reservation_overview(store, today: date | None = None) -> list[dict]:
    """Reservations with derived status and reminder information"""
    today = today or local_today()
    overview = []
    for reservation in list_reservations(store):
        item = reservation.summary()
        item["days_until_checkin"] = days_until_checkin(reservation, today)
        item["reminder_due"] = is_reminder_due(reservation, today)
        item["email_count"] = len(read_history(reservation.email_history))
        overview.append(item)
    return overview


def reservation_summary(store, today: date | None = None) -> dict:
    """Counts for the staff dashboard"""
    today = today or local_today()
    reservations = list_reservations(store)
    counts = {status.value: 0 for status in ReservationStatus}
    for reservation in reservations:
        counts[reservation.status.value] += 1

    checkin_today = [r for r in reservations if r.checkin_date == today]
    due, _ = collect_due_reminders(reservations, today)
    return {
        "total": len(reservations),
        "counts": counts,
        "unsent": counts[ReservationStatus.PENDING.value],
        "reminders_due": len(due),
        "checkin_today": len(checkin_today),
        "checkin_today_not_completed": sum(
            1 for r in checkin_today if r.status != ReservationStatus.COMPLETED
        ),
    }


def get_reservation_detail(store, booking_id: str) -> dict:
    """One reservation with its guest response, revision diff and email history"""
    reservation = Reservation.from_row(find_row(store, booking_id))
    record = parse_response_record(reservation.notes)
    return {
        "reservation": reservation.summary(),
        "response": record.model_dump(mode="json", exclude_none=True) if record else None,
        "changes": [change.model_dump() for change in revision_changes(record)],
        "email_history": [
            entry.model_dump(mode="json") for entry in read_history(reservation.email_history)
        ],
    }


def update_status(store, booking_id: str, status, now: datetime | None = None) -> dict:
    """Staff status change"""
    target = coerce_status(status)
    row = find_row(store, booking_id)
    plan = plan_transition(target, row, now=now)
    if plan:
        store.write_cells(booking_id, plan)
    logger.info("Booking %s set to %s (%s cells changed)", booking_id, target.value, len(plan))
    return {"ok": True, "booking_id": booking_id, "status": target.value, "updated": sorted(plan)}


def submit_response(store, booking_id: str, form_data: GuestAnswers | dict, now: datetime | None = None) -> dict:
    """Store a guest questionnaire submission, keeping the previous answers on revisions"""
    row = find_row(store, booking_id)
    existing = parse_response_record(row.get(COL_NOTES))
    record = classify_submission(existing, form_data, now=now)

    plan = plan_cells(row, {
        COL_FORM_RESPONDED: format_bool(True),
        COL_NOTES: record.to_cell(),
    })
    if plan:
        store.write_cells(booking_id, plan)

    changes = revision_changes(record)
    logger.info(
        "Guest response stored for %s (revision=%s, %s fields changed)",
        booking_id, record.is_revision, len(changes),
    )
    return {
        "ok": True,
        "booking_id": booking_id,
        "is_revision": record.is_revision,
        "changes": [change.model_dump() for change in changes],
    }


def _guest_language(reservation: Reservation, language: str | None = None) -> str:
    if language:
        return language
    record = parse_response_record(reservation.notes)
    if record and record.language:
        return record.language
    return settings.default_language


def _email_plan(kind: str, row: dict, record: EmailRecord, now: datetime) -> dict:
    desired = {COL_EMAIL_HISTORY: append_email(row.get(COL_EMAIL_HISTORY), record)}
    if kind == "initial":
        desired[COL_INITIAL_EMAIL_SENT] = format_bool(True)
        if not (row.get(COL_EMAIL_SENT_AT) or "").strip():
            desired[COL_EMAIL_SENT_AT] = format_timestamp(now)
        return plan_cells(row, desired)
    if kind == "reception":
        return {**plan_transition(ReservationStatus.COMPLETED, row), **plan_cells(row, desired)}
    return plan_cells(row, desired)


def _deliver(store, email_service, row: dict, kind: str, language: str | None,
             days_until: int | None = None, now: datetime | None = None) -> dict:
    """Render, send and record one email. Returns a per-booking result."""
    now = now or utc_now()
    reservation = Reservation.from_row(row)
    language = _guest_language(reservation, language)
    subject, body = render_email(
        kind,
        language,
        guest_name=reservation.guest_name,
        booking_id=reservation.booking_id,
        checkin_date=reservation.checkin_date_raw,
        nights=reservation.nights,
        days_until_checkin=days_until if days_until is not None else 0,
    )

    result = email_service.send(reservation.email, subject, body)
    if not result.ok:
        logger.warning("Email %s to booking %s failed: %s", kind, reservation.booking_id, result.error)
        return {"booking_id": reservation.booking_id, "success": False, "error": result.error}

    record = EmailRecord(
        type=EmailType.RECEPTION if kind == "reception" else EmailType.INITIAL,
        to=reservation.email,
        subject=subject,
        body=body,
        sent_at=format_timestamp(now),
    )
    plan = _email_plan(kind, row, record, now)
    if plan:
        store.write_cells(reservation.booking_id, plan)
    return {"booking_id": reservation.booking_id, "success": True}


def send_guest_email(store, email_service, booking_id: str, kind: str,
                     language: str | None = None, now: datetime | None = None) -> dict:
    """
    Send one templated email to a guest.

    initial also marks the booking as emailed (email_sent_at is set once),
    reception marks it completed. Nothing is recorded when sending fails.
    """
    if kind not in EMAIL_KINDS:
        raise ValueError(f"Unknown email type: {kind}")
    row = find_row(store, booking_id)
    days_until = None
    if kind == "reminder":
        days_until = days_until_checkin(Reservation.from_row(row), local_today())

    result = _deliver(store, email_service, row, kind, language, days_until=days_until, now=now)
    if not result["success"]:
        raise EmailSendError(f"Failed to send {kind} email for booking {booking_id}: {result['error']}")
    return {"ok": True, "booking_id": booking_id, "type": kind}


def send_raw_email(email_service, to: str, subject: str, body: str) -> dict:
    """Send an arbitrary email without touching any booking"""
    result = email_service.send(to, subject, body)
    if not result.ok:
        raise EmailSendError(result.error or "Failed to send email")
    return {"ok": True}


def run_reminder_sweep(store, email_service, today: date | None = None,
                       now: datetime | None = None) -> dict:
    """
    Send every reminder due today.

    A failed send or write for one booking is recorded in the results and
    the sweep carries on with the rest.
    """
    today = today or local_today()
    rows = _rows_with_booking_id(store)
    rows_by_id = {row[COL_BOOKING_ID].strip(): row for row in rows}
    due, _ = collect_due_reminders((Reservation.from_row(row) for row in rows), today)

    results = []
    for reminder in due:
        booking_id = reminder.reservation.booking_id
        try:
            result = _deliver(store, email_service, rows_by_id[booking_id], "reminder", None,
                              days_until=reminder.days_until, now=now)
        except Exception as e:
            # Transport errors from the store client are not wrapped; keep going
            logger.exception("Reminder for booking %s could not be recorded", booking_id)
            result = {"booking_id": booking_id, "success": False, "error": str(e)}
        result["days_until"] = reminder.days_until
        results.append(result)

    sent = sum(1 for r in results if r["success"])
    logger.info("Reminder sweep for %s: %s due, %s sent", today, len(due), sent)
    return {"ok": True, "checked": len(rows), "reminders_sent": sent, "results": results}


SEED_STATUSES = (
    [ReservationStatus.PENDING] * 5
    + [ReservationStatus.EMAIL_SENT] * 3
    + [ReservationStatus.QUESTIONING]
    + [ReservationStatus.COMPLETED] * 4
)
SEED_OTAS = ("Booking.com", "Expedia", "Agoda")
SEED_DINNER = ("Unknown", "Yes", "No")
SEED_TODAY_INDEXES = (0, 7)


def build_seed_rows(today: date | None = None, now: datetime | None = None) -> list[dict]:
    """Dummy bookings covering every status; two of them check in today"""
    today = today or local_today()
    timestamp = format_timestamp(now or utc_now())
    prefix = settings.test_booking_prefix
    rows = []
    for i, status in enumerate(SEED_STATUSES):
        num = f"{i + 1:03d}"
        offset = 0 if i in SEED_TODAY_INDEXES else i
        emailed = status != ReservationStatus.PENDING
        rows.append({
            "booking_id": f"{prefix}{num}",
            "guest_name": f"John Doe {num}",
            "email": f"john{num}@example.com",
            "checkin_date": (today + timedelta(days=offset)).isoformat(),
            "nights": str(i % 3 + 1),
            "ota_name": SEED_OTAS[i % 3],
            "dinner_included": SEED_DINNER[i % 3],
            "initial_email_sent": format_bool(emailed),
            "email_sent_at": timestamp if emailed else "",
            "form_responded": format_bool(status in (ReservationStatus.QUESTIONING, ReservationStatus.COMPLETED)),
            "questioning": format_bool(status == ReservationStatus.QUESTIONING),
            "reception_completed": format_bool(status == ReservationStatus.COMPLETED),
            "notes": "seeded test data",
        })
    return rows


def seed_test_data(store, today: date | None = None) -> dict:
    rows = build_seed_rows(today)
    inserted = store.append_rows(rows)
    return {"ok": True, "inserted": inserted}


def reset_test_data(store) -> dict:
    """Put every test booking back to pending and clear its response"""
    prefix = settings.test_booking_prefix
    reset_count = 0
    for row in _rows_with_booking_id(store):
        booking_id = row[COL_BOOKING_ID].strip()
        if not booking_id.startswith(prefix):
            continue
        plan = plan_transition(ReservationStatus.PENDING, row, reset=True)
        if plan:
            store.write_cells(booking_id, plan)
        reset_count += 1
    logger.info("Reset %s test bookings", reset_count)
    return {"ok": True, "reset_count": reset_count}
