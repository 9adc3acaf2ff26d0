from typing import Literal
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from app.errors import ReceptionError, reception_error_to_http
from app.models import GuestAnswers, ReservationStatus
from app.services import reservation_service
from app.services.email_service import get_email_service
from app.services.google_sheets import get_row_store

router = APIRouter()


class CamelModel(BaseModel):
    """Accepts both snake_case and camelCase keys"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class UpdateStatusRequest(CamelModel):
    """Request model for /update-status endpoint"""

    booking_id: str
    status: ReservationStatus


class FormSubmitRequest(CamelModel):
    """Request model for /form-submit endpoint"""

    booking_id: str
    form_data: GuestAnswers


class SendEmailRequest(CamelModel):
    """Request model for /send-email endpoint"""

    booking_id: str
    type: Literal["initial", "reminder", "reception"] = "initial"
    language: Literal["ja", "en"] | None = None


class RawEmailRequest(CamelModel):
    """Request model for /send-raw-email endpoint"""

    to: str
    subject: str
    body_text: str


def row_store():
    """Row store dependency; configuration problems become HTTP errors"""
    try:
        return get_row_store()
    except ReceptionError as e:
        raise reception_error_to_http(e)


def email_service():
    return get_email_service()


@router.get("/health")
def health_check():
    """Health check endpoint"""
    return {"status": "ok", "app": "Guest Reception Tracker"}


@router.get("/reservations")
def get_reservations(store=Depends(row_store)):
    """Get all reservations with derived status"""
    try:
        reservations = reservation_service.reservation_overview(store)
    except ReceptionError as e:
        raise reception_error_to_http(e)
    return {"reservations": reservations, "total": len(reservations)}


@router.get("/reservations/summary")
def get_reservation_summary(store=Depends(row_store)):
    """Dashboard counts: per status, unsent, reminders due, today's check-ins"""
    try:
        return reservation_service.reservation_summary(store)
    except ReceptionError as e:
        raise reception_error_to_http(e)


@router.get("/reservations/{booking_id}")
def get_reservation(booking_id: str, store=Depends(row_store)):
    """Get one reservation with guest response, revision changes and email history"""
    try:
        return reservation_service.get_reservation_detail(store, booking_id)
    except ReceptionError as e:
        raise reception_error_to_http(e)


@router.post("/update-status")
def update_status(request: UpdateStatusRequest, store=Depends(row_store)):
    """
    Staff status change.

    - Unknown statuses are rejected by request validation
    - Only cells that change are written
    """
    try:
        return reservation_service.update_status(store, request.booking_id, request.status)
    except ReceptionError as e:
        raise reception_error_to_http(e)


@router.post("/form-submit")
def form_submit(request: FormSubmitRequest, store=Depends(row_store)):
    """Store a guest questionnaire submission (first answer or revision)"""
    if not request.booking_id.strip():
        raise HTTPException(status_code=400, detail="Missing bookingId")
    try:
        return reservation_service.submit_response(store, request.booking_id, request.form_data)
    except ReceptionError as e:
        raise reception_error_to_http(e)


@router.post("/send-email")
def send_email(request: SendEmailRequest, store=Depends(row_store), mailer=Depends(email_service)):
    """Send a templated email to the guest and record it in the email history"""
    try:
        return reservation_service.send_guest_email(
            store, mailer, request.booking_id, request.type, request.language
        )
    except ReceptionError as e:
        raise reception_error_to_http(e)


@router.post("/send-raw-email")
def send_raw_email(request: RawEmailRequest, mailer=Depends(email_service)):
    """Send an arbitrary email; not recorded against any booking"""
    try:
        return reservation_service.send_raw_email(mailer, request.to, request.subject, request.body_text)
    except ReceptionError as e:
        raise reception_error_to_http(e)


@router.post("/check-reminders")
def check_reminders(store=Depends(row_store), mailer=Depends(email_service)):
    """Run the reminder sweep now"""
    try:
        return reservation_service.run_reminder_sweep(store, mailer)
    except ReceptionError as e:
        raise reception_error_to_http(e)


@router.post("/seed")
def seed(store=Depends(row_store)):
    """Append dummy test bookings"""
    try:
        return reservation_service.seed_test_data(store)
    except ReceptionError as e:
        raise reception_error_to_http(e)


@router.post("/reset-test-data")
def reset_test_data(store=Depends(row_store)):
    """Reset all test bookings to pending"""
    try:
        return reservation_service.reset_test_data(store)
    except ReceptionError as e:
        raise reception_error_to_http(e)
