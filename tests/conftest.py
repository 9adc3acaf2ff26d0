"""
Pytest configuration and fixtures
"""
from datetime import date, datetime, timedelta, timezone
import pytest
from fastapi.testclient import TestClient
from app.errors import BookingNotFoundError, StoreWriteError
from app.models import SendResult


HEADER = [
    "booking_id",
    "guest_name",
    "email",
    "checkin_date",
    "nights",
    "ota_name",
    "dinner_included",
    "initial_email_sent",
    "email_sent_at",
    "form_responded",
    "questioning",
    "reception_completed",
    "notes",
    "email_history",
]

TODAY = date(2025, 3, 1)
NOW = datetime(2025, 3, 1, 9, 0, tzinfo=timezone.utc)


class InMemoryRowStore:
    """Row store fake holding rows as dicts keyed by the header columns"""

    def __init__(self, rows=None, header=None):
        self.header = list(header or HEADER)
        self.rows = [self._normalize(row) for row in rows or []]
        self.writes = []
        self.fail_writes_for = set()

    def _normalize(self, row):
        return {col: str(row.get(col, "")) for col in self.header}

    def list_rows(self):
        return [dict(row) for row in self.rows]

    def write_cells(self, booking_id, cells):
        if booking_id in self.fail_writes_for:
            raise StoreWriteError(f"Write rejected for {booking_id}")
        unknown = [col for col in cells if col not in self.header]
        if unknown:
            raise StoreWriteError(f"Unknown columns: {unknown}")
        for row in self.rows:
            if row["booking_id"].strip() == booking_id.strip():
                row.update(cells)
                self.writes.append((booking_id, dict(cells)))
                return len(cells)
        raise BookingNotFoundError(booking_id)

    def append_rows(self, rows):
        self.rows.extend(self._normalize(row) for row in rows)
        return len(rows)

    def get(self, booking_id):
        return next(row for row in self.rows if row["booking_id"] == booking_id)


class RecordingEmailService:
    """Email transport fake that records sends and can fail per recipient"""

    def __init__(self):
        self.sent = []
        self.fail_for = set()

    def send(self, to, subject, body):
        if to in self.fail_for:
            return SendResult(ok=False, error="SMTP rejected recipient")
        self.sent.append({"to": to, "subject": subject, "body": body})
        return SendResult(ok=True)


def make_row(booking_id, checkin=None, **values):
    row = {
        "booking_id": booking_id,
        "guest_name": f"Guest {booking_id}",
        "email": f"{booking_id.lower()}@example.com",
        "checkin_date": (checkin or TODAY + timedelta(days=40)).isoformat(),
        "nights": "2",
        "ota_name": "Booking.com",
        "dinner_included": "No",
        "initial_email_sent": "FALSE",
        "email_sent_at": "",
        "form_responded": "FALSE",
        "questioning": "FALSE",
        "reception_completed": "FALSE",
        "notes": "",
        "email_history": "",
    }
    row.update(values)
    return row


@pytest.fixture
def sample_rows():
    """One booking per status plus reminder candidates"""
    return [
        make_row("BK-PENDING"),
        make_row("BK-SENT-21", checkin=TODAY + timedelta(days=21),
                 initial_email_sent="TRUE", email_sent_at="2025-02-01T00:00:00.000Z"),
        make_row("BK-SENT-20", checkin=TODAY + timedelta(days=20), initial_email_sent="true"),
        make_row("BK-RESPONDED", checkin=TODAY + timedelta(days=7),
                 initial_email_sent="TRUE", form_responded="TRUE"),
        make_row("BK-QUESTION", initial_email_sent="1", form_responded="1", questioning="1"),
        make_row("BK-DONE", checkin=TODAY, initial_email_sent="TRUE",
                 form_responded="TRUE", reception_completed="TRUE"),
    ]


@pytest.fixture
def store(sample_rows):
    return InMemoryRowStore(sample_rows)


@pytest.fixture
def mailer():
    return RecordingEmailService()


@pytest.fixture
def client(store, mailer):
    """Test client with the row store and email transport replaced by fakes"""
    from app.main import app
    from app.api import routes

    app.dependency_overrides[routes.row_store] = lambda: store
    app.dependency_overrides[routes.email_service] = lambda: mailer
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def sample_answers():
    return {
        "language": "en",
        "reservationConfirmed": True,
        "hasChildren": False,
        "childrenDetails": "",
        "arrivalCountryDate": "2025-03-20",
        "prevNightPlace": "Tokyo",
        "hasPhone": True,
        "phoneNumber": "+81-90-1234-5678",
        "dinnerRequest": "no",
        "dinnerConsent": False,
        "dietaryNeeds": False,
        "dietaryDetails": "",
        "arrivalTime": "15:00",
        "arrivalTimeConsent": False,
        "needsPickup": False,
        "pickupConsent": False,
        "otherNotes": "",
    }


# Test markers
def pytest_configure(config):
    """Register custom markers"""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests")
