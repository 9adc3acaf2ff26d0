"""
Unit tests for the email history log
"""
import json

import pytest

from app.models import EmailRecord, EmailType
from app.services.email_history import append_email, read_history, serialize_history


def record(n, kind=EmailType.INITIAL):
    return EmailRecord(
        type=kind,
        to="guest@example.com",
        subject=f"Subject {n}",
        body=f"Body {n}",
        sent_at=f"2025-03-0{n}T09:00:00.000Z",
    )


class TestReadHistory:
    """Test decoding of the email_history cell"""

    @pytest.mark.parametrize("raw", ["", None, "   ", "{not json", '{"type": "initial"}', "42"])
    def test_malformed_reads_as_empty(self, raw):
        assert read_history(raw) == []

    def test_reads_camel_case_entries(self):
        raw = json.dumps([{
            "type": "reception", "to": "a@example.com", "subject": "S",
            "body": "B", "sentAt": "2025-03-01T00:00:00.000Z",
        }])
        history = read_history(raw)

        assert len(history) == 1
        assert history[0].type == EmailType.RECEPTION
        assert history[0].sent_at == "2025-03-01T00:00:00.000Z"

    def test_malformed_entries_skipped(self):
        raw = serialize_history([record(1)])
        entries = json.loads(raw) + [{"type": "fax"}, "junk"]
        history = read_history(json.dumps(entries))

        assert history == [record(1)]


class TestAppendEmail:
    """Test append-only behaviour"""

    def test_round_trip_preserves_order(self):
        """Appending to a well-formed history adds exactly one record at the end"""
        history = serialize_history([record(1), record(2, EmailType.RECEPTION)])
        updated = append_email(read_history(history), record(3))

        assert read_history(updated) == [record(1), record(2, EmailType.RECEPTION), record(3)]

    def test_append_to_raw_cell(self):
        updated = append_email(serialize_history([record(1)]), record(2))
        assert [r.subject for r in read_history(updated)] == ["Subject 1", "Subject 2"]

    def test_corrupt_history_treated_as_empty(self):
        updated = append_email("{broken", record(1))
        assert read_history(updated) == [record(1)]

    def test_stored_with_camel_case_keys(self):
        stored = json.loads(append_email("", record(1)))
        assert stored == [{
            "type": "initial",
            "to": "guest@example.com",
            "subject": "Subject 1",
            "body": "Body 1",
            "sentAt": "2025-03-01T09:00:00.000Z",
        }]

    def test_non_ascii_kept_readable(self):
        entry = record(1).model_copy(update={"subject": "【夢殿】ご予約確認"})
        assert "【夢殿】" in append_email("", entry)
