"""
Unit tests for reminder scheduling
"""
from datetime import datetime, timedelta

import pytest

from app.config import settings
from app.models import Reservation
from app.services.reminder_service import collect_due_reminders, days_until_checkin, is_reminder_due
from tests.conftest import TODAY, make_row


def reservation(days=None, checkin=None, **values):
    if checkin is None and days is not None:
        checkin = (TODAY + timedelta(days=days)).isoformat()
    row = make_row("BK-1", **values)
    if checkin is not None:
        row["checkin_date"] = checkin
    return Reservation.from_row(row)


def emailed(days, **values):
    return reservation(days, initial_email_sent="TRUE", **values)


class TestDaysUntilCheckin:
    """Test check-in day arithmetic"""

    def test_same_day_is_zero(self):
        assert days_until_checkin(reservation(0), TODAY) == 0

    def test_one_week_ahead(self):
        assert days_until_checkin(reservation(7), TODAY) == 7

    def test_time_of_day_is_ignored(self):
        """Late evening invocation still counts whole calendar days"""
        late = datetime(TODAY.year, TODAY.month, TODAY.day, 23, 59)
        assert days_until_checkin(reservation(7), late) == 7

    def test_past_checkin_is_negative(self):
        assert days_until_checkin(reservation(-3), TODAY) == -3

    def test_unparseable_date_gives_none(self):
        assert days_until_checkin(reservation(checkin="next tuesday"), TODAY) is None
        assert days_until_checkin(reservation(checkin=""), TODAY) is None

    def test_slash_and_timestamp_formats(self):
        assert days_until_checkin(reservation(checkin="2025/03/08"), TODAY) == 7
        assert days_until_checkin(reservation(checkin="2025-03-08T00:00:00.000Z"), TODAY) == 7


class TestIsReminderDue:
    """Test exact-threshold reminder rule"""

    @pytest.mark.parametrize("days", [30, 21, 14, 7])
    def test_due_on_each_threshold(self, days):
        assert is_reminder_due(emailed(days), TODAY) is True

    @pytest.mark.parametrize("days", [20, 22, 6, 8, 0, 31, 1])
    def test_not_due_between_thresholds(self, days):
        assert is_reminder_due(emailed(days), TODAY) is False

    @pytest.mark.parametrize("days", [-7, -14, -21, -30])
    def test_past_checkins_never_due(self, days):
        assert is_reminder_due(emailed(days), TODAY) is False

    @pytest.mark.parametrize("flags", [
        {},
        {"initial_email_sent": "TRUE", "form_responded": "TRUE"},
        {"initial_email_sent": "TRUE", "questioning": "TRUE"},
        {"initial_email_sent": "TRUE", "reception_completed": "TRUE"},
    ])
    @pytest.mark.parametrize("days", [30, 21, 14, 7])
    def test_only_email_sent_status_is_due(self, flags, days):
        assert is_reminder_due(reservation(days, **flags), TODAY) is False

    def test_malformed_date_fails_closed(self):
        r = reservation(checkin="31/31/2025", initial_email_sent="TRUE")
        assert is_reminder_due(r, TODAY) is False

    def test_already_processed_in_pass(self):
        assert is_reminder_due(emailed(21), TODAY, already_processed={"BK-1"}) is False

    def test_custom_thresholds(self):
        assert is_reminder_due(emailed(3), TODAY, thresholds=[3]) is True
        assert is_reminder_due(emailed(7), TODAY, thresholds=[3]) is False

    def test_empty_thresholds_disable_reminders(self):
        assert is_reminder_due(emailed(7), TODAY, thresholds=[]) is False

    def test_empty_configured_thresholds_disable_reminders(self, monkeypatch):
        monkeypatch.setattr(settings, "reminder_thresholds", [])
        assert is_reminder_due(emailed(21), TODAY) is False


class TestCollectDueReminders:
    """Test one scheduling pass"""

    def test_collects_due_and_returns_processed(self):
        rows = [
            make_row("A", checkin=TODAY + timedelta(days=21), initial_email_sent="TRUE"),
            make_row("B", checkin=TODAY + timedelta(days=20), initial_email_sent="TRUE"),
            make_row("C", checkin=TODAY + timedelta(days=7), initial_email_sent="TRUE"),
        ]
        due, processed = collect_due_reminders([Reservation.from_row(r) for r in rows], TODAY)

        assert [(d.reservation.booking_id, d.days_until) for d in due] == [("A", 21), ("C", 7)]
        assert processed == {"A", "C"}

    def test_same_pass_does_not_flag_twice(self):
        """A duplicated row for the same booking is only picked once"""
        row = make_row("A", checkin=TODAY + timedelta(days=14), initial_email_sent="TRUE")
        due, _ = collect_due_reminders([Reservation.from_row(row), Reservation.from_row(row)], TODAY)

        assert len(due) == 1

    def test_processed_set_is_carried_in(self):
        row = make_row("A", checkin=TODAY + timedelta(days=14), initial_email_sent="TRUE")
        due, processed = collect_due_reminders([Reservation.from_row(row)], TODAY, processed={"A"})

        assert due == []
        assert processed == {"A"}

    def test_input_set_not_mutated(self):
        row = make_row("A", checkin=TODAY + timedelta(days=14), initial_email_sent="TRUE")
        seen = set()
        _, processed = collect_due_reminders([Reservation.from_row(row)], TODAY, processed=seen)

        assert seen == set()
        assert processed == {"A"}

    def test_missing_email_skipped(self):
        row = make_row("A", checkin=TODAY + timedelta(days=7), initial_email_sent="TRUE", email="")
        due, _ = collect_due_reminders([Reservation.from_row(row)], TODAY)

        assert due == []

    def test_empty_thresholds_collect_nothing(self):
        row = make_row("A", checkin=TODAY + timedelta(days=7), initial_email_sent="TRUE")
        due, processed = collect_due_reminders([Reservation.from_row(row)], TODAY, thresholds=[])

        assert due == []
        assert processed == set()
