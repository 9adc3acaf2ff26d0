"""
Guest response revisions.

The notes cell holds the latest submission. A second or later submission
keeps the original submittedAt, carries the prior answers one level deep
in previousResponse and can be diffed against them for staff review.
"""
import json
import logging
from datetime import datetime
from typing import Callable

from pydantic import ValidationError

from app.models.guest_response import FieldChange, GuestAnswers, ResponseRecord
from app.services.cell_codec import format_timestamp, utc_now

logger = logging.getLogger(__name__)


def parse_response_record(raw) -> ResponseRecord | None:
    """Decode a notes cell; anything that is not a response record gives None"""
    if isinstance(raw, ResponseRecord):
        return raw
    text = (raw or "").strip() if isinstance(raw, str) else ""
    if not text:
        return None
    try:
        data = json.loads(text)
    except json.JSONDecodeError:
        logger.debug("Notes cell is not JSON, treating as no response")
        return None
    if not isinstance(data, dict):
        return None
    try:
        return ResponseRecord.model_validate(data)
    except ValidationError as e:
        # Drop only the offending top-level keys so submittedAt survives
        bad_keys = {err["loc"][0] for err in e.errors() if err["loc"]}
        logger.warning("Notes cell has invalid fields %s, ignoring them", sorted(map(str, bad_keys)))
    try:
        return ResponseRecord.model_validate({k: v for k, v in data.items() if k not in bad_keys})
    except ValidationError as e:
        logger.warning("Notes cell is not a valid response record: %s", e)
        return None


def classify_submission(
    existing: ResponseRecord | None,
    incoming: GuestAnswers | dict,
    now: datetime | None = None,
) -> ResponseRecord:
    """Build the record to store for a new submission"""
    if isinstance(incoming, dict):
        incoming = GuestAnswers.model_validate(incoming)
    answers = incoming.model_dump()
    timestamp = format_timestamp(now or utc_now())

    if existing is None or not existing.submitted_at:
        return ResponseRecord(submitted_at=timestamp, is_revision=False, **answers)

    return ResponseRecord(
        submitted_at=existing.submitted_at,
        is_revision=True,
        revised_at=timestamp,
        previous_response=existing.answers(),
        **answers,
    )


def _text(value) -> str:
    return (value or "").strip() if isinstance(value, str) else ""


def _yes_no(value) -> str:
    return "Yes" if value else "No"


def _with_detail(flag, detail) -> str:
    if not flag:
        return "No"
    detail = _text(detail)
    return f"Yes - {detail}" if detail else "Yes"


def _with_consent(base: str, consent) -> str:
    if base and consent:
        return f"{base} (agreed)"
    return base


def _dinner(answers: GuestAnswers) -> str:
    choice = _text(answers.dinner_request).lower()
    base = {"yes": "Yes", "no": "No"}.get(choice, "")
    return _with_consent(base, answers.dinner_consent)


# Canonical display order for diffs.
DIFF_FIELDS: list[tuple[str, str, Callable[[GuestAnswers], str]]] = [
    ("children", "Traveling with children",
     lambda a: _with_detail(a.has_children, a.children_details)),
    ("arrival_country_date", "Arrival date in Japan", lambda a: _text(a.arrival_country_date)),
    ("prev_night_place", "Stay the night before", lambda a: _text(a.prev_night_place)),
    ("phone", "Phone usable in Japan", lambda a: _with_detail(a.has_phone, a.phone_number)),
    ("dinner", "Dinner", _dinner),
    ("dietary", "Dietary requirements",
     lambda a: _with_detail(a.dietary_needs, a.dietary_details)),
    ("arrival_time", "Arrival time",
     lambda a: _with_consent(_text(a.arrival_time), a.arrival_time_consent)),
    ("pickup", "Pickup from station",
     lambda a: _with_consent(_yes_no(a.needs_pickup), a.needs_pickup and a.pickup_consent)),
    ("other_notes", "Other requests", lambda a: _text(a.other_notes)),
]


def diff_responses(previous: GuestAnswers | None, current: GuestAnswers | None) -> list[FieldChange]:
    """List the answers whose display value changed, in canonical order"""
    previous = previous or GuestAnswers()
    current = current or GuestAnswers()
    changes = []
    for field, label, render in DIFF_FIELDS:
        before = render(previous)
        after = render(current)
        if before != after:
            changes.append(FieldChange(field=field, label=label, before=before, after=after))
    return changes


def revision_changes(record: ResponseRecord | None) -> list[FieldChange]:
    """Diff of a stored revision against the answers it replaced"""
    if record is None or not record.is_revision or record.previous_response is None:
        return []
    return diff_responses(record.previous_response, record.answers())
