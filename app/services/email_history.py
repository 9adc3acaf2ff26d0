"""
Append-only email history kept as a JSON array in one sheet cell.
Reading never fails: a corrupt cell reads as an empty history.
"""
import json
import logging

from pydantic import ValidationError

from app.models.email_record import EmailRecord

logger = logging.getLogger(__name__)


def read_history(raw) -> list[EmailRecord]:
    """Decode an email_history cell into records, oldest first"""
    if isinstance(raw, list):
        entries = raw
    else:
        text = (raw or "").strip() if isinstance(raw, str) else ""
        if not text:
            return []
        try:
            entries = json.loads(text)
        except json.JSONDecodeError:
            logger.warning("Email history cell is not valid JSON, ignoring it")
            return []
        if not isinstance(entries, list):
            logger.warning("Email history cell is not a list, ignoring it")
            return []

    records = []
    for entry in entries:
        if isinstance(entry, EmailRecord):
            records.append(entry)
            continue
        try:
            records.append(EmailRecord.model_validate(entry))
        except ValidationError:
            logger.warning("Skipping malformed email history entry")
    return records


def serialize_history(records: list[EmailRecord]) -> str:
    return json.dumps(
        [record.model_dump(mode="json", by_alias=True) for record in records],
        ensure_ascii=False,
    )


def append_email(existing, record: EmailRecord) -> str:
    """Return the history cell value with record appended at the end"""
    return serialize_history(read_history(existing) + [record])
