"""
Decoding and encoding of raw spreadsheet cell values.
Every cell arrives as a string; this is the only place that interprets them.
"""
import logging
from datetime import date, datetime, timezone

logger = logging.getLogger(__name__)

TRUE_VALUES = {"true", "1"}
CELL_TRUE = "TRUE"
CELL_FALSE = "FALSE"

DATE_FORMATS = ("%Y-%m-%d", "%Y/%m/%d")


def parse_bool(value) -> bool:
    """TRUE/true/1 are true, anything else (including blank) is false"""
    if isinstance(value, bool):
        return value
    if value is None:
        return False
    return str(value).strip().lower() in TRUE_VALUES


def format_bool(value: bool) -> str:
    return CELL_TRUE if value else CELL_FALSE


def parse_date(value) -> date | None:
    """
    Parse a check-in date cell.

    Accepts YYYY-MM-DD, YYYY/MM/DD and full ISO timestamps (time is dropped).
    Returns None when the value cannot be parsed.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = (value or "").strip()
    if not text:
        return None
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(text, fmt).date()
        except ValueError:
            continue
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
    except ValueError:
        logger.warning("Unparseable date value: %r", text)
        return None


def parse_int(value, default: int = 0) -> int:
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        return default


def format_timestamp(moment: datetime) -> str:
    """ISO 8601 in UTC with millisecond precision and a Z suffix"""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    moment = moment.astimezone(timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def now_timestamp() -> str:
    return format_timestamp(utc_now())
