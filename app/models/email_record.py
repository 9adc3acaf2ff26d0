from enum import Enum

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class EmailType(str, Enum):
    """History slot an email is logged under (reminders reuse INITIAL)"""

    INITIAL = "initial"
    RECEPTION = "reception"


class EmailRecord(BaseModel):
    """One sent email in a booking's email history"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    type: EmailType
    to: str
    subject: str
    body: str
    sent_at: str


class SendResult(BaseModel):
    """Outcome of a single email transport call"""

    ok: bool
    error: str | None = None
