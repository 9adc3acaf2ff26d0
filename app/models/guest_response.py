from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class GuestAnswers(BaseModel):
    """Answers from the guest questionnaire form, stored with camelCase keys"""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    language: str | None = None
    reservation_confirmed: bool | None = None
    has_children: bool | None = None
    children_details: str | None = None
    arrival_country_date: str | None = None
    prev_night_place: str | None = None
    has_phone: bool | None = None
    phone_number: str | None = None
    dinner_request: str | None = None  # "yes", "no" or ""
    dinner_consent: bool | None = None
    dietary_needs: bool | None = None
    dietary_details: str | None = None
    arrival_time: str | None = None
    arrival_time_consent: bool | None = None
    needs_pickup: bool | None = None
    pickup_consent: bool | None = None
    other_notes: str | None = None


ANSWER_FIELDS = tuple(GuestAnswers.model_fields)


class ResponseRecord(GuestAnswers):
    """Latest guest submission plus revision metadata (the notes cell)"""

    submitted_at: str | None = None
    is_revision: bool = False
    revised_at: str | None = None
    previous_response: GuestAnswers | None = None

    def answers(self) -> GuestAnswers:
        """Answer fields only, without revision metadata"""
        return GuestAnswers(**{name: getattr(self, name) for name in ANSWER_FIELDS})

    def to_cell(self) -> str:
        return self.model_dump_json(by_alias=True, exclude_none=True)


class FieldChange(BaseModel):
    """One changed answer between two submissions, as display strings"""

    field: str
    label: str
    before: str
    after: str
