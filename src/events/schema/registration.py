"""Attendee, registration and pass schemas."""

import typing as t
from datetime import datetime
from uuid import UUID

from ninja import ModelSchema, Schema
from pydantic import EmailStr, Field

from common.schema import OneToOneFiftyString, OneToTwoFiftyFiveString, StrippedString
from events.models import Attendee, Occurrence, Registration

from .event import MinimalEventSchema, OccurrenceSchema, PhoneString


class RegistrationCreateSchema(Schema):
    email: EmailStr
    first_name: OneToOneFiftyString
    last_name: OneToOneFiftyString
    phone: PhoneString | None = None
    company: OneToTwoFiftyFiveString | None = None
    event_id: UUID
    occurrence_ids: list[UUID] = Field(..., min_length=1)

    def attendee_fields(self) -> dict[str, str]:
        """Profile fields offered for the attendee merge, without blanks."""
        fields = self.model_dump(include={"first_name", "last_name", "phone", "company"})
        return {k: v for k, v in fields.items() if v}


class RegistrationStatusUpdateSchema(Schema):
    # validated by the status machine so unknown values get a domain error
    status: StrippedString


class PassQuerySchema(Schema):
    query: t.Annotated[StrippedString, Field(min_length=1, max_length=128)]


class AttendeeSchema(ModelSchema):
    class Meta:
        model = Attendee
        fields = ["id", "email", "first_name", "last_name", "phone", "company"]


def _selected_occurrences(obj: Registration) -> list[Occurrence]:
    return [selection.occurrence for selection in obj.selections.all()]


class RegistrationSchema(ModelSchema):
    attendee: AttendeeSchema
    event: MinimalEventSchema
    status: Registration.Status
    registered_at: datetime
    occurrences: list[OccurrenceSchema]

    class Meta:
        model = Registration
        fields = ["id", "pass_id", "pass_number", "checked_in_at", "cancelled_at"]

    @staticmethod
    def resolve_occurrences(obj: Registration) -> list[Occurrence]:
        return _selected_occurrences(obj)


class PublicPassSchema(Schema):
    """What anyone holding a pass id may see."""

    pass_id: str
    status: Registration.Status
    full_name: str
    company: str
    event: MinimalEventSchema
    occurrences: list[OccurrenceSchema]

    @staticmethod
    def resolve_full_name(obj: Registration) -> str:
        return obj.attendee.full_name

    @staticmethod
    def resolve_company(obj: Registration) -> str:
        return obj.attendee.company

    @staticmethod
    def resolve_occurrences(obj: Registration) -> list[Occurrence]:
        return _selected_occurrences(obj)


class CheckInResponseSchema(Schema):
    registration: RegistrationSchema
    checked_in: bool = Field(..., description="False when the pass was already checked in")
