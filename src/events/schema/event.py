"""Event and occurrence schemas."""

import typing as t
from uuid import UUID

from ninja import ModelSchema, Schema
from pydantic import AwareDatetime, EmailStr, Field, StringConstraints, field_validator, model_validator

from common.schema import OneToTwoFiftyFiveString, StrippedString
from events.models import Event, Occurrence

PhoneString = t.Annotated[str, StringConstraints(strip_whitespace=True, max_length=32, pattern=r"^[0-9\s\-\+()]+$")]


class OccurrenceEditSchema(Schema):
    """One desired session. Omit ``id`` to create a new one."""

    id: UUID | None = None
    start_time: AwareDatetime
    end_time: AwareDatetime | None = None
    location: StrippedString | None = None

    @model_validator(mode="after")
    def validate_time_range(self) -> t.Self:
        """An occurrence cannot end before it starts."""
        if self.end_time and self.end_time < self.start_time:
            raise ValueError("Occurrence end time cannot be before start time.")
        return self


class EventEditSchema(Schema):
    name: OneToTwoFiftyFiveString
    description: t.Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
    location: OneToTwoFiftyFiveString
    google_maps_link: StrippedString = ""
    contact_email: EmailStr
    contact_phone: PhoneString
    max_capacity: int | None = Field(None, ge=1, description="Upper bound on registrations (null = unlimited)")
    occurrences: list[OccurrenceEditSchema] = Field(..., min_length=1)

    @field_validator("google_maps_link")
    @classmethod
    def validate_maps_link(cls, v: str) -> str:
        if v and not v.startswith(("http://", "https://")):
            raise ValueError("Google Maps link must start with http:// or https://.")
        return v


class OccurrenceSchema(ModelSchema):
    class Meta:
        model = Occurrence
        fields = ["id", "start_time", "end_time", "location"]


class MinimalEventSchema(ModelSchema):
    class Meta:
        model = Event
        fields = ["id", "name", "location"]


class EventSchema(ModelSchema):
    occurrences: list[OccurrenceSchema]
    registration_count: int

    class Meta:
        model = Event
        fields = [
            "id",
            "name",
            "description",
            "location",
            "google_maps_link",
            "contact_email",
            "contact_phone",
            "max_capacity",
            "created_at",
            "updated_at",
        ]

    @staticmethod
    def resolve_occurrences(obj: Event) -> list[Occurrence]:
        return list(obj.occurrences.order_by("start_time"))

    @staticmethod
    def resolve_registration_count(obj: Event) -> int:
        count = getattr(obj, "registration_count", None)
        if count is None:
            return obj.registrations.count()
        return int(count)


class ScheduleEditSchema(Schema):
    """The complete desired schedule of an event. Occurrences left out are deleted."""

    occurrences: list[OccurrenceEditSchema]
