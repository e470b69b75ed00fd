# src/events/filters.py

from uuid import UUID

from ninja import Field, FilterSchema

from events.models import Registration


class EventFilterSchema(FilterSchema):
    name: str | None = Field(None, q="name__icontains")  # type: ignore[call-overload]
    location: str | None = Field(None, q="location__icontains")  # type: ignore[call-overload]


class RegistrationFilterSchema(FilterSchema):
    """Structured filters for the registration directory."""

    status: Registration.Status | None = None
    event_id: UUID | None = None
    occurrence_id: UUID | None = Field(None, q="selections__occurrence_id")  # type: ignore[call-overload]
    attendee_email: str | None = Field(None, q="attendee__email__icontains")  # type: ignore[call-overload]
    event_name: str | None = Field(None, q="event__name__icontains")  # type: ignore[call-overload]
