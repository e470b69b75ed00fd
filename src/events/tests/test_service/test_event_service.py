from datetime import timedelta

import pytest
from django.utils import timezone

from conftest import occurrence_payload
from events.exceptions import OccurrenceInUseError
from events.models import Event, Occurrence, Registration, RegistrationOccurrence
from events.schema import EventEditSchema
from events.service import event_service

pytestmark = pytest.mark.django_db


def _payload(**kwargs: object) -> EventEditSchema:
    start = timezone.now().replace(microsecond=0) + timedelta(days=14)
    data: dict[str, object] = {
        "name": "EuroPython",
        "description": "The European Python conference.",
        "location": "Prague",
        "contact_email": "info@europython.example",
        "contact_phone": "+420 123 456 789",
        "occurrences": [occurrence_payload(start_time=start), occurrence_payload(start_time=start + timedelta(days=1))],
    }
    data.update(kwargs)
    return EventEditSchema(**data)  # type: ignore[arg-type]


def test_create_event_with_schedule() -> None:
    event = event_service.create_event(_payload(max_capacity=300))

    assert event.name == "EuroPython"
    assert event.max_capacity == 300
    assert event.occurrences.count() == 2


def test_update_event_replaces_fields_and_schedule(event: Event) -> None:
    first = event.occurrences.order_by("start_time").first()
    assert first is not None

    updated = event_service.update_event(
        event, _payload(name="PyCon Vienna 2030", occurrences=[occurrence_payload(first, location="Hall A")])
    )

    assert updated.name == "PyCon Vienna 2030"
    assert updated.location == "Prague"
    assert [(o.id, o.location) for o in updated.occurrences.all()] == [(first.id, "Hall A")]


def test_update_event_rolls_back_when_schedule_is_rejected(event: Event, registration: Registration) -> None:
    last = event.occurrences.order_by("start_time").last()
    assert last is not None

    # the registration picked the first session, which this payload drops
    with pytest.raises(OccurrenceInUseError):
        event_service.update_event(event, _payload(name="Renamed", occurrences=[occurrence_payload(last)]))

    event.refresh_from_db()
    assert event.name == "PyCon Vienna"
    assert event.occurrences.count() == 2


def test_update_event_with_cascade(event: Event, registration: Registration) -> None:
    last = event.occurrences.order_by("start_time").last()
    assert last is not None

    event_service.update_event(event, _payload(occurrences=[occurrence_payload(last)]), cascade=True)

    assert not registration.selections.exists()
    assert Registration.objects.filter(pk=registration.pk).exists()


def test_delete_event_removes_everything(event: Event, registration: Registration) -> None:
    event_service.delete_event(event)

    assert not Event.objects.filter(pk=event.pk).exists()
    assert not Occurrence.objects.exists()
    assert not Registration.objects.exists()
    assert not RegistrationOccurrence.objects.exists()


def test_event_queryset_counts_registrations(event: Event, registration: Registration) -> None:
    annotated = event_service.get_event_queryset().get(pk=event.pk)

    assert annotated.registration_count == 1  # type: ignore[attr-defined]
