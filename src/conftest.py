"""Shared fixtures for the passdesk test suite."""

import typing as t
from datetime import datetime, timedelta

import faker
import pytest
from django.core.cache import cache
from django.utils import timezone
from pytest import MonkeyPatch

from events.models import Attendee, Event, Occurrence
from events.schema import OccurrenceEditSchema, RegistrationCreateSchema


@pytest.fixture(autouse=True)
def increase_rate_limit(monkeypatch: MonkeyPatch) -> None:
    """Increase the rate limits so endpoint tests are never throttled."""
    for throttle in ("AnonDefaultThrottle", "RegistrationThrottle", "WriteThrottle", "CheckInThrottle"):
        monkeypatch.setattr(f"common.throttling.{throttle}.rate", "10000/min")


@pytest.fixture(autouse=True)
def enable_celery_eager_mode(settings: t.Any) -> None:
    """Enable Celery eager mode for tests so tasks execute synchronously.

    This ensures that Celery tasks run immediately in the same process,
    allowing tests to verify their side effects without async complications.
    """
    settings.CELERY_TASK_ALWAYS_EAGER = True
    settings.CELERY_TASK_EAGER_PROPAGATES = True


@pytest.fixture(autouse=True)
def clear_cache() -> None:
    """Throttle counters live in the cache; start every test from zero."""
    cache.clear()


@pytest.fixture(autouse=True)
def pass_settings(settings: t.Any) -> None:
    settings.PASS_ID_PREFIX = "PASS-"
    settings.PASS_NUMBER_START = 1001
    settings.PASS_ALLOCATION_MAX_ATTEMPTS = 5
    settings.BADGE_HEADER_IMAGE = ""


class EventFactory:
    """Factory for creating events with a schedule for testing."""

    fake = faker.Faker()

    def create_event(self, occurrences: int = 2, start: datetime | None = None, **kwargs: t.Any) -> Event:
        start = start or timezone.now().replace(microsecond=0) + timedelta(days=7)
        event = Event.objects.create(
            name=kwargs.pop("name", self.fake.catch_phrase()),
            description=kwargs.pop("description", self.fake.paragraph()),
            location=kwargs.pop("location", self.fake.city()),
            contact_email=kwargs.pop("contact_email", self.fake.email()),
            contact_phone=kwargs.pop("contact_phone", "+43 1 234 5678"),
            **kwargs,
        )
        for i in range(occurrences):
            Occurrence.objects.create(
                event=event, start_time=start + timedelta(days=i), end_time=start + timedelta(days=i, hours=2)
            )
        return event

    def __call__(self, occurrences: int = 2, **kwargs: t.Any) -> Event:
        return self.create_event(occurrences=occurrences, **kwargs)


@pytest.fixture
def event_factory() -> EventFactory:
    return EventFactory()


@pytest.fixture
def event(event_factory: EventFactory) -> Event:
    """An event with two sessions and no capacity limit."""
    return event_factory(name="PyCon Vienna", location="Vienna")


class RegistrationPayloadFactory:
    """Builds admission requests with fake attendee data."""

    fake = faker.Faker()

    def __call__(self, event: Event, **kwargs: t.Any) -> RegistrationCreateSchema:
        data: dict[str, t.Any] = {
            "email": self.fake.unique.email(),
            "first_name": self.fake.first_name(),
            "last_name": self.fake.last_name(),
            "phone": "+43 660 1234567",
            "company": self.fake.company(),
            "event_id": event.pk,
            "occurrence_ids": [event.occurrences.order_by("start_time").values_list("pk", flat=True).first()],
        }
        data.update(kwargs)
        return RegistrationCreateSchema(**data)


@pytest.fixture
def registration_payload() -> RegistrationPayloadFactory:
    return RegistrationPayloadFactory()


@pytest.fixture
def attendee() -> Attendee:
    return Attendee.objects.create(email="ada@example.com", first_name="Ada", last_name="Lovelace")


def occurrence_payload(occurrence: Occurrence | None = None, **kwargs: t.Any) -> OccurrenceEditSchema:
    """Desired-schedule entry mirroring ``occurrence``, overridden by ``kwargs``."""
    data: dict[str, t.Any] = {}
    if occurrence is not None:
        data = {
            "id": occurrence.pk,
            "start_time": occurrence.start_time,
            "end_time": occurrence.end_time,
            "location": occurrence.location,
        }
    data.update(kwargs)
    return OccurrenceEditSchema(**data)
