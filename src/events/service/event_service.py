"""Event management on top of the schedule service."""

import structlog
from django.db import models, transaction

from events.models import Event
from events.schema import EventEditSchema
from events.service import schedule_service, update_db_instance

logger = structlog.get_logger(__name__)


@transaction.atomic
def create_event(payload: EventEditSchema) -> Event:
    """Create an event together with its occurrences."""
    event = Event.objects.create(**payload.model_dump(exclude={"occurrences"}))
    schedule_service.reconcile(event, payload.occurrences)
    logger.info("event_created", event_id=str(event.pk), occurrences=len(payload.occurrences))
    return event


@transaction.atomic
def update_event(event: Event, payload: EventEditSchema, *, cascade: bool = False) -> Event:
    """Replace the descriptive fields and reconcile the schedule in one transaction."""
    event = update_db_instance(event, payload, exclude_unset=False, exclude={"occurrences"})
    schedule_service.reconcile(event, payload.occurrences, cascade=cascade)
    logger.info("event_updated", event_id=str(event.pk))
    return event


@transaction.atomic
def delete_event(event: Event) -> None:
    """Delete the event with its occurrences, registrations and their selections."""
    event_id = str(event.pk)
    event.delete()
    logger.info("event_deleted", event_id=event_id)


def get_event_queryset() -> models.QuerySet[Event]:
    return Event.objects.with_registration_count().with_occurrences()
