"""Registration admission.

``admit`` validates the request, resolves the attendee by email, returns an
existing registration unchanged, enforces capacity and finally allocates a pass
and writes the registration with its sessions in one transaction.
"""

import typing as t
from functools import partial
from uuid import UUID

import structlog
from django.conf import settings
from django.db import IntegrityError, OperationalError, transaction
from django.db.models import Q
from django.shortcuts import get_object_or_404

from common.utils import get_or_create_with_race_protection
from events.exceptions import (
    CapacityExceededError,
    ForeignOccurrenceError,
    InvalidInputError,
    RegistrationRaceError,
    TransientStoreError,
)
from events.models import Attendee, Event, Occurrence, Registration, RegistrationOccurrence
from events.schema import RegistrationCreateSchema
from events.service import pass_allocator
from events.service.pass_notification_service import dispatch_pass_email

logger = structlog.get_logger(__name__)


def resolve_attendee(email: str, fields: dict[str, t.Any]) -> Attendee:
    """Find the attendee by email, creating it on first sight.

    An existing attendee only gains values for fields that are still empty.
    """
    email = email.strip().lower()
    attendee, created = get_or_create_with_race_protection(
        Attendee,
        Q(email__iexact=email),
        {"email": email, **{k: v for k, v in fields.items() if k in Attendee.MERGEABLE_FIELDS}},
    )
    if created:
        return attendee
    changed = [
        name for name in Attendee.MERGEABLE_FIELDS if not getattr(attendee, name) and fields.get(name)
    ]
    for name in changed:
        setattr(attendee, name, fields[name])
    if changed:
        attendee.save(update_fields=[*changed, "updated_at"])
        logger.info("attendee_merged", attendee_id=str(attendee.pk), fields=changed)
    return attendee


def validate_occurrences(event: Event, occurrence_ids: t.Sequence[UUID]) -> list[UUID]:
    """Check that every selected occurrence belongs to the event.

    Returns:
        The ids, deduplicated, in request order.
    """
    unique_ids = list(dict.fromkeys(occurrence_ids))
    if not unique_ids:
        raise InvalidInputError("Select at least one occurrence.")
    owned = set(Occurrence.objects.filter(event=event, pk__in=unique_ids).values_list("pk", flat=True))
    foreign = [str(pk) for pk in unique_ids if pk not in owned]
    if foreign:
        raise ForeignOccurrenceError(f"Occurrences {', '.join(foreign)} do not belong to this event.")
    return unique_ids


def _admit_once(payload: RegistrationCreateSchema) -> tuple[Registration, bool]:
    with transaction.atomic():
        # serializes admissions per event so the capacity check and the insert see the same count
        event = get_object_or_404(Event.objects.select_for_update(), pk=payload.event_id)
        occurrence_ids = validate_occurrences(event, payload.occurrence_ids)
        attendee = resolve_attendee(payload.email, payload.attendee_fields())

        existing = Registration.objects.filter(event=event, attendee=attendee).first()
        if existing:
            return existing, False

        if event.max_capacity is not None:
            count = Registration.objects.filter(event=event).count()
            if count >= event.max_capacity:
                raise CapacityExceededError()

        pass_id, pass_number = pass_allocator.allocate()
        registration = Registration(event=event, attendee=attendee, pass_id=pass_id, pass_number=pass_number)
        # uniqueness is left to the database so a lost race surfaces as IntegrityError
        Registration.objects.bulk_create([registration])
        RegistrationOccurrence.objects.bulk_create(
            [RegistrationOccurrence(registration=registration, occurrence_id=pk) for pk in occurrence_ids]
        )
        transaction.on_commit(partial(dispatch_pass_email, registration.pk))
        return registration, True


def admit(payload: RegistrationCreateSchema) -> tuple[Registration, bool]:
    """Admit a registration for ``payload.event_id``.

    Re-submitting the same email for the same event returns the existing
    registration. Lock contention and pass collisions are retried a bounded
    number of times.

    Returns:
        Tuple of (registration, created).

    Raises:
        InvalidInputError: no occurrences, or occurrences of another event.
        CapacityExceededError: the event is full.
        RegistrationRaceError: a concurrent request registered the same attendee.
        TransientStoreError: the pass could not be allocated within the attempt budget.
    """
    max_attempts = settings.PASS_ALLOCATION_MAX_ATTEMPTS
    for attempt in range(1, max_attempts + 1):
        try:
            registration, created = _admit_once(payload)
        except (IntegrityError, OperationalError) as exc:
            if isinstance(exc, IntegrityError) and Registration.objects.filter(
                event_id=payload.event_id, attendee__email__iexact=payload.email
            ).exists():
                raise RegistrationRaceError() from exc
            logger.warning(
                "pass_allocation_retry",
                event_id=str(payload.event_id),
                attempt=attempt,
                max_attempts=max_attempts,
                error=str(exc),
            )
            continue
        logger.info(
            "registration_admitted" if created else "registration_resubmitted",
            event_id=str(payload.event_id),
            registration_id=str(registration.pk),
            pass_id=registration.pass_id,
        )
        return registration, created
    raise TransientStoreError()
