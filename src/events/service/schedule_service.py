"""Occurrence schedule reconciliation.

``reconcile`` makes an event's persisted occurrences match a desired list in one
transaction: entries with a known id are updated, entries without an id are
created, and persisted occurrences missing from the list are deleted.
"""

import typing as t
from uuid import UUID

import structlog
from django.db import IntegrityError, connection, transaction
from django.utils import timezone

from events.exceptions import (
    DuplicateOccurrenceTimeError,
    ForeignOccurrenceError,
    InvalidInputError,
    OccurrenceInUseError,
)
from events.models import Event, Occurrence, RegistrationOccurrence
from events.schema import OccurrenceEditSchema

logger = structlog.get_logger(__name__)


class SchedulePlan(t.NamedTuple):
    to_create: list[OccurrenceEditSchema]
    to_update: list[OccurrenceEditSchema]
    to_delete: list[UUID]


def plan_changes(persisted_ids: set[UUID], desired: t.Sequence[OccurrenceEditSchema]) -> SchedulePlan:
    """Split the desired list into creates, updates and deletes.

    Raises:
        ForeignOccurrenceError: an entry carries an id the event does not own.
        InvalidInputError: the same id appears twice, or an entry ends before it starts.
        DuplicateOccurrenceTimeError: two entries share a start time.
    """
    to_create: list[OccurrenceEditSchema] = []
    to_update: list[OccurrenceEditSchema] = []
    seen_ids: set[UUID] = set()
    seen_starts: set[t.Any] = set()
    for entry in desired:
        if entry.end_time and entry.end_time < entry.start_time:
            raise InvalidInputError("Occurrence end time cannot be before start time.")
        if entry.start_time in seen_starts:
            raise DuplicateOccurrenceTimeError(
                f"More than one occurrence starts at {entry.start_time.isoformat()}."
            )
        seen_starts.add(entry.start_time)
        if entry.id is None:
            to_create.append(entry)
            continue
        if entry.id not in persisted_ids:
            raise ForeignOccurrenceError(f"Occurrence {entry.id} does not belong to this event.")
        if entry.id in seen_ids:
            raise InvalidInputError(f"Occurrence {entry.id} is listed more than once.")
        seen_ids.add(entry.id)
        to_update.append(entry)
    to_delete = sorted(persisted_ids - seen_ids)
    return SchedulePlan(to_create=to_create, to_update=to_update, to_delete=to_delete)


def _check_deferred_constraints() -> None:
    # surface start time collisions now rather than at the outermost commit
    if connection.vendor == "postgresql":
        with connection.cursor() as cursor:
            cursor.execute("SET CONSTRAINTS ALL IMMEDIATE")


def reconcile(
    event: Event, desired: t.Sequence[OccurrenceEditSchema], *, cascade: bool = False
) -> list[Occurrence]:
    """Sync the event's occurrences to ``desired`` atomically.

    Deleting an occurrence that registrants selected is refused unless ``cascade``
    is set, in which case those selections are removed with it.

    Returns:
        The event's occurrences after the change, ordered by start time.
    """
    try:
        with transaction.atomic():
            Event.objects.select_for_update().filter(pk=event.pk).exists()
            persisted = {o.id: o for o in Occurrence.objects.filter(event=event)}
            plan = plan_changes(set(persisted), desired)

            if plan.to_delete:
                selections = RegistrationOccurrence.objects.filter(occurrence_id__in=plan.to_delete)
                if selections.exists():
                    if not cascade:
                        raise OccurrenceInUseError()
                    removed, _ = selections.delete()
                    logger.warning(
                        "occurrence_selections_cascaded", event_id=str(event.pk), selections_removed=removed
                    )
                Occurrence.objects.filter(pk__in=plan.to_delete).delete()

            updated = 0
            now = timezone.now()
            for entry in plan.to_update:
                current = persisted[entry.id]  # type: ignore[index]
                if (current.start_time, current.end_time, current.location) == (
                    entry.start_time,
                    entry.end_time,
                    entry.location,
                ):
                    continue
                Occurrence.objects.filter(pk=entry.id).update(
                    start_time=entry.start_time, end_time=entry.end_time, location=entry.location, updated_at=now
                )
                updated += 1

            # bulk writes skip full_clean, plan_changes already validated the entries
            Occurrence.objects.bulk_create(
                [
                    Occurrence(event=event, start_time=e.start_time, end_time=e.end_time, location=e.location)
                    for e in plan.to_create
                ]
            )
            _check_deferred_constraints()
    except IntegrityError as exc:
        raise DuplicateOccurrenceTimeError() from exc

    logger.info(
        "occurrences_reconciled",
        event_id=str(event.pk),
        created=len(plan.to_create),
        updated=updated,
        deleted=len(plan.to_delete),
    )
    return list(Occurrence.objects.filter(event=event).order_by("start_time"))
