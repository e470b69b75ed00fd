import typing as t
from uuid import UUID

from django.db.models import QuerySet
from ninja import Query
from ninja_extra import ControllerBase, api_controller, route
from ninja_extra.pagination import PageNumberPaginationExtra, PaginatedResponseSchema, paginate
from ninja_extra.searching import Searching, searching

from common.schema import ErrorResponse, ResponseOk
from common.throttling import WriteThrottle
from events import filters, models, schema
from events.service import event_service, schedule_service


@api_controller("/events", tags=["Events"], throttle=WriteThrottle())
class EventController(ControllerBase):
    def get_queryset(self) -> QuerySet[models.Event]:
        return event_service.get_event_queryset()

    def get_one(self, event_id: UUID) -> models.Event:
        """Wrapper helper."""
        return t.cast(models.Event, self.get_object_or_exception(self.get_queryset(), pk=event_id))

    @route.get("/", url_name="list_events", response=PaginatedResponseSchema[schema.EventSchema])
    @paginate(PageNumberPaginationExtra, page_size=20)
    @searching(Searching, search_fields=["name", "description", "location"])
    def list_events(
        self,
        params: filters.EventFilterSchema = Query(...),  # type: ignore[type-arg]
    ) -> QuerySet[models.Event]:
        """List events with their occurrences and live registration counts."""
        return params.filter(self.get_queryset())

    @route.post("/", url_name="create_event", response={201: schema.EventSchema, 400: ErrorResponse})
    def create_event(self, payload: schema.EventEditSchema) -> tuple[int, models.Event]:
        """Create an event and its initial schedule."""
        event = event_service.create_event(payload)
        return 201, self.get_one(event.pk)

    @route.get("/{event_id}", url_name="get_event", response={200: schema.EventSchema, 404: ErrorResponse})
    def get_event(self, event_id: UUID) -> models.Event:
        """Retrieve an event with its occurrences ordered by start time."""
        return self.get_one(event_id)

    @route.put(
        "/{event_id}",
        url_name="update_event",
        response={200: schema.EventSchema, 400: ErrorResponse, 404: ErrorResponse, 409: ErrorResponse},
    )
    def update_event(self, event_id: UUID, payload: schema.EventEditSchema, cascade: bool = False) -> models.Event:
        """Replace an event's details and reconcile its schedule.

        Occurrences carrying an id are updated, those without one are created and
        the ones left out are deleted. Removing an occurrence that attendees picked
        fails with 409 unless cascade=true.
        """
        event = event_service.update_event(self.get_one(event_id), payload, cascade=cascade)
        return self.get_one(event.pk)

    @route.delete("/{event_id}", url_name="delete_event", response={200: ResponseOk, 404: ErrorResponse})
    def delete_event(self, event_id: UUID) -> ResponseOk:
        """Delete an event together with its occurrences and registrations."""
        event_service.delete_event(self.get_one(event_id))
        return ResponseOk()

    @route.put(
        "/{event_id}/occurrences",
        url_name="reconcile_occurrences",
        response={200: list[schema.OccurrenceSchema], 400: ErrorResponse, 404: ErrorResponse, 409: ErrorResponse},
    )
    def reconcile_occurrences(
        self, event_id: UUID, payload: schema.ScheduleEditSchema, cascade: bool = False
    ) -> list[models.Occurrence]:
        """Sync the event's schedule to the submitted list and return it ordered by start time."""
        return schedule_service.reconcile(self.get_one(event_id), payload.occurrences, cascade=cascade)
