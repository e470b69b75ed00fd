import typing as t
from uuid import UUID

import structlog
from django.db.models import QuerySet
from ninja import Query
from ninja_extra import ControllerBase, api_controller, route
from ninja_extra.pagination import PageNumberPaginationExtra, PaginatedResponseSchema, paginate

from common.schema import ErrorResponse, ResponseMessage, ResponseOk
from common.throttling import RegistrationThrottle, WriteThrottle
from events import filters, models, schema
from events.service import admission_service, directory, registration_status
from events.service.pass_notification_service import dispatch_pass_email

logger = structlog.get_logger(__name__)


@api_controller("/registrations", tags=["Registrations"], throttle=WriteThrottle())
class RegistrationController(ControllerBase):
    def get_one(self, registration_id: UUID) -> models.Registration:
        """Wrapper helper."""
        return t.cast(
            models.Registration,
            self.get_object_or_exception(models.Registration.objects.full(), pk=registration_id),
        )

    @route.post(
        "/",
        url_name="create_registration",
        response={
            200: schema.RegistrationSchema,
            201: schema.RegistrationSchema,
            400: ErrorResponse,
            404: ErrorResponse,
            409: ErrorResponse,
        },
        throttle=RegistrationThrottle(),
    )
    def create_registration(self, payload: schema.RegistrationCreateSchema) -> tuple[int, models.Registration]:
        """Register an attendee for an event and issue a pass.

        Returns 201 with the new registration, or 200 with the existing one when this
        email is already registered for the event. The pass email is sent in the background.
        """
        registration, created = admission_service.admit(payload)
        return (201 if created else 200), self.get_one(registration.pk)

    @route.get(
        "/",
        url_name="list_registrations",
        response={200: PaginatedResponseSchema[schema.RegistrationSchema], 400: ErrorResponse},
    )
    @paginate(PageNumberPaginationExtra, page_size=25)
    def list_registrations(
        self,
        params: filters.RegistrationFilterSchema = Query(...),  # type: ignore[type-arg]
        search: str | None = None,
        order_by: str = directory.DEFAULT_SORT,
    ) -> QuerySet[models.Registration]:
        """Search registrations.

        ``search`` matches attendee name, email and company, the pass id, the event
        name and location, and session locations. ``order_by`` accepts registered_at,
        status, attendee_name, attendee_email or event_name, with a leading '-' for
        descending order.
        """
        return directory.search(params, search, order_by)

    @route.get(
        "/{registration_id}",
        url_name="get_registration",
        response={200: schema.RegistrationSchema, 404: ErrorResponse},
    )
    def get_registration(self, registration_id: UUID) -> models.Registration:
        return self.get_one(registration_id)

    @route.patch(
        "/{registration_id}",
        url_name="update_registration_status",
        response={200: schema.RegistrationSchema, 400: ErrorResponse, 404: ErrorResponse},
    )
    def update_registration_status(
        self, registration_id: UUID, payload: schema.RegistrationStatusUpdateSchema
    ) -> models.Registration:
        """Check in or cancel a registration. Cancelled registrations cannot change again."""
        registration = self.get_one(registration_id)
        registration_status.transition(registration, payload.status)
        return self.get_one(registration_id)

    @route.delete(
        "/{registration_id}",
        url_name="delete_registration",
        response={200: ResponseOk, 404: ErrorResponse},
    )
    def delete_registration(self, registration_id: UUID) -> ResponseOk:
        registration = self.get_one(registration_id)
        registration.delete()
        logger.info("registration_deleted", registration_id=str(registration_id), pass_id=registration.pass_id)
        return ResponseOk()

    @route.post(
        "/{registration_id}/resend-email",
        url_name="resend_pass_email",
        response={200: ResponseMessage, 404: ErrorResponse, 503: ErrorResponse},
    )
    def resend_pass_email(self, registration_id: UUID) -> tuple[int, ResponseMessage | ErrorResponse]:
        """Queue the pass email again."""
        registration = self.get_one(registration_id)
        if not dispatch_pass_email(registration.pk):
            return 503, ErrorResponse(kind="notification_failed", detail="The pass email could not be queued.")
        return 200, ResponseMessage(message="Pass email queued.")
