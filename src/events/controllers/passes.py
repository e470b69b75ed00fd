import typing as t

from django.http import HttpResponse
from ninja_extra import ControllerBase, api_controller, route

from badges.service import render_badge
from common.schema import ErrorResponse
from common.throttling import CheckInThrottle
from events import models, schema
from events.service import directory, registration_status


@api_controller("/passes", tags=["Passes"])
class PassController(ControllerBase):
    @route.get(
        "/{pass_id}",
        url_name="get_pass",
        response={200: schema.PublicPassSchema, 404: ErrorResponse},
    )
    def get_pass(self, pass_id: str) -> models.Registration:
        """Public details of a pass."""
        return directory.get_by_pass_id(pass_id)

    @route.get("/{pass_id}/badge", url_name="get_badge", response={404: ErrorResponse})
    def get_badge(self, pass_id: str) -> HttpResponse:
        """Download the printable badge as a PDF."""
        registration = directory.get_by_pass_id(pass_id)
        response = HttpResponse(render_badge(registration), content_type="application/pdf")
        response["Content-Disposition"] = f'inline; filename="{registration.pass_id}.pdf"'
        return response


@api_controller("/check-in", tags=["Check-in"], throttle=CheckInThrottle())
class CheckInController(ControllerBase):
    @route.get(
        "/resolve",
        url_name="resolve_pass",
        response={200: schema.RegistrationSchema, 400: ErrorResponse, 404: ErrorResponse},
    )
    def resolve_pass(self, q: str) -> models.Registration:
        """Find a registration from a typed or scanned pass id without changing it.

        Dash style, letter case and surrounding whitespace are ignored, and the bare
        number finds the prefixed id.
        """
        return directory.resolve_pass_id(q)

    @route.post(
        "/",
        url_name="check_in",
        response={200: schema.CheckInResponseSchema, 400: ErrorResponse, 404: ErrorResponse},
    )
    def check_in(self, payload: schema.PassQuerySchema) -> dict[str, t.Any]:
        """Resolve a pass and mark it checked in.

        Checking in an already checked-in pass succeeds with ``checked_in`` false.
        Cancelled passes are rejected.
        """
        registration = directory.resolve_pass_id(payload.query)
        registration, changed = registration_status.transition(registration, models.Registration.Status.CHECKED_IN)
        return {"registration": directory.get_by_pass_id(registration.pass_id), "checked_in": changed}
