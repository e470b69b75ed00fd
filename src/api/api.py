from django.conf import settings
from django.core.exceptions import ValidationError
from django.http import Http404, HttpRequest
from ninja.errors import ValidationError as NinjaValidationError
from ninja_extra import NinjaExtraAPI
from ninja_extra.exceptions import APIException

from common.schema import ResponseOk, VersionResponse
from common.throttling import AnonDefaultThrottle
from events.controllers.events import EventController
from events.controllers.passes import CheckInController, PassController
from events.controllers.registrations import RegistrationController
from events.exceptions import PassdeskError

from .exception_handlers import (
    handle_api_exception,
    handle_django_validation_error,
    handle_general_exception,
    handle_not_found,
    handle_passdesk_error,
    handle_request_validation_error,
)

api = NinjaExtraAPI(
    title="Passdesk API",
    docs_url="/docs",
    version=settings.VERSION,
    description=f"Passdesk API {settings.VERSION}",
    app_name=f"passdesk-api-{settings.VERSION}",
    urls_namespace="api",
    servers=[
        {"url": settings.SERVICE_URL, "description": settings.SERVICE_DESCRIPTION},
    ],
    throttle=[AnonDefaultThrottle()],
)


@api.get("/version", tags=["Version"], response={200: VersionResponse})
def version(request: HttpRequest) -> tuple[int, VersionResponse]:
    """Get the API version.

    Args:
        request: The incoming HTTP request.

    Returns:
        The response status code and message.
    """
    return 200, VersionResponse(version=settings.VERSION)


@api.get("/healthcheck", tags=["Healthcheck"], response={200: ResponseOk})
def healthcheck(request: HttpRequest) -> tuple[int, ResponseOk]:
    """Check the health of the API."""
    return 200, ResponseOk()


api.register_controllers(
    EventController,
    RegistrationController,
    PassController,
    CheckInController,
)

EXCEPTION_HANDLERS = {
    Exception: handle_general_exception,
    ValidationError: handle_django_validation_error,
    NinjaValidationError: handle_request_validation_error,
    Http404: handle_not_found,
    APIException: handle_api_exception,
    PassdeskError: handle_passdesk_error,
}

for exc, handler in EXCEPTION_HANDLERS.items():
    api.add_exception_handler(exc, handler)
