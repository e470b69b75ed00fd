"""Exception handlers for the API.

Every error body carries a stable ``kind`` and a human-readable ``detail``.
"""

import traceback
import typing as t
from copy import deepcopy

import orjson
import structlog
from django.conf import settings
from django.core.exceptions import ValidationError
from django.http import Http404, HttpRequest
from ninja.errors import ValidationError as NinjaValidationError
from ninja.responses import Response
from ninja_extra.exceptions import APIException, NotFound

from events.exceptions import PassdeskError

logger = structlog.get_logger(__name__)

SENSITIVE_KEYS = {"email", "phone", "first_name", "last_name", "authorization", "cookie"}


def handle_general_exception(request: HttpRequest, exc: Exception | t.Type[Exception]) -> Response:
    """Handle a general exception.

    Args:
        request: The incoming HTTP request.
        exc: The exception.

    Returns:
        The response.
    """
    json_payload = None
    if request.method in ("POST", "PUT", "PATCH") and request.headers.get("Content-Type") == "application/json":
        try:
            json_payload = obfuscate(orjson.loads(request.body))
        except orjson.JSONDecodeError:
            json_payload = None
    logger.exception(
        "INTERNAL_SERVER_ERROR",
        method=request.method,
        path=request.path,
        query=obfuscate(request.GET.dict()),
        payload=json_payload,
    )
    data = {"kind": "internal_error", "detail": "Internal Server Error."}
    if settings.DEBUG:  # pragma: no cover
        data["traceback"] = traceback.format_exc()
    return Response(status=500, data=data)


def handle_passdesk_error(request: HttpRequest, exc: PassdeskError | t.Type[PassdeskError]) -> Response:
    """Translate a domain error to its HTTP status."""
    if exc.status_code >= 409:
        logger.info("request_conflict", kind=exc.kind, detail=exc.detail, path=request.path)
    return Response(status=exc.status_code, data={"kind": exc.kind, "detail": exc.detail})


def handle_request_validation_error(
    request: HttpRequest, exc: NinjaValidationError | t.Type[NinjaValidationError]
) -> Response:
    """Request payloads that fail schema validation are a 400, not ninja's default 422."""
    messages = []
    # ctx can hold the raised exception object, which is not JSON serializable
    errors = [{k: v for k, v in error.items() if k != "ctx"} for error in exc.errors]
    for error in errors:
        location = ".".join(str(part) for part in error.get("loc", ()) if part not in ("body", "payload", "query"))
        messages.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    return Response(
        status=400,
        data={"kind": "validation_error", "detail": "; ".join(messages) or "Invalid input.", "errors": errors},
    )


def handle_django_validation_error(request: HttpRequest, exc: ValidationError | t.Type[ValidationError]) -> Response:
    """Handle a validation error raised by model validation.

    Args:
        request: The incoming HTTP request.
        exc: The exception.
    """
    logger.warning("VALIDATION_ERROR", path=request.path, messages=exc.messages)
    errors = exc.message_dict if hasattr(exc, "error_dict") else {"__all__": exc.messages}
    return Response(
        status=400,
        data={"kind": "validation_error", "detail": "; ".join(exc.messages), "errors": errors},
    )


def handle_not_found(request: HttpRequest, exc: Http404 | t.Type[Http404]) -> Response:
    """Lookups of unknown ids answer with the same body shape as domain errors."""
    return Response(status=404, data={"kind": "not_found", "detail": "Not found."})


def handle_api_exception(request: HttpRequest, exc: APIException | t.Type[APIException]) -> Response:
    """Reshape ninja-extra's own errors (raised by controller lookups and throttles)."""
    kind = "not_found" if isinstance(exc, NotFound) else exc.default_code
    return Response(status=exc.status_code, data={"kind": kind, "detail": str(exc.detail)})


def obfuscate(data: t.Any) -> t.Any:
    """Mask personal data in payloads before they reach the logs."""
    if not isinstance(data, dict):
        return data
    new_data = deepcopy(data)
    for key in data.keys():
        if key.lower() in SENSITIVE_KEYS:
            new_data[key] = "********"
    return new_data
