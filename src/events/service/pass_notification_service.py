"""Credential email composition and dispatch."""

import typing as t
from uuid import UUID

import structlog
from django.conf import settings
from django.template.loader import render_to_string
from django.urls import reverse

from common.models import SiteSettings
from events.models import Registration

logger = structlog.get_logger(__name__)


def badge_url(pass_id: str) -> str:
    """Absolute link to the printable badge for ``pass_id``."""
    return settings.BASE_URL.rstrip("/") + reverse("api:get_badge", kwargs={"pass_id": pass_id})


def pass_page_url(pass_id: str) -> str:
    """Link to the pass page on the attendee-facing site."""
    return SiteSettings.get_solo().frontend_base_url.rstrip("/") + f"/passes/{pass_id}"


def build_pass_email(registration: Registration) -> tuple[str, str, str]:
    """Render the credential email.

    Returns:
        Tuple of (subject, text body, html body).
    """
    event = registration.event
    sessions: list[dict[str, t.Any]] = [
        {
            "start_time": selection.occurrence.start_time,
            "end_time": selection.occurrence.end_time,
            "location": (
                selection.occurrence.location
                if selection.occurrence.location and selection.occurrence.location != event.location
                else ""
            ),
        }
        for selection in registration.selections.select_related("occurrence").order_by("occurrence__start_time")
    ]
    context = {
        "attendee_name": registration.attendee.full_name or registration.attendee.email,
        "event_name": event.name,
        "event_location": event.location,
        "google_maps_link": event.google_maps_link,
        "pass_id": registration.pass_id,
        "sessions": sessions,
        "badge_url": badge_url(registration.pass_id),
        "pass_url": pass_page_url(registration.pass_id),
        "contact_email": event.contact_email,
    }
    subject = f"Your Event Pass for {event.name}"
    body = render_to_string("events/emails/pass_issued_body.txt", context)
    html_body = render_to_string("events/emails/pass_issued_body.html", context)
    return subject, body, html_body


def dispatch_pass_email(registration_id: UUID) -> bool:
    """Queue the credential email. Failures are logged and never raised.

    Returns:
        True when the task was handed to the queue.
    """
    from events.tasks import send_pass_email

    try:
        # a broker outage fails the publish at once instead of retrying it
        send_pass_email.apply_async(args=[str(registration_id)], retry=False)
    except Exception:
        logger.exception("pass_email_dispatch_failed", registration_id=str(registration_id))
        return False
    return True
