import structlog
from celery import shared_task

from common.tasks import send_email
from events.models import Registration
from events.service.pass_notification_service import build_pass_email

logger = structlog.get_logger(__name__)


@shared_task
def send_pass_email(registration_id: str) -> None:
    """Send the credential email for a registration."""
    registration = Registration.objects.select_related("attendee", "event").get(pk=registration_id)
    logger.info("pass_email_sending", registration_id=registration_id, pass_id=registration.pass_id)
    subject, body, html_body = build_pass_email(registration)
    send_email(to=registration.attendee.email, subject=subject, body=body, html_body=html_body)
    logger.info("pass_email_sent", registration_id=registration_id, pass_id=registration.pass_id)
