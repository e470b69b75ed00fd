import structlog

from events.models import Registration

from .renderer import BadgeContent, BadgeRenderer

logger = structlog.get_logger(__name__)


def badge_content(registration: Registration) -> BadgeContent:
    attendee = registration.attendee
    return BadgeContent(
        full_name=attendee.full_name or attendee.email,
        company=attendee.company,
        pass_id=registration.pass_id,
    )


def render_badge(registration: Registration) -> bytes:
    """Render the printable PDF badge for a registration."""
    pdf = BadgeRenderer.from_settings().render(badge_content(registration))
    logger.info("badge_rendered", pass_id=registration.pass_id, size=len(pdf))
    return pdf
