"""Registration status lifecycle.

registered -> checked-in, and registered / checked-in -> cancelled. Cancelled is
terminal. This module is the only writer of ``Registration.status``.
"""

import structlog
from django.db import transaction
from django.utils import timezone

from events.exceptions import InvalidStatusError, InvalidStatusTransitionError
from events.models import Registration

logger = structlog.get_logger(__name__)

Status = Registration.Status

ALLOWED_TRANSITIONS: dict[str, frozenset[str]] = {
    Status.REGISTERED: frozenset({Status.CHECKED_IN, Status.CANCELLED}),
    Status.CHECKED_IN: frozenset({Status.CANCELLED}),
    Status.CANCELLED: frozenset(),
}


def parse_status(value: str) -> Registration.Status:
    """Map a client supplied value to a status, or raise InvalidStatusError."""
    try:
        return Status(value.strip().lower())
    except ValueError:
        allowed = ", ".join(Status.values)
        raise InvalidStatusError(f"Unknown status '{value}'. Expected one of: {allowed}.") from None


def can_transition(current: str, target: str) -> bool:
    if current == target:
        return current != Status.CANCELLED
    return target in ALLOWED_TRANSITIONS.get(current, frozenset())


def transition(registration: Registration, target: str) -> tuple[Registration, bool]:
    """Move a registration to ``target``.

    Asking for the status the registration already has is a no-op, except for
    cancelled registrations which accept no request at all.

    Returns:
        Tuple of (registration, changed).
    """
    new_status = parse_status(target)
    with transaction.atomic():
        locked = Registration.objects.select_for_update().get(pk=registration.pk)
        if not can_transition(locked.status, new_status):
            raise InvalidStatusTransitionError(f"Cannot change status from '{locked.status}' to '{new_status}'.")
        if locked.status == new_status:
            return locked, False

        update_fields = ["status", "updated_at"]
        locked.status = new_status
        if new_status == Status.CHECKED_IN:
            locked.checked_in_at = timezone.now()
            update_fields.append("checked_in_at")
        elif new_status == Status.CANCELLED:
            locked.cancelled_at = timezone.now()
            update_fields.append("cancelled_at")
        locked.save(update_fields=update_fields)

    logger.info(
        "registration_status_changed",
        registration_id=str(locked.pk),
        pass_id=locked.pass_id,
        status=new_status.value,
    )
    return locked, True
