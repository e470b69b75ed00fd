"""Pass id allocation.

Every pass number comes from a ``PassCounter`` row that is incremented with a
single ``UPDATE ... SET last_value = last_value + 1``. The row stays locked until
the surrounding transaction ends, so two admissions can never read the same
value, and numbers stay dense as long as admissions commit.
"""

from django.conf import settings
from django.db import transaction
from django.db.models import F, Max, Q

from common.utils import get_or_create_with_race_protection
from events.models import PassCounter, Registration


def format_pass_id(number: int, prefix: str | None = None) -> str:
    """Build the human-readable pass id, e.g. ``PASS-1001``."""
    return f"{settings.PASS_ID_PREFIX if prefix is None else prefix}{number}"


def _initial_value() -> int:
    # pass numbers are unique across prefixes, so seed past anything already issued or reserved
    issued = Registration.objects.aggregate(highest=Max("pass_number"))["highest"] or 0
    reserved = PassCounter.objects.aggregate(highest=Max("last_value"))["highest"] or 0
    return max(settings.PASS_NUMBER_START - 1, issued, reserved)


@transaction.atomic
def allocate(prefix: str | None = None) -> tuple[str, int]:
    """Reserve the next pass number for ``prefix``.

    Call this inside the transaction that inserts the registration: if that
    transaction rolls back, so does the reservation.

    Returns:
        Tuple of (pass_id, pass_number).
    """
    prefix = settings.PASS_ID_PREFIX if prefix is None else prefix
    get_or_create_with_race_protection(
        PassCounter,
        Q(prefix=prefix),
        {"prefix": prefix, "last_value": _initial_value()},
    )
    PassCounter.objects.filter(pk=prefix).update(last_value=F("last_value") + 1)
    number = PassCounter.objects.values_list("last_value", flat=True).get(pk=prefix)
    return format_pass_id(number, prefix), number
