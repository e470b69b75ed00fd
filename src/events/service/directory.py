"""Registration directory: filtered search and pass id resolution."""

import string
import unicodedata

from django.db.models import QuerySet

from events.exceptions import AmbiguousPassQueryError, InvalidInputError, PassNotFoundError
from events.filters import RegistrationFilterSchema
from events.models import Registration

# public sort key -> ORM ordering
SORT_FIELDS: dict[str, tuple[str, ...]] = {
    "registered_at": ("created_at",),
    "status": ("status",),
    "attendee_name": ("attendee__first_name", "attendee__last_name"),
    "attendee_email": ("attendee__email",),
    "event_name": ("event__name",),
}
DEFAULT_SORT = "-registered_at"

# dashes that unicodedata does not file under Pd
_EXTRA_DASHES = frozenset({"−", "➖", "﹣", "－"})


def ordering_for(sort: str | None) -> list[str]:
    """Translate a public sort key such as ``-event_name`` into ORM ordering.

    Raises:
        InvalidInputError: the key is not in ``SORT_FIELDS``.
    """
    sort = (sort or DEFAULT_SORT).strip()
    descending = sort.startswith("-")
    key = sort.removeprefix("-")
    if key not in SORT_FIELDS:
        raise InvalidInputError(f"Cannot sort by '{key}'. Allowed: {', '.join(sorted(SORT_FIELDS))}.")
    direction = "-" if descending else ""
    return [f"{direction}{field}" for field in SORT_FIELDS[key]] + [f"{direction}pk"]


def search(
    filters: RegistrationFilterSchema | None = None,
    text: str | None = None,
    sort: str | None = None,
) -> QuerySet[Registration]:
    """Registrations matching the structured filters and the free text, in the requested order."""
    qs = Registration.objects.full()
    if filters is not None:
        qs = filters.filter(qs)
    if text:
        qs = qs.search(text)
    return qs.distinct().order_by(*ordering_for(sort))


def normalize_pass_query(value: str) -> str:
    """Canonical form of a typed or scanned pass id.

    Drops invisible format characters, turns every dash into ``-``, casefolds and trims.
    """
    chars: list[str] = []
    for ch in unicodedata.normalize("NFKC", value):
        category = unicodedata.category(ch)
        if category == "Cf":
            continue
        if category == "Pd" or ch in _EXTRA_DASHES:
            chars.append("-")
        else:
            chars.append(ch)
    return "".join(chars).strip().casefold()


def _alphanumeric(value: str) -> str:
    return "".join(ch for ch in value if ch.isalnum())


def get_by_pass_id(pass_id: str) -> Registration:
    """Exact, case-insensitive lookup."""
    registration = Registration.objects.full().filter(pass_id__iexact=pass_id.strip()).first()
    if registration is None:
        raise PassNotFoundError(f"No pass with id '{pass_id}'.")
    return registration


def resolve_pass_id(query: str) -> Registration:
    """Find the registration a typed or scanned pass id refers to.

    Tried in order: exact match after normalization, match ignoring punctuation
    and spacing, then the digits of the query alone (``1001`` finds ``PASS-1001``).

    Raises:
        InvalidInputError: the query is empty after normalization.
        PassNotFoundError: nothing matches.
        AmbiguousPassQueryError: the digits match several passes and none exactly.
    """
    normalized = normalize_pass_query(query)
    if not normalized:
        raise InvalidInputError("Enter a pass id.")
    qs = Registration.objects.full()

    match = qs.filter(pass_id__iexact=normalized).first()
    if match:
        return match

    # the number is some tail of the trailing digit run, as the prefix may hold digits too
    compact = _alphanumeric(normalized)
    tail = compact[len(compact.rstrip(string.digits)) :]
    numbers = {int(tail[i:]) for i in range(len(tail))}
    for registration in qs.filter(pass_number__in=numbers):
        if _alphanumeric(registration.pass_id.casefold()) == compact:
            return registration

    digits = "".join(ch for ch in normalized if ch in string.digits)
    if not digits:
        raise PassNotFoundError(f"No pass matches '{query.strip()}'.")
    numbered = qs.filter(pass_number=int(digits)).first()
    if numbered:
        return numbered
    matches = list(qs.filter(pass_id__contains=digits)[:2])
    if not matches:
        raise PassNotFoundError(f"No pass matches '{query.strip()}'.")
    if len(matches) > 1:
        raise AmbiguousPassQueryError(f"'{query.strip()}' matches more than one pass. Enter the full pass id.")
    return matches[0]
