import typing as t

from django.db import IntegrityError, models, transaction

T = t.TypeVar("T", bound=models.Model)


def get_or_create_with_race_protection(
    model: type[T],
    lookup_filter: models.Q,
    defaults: dict[str, t.Any],
) -> tuple[T, bool]:
    """Get or create a model instance with protection against race conditions.

    Attempts to retrieve an instance matching the lookup filter. If not found,
    creates one using the defaults. Handles IntegrityError from race conditions
    by retrying the lookup.

    Args:
        model: The Django model class
        lookup_filter: Q object for filtering the lookup
        defaults: Dictionary of field values for creating the instance

    Returns:
        Tuple of (instance, created) where created is True if the instance was created

    Example:
        attendee, created = get_or_create_with_race_protection(
            Attendee,
            Q(email__iexact="ada@example.com"),
            {"email": "ada@example.com", "first_name": "Ada"}
        )
    """
    manager: models.Manager[T] = getattr(model, "objects")
    instance = manager.filter(lookup_filter).first()
    if instance:
        return instance, False

    try:
        # savepoint so a losing insert does not poison an enclosing transaction
        with transaction.atomic():
            return manager.create(**defaults), True
    except IntegrityError:
        # Race condition: another request created it between our check and create
        instance = manager.filter(lookup_filter).first()
        if not instance:
            raise
        return instance, False
