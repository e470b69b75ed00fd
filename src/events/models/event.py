import typing as t

from django.core.exceptions import ValidationError as DjangoValidationError
from django.core.validators import MinValueValidator, RegexValidator
from django.db import models
from django.db.models import Count

from common.models import TimeStampedModel

phone_validator = RegexValidator(r"^[0-9\s\-\+()]+$", "Invalid phone number format.")


class EventQuerySet(models.QuerySet["Event"]):
    def with_registration_count(self) -> t.Self:
        """Annotate each event with its live registration count."""
        return self.annotate(registration_count=Count("registrations", distinct=True))

    def with_occurrences(self) -> t.Self:
        """Prefetch occurrences ordered by start time."""
        return self.prefetch_related(
            models.Prefetch("occurrences", queryset=Occurrence.objects.order_by("start_time"))
        )


class Event(TimeStampedModel):
    name = models.CharField(max_length=255, db_index=True)
    description = models.TextField()
    location = models.CharField(max_length=255)
    google_maps_link = models.URLField(max_length=500, blank=True, default="")
    contact_email = models.EmailField()
    contact_phone = models.CharField(max_length=32, validators=[phone_validator])
    max_capacity = models.PositiveIntegerField(
        null=True,
        blank=True,
        validators=[MinValueValidator(1)],
        help_text="Upper bound on registrations. Leave empty for unlimited.",
    )

    objects = EventQuerySet.as_manager()

    class Meta:
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return self.name


class Occurrence(TimeStampedModel):
    """One scheduled session of an event.

    Rows are written only by the schedule service, which validates the
    per-event start time uniqueness before touching the table.
    """

    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="occurrences")
    start_time = models.DateTimeField(db_index=True)
    end_time = models.DateTimeField(null=True, blank=True)
    location = models.CharField(max_length=255, null=True, blank=True)

    class Meta:
        ordering = ["start_time"]
        constraints = [
            # deferred so a schedule edit can swap two start times inside one transaction
            models.UniqueConstraint(
                fields=["event", "start_time"],
                name="unique_event_occurrence_start",
                deferrable=models.Deferrable.DEFERRED,
            ),
        ]

    def clean(self) -> None:
        """An occurrence cannot end before it starts."""
        if self.end_time and self.end_time < self.start_time:
            raise DjangoValidationError({"end_time": ["Occurrence end time cannot be before start time."]})

    def __str__(self) -> str:
        return f"{self.event_id} @ {self.start_time.isoformat()}"
