import typing as t

from django.db import models
from django.db.models import Q

from common.models import TimeStampedModel

from .attendee import Attendee
from .event import Event, Occurrence


class RegistrationQuerySet(models.QuerySet["Registration"]):
    def full(self) -> t.Self:
        """Select everything the API serializes for a registration."""
        return self.select_related("attendee", "event").prefetch_related(
            models.Prefetch(
                "selections",
                queryset=RegistrationOccurrence.objects.select_related("occurrence").order_by(
                    "occurrence__start_time"
                ),
            )
        )

    def search(self, text: str) -> t.Self:
        """Case-insensitive free-text match over attendee, pass, event and session fields."""
        text = text.strip()
        if not text:
            return self
        q = (
            Q(attendee__first_name__icontains=text)
            | Q(attendee__last_name__icontains=text)
            | Q(attendee__email__icontains=text)
            | Q(attendee__company__icontains=text)
            | Q(pass_id__icontains=text)
            | Q(event__name__icontains=text)
            | Q(event__location__icontains=text)
            | Q(selections__occurrence__location__icontains=text)
        )
        return self.filter(q).distinct()


class Registration(TimeStampedModel):
    class Status(models.TextChoices):
        REGISTERED = "registered", "Registered"
        CHECKED_IN = "checked-in", "Checked In"
        CANCELLED = "cancelled", "Cancelled"

    event = models.ForeignKey(Event, on_delete=models.CASCADE, related_name="registrations")
    attendee = models.ForeignKey(Attendee, on_delete=models.CASCADE, related_name="registrations")
    pass_id = models.CharField(max_length=64, unique=True)
    pass_number = models.PositiveBigIntegerField(unique=True)
    # only registration_status.transition writes this field after creation
    status = models.CharField(max_length=20, choices=Status.choices, default=Status.REGISTERED, db_index=True)
    checked_in_at = models.DateTimeField(null=True, blank=True, editable=False)
    cancelled_at = models.DateTimeField(null=True, blank=True, editable=False)
    occurrences = models.ManyToManyField(Occurrence, through="RegistrationOccurrence", related_name="registrations")

    objects = RegistrationQuerySet.as_manager()

    class Meta:
        ordering = ["-created_at"]
        constraints = [
            models.UniqueConstraint(fields=["event", "attendee"], name="unique_registration_event_attendee"),
        ]

    @property
    def registered_at(self) -> t.Any:
        return self.created_at

    def __str__(self) -> str:
        return self.pass_id


class RegistrationOccurrence(models.Model):
    """A session picked by a registration."""

    registration = models.ForeignKey(Registration, on_delete=models.CASCADE, related_name="selections")
    # RESTRICT: removing a picked session must go through the schedule service
    occurrence = models.ForeignKey(Occurrence, on_delete=models.RESTRICT, related_name="selections")
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(fields=["registration", "occurrence"], name="unique_registration_occurrence"),
        ]

    def __str__(self) -> str:
        return f"{self.registration_id} -> {self.occurrence_id}"


class PassCounter(models.Model):
    """Monotonic counter backing pass numbers for one pass id prefix."""

    prefix = models.CharField(max_length=32, primary_key=True)
    last_value = models.PositiveBigIntegerField()
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:
        return f"{self.prefix}{self.last_value}"
