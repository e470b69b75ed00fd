import typing as t

from django.db import models

from common.models import TimeStampedModel

from .event import phone_validator


class Attendee(TimeStampedModel):
    """A person who registers for events, keyed by email."""

    # fields a later registration may fill in when they are still empty
    MERGEABLE_FIELDS = ("first_name", "last_name", "phone", "company")

    email = models.EmailField(unique=True)
    first_name = models.CharField(max_length=150, blank=True, default="")
    last_name = models.CharField(max_length=150, blank=True, default="")
    phone = models.CharField(max_length=32, blank=True, default="", validators=[phone_validator])
    company = models.CharField(max_length=255, blank=True, default="")

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def save(self, *args: t.Any, **kwargs: t.Any) -> None:
        """Store emails lowercased so the natural key is case-insensitive."""
        self.email = self.email.strip().lower()
        super().save(*args, **kwargs)

    def __str__(self) -> str:
        return self.email
