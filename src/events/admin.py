# src/events/admin.py

import typing as t

from django.contrib import admin, messages
from django.db.models import QuerySet
from django.http import HttpRequest
from django.urls import reverse
from django.utils.html import format_html
from unfold.admin import ModelAdmin, TabularInline

from . import models
from .exceptions import InvalidStatusTransitionError
from .service import registration_status


class EventLinkMixin:
    """Mixin to add a link to an event."""

    def event_link(self, obj: t.Any) -> str | None:
        if not getattr(obj, "event", None):
            return None
        url = reverse("admin:events_event_change", args=[obj.event.id])
        return format_html('<a href="{}">{}</a>', url, obj.event.name)

    event_link.short_description = "Event"  # type: ignore[attr-defined]


class AttendeeLinkMixin:
    """Mixin to add a link to an attendee."""

    def attendee_link(self, obj: t.Any) -> str | None:
        if not getattr(obj, "attendee", None):
            return None
        url = reverse("admin:events_attendee_change", args=[obj.attendee.id])
        return format_html('<a href="{}">{}</a>', url, obj.attendee.email)

    attendee_link.short_description = "Attendee"  # type: ignore[attr-defined]


class OccurrenceInline(TabularInline):  # type: ignore[misc]
    """Read-only: schedules are edited through the API so they get reconciled."""

    model = models.Occurrence
    extra = 0
    can_delete = False
    fields = ["start_time", "end_time", "location"]
    readonly_fields = ["start_time", "end_time", "location"]
    ordering = ["start_time"]

    def has_add_permission(self, request: HttpRequest, obj: t.Any = None) -> bool:
        return False


@admin.register(models.Event)
class EventAdmin(ModelAdmin):  # type: ignore[misc]
    list_display = ["name", "location", "max_capacity", "registration_count", "created_at"]
    search_fields = ["name", "description", "location"]
    readonly_fields = ["id", "created_at", "updated_at"]
    inlines = [OccurrenceInline]
    ordering = ["-created_at"]

    def get_queryset(self, request: HttpRequest) -> QuerySet[models.Event]:
        return super().get_queryset(request).with_registration_count()  # type: ignore[no-any-return]

    @admin.display(description="Registrations", ordering="registration_count")
    def registration_count(self, obj: models.Event) -> int:
        return obj.registration_count  # type: ignore[attr-defined,no-any-return]


@admin.register(models.Attendee)
class AttendeeAdmin(ModelAdmin):  # type: ignore[misc]
    list_display = ["email", "first_name", "last_name", "company", "created_at"]
    search_fields = ["email", "first_name", "last_name", "company"]
    readonly_fields = ["id", "created_at", "updated_at"]


class RegistrationOccurrenceInline(TabularInline):  # type: ignore[misc]
    model = models.RegistrationOccurrence
    extra = 0
    can_delete = False
    fields = ["occurrence", "created_at"]
    readonly_fields = ["occurrence", "created_at"]

    def has_add_permission(self, request: HttpRequest, obj: t.Any = None) -> bool:
        return False


@admin.register(models.Registration)
class RegistrationAdmin(EventLinkMixin, AttendeeLinkMixin, ModelAdmin):  # type: ignore[misc]
    list_display = ["pass_id", "attendee_link", "event_link", "status", "created_at"]
    list_filter = ["status", "event"]
    search_fields = ["pass_id", "attendee__email", "attendee__first_name", "attendee__last_name", "event__name"]
    list_select_related = ["attendee", "event"]
    readonly_fields = [
        "id",
        "event",
        "attendee",
        "pass_id",
        "pass_number",
        "status",
        "checked_in_at",
        "cancelled_at",
        "created_at",
        "updated_at",
    ]
    inlines = [RegistrationOccurrenceInline]
    actions = ["check_in", "cancel"]
    ordering = ["-created_at"]

    def has_add_permission(self, request: HttpRequest) -> bool:
        return False

    def _transition(self, request: HttpRequest, queryset: QuerySet[models.Registration], target: str) -> None:
        changed = 0
        for registration in queryset:
            try:
                _, did_change = registration_status.transition(registration, target)
            except InvalidStatusTransitionError as e:
                self.message_user(request, f"{registration.pass_id}: {e.detail}", level=messages.WARNING)
                continue
            changed += int(did_change)
        self.message_user(request, f"{changed} registration(s) updated.", level=messages.SUCCESS)

    @admin.action(description="Check in selected registrations")
    def check_in(self, request: HttpRequest, queryset: QuerySet[models.Registration]) -> None:
        self._transition(request, queryset, models.Registration.Status.CHECKED_IN)

    @admin.action(description="Cancel selected registrations")
    def cancel(self, request: HttpRequest, queryset: QuerySet[models.Registration]) -> None:
        self._transition(request, queryset, models.Registration.Status.CANCELLED)
