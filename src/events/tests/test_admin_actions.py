import typing as t

import pytest
from django.urls import reverse

from events.models import Registration

pytestmark = pytest.mark.django_db


def _run_action(admin_client: t.Any, action: str, registration: Registration) -> t.Any:
    return admin_client.post(
        reverse("admin:events_registration_changelist"),
        {"action": action, "_selected_action": [str(registration.pk)]},
    )


def test_check_in_action(admin_client: t.Any, registration: Registration) -> None:
    response = _run_action(admin_client, "check_in", registration)

    assert response.status_code == 302
    registration.refresh_from_db()
    assert registration.status == Registration.Status.CHECKED_IN


def test_cancel_then_check_in_is_refused(admin_client: t.Any, registration: Registration) -> None:
    _run_action(admin_client, "cancel", registration)

    response = _run_action(admin_client, "check_in", registration)

    assert response.status_code == 302
    registration.refresh_from_db()
    assert registration.status == Registration.Status.CANCELLED
