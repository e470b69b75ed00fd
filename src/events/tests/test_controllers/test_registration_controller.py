import typing as t
from unittest import mock
from unittest.mock import MagicMock
from uuid import uuid4

import orjson
import pytest
from django.test.client import Client
from django.urls import reverse

from conftest import EventFactory, RegistrationPayloadFactory
from events.exceptions import TransientStoreError
from events.models import Event, Registration
from events.service import admission_service

pytestmark = pytest.mark.django_db


def _body(event: Event, **kwargs: t.Any) -> bytes:
    data: dict[str, t.Any] = {
        "email": "linus@example.com",
        "first_name": "Linus",
        "last_name": "Torvalds",
        "company": "Kernel Org",
        "event_id": str(event.id),
        "occurrence_ids": [str(o.id) for o in event.occurrences.order_by("start_time")],
    }
    data.update(kwargs)
    return orjson.dumps(data)


class TestCreateRegistration:
    url = reverse("api:create_registration")

    @mock.patch("events.tasks.send_pass_email.apply_async")
    def test_creates_and_queues_email(
        self, mock_apply_async: MagicMock, client: Client, event: Event, django_capture_on_commit_callbacks: t.Any
    ) -> None:
        with django_capture_on_commit_callbacks(execute=True):
            response = client.post(self.url, _body(event), content_type="application/json")

        assert response.status_code == 201, response.content
        data = response.json()
        assert data["pass_id"] == "PASS-1001"
        assert data["status"] == "registered"
        assert data["attendee"]["email"] == "linus@example.com"
        assert data["event"]["id"] == str(event.id)
        assert len(data["occurrences"]) == 2
        mock_apply_async.assert_called_once_with(args=[data["id"]], retry=False)

    def test_resubmission_returns_200(self, client: Client, event: Event) -> None:
        first = client.post(self.url, _body(event), content_type="application/json")
        again = client.post(self.url, _body(event, email="LINUS@example.com"), content_type="application/json")

        assert first.status_code == 201
        assert again.status_code == 200
        assert again.json()["pass_id"] == first.json()["pass_id"]

    def test_full_event(self, client: Client, event_factory: EventFactory) -> None:
        event = event_factory(max_capacity=1)
        client.post(self.url, _body(event, email="first@example.com"), content_type="application/json")

        response = client.post(self.url, _body(event), content_type="application/json")

        assert response.status_code == 409
        assert response.json()["kind"] == "capacity_exceeded"

    def test_foreign_occurrence(self, client: Client, event: Event, event_factory: EventFactory) -> None:
        other = event_factory()
        foreign = [str(o.id) for o in other.occurrences.all()]

        response = client.post(self.url, _body(event, occurrence_ids=foreign), content_type="application/json")

        assert response.status_code == 400
        assert response.json()["kind"] == "validation_error"
        assert not Registration.objects.exists()

    def test_unknown_event(self, client: Client, event: Event) -> None:
        response = client.post(self.url, _body(event, event_id=str(uuid4())), content_type="application/json")

        assert response.status_code == 404

    @pytest.mark.parametrize(
        "override",
        [{"occurrence_ids": []}, {"email": "nope"}, {"first_name": ""}, {"phone": "ask reception"}],
    )
    def test_invalid_payload(self, client: Client, event: Event, override: dict[str, t.Any]) -> None:
        response = client.post(self.url, _body(event, **override), content_type="application/json")

        assert response.status_code == 400
        assert response.json()["kind"] == "validation_error"

    def test_store_contention_is_409(self, client: Client, event: Event) -> None:
        with mock.patch(
            "events.controllers.registrations.admission_service.admit",
            side_effect=TransientStoreError(),
        ):
            response = client.post(self.url, _body(event), content_type="application/json")

        assert response.status_code == 409
        assert response.json()["kind"] == "transient_store_error"


class TestListRegistrations:
    url = reverse("api:list_registrations")

    @pytest.fixture
    def registrations(
        self, event: Event, event_factory: EventFactory, registration_payload: RegistrationPayloadFactory
    ) -> list[Registration]:
        other = event_factory(name="EuroSciPy", location="Basel")
        return [
            admission_service.admit(registration_payload(event, email="ada@example.com", first_name="Ada"))[0],
            admission_service.admit(registration_payload(event, email="bob@example.com", first_name="Bob"))[0],
            admission_service.admit(registration_payload(other, email="cy@example.com", first_name="Cy"))[0],
        ]

    def test_lists_newest_first(self, client: Client, registrations: list[Registration]) -> None:
        response = client.get(self.url)

        assert response.status_code == 200
        data = response.json()
        assert data["count"] == 3
        assert [r["pass_id"] for r in data["results"]] == ["PASS-1003", "PASS-1002", "PASS-1001"]

    def test_filters_and_search(self, client: Client, event: Event, registrations: list[Registration]) -> None:
        by_event = client.get(self.url, {"event_id": str(event.id), "order_by": "attendee_email"}).json()
        by_text = client.get(self.url, {"search": "basel"}).json()

        assert [r["attendee"]["email"] for r in by_event["results"]] == ["ada@example.com", "bob@example.com"]
        assert [r["pass_id"] for r in by_text["results"]] == ["PASS-1003"]

    def test_status_filter(self, client: Client, registrations: list[Registration]) -> None:
        client.patch(
            reverse("api:update_registration_status", kwargs={"registration_id": registrations[1].id}),
            orjson.dumps({"status": "checked-in"}),
            content_type="application/json",
        )

        response = client.get(self.url, {"status": "checked-in"})

        assert [r["pass_id"] for r in response.json()["results"]] == ["PASS-1002"]

    def test_unknown_sort_key(self, client: Client, registrations: list[Registration]) -> None:
        response = client.get(self.url, {"order_by": "shoe_size"})

        assert response.status_code == 400
        assert response.json()["kind"] == "validation_error"


def test_get_registration(client: Client, registration: Registration) -> None:
    response = client.get(reverse("api:get_registration", kwargs={"registration_id": registration.id}))

    assert response.status_code == 200
    assert response.json()["attendee"]["company"] == "Analytical Engines"


class TestUpdateStatus:
    def _patch(self, client: Client, registration: Registration, status: str) -> t.Any:
        return client.patch(
            reverse("api:update_registration_status", kwargs={"registration_id": registration.id}),
            orjson.dumps({"status": status}),
            content_type="application/json",
        )

    def test_check_in_then_cancel(self, client: Client, registration: Registration) -> None:
        checked_in = self._patch(client, registration, "checked-in")
        cancelled = self._patch(client, registration, "cancelled")

        assert checked_in.status_code == 200
        assert checked_in.json()["checked_in_at"] is not None
        assert cancelled.status_code == 200
        assert cancelled.json()["status"] == "cancelled"

    def test_cancelled_is_final(self, client: Client, registration: Registration) -> None:
        self._patch(client, registration, "cancelled")

        response = self._patch(client, registration, "registered")

        assert response.status_code == 400
        assert response.json()["kind"] == "validation_error"

    def test_unknown_status(self, client: Client, registration: Registration) -> None:
        response = self._patch(client, registration, "vip")

        assert response.status_code == 400
        registration.refresh_from_db()
        assert registration.status == Registration.Status.REGISTERED


def test_delete_registration(client: Client, registration: Registration) -> None:
    response = client.delete(reverse("api:delete_registration", kwargs={"registration_id": registration.id}))

    assert response.status_code == 200
    assert not Registration.objects.exists()


@mock.patch("events.tasks.send_pass_email.apply_async")
def test_resend_pass_email(mock_apply_async: MagicMock, client: Client, registration: Registration) -> None:
    response = client.post(reverse("api:resend_pass_email", kwargs={"registration_id": registration.id}))

    assert response.status_code == 200
    mock_apply_async.assert_called_once_with(args=[str(registration.id)], retry=False)


@mock.patch("events.tasks.send_pass_email.apply_async", side_effect=ConnectionError("broker down"))
def test_resend_pass_email_failure(mock_apply_async: MagicMock, client: Client, registration: Registration) -> None:
    response = client.post(reverse("api:resend_pass_email", kwargs={"registration_id": registration.id}))

    assert response.status_code == 503
    assert response.json()["kind"] == "notification_failed"
