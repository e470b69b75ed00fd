import typing as t

import orjson
import pytest
from django.test.client import Client
from django.urls import reverse

from events.models import Registration
from events.service import registration_status

pytestmark = pytest.mark.django_db


@pytest.fixture(autouse=True)
def low_dpi(settings: t.Any) -> None:
    settings.BADGE_DPI = 72


def test_get_pass_is_public_subset(client: Client, registration: Registration) -> None:
    response = client.get(reverse("api:get_pass", kwargs={"pass_id": "pass-1001"}))

    assert response.status_code == 200
    data = response.json()
    assert data["pass_id"] == "PASS-1001"
    assert data["full_name"] == "Ada Lovelace"
    assert data["company"] == "Analytical Engines"
    assert data["event"]["name"] == "PyCon Vienna"
    assert len(data["occurrences"]) == 1
    assert "attendee" not in data
    assert "email" not in orjson.dumps(data).decode()


def test_get_unknown_pass(client: Client) -> None:
    response = client.get(reverse("api:get_pass", kwargs={"pass_id": "PASS-4242"}))

    assert response.status_code == 404
    assert response.json()["kind"] == "not_found"


def test_get_badge(client: Client, registration: Registration) -> None:
    response = client.get(reverse("api:get_badge", kwargs={"pass_id": registration.pass_id}))

    assert response.status_code == 200
    assert response["Content-Type"] == "application/pdf"
    assert response["Content-Disposition"] == 'inline; filename="PASS-1001.pdf"'
    assert response.content.startswith(b"%PDF")


def test_get_badge_for_unknown_pass(client: Client) -> None:
    response = client.get(reverse("api:get_badge", kwargs={"pass_id": "PASS-4242"}))

    assert response.status_code == 404


class TestCheckIn:
    url = reverse("api:check_in")

    def _check_in(self, client: Client, query: str) -> t.Any:
        return client.post(self.url, orjson.dumps({"query": query}), content_type="application/json")

    def test_resolve_does_not_check_in(self, client: Client, registration: Registration) -> None:
        response = client.get(reverse("api:resolve_pass"), {"q": " 1001 "})

        assert response.status_code == 200
        assert response.json()["pass_id"] == "PASS-1001"
        registration.refresh_from_db()
        assert registration.status == Registration.Status.REGISTERED

    def test_check_in_by_scanned_id(self, client: Client, registration: Registration) -> None:
        response = self._check_in(client, "pass–1001")

        assert response.status_code == 200
        data = response.json()
        assert data["checked_in"] is True
        assert data["registration"]["status"] == "checked-in"
        assert data["registration"]["checked_in_at"] is not None

    def test_second_check_in_reports_no_change(self, client: Client, registration: Registration) -> None:
        first = self._check_in(client, "PASS-1001").json()

        response = self._check_in(client, "PASS-1001")

        assert response.status_code == 200
        assert response.json()["checked_in"] is False
        assert response.json()["registration"]["checked_in_at"] == first["registration"]["checked_in_at"]

    def test_cancelled_pass_is_rejected(self, client: Client, registration: Registration) -> None:
        registration_status.transition(registration, Registration.Status.CANCELLED)

        response = self._check_in(client, "PASS-1001")

        assert response.status_code == 400
        assert response.json()["kind"] == "validation_error"

    def test_unknown_pass(self, client: Client, registration: Registration) -> None:
        response = self._check_in(client, "PASS-9999")

        assert response.status_code == 404

    def test_blank_query(self, client: Client) -> None:
        response = self._check_in(client, "   ")

        assert response.status_code == 400
