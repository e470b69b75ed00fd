import pytest

from conftest import RegistrationPayloadFactory
from events.models import Event, Registration
from events.service import admission_service


@pytest.fixture
def registration(event: Event, registration_payload: RegistrationPayloadFactory) -> Registration:
    """A fresh registration for the first session of ``event``."""
    payload = registration_payload(
        event, email="ada@example.com", first_name="Ada", last_name="Lovelace", company="Analytical Engines"
    )
    registration, _ = admission_service.admit(payload)
    return registration
