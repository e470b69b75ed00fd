import pytest

from events.exceptions import InvalidStatusError, InvalidStatusTransitionError
from events.models import Registration
from events.service import registration_status

pytestmark = pytest.mark.django_db

Status = Registration.Status


@pytest.mark.parametrize(
    "current,target,allowed",
    [
        (Status.REGISTERED, Status.CHECKED_IN, True),
        (Status.REGISTERED, Status.CANCELLED, True),
        (Status.REGISTERED, Status.REGISTERED, True),
        (Status.CHECKED_IN, Status.CANCELLED, True),
        (Status.CHECKED_IN, Status.CHECKED_IN, True),
        (Status.CHECKED_IN, Status.REGISTERED, False),
        (Status.CANCELLED, Status.REGISTERED, False),
        (Status.CANCELLED, Status.CHECKED_IN, False),
        (Status.CANCELLED, Status.CANCELLED, False),
    ],
)
def test_can_transition(current: str, target: str, allowed: bool) -> None:
    assert registration_status.can_transition(current, target) is allowed


@pytest.mark.parametrize("value", [" Checked-In ", "CANCELLED", "registered"])
def test_parse_status_is_lenient(value: str) -> None:
    assert registration_status.parse_status(value) in Status.values


def test_parse_status_rejects_unknown_values() -> None:
    with pytest.raises(InvalidStatusError):
        registration_status.parse_status("attended")


def test_check_in_sets_timestamp(registration: Registration) -> None:
    updated, changed = registration_status.transition(registration, "checked-in")

    assert changed is True
    assert updated.status == Status.CHECKED_IN
    assert updated.checked_in_at is not None
    registration.refresh_from_db()
    assert registration.status == Status.CHECKED_IN


def test_repeated_check_in_is_a_no_op(registration: Registration) -> None:
    first, _ = registration_status.transition(registration, Status.CHECKED_IN)

    again, changed = registration_status.transition(registration, Status.CHECKED_IN)

    assert changed is False
    assert again.checked_in_at == first.checked_in_at


def test_cancel_after_check_in_keeps_check_in_time(registration: Registration) -> None:
    checked_in, _ = registration_status.transition(registration, Status.CHECKED_IN)

    cancelled, changed = registration_status.transition(registration, Status.CANCELLED)

    assert changed is True
    assert cancelled.cancelled_at is not None
    assert cancelled.checked_in_at == checked_in.checked_in_at


def test_cancelled_is_terminal(registration: Registration) -> None:
    registration_status.transition(registration, Status.CANCELLED)

    for target in Status.values:
        with pytest.raises(InvalidStatusTransitionError):
            registration_status.transition(registration, target)

    registration.refresh_from_db()
    assert registration.status == Status.CANCELLED


def test_cannot_go_back_to_registered(registration: Registration) -> None:
    registration_status.transition(registration, Status.CHECKED_IN)

    with pytest.raises(InvalidStatusTransitionError):
        registration_status.transition(registration, Status.REGISTERED)


def test_unknown_status_leaves_registration_untouched(registration: Registration) -> None:
    with pytest.raises(InvalidStatusError):
        registration_status.transition(registration, "no-show")

    registration.refresh_from_db()
    assert registration.status == Status.REGISTERED
