import typing as t
from concurrent.futures import ThreadPoolExecutor

import pytest
from django.db import connection, transaction

from events.models import Attendee, Event, PassCounter, Registration
from events.service import pass_allocator

pytestmark = pytest.mark.django_db


def test_first_pass_uses_configured_start() -> None:
    assert pass_allocator.allocate() == ("PASS-1001", 1001)
    assert PassCounter.objects.get(pk="PASS-").last_value == 1001


def test_allocations_are_dense_and_increasing() -> None:
    numbers = [pass_allocator.allocate()[1] for _ in range(5)]
    assert numbers == [1001, 1002, 1003, 1004, 1005]


def test_custom_start(settings: t.Any) -> None:
    settings.PASS_NUMBER_START = 50
    assert pass_allocator.allocate() == ("PASS-50", 50)


def test_counter_is_seeded_past_existing_passes(event: Event, attendee: Attendee) -> None:
    Registration.objects.create(event=event, attendee=attendee, pass_id="PASS-5000", pass_number=5000)
    assert pass_allocator.allocate() == ("PASS-5001", 5001)


def test_new_prefix_continues_global_numbering() -> None:
    pass_allocator.allocate()
    assert pass_allocator.allocate(prefix="VIP-") == ("VIP-1002", 1002)


def test_rolled_back_reservation_is_handed_out_again() -> None:
    with pytest.raises(RuntimeError):
        with transaction.atomic():
            pass_allocator.allocate()
            raise RuntimeError("insert failed")

    assert pass_allocator.allocate() == ("PASS-1001", 1001)


def test_format_pass_id() -> None:
    assert pass_allocator.format_pass_id(1234) == "PASS-1234"
    assert pass_allocator.format_pass_id(7, prefix="") == "7"


@pytest.mark.django_db(transaction=True)
def test_concurrent_allocations_never_collide() -> None:
    def allocate_in_own_transaction(_: int) -> tuple[str, int]:
        try:
            with transaction.atomic():
                return pass_allocator.allocate()
        finally:
            connection.close()

    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(pool.map(allocate_in_own_transaction, range(24)))

    pass_ids = [pass_id for pass_id, _ in results]
    assert len(set(pass_ids)) == 24
    assert sorted(number for _, number in results) == list(range(1001, 1025))
