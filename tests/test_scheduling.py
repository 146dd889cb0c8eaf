from datetime import timedelta

import pytest

from app.core.exceptions import CapacityError, ConflictError
from app.models import Blocked, Booking, BookingStatus, Permanent
from app.schemas.booking import BookingCreate
from app.services.booking_service import BookingService
from app.services.scheduling import (
    AssignmentReason, ConflictScope, active_barbers, find_conflict,
    round_robin_index, select_barber, todays_booking_count,
)
from conftest import MONDAY, at, booking_payload

NOW = at(7)


def book(db, when, phone, now=NOW, **overrides):
    data = BookingCreate(**booking_payload(
        preferred_datetime=when.isoformat(), customer_phone=phone, **overrides
    ))
    return BookingService.create_booking(db, data, now=now)


def add_booking(db, barber, when, status=BookingStatus.PENDING, phone="0799999999", created_at=NOW):
    booking = Booking(
        customer_name="Existing Customer",
        customer_phone=phone,
        address="1 Test Lane, Nairobi",
        preferred_datetime=when,
        service_type="Haircut",
        service_price=1000,
        barber_id=barber.id,
        barber_name=barber.name,
        barber_phone=barber.phone,
        status=status,
        created_at=created_at,
    )
    db.add(booking)
    db.commit()
    return booking


def test_window_overlap_is_symmetric(db, barbers):
    alex = barbers[0]
    add_booking(db, alex, at(10))

    assert find_conflict(db, at(11, 59), ConflictScope.BARBER, barber_id=alex.id) is not None
    assert find_conflict(db, at(8, 1), ConflictScope.BARBER, barber_id=alex.id) is not None
    assert find_conflict(db, at(10), ConflictScope.BARBER, barber_id=alex.id) is not None


def test_window_edges_are_free(db, barbers):
    alex = barbers[0]
    add_booking(db, alex, at(10))

    # windows are half-open, so starts exactly two hours apart do not collide
    assert find_conflict(db, at(12), ConflictScope.BARBER, barber_id=alex.id) is None
    assert find_conflict(db, at(8), ConflictScope.BARBER, barber_id=alex.id) is None


def test_conflict_is_scoped_to_barber(db, barbers):
    alex, brian, _ = barbers
    add_booking(db, alex, at(10))

    assert find_conflict(db, at(10), ConflictScope.BARBER, barber_id=brian.id) is None
    assert find_conflict(db, at(10), ConflictScope.GLOBAL) is not None


def test_terminal_bookings_do_not_hold_slots(db, barbers):
    alex = barbers[0]
    add_booking(db, alex, at(10), status=BookingStatus.CANCELLED)
    add_booking(db, alex, at(10, 30), status=BookingStatus.COMPLETED)
    add_booking(db, alex, at(11), status=BookingStatus.NO_SHOW)

    assert find_conflict(db, at(10), ConflictScope.BARBER, barber_id=alex.id) is None


def test_customer_scope_uses_calendar_day(db, barbers):
    add_booking(db, barbers[0], at(9), phone="0722000001")

    assert find_conflict(db, at(17), ConflictScope.CUSTOMER, customer_phone="0722000001") is not None
    next_day = MONDAY + timedelta(days=1)
    assert find_conflict(db, at(9, day=next_day), ConflictScope.CUSTOMER, customer_phone="0722000001") is None


def test_exclude_booking_from_conflicts(db, barbers):
    existing = add_booking(db, barbers[0], at(10))
    assert find_conflict(
        db, at(10, 30), ConflictScope.BARBER, barber_id=barbers[0].id, exclude_booking_id=existing.id
    ) is None


def test_pool_is_ordered_by_badge_and_skips_ineligible(db, make_barber):
    make_barber("Zed", "0711000009", "B009")
    make_barber("Amos", "0711000005", "B005")
    make_barber("Idle", "0711000006", "B006", is_active=False)
    blocked = make_barber("Blocked", "0711000007", "B007")
    blocked.apply_block_state(Blocked(reason="Late twice", kind=Permanent(), blocked_at=NOW))
    db.commit()

    assert [b.identity_badge_number for b in active_barbers(db)] == ["B005", "B009"]


def test_round_robin_index_wraps():
    assert [round_robin_index(n, 3) for n in range(5)] == [0, 1, 2, 0, 1]


def test_round_robin_rotation_and_fallback(db, barbers):
    first, assignment = book(db, at(10), "0722000001")
    assert assignment.barber.name == "Alex"
    assert assignment.reason == AssignmentReason.ROUND_ROBIN

    second, assignment = book(db, at(14), "0722000002")
    assert assignment.barber.name == "Brian"

    third, assignment = book(db, at(16), "0722000003")
    assert assignment.barber.name == "Chris"

    # fourth booking of the day starts back at Alex, who is busy until 12:00
    fourth, assignment = book(db, at(10, 30), "0722000004")
    assert assignment.barber.name == "Brian"
    assert assignment.reason == AssignmentReason.FALLBACK
    assert assignment.attempts == 2
    assert fourth.barber_name == "Brian"


def test_cancelled_bookings_do_not_advance_rotation(db, barbers):
    add_booking(db, barbers[0], at(15), status=BookingStatus.CANCELLED)
    assert todays_booking_count(db, NOW) == 0

    _, assignment = book(db, at(10), "0722000001")
    assert assignment.barber.name == "Alex"


def test_preferred_barber_is_tried_first(db, barbers):
    _, assignment = book(db, at(10), "0722000001", barber_name="Chris", barber_phone="0711000003")
    assert assignment.barber.name == "Chris"
    assert assignment.reason == AssignmentReason.PREFERRED


def test_unknown_preferred_barber_falls_back_to_rotation(db, barbers):
    _, assignment = book(db, at(10), "0722000001", barber_name="Nobody", barber_phone="0700000000")
    assert assignment.barber.name == "Alex"
    assert assignment.reason == AssignmentReason.ROUND_ROBIN


def test_all_barbers_busy(db, make_barber):
    alex = make_barber("Alex", "0711000001", "B001")
    existing = add_booking(db, alex, at(10))

    with pytest.raises(ConflictError) as exc:
        select_barber(db, at(11), active_barbers(db), now=NOW)

    assert exc.value.status_code == 409
    assert exc.value.detail["error"] == "ALL_BARBERS_BUSY"
    assert exc.value.detail["conflicting_booking"]["id"] == existing.id


def test_empty_pool(db):
    with pytest.raises(CapacityError) as exc:
        select_barber(db, at(10), [], now=NOW)
    assert exc.value.status_code == 503
    assert exc.value.detail["error"] == "NO_BARBERS_AVAILABLE"


def test_back_to_back_bookings_two_hours_apart(db, make_barber):
    make_barber("Alex", "0711000001", "B001")
    book(db, at(10), "0722000001")
    second, assignment = book(db, at(12), "0722000002")
    assert assignment.barber.name == "Alex"
    assert second.preferred_datetime == at(12)
