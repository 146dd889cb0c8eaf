import threading

import pytest
from fastapi import HTTPException
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from app.database import Base, configure_sqlite
from app.models import Barber, Booking
from app.schemas.booking import BookingCreate
from app.services.booking_service import BookingService
from app.services.working_hours_service import WorkingHoursService
from conftest import at, booking_payload


@pytest.fixture
def file_session_factory(tmp_path):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'race.db'}",
        connect_args={"check_same_thread": False, "timeout": 15},
    )
    configure_sqlite(engine)
    Base.metadata.create_all(bind=engine)
    Session = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    setup = Session()
    WorkingHoursService.seed_defaults(setup)
    setup.add(Barber(name="Alex", phone="0711000001", identity_badge_number="B001"))
    setup.commit()
    setup.close()

    try:
        yield Session
    finally:
        engine.dispose()


def test_concurrent_requests_cannot_double_book(file_session_factory):
    start = threading.Barrier(2)
    results = []
    lock = threading.Lock()

    def book(phone):
        session = file_session_factory()
        try:
            start.wait()
            booking, _ = BookingService.create_booking(
                session, BookingCreate(**booking_payload(customer_phone=phone, preferred_datetime=at(10).isoformat()))
            )
            outcome = ("booked", booking.barber_name)
        except HTTPException as e:
            outcome = (e.status_code, e.detail["error"])
        finally:
            session.close()
        with lock:
            results.append(outcome)

    threads = [threading.Thread(target=book, args=(phone,)) for phone in ("0722000001", "0722000002")]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=30)

    assert sorted(results, key=str) == sorted([("booked", "Alex"), (409, "ALL_BARBERS_BUSY")], key=str)

    check = file_session_factory()
    try:
        assert check.query(Booking).count() == 1
    finally:
        check.close()
