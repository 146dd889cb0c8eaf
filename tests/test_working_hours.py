from datetime import date, timedelta

import pytest

from app.core.exceptions import NotFoundError, ValidationError
from app.schemas.working_hours import WorkingHoursUpdate
from app.services.working_hours_service import WorkingHoursService
from app.utils.timeutils import js_weekday
from conftest import MONDAY, at


def test_js_weekday_numbering():
    assert js_weekday(MONDAY) == 1
    assert js_weekday(MONDAY - timedelta(days=1)) == 0
    assert js_weekday(MONDAY + timedelta(days=5)) == 6


def test_default_week_is_seeded(db):
    rows = WorkingHoursService.get_working_hours(db)
    assert [row.day_of_week for row in rows] == list(range(7))
    assert rows[0].is_open is False
    assert (rows[6].open_time, rows[6].close_time) == ("08:00", "16:00")


def test_open_and_close_times_are_inclusive(db):
    assert WorkingHoursService.is_within_working_hours(db, at(8))["is_open"]
    assert WorkingHoursService.is_within_working_hours(db, at(18))["is_open"]

    early = WorkingHoursService.is_within_working_hours(db, at(7, 59))
    assert not early["is_open"]
    assert early["reason"] == "We open at 08:00 on Monday"
    assert early["next_open"]["date"] == at(8)

    late = WorkingHoursService.is_within_working_hours(db, at(18, 1))
    assert not late["is_open"]
    assert late["next_open"]["date"] == at(8, day=MONDAY + timedelta(days=1))


def test_closed_day_points_to_next_opening(db):
    sunday = MONDAY - timedelta(days=1)
    result = WorkingHoursService.is_within_working_hours(db, at(12, day=sunday))
    assert not result["is_open"]
    assert result["reason"] == "We are closed on Sunday"
    assert result["next_open"] == {"date": at(8), "day": "Monday", "time": "08:00"}


def test_next_open_is_none_when_always_closed(db):
    for day in range(7):
        WorkingHoursService.update_working_hours(db, day, WorkingHoursUpdate(is_open=False))
    assert WorkingHoursService.next_open_time(db, at(9)) is None


def test_time_slots(db):
    slots = WorkingHoursService.available_time_slots(db, date(2030, 1, 12), 60)
    assert [slot["time_string"] for slot in slots] == [f"{h:02d}:00" for h in range(8, 16)]
    assert WorkingHoursService.available_time_slots(db, date(2030, 1, 6)) == []

    with pytest.raises(ValidationError):
        WorkingHoursService.available_time_slots(db, date(2030, 1, 12), 0)


def test_update_normalises_and_validates(db):
    monday = WorkingHoursService.update_working_hours(
        db, 1, WorkingHoursUpdate(is_open=True, open_time="9:00", close_time="17:30", notes="Short day")
    )
    assert (monday.open_time, monday.close_time, monday.notes) == ("09:00", "17:30", "Short day")

    with pytest.raises(ValidationError):
        WorkingHoursService.update_working_hours(db, 1, WorkingHoursUpdate(is_open=True, open_time="17:00", close_time="09:00"))

    with pytest.raises(NotFoundError):
        WorkingHoursService.update_working_hours(db, 9, WorkingHoursUpdate(is_open=False))


def test_working_hours_routes(client, admin_headers):
    assert len(client.get("/api/working-hours/").json()) == 7

    check = client.post("/api/working-hours/check", json={"datetime": at(20).isoformat()})
    assert check.status_code == 200
    assert check.json()["is_open"] is False

    slots = client.get("/api/working-hours/slots/2030-01-07", params={"duration": 120})
    assert slots.json()["count"] == 5

    update = client.put("/api/working-hours/0", json={"is_open": True, "open_time": "10:00", "close_time": "14:00"})
    assert update.status_code == 401

    update = client.put(
        "/api/working-hours/0",
        json={"is_open": True, "open_time": "10:00", "close_time": "14:00"},
        headers=admin_headers,
    )
    assert update.status_code == 200
    assert update.json()["is_open"] is True

    bad = client.put("/api/working-hours/0", json={"is_open": True, "open_time": "25:00", "close_time": "14:00"},
                     headers=admin_headers)
    assert bad.status_code == 400


def test_summary(client):
    response = client.get("/api/working-hours/summary")
    assert response.status_code == 200
    body = response.json()
    assert len(body["weekly"]) == 7
    assert body["weekly"][0] == {"day": "Sunday", "is_open": False, "hours": "Closed"}
