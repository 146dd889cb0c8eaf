import logging
from sqlalchemy.orm import Session
from typing import Optional, List
from datetime import datetime, date, time, timedelta

from app.core.exceptions import NotFoundError, ValidationError
from app.models.working_hours import WorkingHours, DEFAULT_WORKING_HOURS
from app.schemas.working_hours import WorkingHoursUpdate
from app.utils.timeutils import js_weekday, local_now

logger = logging.getLogger(__name__)


def _parse_hhmm(value: str) -> time:
    hours, minutes = value.split(":")
    return time(int(hours), int(minutes))


class WorkingHoursService:
    @staticmethod
    def seed_defaults(db: Session):
        """Insert the default week if the table is empty."""
        if db.query(WorkingHours).count():
            return
        for row in DEFAULT_WORKING_HOURS:
            db.add(WorkingHours(**row))
        db.commit()
        logger.info("Inserted default working hours")

    @staticmethod
    def get_working_hours(db: Session) -> List[WorkingHours]:
        return db.query(WorkingHours).order_by(WorkingHours.day_of_week.asc()).all()

    @staticmethod
    def get_day(db: Session, day_of_week: int) -> Optional[WorkingHours]:
        return db.query(WorkingHours).filter(WorkingHours.day_of_week == day_of_week).first()

    @staticmethod
    def is_within_working_hours(db: Session, when: datetime) -> dict:
        day = WorkingHoursService.get_day(db, js_weekday(when))

        if not day or not day.is_open:
            day_name = day.day_name if day else when.strftime("%A")
            return {
                "is_open": False,
                "reason": f"We are closed on {day_name}",
                "next_open": WorkingHoursService.next_open_time(db, when),
            }

        time_string = when.strftime("%H:%M")
        if time_string < day.open_time:
            return {
                "is_open": False,
                "reason": f"We open at {day.open_time} on {day.day_name}",
                "next_open": WorkingHoursService.next_open_time(db, when),
            }

        if time_string > day.close_time:
            return {
                "is_open": False,
                "reason": f"We close at {day.close_time} on {day.day_name}",
                "next_open": WorkingHoursService.next_open_time(db, when),
            }

        return {"is_open": True, "reason": "We are open for business", "next_open": None}

    @staticmethod
    def next_open_time(db: Session, from_dt: datetime) -> Optional[dict]:
        """Next opening moment strictly after ``from_dt`` within the coming week."""
        hours = {row.day_of_week: row for row in WorkingHoursService.get_working_hours(db)}

        for offset in range(8):
            current = from_dt.date() + timedelta(days=offset)
            day = hours.get(js_weekday(current))
            if not day or not day.is_open or not day.open_time:
                continue
            opens_at = datetime.combine(current, _parse_hhmm(day.open_time))
            if opens_at <= from_dt:
                continue
            return {"date": opens_at, "day": day.day_name, "time": day.open_time}

        return None

    @staticmethod
    def available_time_slots(db: Session, on: date, slot_duration: int = 60) -> List[dict]:
        if slot_duration <= 0:
            raise ValidationError("Slot duration must be positive", error="INVALID_DURATION")

        day = WorkingHoursService.get_day(db, js_weekday(on))
        if not day or not day.is_open or not day.open_time or not day.close_time:
            return []

        open_at = datetime.combine(on, _parse_hhmm(day.open_time))
        close_at = datetime.combine(on, _parse_hhmm(day.close_time))
        step = timedelta(minutes=slot_duration)

        slots = []
        current = open_at
        while current + step <= close_at:
            slots.append({"start": current, "end": current + step, "time_string": current.strftime("%H:%M")})
            current += step
        return slots

    @staticmethod
    def update_working_hours(db: Session, day_of_week: int, data: WorkingHoursUpdate) -> WorkingHours:
        day = WorkingHoursService.get_day(db, day_of_week)
        if not day:
            raise NotFoundError(f"No working hours configured for day {day_of_week}")

        if data.is_open:
            if not data.open_time or not data.close_time:
                raise ValidationError("Open days need both open and close times", error="INVALID_HOURS")
            if _parse_hhmm(data.open_time) >= _parse_hhmm(data.close_time):
                raise ValidationError("Close time must be after open time", error="INVALID_HOURS")
            # normalise 8:00 to 08:00 so string comparison of HH:MM stays valid
            day.open_time = _parse_hhmm(data.open_time).strftime("%H:%M")
            day.close_time = _parse_hhmm(data.close_time).strftime("%H:%M")
        else:
            day.open_time = None
            day.close_time = None

        day.is_open = data.is_open
        day.notes = data.notes
        db.commit()
        db.refresh(day)
        logger.info("Working hours updated for %s", day.day_name)
        return day

    @staticmethod
    def summary(db: Session, now: Optional[datetime] = None) -> dict:
        now = now or local_now()
        rows = WorkingHoursService.get_working_hours(db)

        def describe(row):
            return {
                "day": row.day_name,
                "is_open": row.is_open,
                "hours": f"{row.open_time} - {row.close_time}" if row.is_open else "Closed",
            }

        today = next((row for row in rows if row.day_of_week == js_weekday(now)), None)
        return {
            "today": describe(today) if today else None,
            "weekly": [describe(row) for row in rows],
            "next_open": WorkingHoursService.next_open_time(db, now),
        }
