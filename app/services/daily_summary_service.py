import logging
from datetime import date, timedelta
from typing import List, Optional

from sqlalchemy import func, case
from sqlalchemy.orm import Session

from app.models.barber import Barber
from app.models.booking import Booking, BookingStatus
from app.services.email import EmailService
from app.utils.timeutils import day_bounds, local_now

logger = logging.getLogger(__name__)


class DailySummaryService:
    @staticmethod
    def summarize(db: Session, barber_id: int, day: date) -> dict:
        """Booking counts and earnings for one barber's appointments on ``day``."""
        start, end = day_bounds(day)
        in_day = (
            Booking.barber_id == barber_id,
            Booking.preferred_datetime >= start,
            Booking.preferred_datetime < end,
        )

        row = db.query(
            func.count(Booking.id),
            func.sum(case((Booking.status == BookingStatus.COMPLETED, 1), else_=0)),
            func.sum(case((Booking.status == BookingStatus.PENDING, 1), else_=0)),
            func.sum(case((Booking.status == BookingStatus.CANCELLED, 1), else_=0)),
            func.sum(case((Booking.status == BookingStatus.COMPLETED, Booking.service_price), else_=0)),
        ).filter(*in_day).one()

        services = [
            name for (name,) in
            db.query(Booking.service_type).filter(*in_day).distinct().order_by(Booking.service_type).all()
        ]

        return {
            "total_bookings": row[0] or 0,
            "completed_bookings": row[1] or 0,
            "pending_bookings": row[2] or 0,
            "cancelled_bookings": row[3] or 0,
            "earnings": float(row[4] or 0),
            "services": services,
        }

    @staticmethod
    def send_all(db: Session, day: Optional[date] = None) -> List[str]:
        """Email every eligible barber their summary for ``day`` (yesterday by default).

        Barbers without an email address or without bookings that day are
        skipped. Returns the names of the barbers who were emailed.
        """
        day = day or (local_now().date() - timedelta(days=1))
        barbers = db.query(Barber).filter(
            Barber.is_active == True,
            Barber.is_blocked == False,
        ).order_by(Barber.name.asc()).all()

        sent = []
        for barber in barbers:
            if not barber.email:
                logger.info("Barber %s has no email address, skipping daily summary", barber.name)
                continue

            summary = DailySummaryService.summarize(db, barber.id, day)
            if not summary["total_bookings"]:
                continue

            if EmailService.send_daily_summary(barber.name, barber.email, day, summary):
                sent.append(barber.name)

        logger.info("Daily summaries for %s sent to %d barber(s)", day, len(sent))
        return sent
