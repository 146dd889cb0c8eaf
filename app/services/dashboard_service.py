from sqlalchemy import func, case
from sqlalchemy.orm import Session
from typing import Optional
from datetime import datetime

from app.models.barber import Barber
from app.models.booking import Booking, BookingStatus
from app.services.booking_service import BookingService
from app.services.payment_service import PaymentService
from app.utils.timeutils import day_bounds, local_now


class DashboardService:
    @staticmethod
    def overview(db: Session, now: Optional[datetime] = None) -> dict:
        now = now or local_now()
        start, end = day_bounds(now.date())

        todays = db.query(Booking).filter(
            Booking.preferred_datetime >= start,
            Booking.preferred_datetime < end,
        ).order_by(Booking.preferred_datetime.asc()).all()

        per_barber = db.query(
            Barber.id,
            Barber.name,
            Barber.is_active,
            Barber.is_blocked,
            func.count(Booking.id),
            func.sum(case((Booking.status == BookingStatus.COMPLETED, 1), else_=0)),
            func.sum(case((Booking.status == BookingStatus.COMPLETED, Booking.service_price), else_=0)),
        ).outerjoin(Booking, Booking.barber_id == Barber.id).group_by(
            Barber.id, Barber.name, Barber.is_active, Barber.is_blocked
        ).order_by(Barber.name.asc()).all()

        return {
            "generated_at": now,
            "bookings": BookingService.stats(db),
            "payments": PaymentService.stats(db),
            "todays_bookings": todays,
            "barbers": [
                {
                    "id": row[0],
                    "name": row[1],
                    "is_active": row[2],
                    "is_blocked": row[3],
                    "total_bookings": row[4] or 0,
                    "completed_bookings": row[5] or 0,
                    "revenue": float(row[6] or 0),
                }
                for row in per_barber
            ],
        }
