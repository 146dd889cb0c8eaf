import logging
from sqlalchemy import func, case
from sqlalchemy.orm import Session
from fastapi import HTTPException, status
from typing import Optional, List
from datetime import datetime, date

from app.core.config import settings
from app.core.exceptions import ConflictError, InvalidStateError, NotFoundError, ValidationError, booking_summary
from app.models.barber import Barber
from app.models.booking import Booking, BookingStatus, BookingPaymentStatus
from app.schemas.booking import BookingCreate, BookingUpdate, BookingStatusUpdate, BookingCancel
from app.services.scheduling import ConflictScope, active_barbers, find_conflict, select_barber
from app.services.working_hours_service import WorkingHoursService
from app.utils.timeutils import day_bounds, local_now, to_local_naive

logger = logging.getLogger(__name__)


def _ensure_open(db: Session, when: datetime):
    check = WorkingHoursService.is_within_working_hours(db, when)
    if not check["is_open"]:
        raise ValidationError(
            check["reason"],
            error="BOOKING_OUTSIDE_HOURS",
            next_open=check["next_open"]["date"].isoformat() if check["next_open"] else None,
        )


def _ensure_customer_free(db: Session, when: datetime, phone: str, exclude_booking_id: Optional[int] = None):
    existing = find_conflict(
        db, when, ConflictScope.CUSTOMER, customer_phone=phone, exclude_booking_id=exclude_booking_id
    )
    if existing:
        raise ConflictError(
            f"You already have a {existing.service_type} appointment scheduled for "
            f"{existing.preferred_datetime:%Y-%m-%d %H:%M} on the same day. Please cancel your "
            "existing appointment first or choose a different date.",
            error="CUSTOMER_DOUBLE_BOOKING",
            existing_booking=booking_summary(existing),
        )


class BookingService:
    @staticmethod
    def create_booking(db: Session, booking_data: BookingCreate, now: Optional[datetime] = None):
        """Validate, assign a barber and insert a booking in a single transaction.

        The eligible barber rows are locked before any conflict check so two
        concurrent requests cannot both see a free slot and double-book it.
        Returns ``(booking, assignment)``.
        """
        now = now or local_now()
        when = to_local_naive(booking_data.preferred_datetime)

        try:
            _ensure_open(db, when)

            pool = active_barbers(db, lock=True)

            if settings.GLOBAL_SLOT_LOCK:
                taken = find_conflict(db, when, ConflictScope.GLOBAL)
                if taken:
                    raise ConflictError(
                        f"This time slot is not available. Another customer has a {taken.service_type} "
                        f"appointment at {taken.preferred_datetime:%Y-%m-%d %H:%M}. Please choose a different time.",
                        error="TIME_SLOT_CONFLICT",
                        conflicting_booking=booking_summary(taken),
                    )

            _ensure_customer_free(db, when, booking_data.customer_phone)

            assignment = select_barber(
                db, when, pool,
                preferred_name=booking_data.barber_name,
                preferred_phone=booking_data.barber_phone,
                now=now,
            )
            barber = assignment.barber

            booking = Booking(
                customer_name=booking_data.customer_name,
                customer_email=booking_data.customer_email,
                customer_phone=booking_data.customer_phone,
                address=booking_data.address,
                location_notes=booking_data.location_notes,
                preferred_datetime=when,
                service_type=booking_data.service_type,
                service_price=booking_data.service_price,
                barber_id=barber.id,
                barber_name=barber.name,
                barber_phone=barber.phone,
                barber_identity_badge=barber.identity_badge_number,
                status=BookingStatus.PENDING,
                payment_status=BookingPaymentStatus.UNPAID,
                payment_method=booking_data.payment_method,
                mpesa_phone=booking_data.mpesa_phone,
                notes=booking_data.notes,
                created_at=now,
            )

            db.add(booking)
            db.commit()
            db.refresh(booking)
            db.refresh(barber)

            logger.info(
                "Booking #%s created for %s at %s, barber %s (%s)",
                booking.id, booking.customer_name, booking.preferred_datetime, barber.name, assignment.reason.value,
            )
            return booking, assignment

        except HTTPException:
            db.rollback()
            raise
        except Exception as e:
            db.rollback()
            logger.exception("Error creating booking")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Error creating booking: {str(e)}"
            )

    @staticmethod
    def get_booking_by_id(db: Session, booking_id: int) -> Booking:
        booking = db.query(Booking).filter(Booking.id == booking_id).first()
        if not booking:
            raise NotFoundError("Booking not found")
        return booking

    @staticmethod
    def list_bookings(
        db: Session,
        booking_status: Optional[BookingStatus] = None,
        barber: Optional[str] = None,
        on: Optional[date] = None,
        limit: int = 50,
        offset: int = 0,
    ) -> List[Booking]:
        query = db.query(Booking)

        if booking_status:
            query = query.filter(Booking.status == BookingStatus(booking_status.value))

        if barber:
            query = query.filter(Booking.barber_name == barber)

        if on:
            start, end = day_bounds(on)
            query = query.filter(Booking.preferred_datetime >= start, Booking.preferred_datetime < end)

        return query.order_by(Booking.created_at.desc(), Booking.id.desc()).offset(offset).limit(limit).all()

    @staticmethod
    def update_status(db: Session, booking_id: int, data: BookingStatusUpdate) -> Booking:
        booking = BookingService.get_booking_by_id(db, booking_id)

        if data.status == BookingStatus.CANCELLED:
            raise ValidationError("Use the cancel endpoint to cancel a booking", error="USE_CANCEL")

        if booking.is_terminal:
            raise InvalidStateError(f"Booking is already {booking.status.value} and cannot change status")

        new_status = BookingStatus(data.status.value)
        booking.status = new_status
        if data.notes is not None:
            booking.notes = data.notes

        if new_status == BookingStatus.COMPLETED and booking.barber_id:
            barber = db.query(Barber).filter(Barber.id == booking.barber_id).first()
            if barber:
                barber.total_services = (barber.total_services or 0) + 1
                barber.total_earnings = (barber.total_earnings or 0.0) + booking.service_price

        db.commit()
        db.refresh(booking)
        logger.info("Booking #%s status set to %s", booking.id, new_status.value)
        return booking

    @staticmethod
    def cancel_booking(db: Session, booking_id: int, data: BookingCancel, now: Optional[datetime] = None) -> Booking:
        booking = BookingService.get_booking_by_id(db, booking_id)

        if booking.status == BookingStatus.CANCELLED:
            raise InvalidStateError("Booking is already cancelled")
        if booking.status == BookingStatus.COMPLETED:
            raise InvalidStateError("Cannot cancel a completed booking")
        if booking.status == BookingStatus.NO_SHOW:
            raise InvalidStateError("Cannot cancel a booking marked as no-show")

        booking.status = BookingStatus.CANCELLED
        booking.cancellation_reason = data.cancellation_reason
        booking.cancelled_by = data.cancelled_by
        booking.cancelled_at = now or local_now()

        db.commit()
        db.refresh(booking)
        logger.info("Booking #%s cancelled by %s: %s", booking.id, data.cancelled_by, data.cancellation_reason)
        return booking

    @staticmethod
    def update_booking(db: Session, booking_id: int, data: BookingUpdate) -> Booking:
        """Edit booking details; a new time is re-checked against hours and the barber's schedule."""
        try:
            booking = BookingService.get_booking_by_id(db, booking_id)
            updates = data.model_dump(exclude_unset=True, exclude_none=True)
            if not updates:
                raise ValidationError("No valid fields to update", error="EMPTY_UPDATE")

            if booking.is_terminal and "preferred_datetime" in updates:
                raise InvalidStateError(f"Cannot reschedule a {booking.status.value} booking")

            rescheduled = "preferred_datetime" in updates
            if rescheduled:
                updates["preferred_datetime"] = to_local_naive(updates["preferred_datetime"])
            when = updates.get("preferred_datetime", booking.preferred_datetime)
            phone = updates.get("customer_phone", booking.customer_phone)

            if rescheduled:
                _ensure_open(db, when)
                if booking.barber_id:
                    # lock the barber row for the duration of the check
                    db.query(Barber).filter(Barber.id == booking.barber_id).with_for_update().first()

            if not booking.is_terminal and (rescheduled or phone != booking.customer_phone):
                _ensure_customer_free(db, when, phone, exclude_booking_id=booking.id)

            if rescheduled and booking.barber_id:
                clash = find_conflict(
                    db, when, ConflictScope.BARBER,
                    barber_id=booking.barber_id, exclude_booking_id=booking.id,
                )
                if clash:
                    raise ConflictError(
                        f"Barber {booking.barber_name} is not available at this time. They have another "
                        f"appointment at {clash.preferred_datetime:%Y-%m-%d %H:%M}.",
                        error="BARBER_SCHEDULING_CONFLICT",
                        conflicting_booking=booking_summary(clash),
                    )

            for field, value in updates.items():
                setattr(booking, field, value)

            db.commit()
            db.refresh(booking)
            return booking

        except HTTPException:
            db.rollback()
            raise
        except Exception as e:
            db.rollback()
            logger.exception("Error updating booking #%s", booking_id)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Error updating booking: {str(e)}"
            )

    @staticmethod
    def stats(db: Session) -> dict:
        def count_of(booking_status):
            return func.sum(case((Booking.status == booking_status, 1), else_=0))

        row = db.query(
            func.count(Booking.id),
            count_of(BookingStatus.PENDING),
            count_of(BookingStatus.IN_PROGRESS),
            count_of(BookingStatus.COMPLETED),
            count_of(BookingStatus.CANCELLED),
            count_of(BookingStatus.NO_SHOW),
            func.sum(case((Booking.status == BookingStatus.COMPLETED, Booking.service_price), else_=0)),
        ).one()

        return {
            "total_bookings": row[0] or 0,
            "pending_bookings": row[1] or 0,
            "in_progress_bookings": row[2] or 0,
            "completed_bookings": row[3] or 0,
            "cancelled_bookings": row[4] or 0,
            "no_show_bookings": row[5] or 0,
            "total_revenue": float(row[6] or 0),
        }
