import logging
from sqlalchemy import func, case, or_
from sqlalchemy.orm import Session
from typing import Optional, List
from datetime import datetime, timedelta

from app.core.exceptions import InvalidStateError, NotFoundError, ValidationError
from app.models.barber import Barber, BlockType, Blocked, Unblocked, Temporary, Permanent
from app.models.booking import Booking, BookingStatus
from app.schemas.barber import BarberCreate, BarberUpdate, BarberBlockRequest
from app.utils.timeutils import local_now

logger = logging.getLogger(__name__)


class BarberService:
    @staticmethod
    def get_all_barbers(db: Session) -> List[Barber]:
        return db.query(Barber).order_by(Barber.name.asc()).all()

    @staticmethod
    def get_barber_by_id(db: Session, barber_id: int) -> Barber:
        barber = db.query(Barber).filter(Barber.id == barber_id).first()
        if not barber:
            raise NotFoundError("Barber not found")
        return barber

    @staticmethod
    def _ensure_unique(db: Session, phone: str, badge: str, exclude_id: Optional[int] = None):
        query = db.query(Barber.id).filter(
            or_(Barber.phone == phone, Barber.identity_badge_number == badge)
        )
        if exclude_id is not None:
            query = query.filter(Barber.id != exclude_id)
        if query.first():
            raise ValidationError(
                "Phone number or identity badge number already exists", error="DUPLICATE_BARBER"
            )

    @staticmethod
    def create_barber(db: Session, barber_data: BarberCreate) -> Barber:
        BarberService._ensure_unique(db, barber_data.phone, barber_data.identity_badge_number)

        barber = Barber(**barber_data.model_dump())
        db.add(barber)
        db.commit()
        db.refresh(barber)
        logger.info("Barber %s added (badge %s)", barber.name, barber.identity_badge_number)
        return barber

    @staticmethod
    def update_barber(db: Session, barber_id: int, barber_data: BarberUpdate) -> Barber:
        barber = BarberService.get_barber_by_id(db, barber_id)
        update_data = barber_data.model_dump(exclude_unset=True)

        phone = update_data.get("phone") or barber.phone
        badge = update_data.get("identity_badge_number") or barber.identity_badge_number
        BarberService._ensure_unique(db, phone, badge, exclude_id=barber.id)

        # Bookings keep the barber name/phone they were made with
        for field, value in update_data.items():
            if value is None and field in ("name", "phone", "identity_badge_number", "is_active"):
                continue
            setattr(barber, field, value)

        db.commit()
        db.refresh(barber)
        return barber

    @staticmethod
    def delete_barber(db: Session, barber_id: int):
        barber = BarberService.get_barber_by_id(db, barber_id)

        active = db.query(Booking.id).filter(
            Booking.barber_id == barber.id,
            Booking.status.in_([BookingStatus.PENDING, BookingStatus.IN_PROGRESS]),
        ).first()
        if active:
            raise InvalidStateError("Cannot delete barber with active bookings")

        # historical bookings keep their denormalized barber fields
        db.query(Booking).filter(Booking.barber_id == barber.id).update(
            {Booking.barber_id: None}, synchronize_session=False
        )
        db.delete(barber)
        db.commit()
        logger.info("Barber %s (ID: %s) deleted", barber.name, barber_id)

    @staticmethod
    def get_stats(db: Session, barber_id: int) -> dict:
        barber = BarberService.get_barber_by_id(db, barber_id)
        row = db.query(
            func.count(Booking.id),
            func.sum(case((Booking.status == BookingStatus.COMPLETED, 1), else_=0)),
            func.sum(case((Booking.status == BookingStatus.PENDING, 1), else_=0)),
            func.sum(case((Booking.status == BookingStatus.COMPLETED, Booking.service_price), else_=0)),
        ).filter(Booking.barber_id == barber.id).one()

        return {
            "barber_id": barber.id,
            "name": barber.name,
            "total_services": barber.total_services,
            "total_earnings": barber.total_earnings,
            "total_bookings": row[0] or 0,
            "completed_bookings": row[1] or 0,
            "pending_bookings": row[2] or 0,
            "total_revenue": float(row[3] or 0),
        }

    @staticmethod
    def block_barber(db: Session, barber_id: int, data: BarberBlockRequest, now: Optional[datetime] = None) -> Barber:
        """Block a barber from new bookings.

        A temporary block's expiry is fixed here, once, as ``now + duration``.
        """
        now = now or local_now()

        if not data.block_reason or not data.block_reason.strip():
            raise ValidationError("Block reason is required", error="BLOCK_REASON_REQUIRED")

        temporary = data.block_type.value == BlockType.TEMPORARY.value
        if temporary and (data.block_duration_hours is None or data.block_duration_hours <= 0):
            raise ValidationError(
                "Block duration is required for temporary blocks", error="BLOCK_DURATION_REQUIRED"
            )

        barber = db.query(Barber).filter(Barber.id == barber_id).with_for_update().first()
        if not barber:
            raise NotFoundError("Barber not found")

        if barber.is_blocked:
            raise InvalidStateError("Barber is already blocked")

        if temporary:
            kind = Temporary(expires_at=now + timedelta(hours=data.block_duration_hours))
        else:
            kind = Permanent()

        barber.apply_block_state(Blocked(
            reason=data.block_reason.strip(),
            kind=kind,
            blocked_at=now,
            blocked_by=data.blocked_by,
            duration_hours=data.block_duration_hours if temporary else None,
            category=data.block_category,
            severity=data.block_severity,
        ))
        barber.block_warning_count = (barber.block_warning_count or 0) + 1

        db.commit()
        db.refresh(barber)
        logger.info(
            "Barber %s (ID: %s) %s: %s",
            barber.name, barber.id,
            f"blocked until {barber.block_expires_at}" if temporary else "permanently blocked",
            barber.block_reason,
        )
        return barber

    @staticmethod
    def unblock_barber(db: Session, barber_id: int) -> Barber:
        barber = db.query(Barber).filter(Barber.id == barber_id).with_for_update().first()
        if not barber:
            raise NotFoundError("Barber not found")

        if not barber.is_blocked:
            raise InvalidStateError("Barber is not blocked")

        barber.apply_block_state(Unblocked())
        db.commit()
        db.refresh(barber)
        logger.info("Barber %s (ID: %s) unblocked", barber.name, barber.id)
        return barber

    @staticmethod
    def unblock_expired(db: Session, now: Optional[datetime] = None) -> List[Barber]:
        """Lift every temporary block whose expiry is at or before ``now``."""
        now = now or local_now()
        try:
            expired = db.query(Barber).filter(
                Barber.is_blocked == True,
                Barber.block_type == BlockType.TEMPORARY,
                Barber.block_expires_at.isnot(None),
                Barber.block_expires_at <= now,
            ).with_for_update().all()

            for barber in expired:
                barber.apply_block_state(Unblocked())

            db.commit()
            for barber in expired:
                db.refresh(barber)
        except Exception:
            db.rollback()
            raise

        if expired:
            logger.info("Auto-unblocked %d expired temporary block(s): %s",
                        len(expired), ", ".join(b.name for b in expired))
        return expired
