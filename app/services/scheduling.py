"""Barber assignment and time-slot conflict detection.

Every booking keeps its barber busy for a protected window of
``SERVICE_DURATION_MINUTES + TRAVEL_BUFFER_MINUTES`` starting at the
requested time. Two bookings collide when their windows overlap, which for
equal-length windows means their start times are less than one window
apart.
"""
import enum
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.exceptions import CapacityError, ConflictError, booking_summary
from app.models.barber import Barber
from app.models.booking import Booking, BookingStatus, TERMINAL_STATUSES
from app.utils.timeutils import day_bounds, local_now

logger = logging.getLogger(__name__)


class ConflictScope(str, enum.Enum):
    GLOBAL = "global"
    CUSTOMER = "customer"
    BARBER = "barber"


class AssignmentReason(str, enum.Enum):
    PREFERRED = "preferred"
    ROUND_ROBIN = "round_robin"
    FALLBACK = "fallback"


@dataclass
class Assignment:
    barber: Barber
    reason: AssignmentReason
    attempts: int


def protected_window() -> timedelta:
    return timedelta(minutes=settings.PROTECTED_WINDOW_MINUTES)


def find_conflict(
    db: Session,
    candidate_time: datetime,
    scope: ConflictScope,
    barber_id: Optional[int] = None,
    customer_phone: Optional[str] = None,
    exclude_booking_id: Optional[int] = None,
) -> Optional[Booking]:
    """Return the first active booking that collides with ``candidate_time``, or None."""
    query = db.query(Booking).filter(Booking.status.notin_(TERMINAL_STATUSES))

    if scope == ConflictScope.CUSTOMER:
        if not customer_phone:
            raise ValueError("customer_phone is required for customer scope")
        start, end = day_bounds(candidate_time.date())
        query = query.filter(
            Booking.customer_phone == customer_phone,
            Booking.preferred_datetime >= start,
            Booking.preferred_datetime < end,
        )
    else:
        window = protected_window()
        query = query.filter(
            Booking.preferred_datetime > candidate_time - window,
            Booking.preferred_datetime < candidate_time + window,
        )
        if scope == ConflictScope.BARBER:
            if barber_id is None:
                raise ValueError("barber_id is required for barber scope")
            query = query.filter(Booking.barber_id == barber_id)

    if exclude_booking_id is not None:
        query = query.filter(Booking.id != exclude_booking_id)

    return query.order_by(Booking.preferred_datetime.asc(), Booking.id.asc()).first()


def active_barbers(db: Session, lock: bool = False) -> List[Barber]:
    """Eligible barbers (active and not blocked) in round-robin order."""
    query = db.query(Barber).filter(
        Barber.is_active == True,
        Barber.is_blocked == False,
    ).order_by(Barber.identity_badge_number.asc(), Barber.id.asc())
    if lock:
        query = query.with_for_update()
    return query.all()


def todays_booking_count(db: Session, now: Optional[datetime] = None) -> int:
    now = now or local_now()
    start, end = day_bounds(now.date())
    return db.query(func.count(Booking.id)).filter(
        Booking.created_at >= start,
        Booking.created_at < end,
        Booking.status != BookingStatus.CANCELLED,
    ).scalar() or 0


def round_robin_index(todays_count: int, pool_size: int) -> int:
    return todays_count % pool_size


def find_preferred(pool: List[Barber], name: Optional[str], phone: Optional[str]) -> Optional[int]:
    if not (name and phone):
        return None
    for index, barber in enumerate(pool):
        if barber.name == name and barber.phone == phone:
            return index
    return None


def select_barber(
    db: Session,
    candidate_time: datetime,
    pool: List[Barber],
    preferred_name: Optional[str] = None,
    preferred_phone: Optional[str] = None,
    now: Optional[datetime] = None,
    exclude_booking_id: Optional[int] = None,
) -> Assignment:
    """Pick the barber for a booking at ``candidate_time``.

    A named, eligible barber is tried first; otherwise the starting point is
    today's booking count modulo the pool size. From there each barber is
    probed in pool order, wrapping around, until one has a free window.
    """
    if not pool:
        raise CapacityError(
            "No barbers available at the moment. Please try again later.",
            error="NO_BARBERS_AVAILABLE",
        )

    start = find_preferred(pool, preferred_name, preferred_phone)
    if start is not None:
        reason = AssignmentReason.PREFERRED
        logger.info("Using customer's preferred barber %s (ID: %s)", pool[start].name, pool[start].id)
    else:
        if preferred_name:
            logger.info("Preferred barber %s not available, auto-assigning", preferred_name)
        todays_count = todays_booking_count(db, now)
        start = round_robin_index(todays_count, len(pool))
        reason = AssignmentReason.ROUND_ROBIN
        logger.info(
            "Round-robin start %s (ID: %s), booking #%d of the day (index %d/%d)",
            pool[start].name, pool[start].id, todays_count + 1, start, len(pool),
        )

    first_conflict = None
    for attempt in range(len(pool)):
        barber = pool[(start + attempt) % len(pool)]
        conflict = find_conflict(
            db, candidate_time, ConflictScope.BARBER,
            barber_id=barber.id, exclude_booking_id=exclude_booking_id,
        )
        if conflict is None:
            if attempt > 0:
                reason = AssignmentReason.FALLBACK
                logger.info("Falling back to %s (ID: %s) after %d busy barber(s)", barber.name, barber.id, attempt)
            return Assignment(barber=barber, reason=reason, attempts=attempt + 1)
        logger.info("Barber %s (ID: %s) busy with booking #%s", barber.name, barber.id, conflict.id)
        first_conflict = first_conflict or conflict

    raise ConflictError(
        "All barbers are busy at this time. Please choose a different time.",
        error="ALL_BARBERS_BUSY",
        conflicting_booking=booking_summary(first_conflict),
    )
