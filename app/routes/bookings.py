from fastapi import APIRouter, BackgroundTasks, Depends, Query, status as http_status
from sqlalchemy.orm import Session
from typing import Optional
from datetime import date

from app.database import get_db
from app.core.dependencies import get_current_admin
from app.models.barber import Barber
from app.schemas.booking import (
    AssignedBarber, BookingCancel, BookingCreate, BookingCreated, BookingList,
    BookingResponse, BookingStats, BookingStatus, BookingStatusUpdate, BookingUpdate,
)
from app.services.booking_service import BookingService
from app.services.notifications import notify_booking_cancelled, notify_booking_created

router = APIRouter()


def _barber_email(db: Session, barber_id: Optional[int]) -> Optional[str]:
    if not barber_id:
        return None
    barber = db.query(Barber).filter(Barber.id == barber_id).first()
    return barber.email if barber else None


@router.post("/", response_model=BookingCreated, status_code=http_status.HTTP_201_CREATED)
def create_booking(
    booking_data: BookingCreate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db)
):
    """Create a booking and assign a barber automatically"""
    booking, assignment = BookingService.create_booking(db, booking_data)
    barber = assignment.barber

    snapshot = BookingResponse.model_validate(booking)
    background_tasks.add_task(notify_booking_created, snapshot, barber.email)

    return BookingCreated(
        booking=snapshot,
        barber=AssignedBarber(
            id=barber.id,
            name=barber.name,
            phone=barber.phone,
            identity_badge=barber.identity_badge_number,
        ),
        assignment_reason=assignment.reason.value,
        message=f"Booking confirmed! {barber.name} has been assigned to your appointment.",
    )


@router.get("/", response_model=BookingList)
def get_bookings(
    status: Optional[BookingStatus] = Query(None),
    barber: Optional[str] = Query(None),
    on: Optional[date] = Query(None, alias="date"),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    current_admin=Depends(get_current_admin),
    db: Session = Depends(get_db)
):
    bookings = BookingService.list_bookings(db, status, barber, on, limit, offset)
    return BookingList(
        bookings=[BookingResponse.model_validate(b) for b in bookings],
        limit=limit,
        offset=offset,
        count=len(bookings),
    )


@router.get("/stats/overview", response_model=BookingStats)
def get_booking_stats(
    current_admin=Depends(get_current_admin),
    db: Session = Depends(get_db)
):
    return BookingService.stats(db)


@router.get("/{booking_id}", response_model=BookingResponse)
def get_booking(booking_id: int, db: Session = Depends(get_db)):
    """Get booking by ID"""
    return BookingService.get_booking_by_id(db, booking_id)


@router.patch("/{booking_id}/status", response_model=BookingResponse)
def update_booking_status(
    booking_id: int,
    status_data: BookingStatusUpdate,
    current_admin=Depends(get_current_admin),
    db: Session = Depends(get_db)
):
    return BookingService.update_status(db, booking_id, status_data)


@router.post("/{booking_id}/cancel", response_model=BookingResponse)
def cancel_booking(
    booking_id: int,
    cancel_data: BookingCancel,
    background_tasks: BackgroundTasks,
    current_admin=Depends(get_current_admin),
    db: Session = Depends(get_db)
):
    booking = BookingService.cancel_booking(db, booking_id, cancel_data)
    snapshot = BookingResponse.model_validate(booking)
    background_tasks.add_task(notify_booking_cancelled, snapshot, _barber_email(db, booking.barber_id))
    return snapshot


@router.patch("/{booking_id}", response_model=BookingResponse)
def update_booking(
    booking_id: int,
    booking_data: BookingUpdate,
    current_admin=Depends(get_current_admin),
    db: Session = Depends(get_db)
):
    """Edit booking details or reschedule"""
    return BookingService.update_booking(db, booking_id, booking_data)
