"""Outbound notifications queued after a write has committed.

Routes hand these functions to FastAPI ``BackgroundTasks`` so they run after
the response is sent. They receive plain snapshots, never ORM instances,
because the request's session is closed by then.
"""
import logging
from typing import Optional

from app.schemas.booking import BookingResponse
from app.services.email import EmailService

logger = logging.getLogger(__name__)


def notify_booking_created(booking: BookingResponse, barber_email: Optional[str]):
    try:
        EmailService.send_barber_assignment(booking.barber_name, barber_email, booking)
        EmailService.send_booking_confirmation(booking)
    except Exception:
        logger.exception("Failed to send notifications for booking #%s", booking.id)


def notify_booking_cancelled(booking: BookingResponse, barber_email: Optional[str]):
    try:
        EmailService.send_cancellation_notice(booking.barber_name, barber_email, booking)
    except Exception:
        logger.exception("Failed to send cancellation notice for booking #%s", booking.id)


def notify_barber_blocked(name: str, email: Optional[str], temporary: bool, duration_hours, reason: str):
    try:
        EmailService.send_block_notice(name, email, temporary, duration_hours, reason)
    except Exception:
        logger.exception("Failed to send block notice for barber %s", name)
