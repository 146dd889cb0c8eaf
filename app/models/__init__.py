from .admin import AdminUser
from .barber import Barber, BlockType, BlockState, Blocked, Unblocked, Temporary, Permanent
from .booking import Booking, BookingStatus, BookingPaymentStatus, TERMINAL_STATUSES
from .payment import Payment, PaymentStatus, PaymentMethod
from .working_hours import WorkingHours, DEFAULT_WORKING_HOURS

from sqlalchemy.orm import configure_mappers
configure_mappers()

__all__ = [
    "AdminUser",
    "Barber", "BlockType", "BlockState", "Blocked", "Unblocked", "Temporary", "Permanent",
    "Booking", "BookingStatus", "BookingPaymentStatus", "TERMINAL_STATUSES",
    "Payment", "PaymentStatus", "PaymentMethod",
    "WorkingHours", "DEFAULT_WORKING_HOURS",
]
