from .auth import AuthService
from .barber_service import BarberService
from .booking_service import BookingService
from .daily_summary_service import DailySummaryService
from .dashboard_service import DashboardService
from .payment_service import PaymentService
from .working_hours_service import WorkingHoursService
from .email import EmailService

__all__ = [
    "AuthService",
    "BarberService",
    "BookingService",
    "DailySummaryService",
    "DashboardService",
    "PaymentService",
    "WorkingHoursService",
    "EmailService"
]
