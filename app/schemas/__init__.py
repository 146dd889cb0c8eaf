from .auth import AdminLogin, AdminResponse, Token
from .barber import BarberCreate, BarberUpdate, BarberResponse, BarberPublic, BarberBlockRequest, BlockResult, SweepResult, BarberStats
from .booking import BookingCreate, BookingUpdate, BookingStatusUpdate, BookingCancel, BookingResponse, BookingCreated, BookingList, BookingStats, BookingStatus
from .payment import PaymentCreate, PaymentResponse, PaymentMarkReceived, PaymentMarkFailed, PaymentStats, PaymentList, PaymentStatus, PaymentMethod, ReceiptResult
from .working_hours import WorkingHoursResponse, WorkingHoursUpdate, WorkingHoursCheck, WorkingHoursCheckResult, TimeSlotList, WorkingHoursSummary
from .dashboard import BarberSummary, DailySummaryResult, DashboardOverview

__all__ = [
    "AdminLogin", "AdminResponse", "Token",
    "BarberCreate", "BarberUpdate", "BarberResponse", "BarberPublic", "BarberBlockRequest", "BlockResult", "SweepResult", "BarberStats",
    "BookingCreate", "BookingUpdate", "BookingStatusUpdate", "BookingCancel", "BookingResponse", "BookingCreated", "BookingList", "BookingStats", "BookingStatus",
    "PaymentCreate", "PaymentResponse", "PaymentMarkReceived", "PaymentMarkFailed", "PaymentStats", "PaymentList", "PaymentStatus", "PaymentMethod", "ReceiptResult",
    "WorkingHoursResponse", "WorkingHoursUpdate", "WorkingHoursCheck", "WorkingHoursCheckResult", "TimeSlotList", "WorkingHoursSummary",
    "BarberSummary", "DailySummaryResult", "DashboardOverview",
]
