from .auth import router as auth_router
from .admin import router as admin_router
from .barbers import router as barbers_router
from .bookings import router as bookings_router
from .payments import router as payments_router
from .working_hours import router as working_hours_router

__all__ = [
    "auth_router",
    "admin_router",
    "barbers_router",
    "bookings_router",
    "payments_router",
    "working_hours_router",
]
