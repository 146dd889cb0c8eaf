from pydantic import BaseModel
from typing import List
from datetime import datetime

from app.schemas.booking import BookingResponse, BookingStats
from app.schemas.payment import PaymentStats

class BarberSummary(BaseModel):
    id: int
    name: str
    is_active: bool
    is_blocked: bool
    total_bookings: int
    completed_bookings: int
    revenue: float

class DashboardOverview(BaseModel):
    generated_at: datetime
    bookings: BookingStats
    payments: PaymentStats
    todays_bookings: List[BookingResponse]
    barbers: List[BarberSummary]

class DailySummaryResult(BaseModel):
    message: str
    sent_to: List[str]
