from sqlalchemy import Column, Integer, String, Boolean, DateTime, Text
from sqlalchemy.sql import func
from app.database import Base

DEFAULT_WORKING_HOURS = [
    {"day_of_week": 1, "day_name": "Monday", "is_open": True, "open_time": "08:00", "close_time": "18:00"},
    {"day_of_week": 2, "day_name": "Tuesday", "is_open": True, "open_time": "08:00", "close_time": "18:00"},
    {"day_of_week": 3, "day_name": "Wednesday", "is_open": True, "open_time": "08:00", "close_time": "18:00"},
    {"day_of_week": 4, "day_name": "Thursday", "is_open": True, "open_time": "08:00", "close_time": "18:00"},
    {"day_of_week": 5, "day_name": "Friday", "is_open": True, "open_time": "08:00", "close_time": "18:00"},
    {"day_of_week": 6, "day_name": "Saturday", "is_open": True, "open_time": "08:00", "close_time": "16:00"},
    {"day_of_week": 0, "day_name": "Sunday", "is_open": False, "open_time": None, "close_time": None},
]

class WorkingHours(Base):
    __tablename__ = "working_hours"

    id = Column(Integer, primary_key=True, index=True)
    day_of_week = Column(Integer, unique=True, nullable=False)  # 0 = Sunday
    day_name = Column(String(20), nullable=False)
    is_open = Column(Boolean, default=True, nullable=False)
    open_time = Column(String(5))   # HH:MM
    close_time = Column(String(5))  # HH:MM
    notes = Column(Text)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, onupdate=func.now())
