from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional, List
from datetime import datetime
import re

TIME_PATTERN = re.compile(r'^([0-1]?[0-9]|2[0-3]):[0-5][0-9]$')

class WorkingHoursResponse(BaseModel):
    day_of_week: int
    day_name: str
    is_open: bool
    open_time: Optional[str] = None
    close_time: Optional[str] = None
    notes: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)

class WorkingHoursUpdate(BaseModel):
    is_open: bool
    open_time: Optional[str] = None
    close_time: Optional[str] = None
    notes: Optional[str] = None

    @field_validator('open_time')
    @classmethod
    def validate_open_time(cls, v, info):
        if info.data.get('is_open') and v and not TIME_PATTERN.match(v):
            raise ValueError('Invalid open time format (HH:MM)')
        return v

    @field_validator('close_time')
    @classmethod
    def validate_close_time(cls, v, info):
        if info.data.get('is_open') and v and not TIME_PATTERN.match(v):
            raise ValueError('Invalid close time format (HH:MM)')
        return v

class WorkingHoursCheck(BaseModel):
    check_at: datetime = Field(..., alias="datetime")

    model_config = ConfigDict(populate_by_name=True)

class NextOpen(BaseModel):
    date: datetime
    day: str
    time: str

class WorkingHoursCheckResult(BaseModel):
    is_open: bool
    reason: str
    next_open: Optional[NextOpen] = None

class TimeSlot(BaseModel):
    start: datetime
    end: datetime
    time_string: str

class TimeSlotList(BaseModel):
    date: str
    slots: List[TimeSlot]
    count: int

class DaySummary(BaseModel):
    day: str
    is_open: bool
    hours: str

class WorkingHoursSummary(BaseModel):
    today: Optional[DaySummary] = None
    weekly: List[DaySummary]
    next_open: Optional[NextOpen] = None
