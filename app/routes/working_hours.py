from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.orm import Session
from typing import List
from datetime import date

from app.database import get_db
from app.core.dependencies import get_current_admin
from app.schemas.working_hours import (
    TimeSlotList, WorkingHoursCheck, WorkingHoursCheckResult, WorkingHoursResponse,
    WorkingHoursSummary, WorkingHoursUpdate,
)
from app.services.working_hours_service import WorkingHoursService
from app.utils.timeutils import to_local_naive

router = APIRouter()

@router.get("/", response_model=List[WorkingHoursResponse])
def get_working_hours(db: Session = Depends(get_db)):
    return WorkingHoursService.get_working_hours(db)

@router.get("/summary", response_model=WorkingHoursSummary)
def get_working_hours_summary(db: Session = Depends(get_db)):
    return WorkingHoursService.summary(db)

@router.post("/check", response_model=WorkingHoursCheckResult)
def check_working_hours(data: WorkingHoursCheck, db: Session = Depends(get_db)):
    """Is the business open at the given moment?"""
    return WorkingHoursService.is_within_working_hours(db, to_local_naive(data.check_at))

@router.get("/slots/{on}", response_model=TimeSlotList)
def get_time_slots(
    on: date,
    duration: int = Query(60, ge=15, le=480),
    db: Session = Depends(get_db)
):
    slots = WorkingHoursService.available_time_slots(db, on, duration)
    return {"date": on.isoformat(), "slots": slots, "count": len(slots)}

@router.put("/{day_of_week}", response_model=WorkingHoursResponse)
def update_working_hours(
    data: WorkingHoursUpdate,
    day_of_week: int = Path(..., ge=0, le=6),
    current_admin=Depends(get_current_admin),
    db: Session = Depends(get_db)
):
    return WorkingHoursService.update_working_hours(db, day_of_week, data)
