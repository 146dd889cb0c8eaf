from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.database import get_db
from app.core.dependencies import get_current_admin
from app.schemas.dashboard import DailySummaryResult, DashboardOverview
from app.services.daily_summary_service import DailySummaryService
from app.services.dashboard_service import DashboardService

router = APIRouter()

@router.get("/dashboard", response_model=DashboardOverview)
def get_dashboard(
    current_admin=Depends(get_current_admin),
    db: Session = Depends(get_db)
):
    return DashboardService.overview(db)

@router.post("/daily-summary", response_model=DailySummaryResult)
def send_daily_summary(
    day: Optional[date] = Query(None, alias="date"),
    current_admin=Depends(get_current_admin),
    db: Session = Depends(get_db)
):
    """Send the barber summaries now instead of waiting for the morning run"""
    sent_to = DailySummaryService.send_all(db, day)
    return {"message": f"Daily summaries sent to {len(sent_to)} barber(s)", "sent_to": sent_to}
