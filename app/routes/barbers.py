from fastapi import APIRouter, BackgroundTasks, Depends, status
from sqlalchemy.orm import Session
from typing import List

from app.database import get_db
from app.core.dependencies import get_current_admin
from app.schemas.barber import (
    BarberBlockRequest, BarberCreate, BarberPublic, BarberResponse, BarberStats,
    BarberUpdate, BlockResult, SweepResult,
)
from app.services.barber_service import BarberService
from app.services.notifications import notify_barber_blocked
from app.services.scheduling import active_barbers

router = APIRouter()

@router.get("/public", response_model=List[BarberPublic])
def get_available_barbers(db: Session = Depends(get_db)):
    """Barbers currently taking bookings, in assignment order"""
    return active_barbers(db)

@router.post("/check-expired-blocks", response_model=SweepResult)
def check_expired_blocks(
    current_admin=Depends(get_current_admin),
    db: Session = Depends(get_db)
):
    unblocked = BarberService.unblock_expired(db)
    return SweepResult(
        message=f"Unblocked {len(unblocked)} barber(s) with expired temporary blocks",
        unblocked_count=len(unblocked),
        unblocked_barbers=[BarberResponse.model_validate(b) for b in unblocked],
    )

@router.get("/", response_model=List[BarberResponse])
def get_barbers(
    current_admin=Depends(get_current_admin),
    db: Session = Depends(get_db)
):
    return BarberService.get_all_barbers(db)

@router.post("/", response_model=BarberResponse, status_code=status.HTTP_201_CREATED)
def create_barber(
    barber_data: BarberCreate,
    current_admin=Depends(get_current_admin),
    db: Session = Depends(get_db)
):
    return BarberService.create_barber(db, barber_data)

@router.get("/{barber_id}", response_model=BarberResponse)
def get_barber(
    barber_id: int,
    current_admin=Depends(get_current_admin),
    db: Session = Depends(get_db)
):
    return BarberService.get_barber_by_id(db, barber_id)

@router.put("/{barber_id}", response_model=BarberResponse)
def update_barber(
    barber_id: int,
    barber_data: BarberUpdate,
    current_admin=Depends(get_current_admin),
    db: Session = Depends(get_db)
):
    return BarberService.update_barber(db, barber_id, barber_data)

@router.delete("/{barber_id}")
def delete_barber(
    barber_id: int,
    current_admin=Depends(get_current_admin),
    db: Session = Depends(get_db)
):
    BarberService.delete_barber(db, barber_id)
    return {"message": "Barber deleted successfully"}

@router.get("/{barber_id}/stats", response_model=BarberStats)
def get_barber_stats(
    barber_id: int,
    current_admin=Depends(get_current_admin),
    db: Session = Depends(get_db)
):
    return BarberService.get_stats(db, barber_id)

@router.post("/{barber_id}/block", response_model=BlockResult)
def block_barber(
    barber_id: int,
    block_data: BarberBlockRequest,
    background_tasks: BackgroundTasks,
    current_admin=Depends(get_current_admin),
    db: Session = Depends(get_db)
):
    if block_data.blocked_by is None:
        block_data.blocked_by = current_admin.username

    barber = BarberService.block_barber(db, barber_id, block_data)
    temporary = barber.block_expires_at is not None

    background_tasks.add_task(
        notify_barber_blocked,
        barber.name, barber.email, temporary, barber.block_duration_hours, barber.block_reason,
    )

    if temporary:
        message = f"{barber.name} blocked for {barber.block_duration_hours:g} hour(s)"
    else:
        message = f"{barber.name} blocked permanently"

    return BlockResult(
        message=message,
        barber=BarberResponse.model_validate(barber),
        block_expires_at=barber.block_expires_at,
    )

@router.post("/{barber_id}/unblock", response_model=BarberResponse)
def unblock_barber(
    barber_id: int,
    current_admin=Depends(get_current_admin),
    db: Session = Depends(get_db)
):
    return BarberService.unblock_barber(db, barber_id)
