from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import Optional

from app.database import get_db
from app.core.dependencies import get_current_admin
from app.schemas.payment import (
    PaymentCreate, PaymentList, PaymentMarkFailed, PaymentMarkReceived,
    PaymentResponse, PaymentStats, PaymentStatus, ReceiptResult,
)
from app.services.payment_service import PaymentService

router = APIRouter()

@router.post("/", response_model=PaymentResponse, status_code=status.HTTP_201_CREATED)
def create_payment(payment_data: PaymentCreate, db: Session = Depends(get_db)):
    """Record a payment for a booking"""
    return PaymentService.create_payment(db, payment_data)

@router.get("/", response_model=PaymentList)
def get_payments(
    payment_status: Optional[PaymentStatus] = Query(None, alias="status"),
    booking_id: Optional[int] = Query(None),
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    current_admin=Depends(get_current_admin),
    db: Session = Depends(get_db)
):
    payments = PaymentService.list_payments(db, payment_status, booking_id, limit, offset)
    return PaymentList(payments=[PaymentResponse.model_validate(p) for p in payments], count=len(payments))

@router.get("/stats/summary", response_model=PaymentStats)
def get_payment_stats(
    current_admin=Depends(get_current_admin),
    db: Session = Depends(get_db)
):
    return PaymentService.stats(db)

@router.get("/{payment_id}", response_model=PaymentResponse)
def get_payment(
    payment_id: int,
    current_admin=Depends(get_current_admin),
    db: Session = Depends(get_db)
):
    return PaymentService.get_payment(db, payment_id)

@router.patch("/{payment_id}/mark-received", response_model=PaymentResponse)
def mark_payment_received(
    payment_id: int,
    data: PaymentMarkReceived,
    current_admin=Depends(get_current_admin),
    db: Session = Depends(get_db)
):
    return PaymentService.mark_received(db, payment_id, data)

@router.patch("/{payment_id}/mark-pending", response_model=PaymentResponse)
def mark_payment_pending(
    payment_id: int,
    current_admin=Depends(get_current_admin),
    db: Session = Depends(get_db)
):
    return PaymentService.mark_pending(db, payment_id)

@router.patch("/{payment_id}/mark-failed", response_model=PaymentResponse)
def mark_payment_failed(
    payment_id: int,
    data: PaymentMarkFailed,
    current_admin=Depends(get_current_admin),
    db: Session = Depends(get_db)
):
    return PaymentService.mark_failed(db, payment_id, data)

@router.post("/{payment_id}/resend-receipt", response_model=ReceiptResult)
def resend_receipt(
    payment_id: int,
    current_admin=Depends(get_current_admin),
    db: Session = Depends(get_db)
):
    sent = PaymentService.resend_receipt(db, payment_id)
    payment = PaymentService.get_payment(db, payment_id)
    return {
        "message": "Receipt resent successfully" if sent else "Receipt could not be sent",
        "receipt_sent": sent,
        "payment": PaymentResponse.model_validate(payment),
    }
