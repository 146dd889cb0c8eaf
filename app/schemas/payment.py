from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional, List
from datetime import datetime
from enum import Enum

from app.utils.validators import is_kenyan_phone

class PaymentStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    RECEIVED = "received"
    FAILED = "failed"

class PaymentMethod(str, Enum):
    MPESA = "mpesa"
    CASH = "cash"
    CARD = "card"

class PaymentCreate(BaseModel):
    booking_id: int
    amount: float = Field(..., ge=0.01)
    payment_method: PaymentMethod
    phone_number: Optional[str] = None
    customer_notes: Optional[str] = None

    @field_validator('phone_number')
    @classmethod
    def validate_phone_number(cls, v, info):
        if v and info.data.get('payment_method') == PaymentMethod.MPESA:
            if not is_kenyan_phone(v):
                raise ValueError('Invalid phone number format for Kenya')
        return v.strip() if v else v

class PaymentMarkReceived(BaseModel):
    payment_notes: Optional[str] = None
    payment_method_used: Optional[str] = None

class PaymentMarkFailed(BaseModel):
    payment_notes: Optional[str] = None

class PaymentResponse(BaseModel):
    id: int
    booking_id: int
    amount: float
    payment_method: PaymentMethod
    payment_method_used: Optional[str] = None
    phone_number: Optional[str] = None
    customer_notes: Optional[str] = None
    status: PaymentStatus
    transaction_id: Optional[str] = None
    receipt_sent: Optional[bool] = False
    payment_received_at: Optional[datetime] = None
    payment_notes: Optional[str] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

class PaymentStats(BaseModel):
    total_payments: int
    pending_payments: int
    completed_payments: int
    received_payments: int
    failed_payments: int
    total_collected: float
    by_method: dict

class PaymentList(BaseModel):
    payments: List[PaymentResponse]
    count: int

class ReceiptResult(BaseModel):
    message: str
    receipt_sent: bool
    payment: PaymentResponse
