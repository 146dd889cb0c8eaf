from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from typing import Optional, List
from datetime import datetime
from enum import Enum

class BookingStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    NO_SHOW = "no_show"

class BookingPaymentStatus(str, Enum):
    UNPAID = "unpaid"
    PENDING = "pending"
    COMPLETED = "completed"

def _strip(v):
    return v.strip() if isinstance(v, str) else v

class BookingCreate(BaseModel):
    customer_name: str
    customer_email: Optional[EmailStr] = None
    customer_phone: str
    address: str
    location_notes: Optional[str] = None
    preferred_datetime: datetime
    service_type: str
    service_price: float = Field(..., ge=0)
    payment_method: str
    mpesa_phone: Optional[str] = None
    barber_name: Optional[str] = None
    barber_phone: Optional[str] = None
    notes: Optional[str] = None

    @field_validator('customer_email', mode='before')
    @classmethod
    def blank_email_is_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator('customer_name', 'customer_phone', 'address', 'service_type', 'payment_method',
                     'barber_name', 'barber_phone', mode='before')
    @classmethod
    def strip_text(cls, v):
        return _strip(v)

    @field_validator('customer_name')
    @classmethod
    def validate_name(cls, v):
        if len(v) < 2:
            raise ValueError('Name must be at least 2 characters')
        return v

    @field_validator('customer_phone')
    @classmethod
    def validate_phone(cls, v):
        if not v:
            raise ValueError('Phone number is required')
        return v

    @field_validator('address')
    @classmethod
    def validate_address(cls, v):
        if len(v) < 5:
            raise ValueError('Address must be at least 5 characters')
        return v

    @field_validator('service_type')
    @classmethod
    def validate_service_type(cls, v):
        if not v:
            raise ValueError('Service type is required')
        return v

    @field_validator('payment_method')
    @classmethod
    def validate_payment_method(cls, v):
        if not v:
            raise ValueError('Payment method is required')
        return v

class BookingUpdate(BaseModel):
    customer_name: Optional[str] = None
    customer_email: Optional[EmailStr] = None
    customer_phone: Optional[str] = None
    address: Optional[str] = None
    location_notes: Optional[str] = None
    preferred_datetime: Optional[datetime] = None
    service_type: Optional[str] = None
    service_price: Optional[float] = Field(None, ge=0)
    notes: Optional[str] = None

    @field_validator('customer_name', 'customer_phone', 'address', 'service_type', mode='before')
    @classmethod
    def strip_text(cls, v):
        return _strip(v)

    @field_validator('customer_name')
    @classmethod
    def validate_name(cls, v):
        if v is not None and len(v) < 2:
            raise ValueError('Name must be at least 2 characters')
        return v

    @field_validator('customer_phone', 'service_type')
    @classmethod
    def not_blank(cls, v):
        if v is not None and not v:
            raise ValueError('Field cannot be empty')
        return v

    @field_validator('address')
    @classmethod
    def validate_address(cls, v):
        if v is not None and len(v) < 5:
            raise ValueError('Address must be at least 5 characters')
        return v

class BookingStatusUpdate(BaseModel):
    status: BookingStatus
    notes: Optional[str] = None

class BookingCancel(BaseModel):
    cancellation_reason: str
    cancelled_by: str

    @field_validator('cancellation_reason')
    @classmethod
    def validate_reason(cls, v):
        if len(v.strip()) < 5:
            raise ValueError('Cancellation reason must be at least 5 characters')
        return v.strip()

    @field_validator('cancelled_by')
    @classmethod
    def validate_cancelled_by(cls, v):
        if len(v.strip()) < 2:
            raise ValueError('Cancelled by must be at least 2 characters')
        return v.strip()

class AssignedBarber(BaseModel):
    id: int
    name: str
    phone: str
    identity_badge: Optional[str] = None

class BookingResponse(BaseModel):
    id: int
    customer_name: str
    customer_email: Optional[str] = None
    customer_phone: str
    address: str
    location_notes: Optional[str] = None
    preferred_datetime: datetime
    service_type: str
    service_price: float
    barber_id: Optional[int] = None
    barber_name: Optional[str] = None
    barber_phone: Optional[str] = None
    barber_identity_badge: Optional[str] = None
    status: BookingStatus
    payment_status: BookingPaymentStatus
    payment_method: Optional[str] = None
    notes: Optional[str] = None
    cancellation_reason: Optional[str] = None
    cancelled_at: Optional[datetime] = None
    cancelled_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

class BookingCreated(BaseModel):
    booking: BookingResponse
    barber: AssignedBarber
    assignment_reason: str
    message: str = "Booking created successfully"

class BookingList(BaseModel):
    bookings: List[BookingResponse]
    limit: int
    offset: int
    count: int

class BookingStats(BaseModel):
    total_bookings: int
    pending_bookings: int
    in_progress_bookings: int
    completed_bookings: int
    cancelled_bookings: int
    no_show_bookings: int
    total_revenue: float
