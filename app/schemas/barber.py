from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from typing import Optional, List
from datetime import datetime
from enum import Enum

class BlockType(str, Enum):
    TEMPORARY = "temporary"
    PERMANENT = "permanent"

class BarberBase(BaseModel):
    name: str
    phone: str
    email: Optional[EmailStr] = None
    identity_badge_number: str
    current_location: Optional[str] = None

    @field_validator('email', mode='before')
    @classmethod
    def blank_email_is_none(cls, v):
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator('name', 'phone', 'identity_badge_number')
    @classmethod
    def not_blank(cls, v):
        if not v or not v.strip():
            raise ValueError('Name, phone, and identity badge number are required')
        return v.strip()

class BarberCreate(BarberBase):
    is_active: bool = True
    total_services: int = Field(0, ge=0)
    total_earnings: float = Field(0.0, ge=0)

class BarberUpdate(BaseModel):
    name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[EmailStr] = None
    identity_badge_number: Optional[str] = None
    current_location: Optional[str] = None
    is_active: Optional[bool] = None

    @field_validator('name', 'phone', 'identity_badge_number')
    @classmethod
    def not_blank(cls, v):
        if v is not None and not v.strip():
            raise ValueError('Field cannot be empty')
        return v.strip() if v is not None else v

class BarberBlockRequest(BaseModel):
    block_reason: str
    blocked_by: Optional[str] = None
    block_type: BlockType = BlockType.PERMANENT
    block_duration_hours: Optional[float] = None
    block_category: Optional[str] = "Policy Violation"
    block_severity: Optional[str] = "suspension"

    @field_validator('blocked_by', mode='before')
    @classmethod
    def coerce_blocked_by(cls, v):
        # admin ids arrive as integers from the dashboard
        return str(v) if v is not None else v

class BarberPublic(BaseModel):
    id: int
    name: str
    phone: str
    identity_badge_number: str
    total_services: int

    model_config = ConfigDict(from_attributes=True)

class BarberResponse(BaseModel):
    id: int
    name: str
    phone: str
    email: Optional[str] = None
    identity_badge_number: str
    current_location: Optional[str] = None
    is_active: bool
    is_blocked: bool
    block_reason: Optional[str] = None
    blocked_at: Optional[datetime] = None
    blocked_by: Optional[str] = None
    block_type: Optional[BlockType] = None
    block_duration_hours: Optional[float] = None
    block_expires_at: Optional[datetime] = None
    block_category: Optional[str] = None
    block_severity: Optional[str] = None
    block_warning_count: Optional[int] = 0
    total_services: int
    total_earnings: float
    last_active: Optional[datetime] = None
    created_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)

class BlockResult(BaseModel):
    message: str
    barber: BarberResponse
    block_expires_at: Optional[datetime] = None

class SweepResult(BaseModel):
    message: str
    unblocked_count: int
    unblocked_barbers: List[BarberResponse]

class BarberStats(BaseModel):
    barber_id: int
    name: str
    total_services: int
    total_earnings: float
    total_bookings: int
    completed_bookings: int
    pending_bookings: int
    total_revenue: float
