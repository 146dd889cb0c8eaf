from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Union

from sqlalchemy import Column, Integer, String, Boolean, DateTime, Text, Float, Enum
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
import enum
from app.database import Base

class BlockType(str, enum.Enum):
    TEMPORARY = "temporary"
    PERMANENT = "permanent"


@dataclass(frozen=True)
class Temporary:
    expires_at: datetime

    def has_expired(self, now: datetime) -> bool:
        return self.expires_at <= now


@dataclass(frozen=True)
class Permanent:
    def has_expired(self, now: datetime) -> bool:
        return False


@dataclass(frozen=True)
class Unblocked:
    pass


@dataclass(frozen=True)
class Blocked:
    reason: str
    kind: Union[Temporary, Permanent]
    blocked_at: datetime
    blocked_by: Optional[str] = None
    duration_hours: Optional[float] = None
    category: Optional[str] = None
    severity: Optional[str] = None


BlockState = Union[Unblocked, Blocked]


class Barber(Base):
    __tablename__ = "barbers"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    phone = Column(String(20), unique=True, nullable=False, index=True)
    email = Column(String(255))
    identity_badge_number = Column(String(50), unique=True, nullable=False, index=True)
    current_location = Column(Text)
    is_active = Column(Boolean, default=True, nullable=False)

    # Block columns are written only through apply_block_state()
    is_blocked = Column(Boolean, default=False, nullable=False)
    block_reason = Column(Text)
    blocked_at = Column(DateTime)
    blocked_by = Column(String(255))
    block_type = Column(Enum(BlockType))
    block_duration_hours = Column(Float)
    block_expires_at = Column(DateTime, index=True)
    block_category = Column(String(100))
    block_severity = Column(String(50))
    block_warning_count = Column(Integer, default=0)

    total_services = Column(Integer, default=0, nullable=False)
    total_earnings = Column(Float, default=0.0, nullable=False)
    last_active = Column(DateTime, server_default=func.now())
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, onupdate=func.now())

    bookings = relationship("Booking", back_populates="barber")

    @property
    def is_eligible(self):
        return bool(self.is_active) and not self.is_blocked

    @property
    def block_state(self) -> BlockState:
        if not self.is_blocked:
            return Unblocked()
        if self.block_type == BlockType.TEMPORARY:
            kind = Temporary(expires_at=self.block_expires_at)
        else:
            kind = Permanent()
        return Blocked(
            reason=self.block_reason,
            kind=kind,
            blocked_at=self.blocked_at,
            blocked_by=self.blocked_by,
            duration_hours=self.block_duration_hours,
            category=self.block_category,
            severity=self.block_severity,
        )

    def apply_block_state(self, state: BlockState):
        if isinstance(state, Unblocked):
            self.is_blocked = False
            self.block_reason = None
            self.blocked_at = None
            self.blocked_by = None
            self.block_type = None
            self.block_duration_hours = None
            self.block_expires_at = None
            self.block_category = None
            self.block_severity = None
            return

        self.is_blocked = True
        self.block_reason = state.reason
        self.blocked_at = state.blocked_at
        self.blocked_by = state.blocked_by
        self.block_category = state.category
        self.block_severity = state.severity
        if isinstance(state.kind, Temporary):
            self.block_type = BlockType.TEMPORARY
            self.block_expires_at = state.kind.expires_at
            self.block_duration_hours = state.duration_hours
        else:
            self.block_type = BlockType.PERMANENT
            self.block_expires_at = None
            self.block_duration_hours = None
