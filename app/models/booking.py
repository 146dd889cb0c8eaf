from sqlalchemy import Column, Integer, String, DateTime, Text, Float, ForeignKey, Enum, Index
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
import enum
from app.database import Base

class BookingStatus(str, enum.Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    NO_SHOW = "no_show"

class BookingPaymentStatus(str, enum.Enum):
    UNPAID = "unpaid"
    PENDING = "pending"
    COMPLETED = "completed"

# Bookings in these states no longer hold a time slot
TERMINAL_STATUSES = (BookingStatus.CANCELLED, BookingStatus.COMPLETED, BookingStatus.NO_SHOW)

class Booking(Base):
    __tablename__ = "bookings"
    __table_args__ = (
        Index("ix_bookings_barber_datetime", "barber_id", "preferred_datetime"),
        Index("ix_bookings_customer_datetime", "customer_phone", "preferred_datetime"),
    )

    id = Column(Integer, primary_key=True, index=True)
    customer_name = Column(String(255), nullable=False)
    customer_email = Column(String(255))
    customer_phone = Column(String(20), nullable=False)
    address = Column(Text, nullable=False)
    location_notes = Column(Text)
    preferred_datetime = Column(DateTime, nullable=False, index=True)
    service_type = Column(String(255), nullable=False)
    service_price = Column(Float, nullable=False)

    # Barber identity is copied at assignment time and never follows later profile edits
    barber_id = Column(Integer, ForeignKey("barbers.id"))
    barber_name = Column(String(255))
    barber_phone = Column(String(20))
    barber_identity_badge = Column(String(50))

    status = Column(Enum(BookingStatus), default=BookingStatus.PENDING, nullable=False)
    payment_status = Column(Enum(BookingPaymentStatus), default=BookingPaymentStatus.UNPAID, nullable=False)
    payment_method = Column(String(50))
    mpesa_phone = Column(String(20))
    notes = Column(Text)

    cancellation_reason = Column(Text)
    cancelled_at = Column(DateTime)
    cancelled_by = Column(String(255))

    created_at = Column(DateTime, server_default=func.now(), index=True)
    updated_at = Column(DateTime, onupdate=func.now())

    barber = relationship("Barber", back_populates="bookings")
    payments = relationship("Payment", back_populates="booking")

    @property
    def is_terminal(self):
        return self.status in TERMINAL_STATUSES
