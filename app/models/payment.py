from sqlalchemy import Column, Integer, String, Boolean, DateTime, Text, Float, ForeignKey, Enum
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship
import enum
from app.database import Base

class PaymentStatus(str, enum.Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    RECEIVED = "received"
    FAILED = "failed"

class PaymentMethod(str, enum.Enum):
    MPESA = "mpesa"
    CASH = "cash"
    CARD = "card"

class Payment(Base):
    __tablename__ = "payments"

    id = Column(Integer, primary_key=True, index=True)
    booking_id = Column(Integer, ForeignKey("bookings.id"), nullable=False, index=True)
    amount = Column(Float, nullable=False)
    payment_method = Column(Enum(PaymentMethod), nullable=False)
    payment_method_used = Column(String(50))
    phone_number = Column(String(20))
    customer_notes = Column(Text)
    status = Column(Enum(PaymentStatus), default=PaymentStatus.PENDING, nullable=False)
    transaction_id = Column(String(100), unique=True)
    receipt_sent = Column(Boolean, default=False)
    payment_received_at = Column(DateTime)
    payment_notes = Column(Text)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, onupdate=func.now())

    booking = relationship("Booking", back_populates="payments")
