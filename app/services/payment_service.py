import logging
from sqlalchemy import func, case
from sqlalchemy.orm import Session
from fastapi import HTTPException, status
from typing import Optional, List
from datetime import datetime
import uuid

from app.core.exceptions import ConflictError, InvalidStateError, NotFoundError, ValidationError
from app.models.booking import Booking, BookingPaymentStatus
from app.models.payment import Payment, PaymentStatus, PaymentMethod
from app.schemas.payment import PaymentCreate, PaymentMarkReceived, PaymentMarkFailed
from app.services.email import EmailService
from app.utils.timeutils import local_now

logger = logging.getLogger(__name__)


def _transaction_id(method: PaymentMethod, now: datetime) -> str:
    return f"{method.value.upper()}_{int(now.timestamp())}_{uuid.uuid4().hex[:8].upper()}"


class PaymentService:

    @staticmethod
    def create_payment(db: Session, payment_data: PaymentCreate, now: Optional[datetime] = None) -> Payment:
        now = now or local_now()
        try:
            booking = db.query(Booking).filter(Booking.id == payment_data.booking_id).with_for_update().first()
            if not booking:
                raise NotFoundError("Booking not found")

            if booking.payment_status != BookingPaymentStatus.UNPAID:
                raise ConflictError(
                    f"Booking #{booking.id} already has a {booking.payment_status.value} payment",
                    error="ALREADY_PAID",
                )

            if abs(payment_data.amount - booking.service_price) > 0.01:
                raise ValidationError(
                    f"Payment amount {payment_data.amount:.2f} does not match service price "
                    f"{booking.service_price:.2f}",
                    error="AMOUNT_MISMATCH",
                )

            method = PaymentMethod(payment_data.payment_method.value)
            phone = payment_data.phone_number
            if method == PaymentMethod.MPESA:
                phone = phone or booking.mpesa_phone
                if not phone:
                    raise ValidationError("Phone number is required for M-Pesa payments", error="PHONE_REQUIRED")
                payment_status = PaymentStatus.PENDING
                booking_payment_status = BookingPaymentStatus.PENDING
            else:
                # cash and card are settled in person
                payment_status = PaymentStatus.COMPLETED
                booking_payment_status = BookingPaymentStatus.COMPLETED

            payment = Payment(
                booking_id=booking.id,
                amount=payment_data.amount,
                payment_method=method,
                phone_number=phone,
                customer_notes=payment_data.customer_notes,
                status=payment_status,
                transaction_id=_transaction_id(method, now),
                payment_received_at=now if payment_status == PaymentStatus.COMPLETED else None,
                created_at=now,
            )
            booking.payment_status = booking_payment_status
            booking.payment_method = method.value

            db.add(payment)
            db.commit()
            db.refresh(payment)
            logger.info("Payment %s recorded for booking #%s (%s, %s)",
                        payment.transaction_id, booking.id, method.value, payment_status.value)
            if payment_status == PaymentStatus.COMPLETED:
                PaymentService.send_receipt(db, payment)
            return payment

        except HTTPException:
            db.rollback()
            raise
        except Exception as e:
            db.rollback()
            logger.exception("Error creating payment")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Error creating payment: {str(e)}"
            )

    @staticmethod
    def get_payment(db: Session, payment_id: int) -> Payment:
        payment = db.query(Payment).filter(Payment.id == payment_id).first()
        if not payment:
            raise NotFoundError("Payment not found")
        return payment

    @staticmethod
    def list_payments(db: Session, payment_status: Optional[PaymentStatus] = None,
                      booking_id: Optional[int] = None, limit: int = 50, offset: int = 0) -> List[Payment]:
        query = db.query(Payment)
        if payment_status:
            query = query.filter(Payment.status == PaymentStatus(payment_status.value))
        if booking_id:
            query = query.filter(Payment.booking_id == booking_id)
        return query.order_by(Payment.created_at.desc(), Payment.id.desc()).offset(offset).limit(limit).all()

    @staticmethod
    def mark_received(db: Session, payment_id: int, data: PaymentMarkReceived,
                      now: Optional[datetime] = None) -> Payment:
        payment = PaymentService.get_payment(db, payment_id)
        if payment.status == PaymentStatus.RECEIVED:
            raise InvalidStateError("Payment already marked as received")
        if payment.status == PaymentStatus.FAILED:
            raise InvalidStateError("A failed payment cannot be collected; record a new payment instead")

        payment.status = PaymentStatus.RECEIVED
        payment.payment_received_at = now or local_now()
        if data.payment_notes is not None:
            payment.payment_notes = data.payment_notes
        payment.payment_method_used = data.payment_method_used or payment.payment_method.value
        payment.booking.payment_status = BookingPaymentStatus.COMPLETED

        db.commit()
        db.refresh(payment)
        logger.info("Payment %s marked as received", payment.transaction_id)
        PaymentService.send_receipt(db, payment)
        return payment

    @staticmethod
    def mark_pending(db: Session, payment_id: int) -> Payment:
        payment = PaymentService.get_payment(db, payment_id)
        if payment.status == PaymentStatus.PENDING:
            raise InvalidStateError("Payment is already pending")
        if payment.status == PaymentStatus.FAILED:
            raise InvalidStateError("A failed payment cannot be reopened; record a new payment instead")

        payment.status = PaymentStatus.PENDING
        payment.payment_received_at = None
        payment.payment_method_used = None
        payment.booking.payment_status = BookingPaymentStatus.PENDING

        db.commit()
        db.refresh(payment)
        logger.info("Payment %s reverted to pending", payment.transaction_id)
        return payment

    @staticmethod
    def mark_failed(db: Session, payment_id: int, data: PaymentMarkFailed) -> Payment:
        payment = PaymentService.get_payment(db, payment_id)
        if payment.status in (PaymentStatus.RECEIVED, PaymentStatus.COMPLETED):
            raise InvalidStateError("Cannot fail a payment that has been collected")

        payment.status = PaymentStatus.FAILED
        if data.payment_notes is not None:
            payment.payment_notes = data.payment_notes
        # a failed attempt frees the booking for another payment
        payment.booking.payment_status = BookingPaymentStatus.UNPAID

        db.commit()
        db.refresh(payment)
        logger.info("Payment %s marked as failed", payment.transaction_id)
        return payment

    @staticmethod
    def send_receipt(db: Session, payment: Payment) -> bool:
        """Email the customer a receipt for a collected payment and record it on the payment.

        Runs after the payment itself has committed, so a failure here is
        logged and never undoes the payment.
        """
        booking = payment.booking
        if not booking.customer_email:
            logger.info("Booking #%s has no customer email, skipping receipt", booking.id)
            return False

        sent = EmailService.send_payment_receipt(booking, payment)
        if not sent:
            logger.warning("Receipt for payment %s was not sent", payment.transaction_id)
            return False

        try:
            payment.receipt_sent = True
            db.commit()
            db.refresh(payment)
        except Exception:
            db.rollback()
            logger.exception("Could not record receipt for payment %s", payment.transaction_id)
        return True

    @staticmethod
    def resend_receipt(db: Session, payment_id: int) -> bool:
        payment = PaymentService.get_payment(db, payment_id)
        if payment.status not in (PaymentStatus.COMPLETED, PaymentStatus.RECEIVED):
            raise InvalidStateError("Only collected payments have a receipt")
        if not payment.booking.customer_email:
            raise ValidationError("Booking has no customer email address", error="NO_CUSTOMER_EMAIL")
        return PaymentService.send_receipt(db, payment)

    @staticmethod
    def stats(db: Session) -> dict:
        def count_of(payment_status):
            return func.sum(case((Payment.status == payment_status, 1), else_=0))

        collected = (PaymentStatus.COMPLETED, PaymentStatus.RECEIVED)
        row = db.query(
            func.count(Payment.id),
            count_of(PaymentStatus.PENDING),
            count_of(PaymentStatus.COMPLETED),
            count_of(PaymentStatus.RECEIVED),
            count_of(PaymentStatus.FAILED),
            func.sum(case((Payment.status.in_(collected), Payment.amount), else_=0)),
        ).one()

        by_method = {}
        for method, count, total in db.query(
            Payment.payment_method, func.count(Payment.id),
            func.sum(case((Payment.status.in_(collected), Payment.amount), else_=0)),
        ).group_by(Payment.payment_method).all():
            by_method[method.value] = {"count": count, "collected": float(total or 0)}

        return {
            "total_payments": row[0] or 0,
            "pending_payments": row[1] or 0,
            "completed_payments": row[2] or 0,
            "received_payments": row[3] or 0,
            "failed_payments": row[4] or 0,
            "total_collected": float(row[5] or 0),
            "by_method": by_method,
        }
