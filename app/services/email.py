import logging
import re
from datetime import datetime

import requests

from app.core.config import settings
from app.utils.validators import sanitize_input

logger = logging.getLogger(__name__)

SENDGRID_URL = "https://api.sendgrid.com/v3/mail/send"

class EmailService:
    @staticmethod
    def send_email(to_email: str, subject: str, html_content: str) -> bool:
        """Send email through the SendGrid API.

        Never raises: every failure is logged and reported as ``False`` so a
        notification can't break the request that triggered it.
        """
        try:
            if not to_email:
                logger.info("No recipient for '%s', skipping email", subject)
                return False

            if not settings.SENDGRID_API_KEY:
                logger.warning("SENDGRID_API_KEY not configured, skipping email to %s", to_email)
                return False

            headers = {
                "Authorization": f"Bearer {settings.SENDGRID_API_KEY}",
                "Content-Type": "application/json",
                "User-Agent": "JazzManHousecalls-API/1.0",
            }

            data = {
                "personalizations": [{
                    "to": [{"email": to_email}],
                    "subject": subject,
                }],
                "from": {
                    "email": settings.FROM_EMAIL,
                    "name": "JazzMan Housecalls"
                },
                "reply_to": {
                    "email": settings.FROM_EMAIL,
                    "name": "JazzMan Housecalls Support"
                },
                "subject": subject,
                "content": [
                    {
                        "type": "text/plain",
                        "value": EmailService.extract_plain_text(html_content)
                    },
                    {
                        "type": "text/html",
                        "value": html_content
                    }
                ],
                "categories": ["transactional", "housecalls"],
                "custom_args": {
                    "timestamp": str(datetime.utcnow().timestamp())
                }
            }

            response = requests.post(
                SENDGRID_URL, json=data, headers=headers, timeout=settings.EMAIL_TIMEOUT_SECONDS
            )

            if response.status_code == 202:
                logger.info("Email '%s' sent to %s", subject, to_email)
                return True

            logger.error("SendGrid rejected email to %s: %s %s", to_email, response.status_code, response.text)
            return False

        except requests.exceptions.Timeout:
            logger.warning("SendGrid request timed out sending to %s", to_email)
            return False
        except Exception:
            logger.exception("Error sending email to %s", to_email)
            return False

    @staticmethod
    def extract_plain_text(html_content: str) -> str:
        text = re.sub(r'<[^>]+>', ' ', html_content)
        text = re.sub(r'&nbsp;', ' ', text)
        text = re.sub(r'&amp;', '&', text)
        text = re.sub(r'&lt;', '<', text)
        text = re.sub(r'&gt;', '>', text)
        text = re.sub(r'\s+', ' ', text)
        return text.strip()

    @staticmethod
    def render(title: str, content: str) -> str:
        return f"""
        <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
            <div style="background-color: #4CAF50; color: white; padding: 20px; text-align: center;">
                <h1 style="margin: 0;">JazzMan Housecalls</h1>
                <p style="margin: 5px 0 0 0;">Premium Housecall Barber Services</p>
            </div>
            <div style="padding: 20px; background-color: #f9f9f9;">
                <h2>{title}</h2>
                {content}
            </div>
        </div>
        """

    @staticmethod
    def booking_details(booking) -> str:
        return f"""
            <div style="background-color: white; padding: 15px; margin: 20px 0; border-radius: 5px;">
                <p><strong>Booking ID:</strong> #{booking.id}</p>
                <p><strong>Service:</strong> {sanitize_input(booking.service_type)}</p>
                <p><strong>Price:</strong> KSh {booking.service_price:,.2f}</p>
                <p><strong>Date &amp; Time:</strong> {booking.preferred_datetime:%a %d %b %Y, %H:%M}</p>
                <p><strong>Customer:</strong> {sanitize_input(booking.customer_name)} ({sanitize_input(booking.customer_phone)})</p>
                <p><strong>Address:</strong> {sanitize_input(booking.address)}</p>
            </div>
        """

    @staticmethod
    def send_barber_assignment(barber_name: str, barber_email: str, booking) -> bool:
        if not barber_email:
            logger.info("Barber %s has no email address, skipping assignment notice", barber_name)
            return False
        content = f"""
            <p>Hello {barber_name},</p>
            <p>You have been assigned a new housecall.</p>
            {EmailService.booking_details(booking)}
            <p>Notes: {sanitize_input(booking.notes) or 'None'}</p>
        """
        subject = f"New Booking #{booking.id} - {booking.service_type}"
        return EmailService.send_email(barber_email, subject, EmailService.render("New Booking Assigned", content))

    @staticmethod
    def send_booking_confirmation(booking) -> bool:
        if not booking.customer_email:
            return False
        content = f"""
            <p>Dear {sanitize_input(booking.customer_name)},</p>
            <p>Thank you for booking with JazzMan Housecalls! Your appointment has been received.</p>
            {EmailService.booking_details(booking)}
            <p><strong>Barber:</strong> {booking.barber_name} ({booking.barber_phone})</p>
        """
        return EmailService.send_email(
            booking.customer_email,
            "JazzMan Housecalls - Booking Confirmation",
            EmailService.render("Booking Confirmation", content),
        )

    @staticmethod
    def send_cancellation_notice(barber_name: str, barber_email: str, booking) -> bool:
        if not barber_email:
            logger.info("Barber %s has no email address, skipping cancellation notice", barber_name)
            return False
        content = f"""
            <p>Hello {barber_name},</p>
            <p>A booking assigned to you has been cancelled.</p>
            {EmailService.booking_details(booking)}
            <p><strong>Cancelled by:</strong> {sanitize_input(booking.cancelled_by)}</p>
            <p><strong>Reason:</strong> {sanitize_input(booking.cancellation_reason)}</p>
            <p>This time slot is free again.</p>
        """
        subject = f"Booking #{booking.id} Cancelled - {booking.service_type}"
        return EmailService.send_email(barber_email, subject, EmailService.render("Booking Cancelled", content))

    @staticmethod
    def send_block_notice(barber_name: str, barber_email: str, temporary: bool, duration_hours, reason: str) -> bool:
        kind = "Temporary Suspension" if temporary else "Permanent Ban"
        duration = f"<p><strong>Duration:</strong> {duration_hours:g} hour(s)</p>" if temporary else ""
        content = f"""
            <p>Dear {barber_name},</p>
            <p>Your JazzMan Housecalls account has been suspended from receiving new bookings.</p>
            <div style="background-color: white; padding: 15px; margin: 20px 0; border-radius: 5px;">
                <p><strong>Type:</strong> {kind}</p>
                <p><strong>Reason:</strong> {sanitize_input(reason)}</p>
                {duration}
            </div>
            <p>If you believe this was made in error, please contact our support team.</p>
        """
        html = EmailService.render("Account Suspension Notice", content)
        sent = False
        if barber_email:
            sent = EmailService.send_email(barber_email, f"Barber Account Suspended: {barber_name}", html)
        EmailService.send_email(settings.ADMIN_EMAIL, f"Barber Blocked: {barber_name}", html)
        return sent

    @staticmethod
    def send_payment_receipt(booking, payment) -> bool:
        if not booking.customer_email:
            return False
        paid_at = payment.payment_received_at or payment.created_at
        content = f"""
            <p>Dear {sanitize_input(booking.customer_name)},</p>
            <p>Thank you for your payment. Here is your receipt.</p>
            <div style="background-color: white; padding: 15px; margin: 20px 0; border-radius: 5px;">
                <p><strong>Receipt #:</strong> {payment.id}</p>
                <p><strong>Transaction:</strong> {payment.transaction_id}</p>
                <p><strong>Date:</strong> {paid_at:%d %b %Y}</p>
                <p><strong>Method:</strong> {(payment.payment_method_used or payment.payment_method.value).upper()}</p>
                <p><strong>Amount:</strong> KSh {payment.amount:,.2f}</p>
            </div>
            {EmailService.booking_details(booking)}
            <p><strong>Your Barber:</strong> {booking.barber_name or 'To be confirmed'} ({booking.barber_identity_badge or '-'})</p>
        """
        return EmailService.send_email(
            booking.customer_email,
            f"Payment Receipt - {booking.service_type}",
            EmailService.render("Payment Receipt", content),
        )

    @staticmethod
    def send_daily_summary(barber_name: str, barber_email: str, day, summary: dict) -> bool:
        services = ", ".join(sanitize_input(s) for s in summary["services"]) or "None"
        content = f"""
            <p>Hello {barber_name},</p>
            <p>Here is your summary for {day:%A, %d %B %Y}.</p>
            <div style="background-color: white; padding: 15px; margin: 20px 0; border-radius: 5px;">
                <p><strong>Total Bookings:</strong> {summary['total_bookings']}</p>
                <p><strong>Completed:</strong> {summary['completed_bookings']}</p>
                <p><strong>Pending:</strong> {summary['pending_bookings']}</p>
                <p><strong>Cancelled:</strong> {summary['cancelled_bookings']}</p>
                <p><strong>Earnings:</strong> KSh {summary['earnings']:,.2f}</p>
                <p><strong>Services:</strong> {services}</p>
            </div>
        """
        return EmailService.send_email(
            barber_email,
            f"Daily Summary - {day:%Y-%m-%d} - JazzMan Housecalls",
            EmailService.render("Daily Summary", content),
        )
