# backend/app/services/email.py
"""
Email Service for the booking platform

Renders the Jinja2 email templates and delivers them through Resend when an
API key is configured, or through the console transport otherwise (local
development and tests).
"""

from datetime import date
import logging
import re
from typing import Any, Dict, Optional

import resend

from ..core.config import settings
from ..core.constants import BRAND_NAME, OTP_PURPOSE_PASSWORD_RESET
from ..core.exceptions import ServiceException
from ..models.booking import Booking
from .base import BaseService
from .email_console import ConsoleEmailService
from .template_service import TemplateService

logger = logging.getLogger(__name__)


class EmailService(BaseService):
    """
    Service for sending transactional emails.

    Extends BaseService for consistent metrics and logging. Uses dependency
    injection: the template renderer and console transport can be supplied.
    """

    def __init__(
        self,
        template_service: Optional[TemplateService] = None,
        console: Optional[ConsoleEmailService] = None,
    ):
        super().__init__(None)
        self.template_service = template_service or TemplateService()
        self.console = console or ConsoleEmailService()
        self.from_email = settings.from_email

        self.use_resend = bool(settings.resend_api_key)
        if self.use_resend:
            resend.api_key = settings.resend_api_key
        else:
            self.logger.info("Resend API key not configured, emails go to the console transport")

    def _html_to_text(self, html_content: str) -> str:
        """Convert HTML content to plain text for better deliverability"""
        text = re.sub(r"<[^>]+>", "", html_content)
        text = re.sub(r"\s+", " ", text)
        return text.strip()

    @BaseService.measure_operation("send_email")
    def send_email(self, to_email: str, subject: str, html_content: str) -> Dict[str, Any]:
        """
        Send one email.

        Raises:
            ServiceException: If the provider rejects or the call fails
        """
        text_content = self._html_to_text(html_content)
        try:
            if self.use_resend:
                response = resend.Emails.send(
                    {
                        "from": self.from_email,
                        "to": to_email,
                        "subject": subject,
                        "html": html_content,
                        "text": text_content,
                    }
                )
            else:
                response = self.console.send_email(to_email, subject, html_content, text_content)
        except Exception as e:
            self.logger.error(f"Failed to send email to {to_email}: {type(e).__name__}: {str(e)}")
            raise ServiceException(f"Failed to send email: {str(e)}")

        self.log_operation("email_sent", to_email=to_email, subject=subject)
        return response

    def _render_and_send(self, to_email: str, subject: str, template: str, **context: Any) -> Dict[str, Any]:
        html = self.template_service.render_template(f"email/{template}.html", context)
        return self.send_email(to_email, subject, html)

    # One-time codes

    def send_otp_email(self, to_email: str, code: str, purpose: str, first_name: Optional[str] = None) -> Dict[str, Any]:
        if purpose == OTP_PURPOSE_PASSWORD_RESET:
            subject = f"Reset your {BRAND_NAME} password"
            action = "reset your password"
        else:
            subject = f"Verify your {BRAND_NAME} email"
            action = "verify your email address"
        return self._render_and_send(
            to_email,
            subject,
            "otp_verification",
            code=code,
            action=action,
            first_name=first_name,
            ttl_minutes=settings.otp_ttl_minutes,
        )

    # Bookings

    def _booking_context(self, booking: Booking) -> Dict[str, Any]:
        instructor_user = booking.instructor.user if booking.instructor else None
        return {
            "student_name": booking.user.first_name if booking.user else "",
            "instructor_name": instructor_user.full_name if instructor_user else "",
            "booking_date": booking.booking_date,
            "start_time": booking.start_time,
            "end_time": booking.end_time,
            "location": booking.location,
            "class_type": booking.class_type,
            "package": booking.package,
            "duration_minutes": booking.duration_minutes,
        }

    def send_booking_pending(self, booking: Booking) -> Dict[str, Any]:
        return self._render_and_send(
            booking.user.email,
            f"Your {BRAND_NAME} booking request was received",
            "booking_pending",
            **self._booking_context(booking),
        )

    def send_booking_confirmation(self, booking: Booking) -> Dict[str, Any]:
        return self._render_and_send(
            booking.user.email,
            f"Your {BRAND_NAME} lesson is confirmed",
            "booking_confirmation",
            **self._booking_context(booking),
        )

    def send_booking_cancellation(self, booking: Booking) -> Dict[str, Any]:
        return self._render_and_send(
            booking.user.email,
            f"Your {BRAND_NAME} lesson was cancelled",
            "booking_cancellation",
            **self._booking_context(booking),
        )

    def send_booking_reschedule(self, booking: Booking, old_date: date, old_start_time: str) -> Dict[str, Any]:
        return self._render_and_send(
            booking.user.email,
            f"Your {BRAND_NAME} lesson was rescheduled",
            "booking_reschedule",
            old_date=old_date,
            old_start_time=old_start_time,
            **self._booking_context(booking),
        )

    def send_booking_reminder(self, booking: Booking) -> Dict[str, Any]:
        return self._render_and_send(
            booking.user.email,
            f"Reminder: your {BRAND_NAME} lesson is tomorrow",
            "booking_reminder",
            **self._booking_context(booking),
        )
