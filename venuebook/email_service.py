"""
Email Service using Resend
Provides email functionality using MJML templates for responsive design
"""

import logging
from typing import Optional, Union

import resend
from mjml import mjml_to_html

from .config import EMAIL_FROM_ADDRESS, FRONTEND_URL, RESEND_API_KEY
from .email_templates import (
    booking_cancelled_template,
    booking_completed_template,
    booking_confirmed_template,
    booking_reminder_template,
    email_verification_template,
    new_booking_request_template,
    password_reset_template,
)

logger = logging.getLogger(__name__)

resend.api_key = RESEND_API_KEY


class EmailNotConfiguredError(Exception):
    """Raised when no email provider is configured"""


def compile_mjml_to_html(mjml_content: str) -> str:
    """Compile MJML template to production-ready HTML"""
    try:
        result = mjml_to_html(mjml_content)
        # mjml_to_html returns a dict-like result with 'html' and 'errors'
        if isinstance(result, dict):
            if result.get("errors"):
                logger.warning(f"MJML compilation warnings: {result['errors']}")
            return result.get("html", "")
        html = getattr(result, "html", None)
        return html if html is not None else str(result)
    except Exception as e:
        logger.error(f"MJML compilation error: {e}")
        raise Exception(f"Failed to compile MJML template: {str(e)}") from e


async def send_email(
    to: Union[str, list[str]],
    subject: str,
    mjml_content: str,
    from_address: Optional[str] = None,
) -> dict:
    """
    Send an email through Resend

    Args:
        to: Recipient email(s)
        subject: Email subject line
        mjml_content: MJML template content (will be compiled to HTML)
        from_address: Optional custom from address

    Returns:
        Send response dict
    """
    if not RESEND_API_KEY:
        logger.error("No email service configured - RESEND_API_KEY missing")
        raise EmailNotConfiguredError("Email service not configured")

    html_content = compile_mjml_to_html(mjml_content)
    recipients = [to] if isinstance(to, str) else to

    try:
        logger.info(f"Sending email via Resend to: {to}")
        response = resend.Emails.send(
            {
                "from": from_address or EMAIL_FROM_ADDRESS,
                "to": recipients,
                "subject": subject,
                "html": html_content,
            }
        )
        logger.info(f"Email sent successfully via Resend: {response}")
        return response
    except Exception as e:
        logger.error(f"Email send error to {recipients}: {e}")
        raise Exception(f"Failed to send email: {str(e)}") from e


async def notify(sender, *args, **kwargs) -> None:
    """Run one of the senders below; failures are logged, never raised to the caller"""
    try:
        await sender(*args, **kwargs)
    except Exception as e:
        logger.warning(f"Notification {sender.__name__} failed: {e}")


def _when(start_time) -> str:
    return start_time.strftime("%a %d %b %Y, %H:%M UTC")


def booking_title(booking) -> str:
    """Human readable name for a service or venue booking"""
    if booking.service is not None:
        return booking.service.title
    if booking.venue is not None:
        return booking.event_name or booking.venue.name
    return f"Booking #{booking.id}"


# ============================================
# Pre-built emails for common events
# ============================================


async def send_verification_email(to: str, user_name: Optional[str], token: str) -> dict:
    verify_link = f"{FRONTEND_URL}/verify-email?token={token}"
    return await send_email(
        to=to,
        subject="Verify Your Email - VenueBook",
        mjml_content=email_verification_template(user_name, verify_link),
    )


async def send_password_reset_email(to: str, token: str) -> dict:
    reset_link = f"{FRONTEND_URL}/reset-password?token={token}"
    return await send_email(
        to=to,
        subject="Reset Your Password - VenueBook",
        mjml_content=password_reset_template(reset_link),
    )


async def send_new_booking_notification(booking) -> Optional[dict]:
    """Notify the provider of a new booking request"""
    provider = booking.provider
    if provider is None:
        return None
    return await send_email(
        to=provider.email,
        subject=f"New booking request: {booking_title(booking)}",
        mjml_content=new_booking_request_template(
            provider_name=provider.business_name or provider.name,
            client_name=booking.client.name or booking.client.email,
            booking_title=booking_title(booking),
            start_time=_when(booking.start_time),
            location=booking.location,
            client_notes=booking.client_notes,
        ),
    )


async def send_booking_confirmed_email(booking) -> dict:
    provider = booking.provider
    return await send_email(
        to=booking.client.email,
        subject=f"Booking confirmed: {booking_title(booking)}",
        mjml_content=booking_confirmed_template(
            client_name=booking.client.name,
            booking_title=booking_title(booking),
            start_time=_when(booking.start_time),
            provider_name=(provider.business_name or provider.name) if provider else None,
            location=booking.location,
        ),
    )


async def send_booking_cancelled_email(booking, recipient) -> dict:
    """Tell the party that did not cancel about the cancellation"""
    return await send_email(
        to=recipient.email,
        subject=f"Booking cancelled: {booking_title(booking)}",
        mjml_content=booking_cancelled_template(
            recipient_name=recipient.name,
            booking_title=booking_title(booking),
            start_time=_when(booking.start_time),
            cancelled_by=booking.cancellation_by or "other party",
            reason=booking.cancellation_reason,
        ),
    )


async def send_booking_completed_email(booking) -> dict:
    review_link = f"{FRONTEND_URL}/bookings/{booking.id}/review"
    return await send_email(
        to=booking.client.email,
        subject=f"How was {booking_title(booking)}?",
        mjml_content=booking_completed_template(
            client_name=booking.client.name,
            booking_title=booking_title(booking),
            review_link=review_link,
        ),
    )


async def send_booking_reminder_email(booking) -> dict:
    return await send_email(
        to=booking.client.email,
        subject=f"Reminder: {booking_title(booking)} is coming up",
        mjml_content=booking_reminder_template(
            client_name=booking.client.name,
            booking_title=booking_title(booking),
            start_time=_when(booking.start_time),
            location=booking.location,
        ),
    )
