"""
MJML Email Templates
All email templates using MJML for responsive, cross-client compatibility
"""

from typing import Optional

from .config import FRONTEND_URL
from .shared.sanitization import sanitize_string

# App theme colors - Indigo/Slate color scheme
THEME = {
    "primary": "#4f46e5",
    "primary_dark": "#4338ca",
    "primary_light": "#e0e7ff",
    "background": "#f8fafc",
    "card_bg": "#ffffff",
    "text_primary": "#0f172a",
    "text_secondary": "#334155",
    "text_muted": "#64748b",
    "border": "#e2e8f0",
    "success": "#16a34a",
    "warning": "#f59e0b",
    "danger": "#ef4444",
}


def _fmt(value) -> str:
    """Escape user-supplied text before it is interpolated into MJML"""
    return sanitize_string(str(value)) if value is not None else ""


def get_base_template(
    title: str,
    preview_text: str,
    content_sections: str,
    cta_url: Optional[str] = None,
    cta_label: Optional[str] = None,
    is_user_email: bool = False,
) -> str:
    """Base MJML template wrapper for all emails"""

    cta_section = ""
    if cta_url and cta_label:
        cta_section = f"""
        <mj-section background-color="#ffffff" padding="0 40px 48px 40px">
          <mj-column>
            <mj-button
              href="{cta_url}"
              background-color="{THEME['primary']}"
              color="#ffffff"
              font-weight="600"
              border-radius="8px"
              padding="18px 40px"
              font-size="16px">
              {cta_label}
            </mj-button>
          </mj-column>
        </mj-section>
        """

    footer_notice = ""
    if is_user_email:
        footer_notice = """
        <mj-text align="center" font-size="12px" color="#94a3b8" padding="12px 0 0 0">
          You're receiving this because you have an account with VenueBook.
        </mj-text>
        """

    return f"""
    <mjml>
      <mj-head>
        <mj-title>{title}</mj-title>
        <mj-preview>{preview_text}</mj-preview>
        <mj-attributes>
          <mj-all font-family="-apple-system, BlinkMacSystemFont, 'Segoe UI', 'Helvetica Neue', Arial, sans-serif" />
          <mj-text font-size="16px" line-height="1.6" color="{THEME['text_secondary']}" />
        </mj-attributes>
      </mj-head>
      <mj-body background-color="{THEME['background']}">
        <!-- Header -->
        <mj-section background-color="#ffffff" padding="32px 20px">
          <mj-column>
            <mj-text font-size="22px" font-weight="700" color="{THEME['primary']}" align="center" padding="0">
              VenueBook
            </mj-text>
          </mj-column>
        </mj-section>

        <mj-section background-color="#ffffff" padding="0 40px 40px 40px">
          <mj-column>
            <mj-divider border-color="{THEME['border']}" border-width="1px" padding="0 0 32px 0" />
          </mj-column>
        </mj-section>

        <!-- Main Content -->
        <mj-section background-color="#ffffff" padding="0 40px 32px 40px">
          <mj-column>
            <mj-text font-size="24px" font-weight="600" color="{THEME['text_primary']}" line-height="1.3" padding="0 0 16px 0">
              {title}
            </mj-text>

            {content_sections}
          </mj-column>
        </mj-section>

        {cta_section}

        <!-- Footer -->
        <mj-section padding="32px 20px">
          <mj-column>
            <mj-text align="center" font-size="13px" color="#94a3b8" padding="0">
              © VenueBook. All rights reserved.
            </mj-text>
            {footer_notice}
          </mj-column>
        </mj-section>
      </mj-body>
    </mjml>
    """


def _booking_details_box(details: list[tuple[str, str]]) -> str:
    rows = "".join(
        f"""
      <tr>
        <td style="padding: 6px 0; color: {THEME['text_muted']}; width: 40%;">{label}</td>
        <td style="padding: 6px 0; color: {THEME['text_primary']}; font-weight: 500;">{_fmt(value)}</td>
      </tr>"""
        for label, value in details
        if value
    )
    return f"""
    <mj-table padding="8px 0 16px 0" font-size="15px">
      {rows}
    </mj-table>
    """


def email_verification_template(user_name: str, verify_link: str) -> str:
    """Email verification MJML template"""
    content = f"""
    <mj-text>
      Hi {_fmt(user_name) or 'there'},
    </mj-text>

    <mj-text>
      Thanks for signing up. Please confirm your email address so we can keep you
      updated about your bookings.
    </mj-text>

    <mj-text font-size="13px" color="{THEME['text_muted']}">
      This link expires in 24 hours. If you didn't create an account, you can ignore this email.
    </mj-text>
    """

    return get_base_template(
        title="Verify Your Email Address",
        preview_text="Confirm your VenueBook account",
        content_sections=content,
        cta_url=verify_link,
        cta_label="Verify Email",
        is_user_email=True,
    )


def password_reset_template(reset_link: str) -> str:
    """Password reset MJML template"""
    content = f"""
    <mj-text>
      We received a request to reset your password.
    </mj-text>

    <mj-text>
      Click the button below to create a new password. This link will expire in 1 hour.
    </mj-text>

    <mj-text font-size="13px" color="{THEME['text_muted']}">
      If you didn't request this, you can safely ignore this email. Your password won't be changed.
    </mj-text>
    """

    return get_base_template(
        title="Reset Your Password",
        preview_text="Reset your VenueBook password",
        content_sections=content,
        cta_url=reset_link,
        cta_label="Reset Password",
        is_user_email=True,
    )


def new_booking_request_template(
    provider_name: str,
    client_name: str,
    booking_title: str,
    start_time: str,
    location: Optional[str] = None,
    client_notes: Optional[str] = None,
) -> str:
    """Sent to the provider when a client requests a booking"""
    details = _booking_details_box(
        [
            ("Booking", booking_title),
            ("When", start_time),
            ("Location", location),
            ("Notes", client_notes),
        ]
    )
    content = f"""
    <mj-text>
      Hi {_fmt(provider_name) or 'there'},
    </mj-text>

    <mj-text>
      <strong>{_fmt(client_name)}</strong> has requested a booking and is waiting for your confirmation.
    </mj-text>

    {details}
    """

    return get_base_template(
        title="New Booking Request",
        preview_text=f"{_fmt(client_name)} requested {_fmt(booking_title)}",
        content_sections=content,
        cta_url=f"{FRONTEND_URL}/bookings",
        cta_label="Review Booking",
        is_user_email=True,
    )


def booking_confirmed_template(
    client_name: str,
    booking_title: str,
    start_time: str,
    provider_name: Optional[str] = None,
    location: Optional[str] = None,
) -> str:
    """Sent to the client once the provider confirms"""
    details = _booking_details_box(
        [
            ("Booking", booking_title),
            ("When", start_time),
            ("With", provider_name),
            ("Location", location),
        ]
    )
    content = f"""
    <mj-text>
      Hi {_fmt(client_name) or 'there'},
    </mj-text>

    <mj-text>
      Good news! Your booking has been confirmed.
    </mj-text>

    {details}
    """

    return get_base_template(
        title="Booking Confirmed",
        preview_text=f"Your booking for {_fmt(booking_title)} is confirmed",
        content_sections=content,
        cta_url=f"{FRONTEND_URL}/bookings",
        cta_label="View Booking",
    )


def booking_cancelled_template(
    recipient_name: str,
    booking_title: str,
    start_time: str,
    cancelled_by: str,
    reason: Optional[str] = None,
) -> str:
    """Sent to the other party when a booking is cancelled"""
    details = _booking_details_box(
        [("Booking", booking_title), ("When", start_time), ("Reason", reason)]
    )
    content = f"""
    <mj-text>
      Hi {_fmt(recipient_name) or 'there'},
    </mj-text>

    <mj-text>
      The following booking was cancelled by the {_fmt(cancelled_by)}.
    </mj-text>

    {details}
    """

    return get_base_template(
        title="Booking Cancelled",
        preview_text=f"{_fmt(booking_title)} on {_fmt(start_time)} was cancelled",
        content_sections=content,
    )


def booking_completed_template(client_name: str, booking_title: str, review_link: str) -> str:
    """Thank-you note with a review request after a completed booking"""
    content = f"""
    <mj-text>
      Hi {_fmt(client_name) or 'there'},
    </mj-text>

    <mj-text>
      Thanks for booking <strong>{_fmt(booking_title)}</strong>. We hope everything went well.
    </mj-text>

    <mj-text>
      Reviews help other customers choose with confidence. It only takes a minute.
    </mj-text>
    """

    return get_base_template(
        title="How Did It Go?",
        preview_text=f"Leave a review for {_fmt(booking_title)}",
        content_sections=content,
        cta_url=review_link,
        cta_label="Leave a Review",
    )


def booking_reminder_template(
    client_name: str,
    booking_title: str,
    start_time: str,
    location: Optional[str] = None,
) -> str:
    """Reminder for a confirmed booking coming up soon"""
    details = _booking_details_box(
        [("Booking", booking_title), ("When", start_time), ("Location", location)]
    )
    content = f"""
    <mj-text>
      Hi {_fmt(client_name) or 'there'},
    </mj-text>

    <mj-text>
      This is a friendly reminder about your upcoming booking.
    </mj-text>

    {details}
    """

    return get_base_template(
        title="Upcoming Booking Reminder",
        preview_text=f"{_fmt(booking_title)} starts {_fmt(start_time)}",
        content_sections=content,
        cta_url=f"{FRONTEND_URL}/bookings",
        cta_label="View Booking",
    )
