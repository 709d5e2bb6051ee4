"""Shared validation utilities"""

import re
from datetime import date, datetime, timezone
from typing import Optional

from ..models import DAYS_OF_WEEK

TIME_OF_DAY_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


def validate_email(email: Optional[str]) -> Optional[str]:
    """
    Validate email format.

    Args:
        email: Email address string

    Returns:
        Lowercase email address

    Raises:
        ValueError: If email format is invalid
    """
    if not email:
        return email

    email = email.strip().lower()

    # Basic email validation pattern
    email_pattern = r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$"

    if not re.match(email_pattern, email):
        raise ValueError("Invalid email format")

    return email


def validate_phone(phone: Optional[str]) -> Optional[str]:
    """
    Normalize a phone number to digits with an optional leading +.

    Raises:
        ValueError: If fewer than 7 or more than 15 digits remain
    """
    if not phone:
        return phone

    stripped = phone.strip()
    digits = re.sub(r"\D", "", stripped)
    if not 7 <= len(digits) <= 15:
        raise ValueError("Phone number must contain between 7 and 15 digits")

    return f"+{digits}" if stripped.startswith("+") else digits


def validate_time_of_day(value: str) -> str:
    """Validate an HH:MM (24 hour) time string"""
    if not value or not TIME_OF_DAY_PATTERN.match(value):
        raise ValueError(f"Invalid time '{value}', expected HH:MM")
    return value


def validate_time_range(start: str, end: str) -> tuple[str, str]:
    """Validate an HH:MM range where start is strictly before end"""
    validate_time_of_day(start)
    validate_time_of_day(end)
    if start >= end:
        raise ValueError(f"Start time {start} must be before end time {end}")
    return start, end


def validate_day_of_week(day: str) -> str:
    day = (day or "").strip().lower()
    if day not in DAYS_OF_WEEK:
        raise ValueError(f"Invalid day of week '{day}'")
    return day


def utcnow() -> datetime:
    """Current UTC time as a naive datetime (the storage convention)"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def parse_datetime(value) -> datetime:
    """
    Parse an ISO-8601 datetime (or date) into a naive UTC datetime.

    Accepts a trailing 'Z'. Offsets are converted to UTC.

    Raises:
        ValueError: If the value cannot be parsed
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    else:
        if not value or not isinstance(value, str):
            raise ValueError("Datetime value is required")
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
    return parsed
