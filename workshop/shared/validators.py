"""Shared validation utilities"""

import re
from datetime import date, datetime
from typing import Optional

TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):([0-5]\d)$")

# VINs never contain I, O or Q
VIN_PATTERN = re.compile(r"^[A-HJ-NPR-Z0-9]{17}$")


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


def validate_vin(vin: Optional[str]) -> str:
    """
    Validate a 17 character vehicle identification number.

    Returns:
        Uppercase VIN

    Raises:
        ValueError: If the VIN has the wrong length or forbidden characters
    """
    if not vin:
        raise ValueError("VIN is required")

    vin = vin.strip().upper()
    if not VIN_PATTERN.match(vin):
        raise ValueError("VIN must be 17 characters (letters except I, O, Q and digits)")
    return vin


def validate_date_key(value: Optional[str]) -> str:
    """Validate a calendar date key in YYYY-MM-DD form"""
    if not value:
        raise ValueError("Date is required")
    try:
        parsed = date.fromisoformat(value.strip())
    except ValueError:
        raise ValueError(f"Invalid date '{value}', expected YYYY-MM-DD") from None
    return parsed.isoformat()


def validate_time_of_day(value: Optional[str]) -> str:
    """Validate a 24-hour HH:MM time"""
    if not value:
        raise ValueError("Time is required")
    value = value.strip()
    if not TIME_PATTERN.match(value):
        raise ValueError(f"Invalid time '{value}', expected HH:MM")
    return value


def split_scheduled_time(value: str) -> tuple[str, str]:
    """Split a 'YYYY-MM-DDTHH:MM' booking time into its date and time parts"""
    if not value or "T" not in value:
        raise ValueError("Scheduled time must look like YYYY-MM-DDTHH:MM")
    date_part, time_part = value.split("T", 1)
    return validate_date_key(date_part), validate_time_of_day(time_part[:5])


def parse_datetime(value: str) -> datetime:
    """Parse an ISO timestamp, accepting a trailing Z"""
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except (ValueError, AttributeError):
        raise ValueError(f"Invalid timestamp '{value}'") from None
