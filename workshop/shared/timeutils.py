"""Clock helpers for the workshop's fixed UTC offset.

Timestamps are persisted as naive UTC. Slot dates and times are wall-clock
values at ``WORKSHOP_UTC_OFFSET`` so every client books the same instant for
the same slot.
"""

import re
from datetime import date, datetime, time, timedelta, timezone

from ..config import WORKSHOP_UTC_OFFSET

_OFFSET_PATTERN = re.compile(r"^([+-])(\d{2}):?(\d{2})$")


def parse_utc_offset(value: str) -> timezone:
    match = _OFFSET_PATTERN.match(value.strip())
    if not match:
        raise ValueError(f"Invalid UTC offset '{value}', expected +HH:MM")
    sign, hours, minutes = match.groups()
    delta = timedelta(hours=int(hours), minutes=int(minutes))
    return timezone(-delta if sign == "-" else delta)


WORKSHOP_TZ = parse_utc_offset(WORKSHOP_UTC_OFFSET)


def utc_now() -> datetime:
    """Current time as naive UTC, the storage convention"""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def to_storage(value: datetime) -> datetime:
    """Convert any datetime to naive UTC; naive input is taken as UTC already"""
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def slot_instant(date_key: str, hhmm: str, tz: timezone = WORKSHOP_TZ) -> datetime:
    """Absolute (naive UTC) instant of a slot on a workshop calendar day"""
    hours, minutes = (int(part) for part in hhmm.split(":"))
    local = datetime.combine(date.fromisoformat(date_key), time(hours, minutes), tzinfo=tz)
    return to_storage(local)


def local_day_bounds(date_key: str, tz: timezone = WORKSHOP_TZ) -> tuple[datetime, datetime]:
    """Naive UTC [start, end) of a workshop calendar day"""
    start = datetime.combine(date.fromisoformat(date_key), time(0, 0), tzinfo=tz)
    return to_storage(start), to_storage(start + timedelta(days=1))


def to_local(value: datetime, tz: timezone = WORKSHOP_TZ) -> datetime:
    """Stored naive UTC timestamp as workshop wall-clock time"""
    return value.replace(tzinfo=timezone.utc).astimezone(tz)
