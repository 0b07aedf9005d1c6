"""Availability service - Working hours, slot generation and slot toggling"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ... import config
from ...auth import STAFF_ROLES, Principal, ensure_role
from ...models import Availability
from ...shared.errors import ValidationError
from ...shared.validators import validate_date_key, validate_time_of_day
from .repository import AvailabilityRepository
from .schemas import TimeSlot, WorkingHours

logger = logging.getLogger(__name__)


def _minutes(hhmm: str) -> int:
    hours, minutes = hhmm.split(":")
    return int(hours) * 60 + int(minutes)


def _hhmm(total_minutes: int) -> str:
    return f"{total_minutes // 60:02d}:{total_minutes % 60:02d}"


def default_working_hours() -> WorkingHours:
    return WorkingHours(
        start=config.DEFAULT_WORK_START,
        end=config.DEFAULT_WORK_END,
        interval=config.DEFAULT_SLOT_INTERVAL,
    )


def check_date(date_key: Optional[str]) -> str:
    try:
        return validate_date_key(date_key)
    except ValueError as e:
        raise ValidationError(str(e)) from e


def check_time(time: Optional[str]) -> str:
    try:
        return validate_time_of_day(time)
    except ValueError as e:
        raise ValidationError(str(e)) from e


def check_working_hours(hours: WorkingHours) -> WorkingHours:
    start, end = check_time(hours.start), check_time(hours.end)
    if hours.interval <= 0:
        raise ValidationError("Interval must be a positive number of minutes")
    return WorkingHours(start=start, end=end, interval=hours.interval)


def generate_slots(working_hours: WorkingHours, date_key: Optional[str] = None) -> list[TimeSlot]:
    """
    Build the open slots of a day: one every `interval` minutes from `start`,
    keeping only starts strictly before `end`.

    The date does not influence the result; it is accepted so callers can pass
    the day they are generating for. `start >= end` gives no slots.
    """
    hours = check_working_hours(working_hours)
    start, end = _minutes(hours.start), _minutes(hours.end)
    return [TimeSlot(time=_hhmm(m), available=True) for m in range(start, end, hours.interval)]


def availability_view(date_key: str, record: Optional[Availability]) -> dict:
    """Wire shape of a day; a day without a record is open with default hours and no slots"""
    if not record:
        return {
            "date": date_key,
            "isBlocked": False,
            "workingHours": default_working_hours(),
            "timeSlots": [],
            "updatedAt": None,
            "updatedBy": None,
        }
    return {
        "date": record.date,
        "isBlocked": record.is_blocked,
        "workingHours": WorkingHours(
            start=record.work_start, end=record.work_end, interval=record.interval_minutes
        ),
        "timeSlots": [TimeSlot(time=s.time, available=s.available) for s in record.slots],
        "updatedAt": record.updated_at,
        "updatedBy": record.updated_by,
    }


class AvailabilityService:
    """Service layer for availability business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = AvailabilityRepository()

    def get_availability(self, date_key: str) -> dict:
        date_key = check_date(date_key)
        return availability_view(date_key, self.repo.get_availability(self.db, date_key))

    def set_availability(
        self,
        date_key: str,
        is_blocked: bool,
        working_hours: Optional[WorkingHours],
        time_slots: Optional[list[TimeSlot]],
        principal: Principal,
    ) -> dict:
        """
        Upsert a day. Existing bookings are left alone; a slot booked earlier
        can be reopened here, which is the staff's call to make.
        """
        ensure_role(principal, *STAFF_ROLES)
        date_key = check_date(date_key)

        if working_hours is None:
            current = self.repo.get_availability(self.db, date_key)
            working_hours = availability_view(date_key, current)["workingHours"]
        hours = check_working_hours(working_hours)

        slots = None
        if time_slots is not None:
            times = [check_time(slot.time) for slot in time_slots]
            if len(set(times)) != len(times):
                raise ValidationError("Slot times must be unique")
            slots = sorted(zip(times, (slot.available for slot in time_slots)))

        record = self.repo.upsert_availability(
            self.db,
            date_key,
            is_blocked=is_blocked,
            work_start=hours.start,
            work_end=hours.end,
            interval_minutes=hours.interval,
            slots=slots,
            updated_by=principal.uid,
        )
        logger.info(
            f"📅 Availability for {date_key} set by {principal.uid}: "
            f"blocked={is_blocked}, {len(record.slots)} slots"
        )
        return availability_view(date_key, record)

    def set_slot_availability(
        self, date_key: str, time: str, available: bool, principal: Principal
    ) -> dict:
        """Flip one slot. An unknown date or time changes nothing and is not an error"""
        ensure_role(principal, *STAFF_ROLES)
        date_key, time = check_date(date_key), check_time(time)

        changed = self.repo.set_slot(self.db, date_key, time, available, principal.uid)
        if changed:
            logger.info(f"🔁 Slot {date_key} {time} set available={available} by {principal.uid}")
        else:
            logger.info(f"ℹ️ No slot {date_key} {time} to toggle")
        return self.get_availability(date_key)
