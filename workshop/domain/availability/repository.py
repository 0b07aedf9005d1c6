"""Availability repository - Database operations for availability days and slots"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import Availability, AvailabilitySlot
from ...shared.timeutils import utc_now


class AvailabilityRepository:
    """Repository for availability database operations"""

    @staticmethod
    def get_availability(db: Session, date_key: str) -> Optional[Availability]:
        return db.query(Availability).filter(Availability.date == date_key).first()

    @staticmethod
    def upsert_availability(
        db: Session,
        date_key: str,
        is_blocked: bool,
        work_start: str,
        work_end: str,
        interval_minutes: int,
        slots: Optional[list[tuple[str, bool]]],
        updated_by: str,
    ) -> Availability:
        """
        Create or replace a day.

        `slots` is the complete new slot list as (time, available) pairs, or None
        to keep the stored slots. Rows whose time survives are updated in place so
        the (date, time) unique constraint never sees a transient duplicate.
        """
        record = db.query(Availability).filter(Availability.date == date_key).first()
        if not record:
            record = Availability(date=date_key)
            db.add(record)

        record.is_blocked = is_blocked
        record.work_start = work_start
        record.work_end = work_end
        record.interval_minutes = interval_minutes
        record.updated_at = utc_now()
        record.updated_by = updated_by

        if slots is not None:
            existing = {slot.time: slot for slot in record.slots}
            wanted = dict(slots)
            for time, slot in existing.items():
                if time not in wanted:
                    record.slots.remove(slot)
            db.flush()
            for time, available in wanted.items():
                if time in existing:
                    existing[time].available = available
                else:
                    record.slots.append(AvailabilitySlot(time=time, available=available))

        db.commit()
        db.refresh(record)
        return record

    @staticmethod
    def set_slot(db: Session, date_key: str, time: str, available: bool, updated_by: str) -> int:
        """Set one slot's flag. Returns the number of slots changed (0 or 1)"""
        updated = (
            db.query(AvailabilitySlot)
            .filter(AvailabilitySlot.date == date_key, AvailabilitySlot.time == time)
            .update({AvailabilitySlot.available: available}, synchronize_session=False)
        )
        if updated:
            db.query(Availability).filter(Availability.date == date_key).update(
                {Availability.updated_at: utc_now(), Availability.updated_by: updated_by},
                synchronize_session=False,
            )
        db.commit()
        return updated
