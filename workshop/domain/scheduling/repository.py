"""Scheduling repository - The booking transaction"""

from datetime import datetime
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from ...models import Availability, AvailabilitySlot, ServiceRecord, Vehicle


class SchedulingRepository:
    """Repository for booking database operations"""

    @staticmethod
    def get_vehicle(db: Session, vehicle_id: str) -> Optional[Vehicle]:
        return (
            db.query(Vehicle)
            .options(joinedload(Vehicle.customer))
            .filter(Vehicle.id == vehicle_id)
            .first()
        )

    @staticmethod
    def get_slot(db: Session, date_key: str, time: str) -> Optional[AvailabilitySlot]:
        return (
            db.query(AvailabilitySlot)
            .options(joinedload(AvailabilitySlot.availability))
            .filter(AvailabilitySlot.date == date_key, AvailabilitySlot.time == time)
            .first()
        )

    @staticmethod
    def claim_slot_and_create_service(
        db: Session, date_key: str, time: str, **service_data
    ) -> Optional[ServiceRecord]:
        """
        Atomically take a slot and record the booked service.

        The slot is flipped by a conditional UPDATE that only matches an open
        slot of an unblocked day. If it matches no row someone else got there
        first: nothing is written and None is returned.
        """
        open_days = select(Availability.date).where(
            Availability.date == date_key, Availability.is_blocked.is_(False)
        )
        try:
            claimed = (
                db.query(AvailabilitySlot)
                .filter(
                    AvailabilitySlot.date == date_key,
                    AvailabilitySlot.time == time,
                    AvailabilitySlot.available.is_(True),
                    AvailabilitySlot.date.in_(open_days),
                )
                .update({AvailabilitySlot.available: False}, synchronize_session=False)
            )
            if claimed != 1:
                db.rollback()
                return None

            service = ServiceRecord(**service_data)
            db.add(service)
            db.commit()
        except SQLAlchemyError:
            db.rollback()
            raise

        db.refresh(service)
        return service

    @staticmethod
    def get_scheduled_services(db: Session, start: datetime, end: datetime) -> list[ServiceRecord]:
        """Scheduled services with start <= serviceDate < end"""
        return (
            db.query(ServiceRecord)
            .options(joinedload(ServiceRecord.vehicle))
            .filter(
                ServiceRecord.service_date >= start,
                ServiceRecord.service_date < end,
                ServiceRecord.status == "scheduled",
            )
            .order_by(ServiceRecord.service_date.asc())
            .all()
        )
