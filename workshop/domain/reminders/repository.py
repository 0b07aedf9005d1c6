"""Reminder repository - Database operations for reminders"""

from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session, joinedload

from ...models import Customer, Reminder, ServiceRecord, Vehicle
from ...shared.pagination import paginate


class ReminderRepository:
    """Repository for reminder database operations"""

    @staticmethod
    def list_reminders(
        db: Session,
        page: int,
        limit: int,
        vehicle_id: Optional[str] = None,
        customer_ids: Optional[list[str]] = None,
        unsent_only: bool = False,
        date_from: Optional[datetime] = None,
        date_to: Optional[datetime] = None,
    ) -> tuple[list[Reminder], int]:
        """Filter reminders; `date_from` is inclusive and `date_to` exclusive"""
        query = db.query(Reminder).options(joinedload(Reminder.service))
        if vehicle_id:
            query = query.filter(Reminder.vehicle_id == vehicle_id)
        if customer_ids is not None:
            query = query.filter(Reminder.customer_id.in_(customer_ids))
        if unsent_only:
            query = query.filter(Reminder.sent.is_(False))
        if date_from is not None:
            query = query.filter(Reminder.reminder_date >= date_from)
        if date_to is not None:
            query = query.filter(Reminder.reminder_date < date_to)
        return paginate(query.order_by(Reminder.reminder_date.asc()), page, limit)

    @staticmethod
    def get_due_reminders(db: Session, now: datetime) -> list[Reminder]:
        """Unsent reminders whose date has come; mileage-only reminders have no date and never match"""
        return (
            db.query(Reminder)
            .filter(
                Reminder.sent.is_(False),
                Reminder.reminder_date.isnot(None),
                Reminder.reminder_date <= now,
            )
            .order_by(Reminder.reminder_date.asc())
            .all()
        )

    @staticmethod
    def get_reminder(db: Session, reminder_id: str) -> Optional[Reminder]:
        return db.query(Reminder).filter(Reminder.id == reminder_id).first()

    @staticmethod
    def get_vehicle(db: Session, vehicle_id: str) -> Optional[Vehicle]:
        return db.query(Vehicle).filter(Vehicle.id == vehicle_id).first()

    @staticmethod
    def get_service(db: Session, service_id: str) -> Optional[ServiceRecord]:
        return db.query(ServiceRecord).filter(ServiceRecord.id == service_id).first()

    @staticmethod
    def get_customer(db: Session, customer_id: str) -> Optional[Customer]:
        return db.query(Customer).filter(Customer.id == customer_id).first()

    @staticmethod
    def create_reminder(db: Session, **reminder_data) -> Reminder:
        reminder = Reminder(**reminder_data)
        db.add(reminder)
        db.commit()
        db.refresh(reminder)
        return reminder

    @staticmethod
    def update_reminder(db: Session, reminder: Reminder, **updates) -> Reminder:
        for key, value in updates.items():
            setattr(reminder, key, value)
        db.commit()
        db.refresh(reminder)
        return reminder

    @staticmethod
    def mark_sent(db: Session, reminder: Reminder) -> None:
        reminder.sent = True
        db.commit()

    @staticmethod
    def delete_reminder(db: Session, reminder: Reminder) -> None:
        db.delete(reminder)
        db.commit()
