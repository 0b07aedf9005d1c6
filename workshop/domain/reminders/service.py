"""Reminder service - Reminder records and the due-reminder sweep"""

import logging
from datetime import date, datetime, time, timedelta
from typing import Awaitable, Callable, Optional

from dateutil.relativedelta import relativedelta
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...auth import ROLE_CLIENT, STAFF_ROLES, Principal, ensure_role
from ...email_service import send_email
from ...email_templates import service_reminder_template
from ...models import Reminder
from ...shared.errors import (
    AuthorizationError,
    NotFoundError,
    ValidationError,
    WorkshopError,
)
from ...shared.pagination import clamp_page, pagination_meta
from ...shared.timeutils import WORKSHOP_TZ, to_local, to_storage, utc_now
from ..customers.repository import CustomerRepository
from ..customers.service import customer_to_dict, ensure_customer_access
from ..service_records.service import (
    check_reminder_type,
    default_reminder_message,
    parse_timestamp,
)
from ..vehicles.service import vehicle_to_dict
from .repository import ReminderRepository
from .schemas import ReminderCreate, ReminderUpdate

logger = logging.getLogger(__name__)

# (to, subject, mjml_content) -> provider response
EmailSender = Callable[..., Awaitable[dict]]

DATE_FILTERS = ("all", "today", "week", "month", "year")


def date_filter_bounds(name: str, now: datetime) -> tuple[Optional[datetime], Optional[datetime]]:
    """
    Naive UTC [start, end) of the current workshop-local day, week (Monday
    first), month or year. 'all' has no bounds.
    """
    if name not in DATE_FILTERS:
        raise ValidationError(f"dateFilter must be one of {', '.join(DATE_FILTERS)}")
    if name == "all":
        return None, None

    today = to_local(now).date()
    if name == "today":
        start, end = today, today + timedelta(days=1)
    elif name == "week":
        start = today - timedelta(days=today.weekday())
        end = start + timedelta(days=7)
    elif name == "month":
        start = today.replace(day=1)
        end = start + relativedelta(months=1)
    else:
        start = date(today.year, 1, 1)
        end = start + relativedelta(years=1)

    def as_utc(day: date) -> datetime:
        return to_storage(datetime.combine(day, time(0, 0), tzinfo=WORKSHOP_TZ))

    return as_utc(start), as_utc(end)


def reminder_to_dict(reminder: Reminder) -> dict:
    return {
        "id": reminder.id,
        "serviceId": reminder.service_id,
        "vehicleId": reminder.vehicle_id,
        "customerId": reminder.customer_id,
        "reminderType": reminder.reminder_type,
        "reminderDate": reminder.reminder_date,
        "mileageThreshold": reminder.mileage_threshold,
        "sent": reminder.sent,
        "email": reminder.email,
        "message": reminder.message,
        "createdAt": reminder.created_at,
        "updatedAt": reminder.updated_at,
    }


class ReminderService:
    """
    Service layer for reminders.

    `sender` delivers one email and raises DependencyError on failure; it
    defaults to the SMTP/Resend email service.
    """

    def __init__(self, db: Session, sender: EmailSender = send_email):
        self.db = db
        self.sender = sender
        self.repo = ReminderRepository()
        self.customers = CustomerRepository()

    def _detail(self, reminder: Reminder) -> dict:
        detail = reminder_to_dict(reminder)
        service = reminder.service
        vehicle = self.repo.get_vehicle(self.db, reminder.vehicle_id)
        customer = self.repo.get_customer(self.db, reminder.customer_id)
        detail["service"] = (
            {
                "id": service.id,
                "serviceType": service.service_type,
                "serviceDate": service.service_date,
                "status": service.status,
                "mileage": service.mileage,
                "cost": service.cost,
            }
            if service
            else None
        )
        detail["vehicle"] = vehicle_to_dict(vehicle) if vehicle else None
        detail["customer"] = customer_to_dict(customer) if customer else None
        return detail

    # ------------------------------------------------------------------
    # Records
    # ------------------------------------------------------------------

    def list_reminders(
        self,
        principal: Principal,
        page: int = 1,
        limit: int = 50,
        vehicle_id: Optional[str] = None,
        customer_id: Optional[str] = None,
        upcoming: bool = False,
        date_filter: str = "all",
        now: Optional[datetime] = None,
    ) -> dict:
        page, limit = clamp_page(page, limit)
        now = now or utc_now()

        customer_ids = [customer_id] if customer_id else None
        if principal.role == ROLE_CLIENT:
            own_ids = self.customers.customer_ids_for_user(self.db, principal.uid)
            if customer_id and customer_id not in own_ids:
                raise AuthorizationError("Unauthorized to access this customer")
            customer_ids = customer_ids or own_ids

        date_from, date_to = date_filter_bounds(date_filter or "all", now)
        if upcoming:
            date_from = max(date_from, now) if date_from else now

        reminders, total = self.repo.list_reminders(
            self.db,
            page,
            limit,
            vehicle_id=vehicle_id,
            customer_ids=customer_ids,
            unsent_only=upcoming,
            date_from=date_from,
            date_to=date_to,
        )
        return {
            "reminders": [self._detail(r) for r in reminders],
            "pagination": pagination_meta(total, page, limit),
        }

    def get_reminder(self, reminder_id: str, principal: Principal) -> Reminder:
        reminder = self.repo.get_reminder(self.db, reminder_id)
        if not reminder:
            raise NotFoundError("Reminder not found")
        if principal.role == ROLE_CLIENT:
            ensure_customer_access(principal, self.repo.get_customer(self.db, reminder.customer_id))
        return reminder

    def get_reminder_detail(self, reminder_id: str, principal: Principal) -> dict:
        return self._detail(self.get_reminder(reminder_id, principal))

    def create_reminder(self, data: ReminderCreate, principal: Principal) -> Reminder:
        ensure_role(principal, *STAFF_ROLES)
        if not all([data.serviceId, data.vehicleId, data.customerId, data.reminderType]):
            raise ValidationError("ServiceId, vehicleId, customerId, and reminderType are required")
        reminder_type = check_reminder_type(data.reminderType)
        if not data.reminderDate and reminder_type != "mileage":
            raise ValidationError("ReminderDate is required for time based reminders")
        reminder_date = parse_timestamp(data.reminderDate, "reminderDate") if data.reminderDate else None

        service = self.repo.get_service(self.db, data.serviceId)
        if not service:
            raise NotFoundError("Service not found")
        vehicle = self.repo.get_vehicle(self.db, data.vehicleId)
        if not vehicle:
            raise NotFoundError("Vehicle not found")
        customer = self.repo.get_customer(self.db, data.customerId)
        if not customer:
            raise NotFoundError("Customer not found")

        reminder = self.repo.create_reminder(
            self.db,
            service_id=service.id,
            vehicle_id=vehicle.id,
            customer_id=customer.id,
            reminder_type=reminder_type,
            reminder_date=reminder_date,
            mileage_threshold=data.mileageThreshold,
            sent=False,
            email=customer.email,
            message=data.message or default_reminder_message(service.service_type, vehicle),
        )
        logger.info(f"⏰ Reminder {reminder.id} created for service {service.id}")
        return reminder

    def update_reminder(self, reminder_id: str, data: ReminderUpdate, principal: Principal) -> Reminder:
        ensure_role(principal, *STAFF_ROLES)
        if not data.reminderType:
            raise ValidationError("ReminderType is required")
        reminder_type = check_reminder_type(data.reminderType)
        if not data.reminderDate and reminder_type != "mileage":
            raise ValidationError("ReminderDate is required for time based reminders")
        reminder = self.get_reminder(reminder_id, principal)

        updates = {
            "reminder_type": reminder_type,
            "reminder_date": (
                parse_timestamp(data.reminderDate, "reminderDate") if data.reminderDate else None
            ),
            "mileage_threshold": data.mileageThreshold,
            "sent": False,
        }
        if data.message is not None:
            updates["message"] = data.message
        return self.repo.update_reminder(self.db, reminder, **updates)

    def delete_reminder(self, reminder_id: str, principal: Principal) -> dict:
        ensure_role(principal, *STAFF_ROLES)
        reminder = self.get_reminder(reminder_id, principal)
        self.repo.delete_reminder(self.db, reminder)
        logger.info(f"🗑️ Reminder {reminder_id} deleted by {principal.uid}")
        return {"success": True}

    # ------------------------------------------------------------------
    # Delivery
    # ------------------------------------------------------------------

    async def _deliver(self, reminder: Reminder) -> None:
        """Email one reminder and mark it sent. Raises NotFoundError or DependencyError"""
        vehicle = self.repo.get_vehicle(self.db, reminder.vehicle_id)
        service = self.repo.get_service(self.db, reminder.service_id)
        if not vehicle or not service:
            raise NotFoundError("Vehicle or service not found")

        mjml_content = service_reminder_template(
            message=reminder.message or default_reminder_message(service.service_type, vehicle),
            make=vehicle.make,
            model=vehicle.model,
            year=vehicle.year,
            vin=vehicle.vin,
            last_service_type=service.service_type,
            last_service_date=to_local(service.service_date).strftime("%Y-%m-%d"),
        )
        await self.sender(
            to=reminder.email,
            subject=f"Service Reminder for your {vehicle.make} {vehicle.model}",
            mjml_content=mjml_content,
        )
        self.repo.mark_sent(self.db, reminder)

    async def send_reminder(self, reminder_id: str) -> dict:
        """Send one reminder now, whether or not it is due"""
        reminder = self.repo.get_reminder(self.db, reminder_id)
        if not reminder:
            raise NotFoundError("Reminder not found")
        await self._deliver(reminder)
        logger.info(f"📧 Reminder {reminder_id} sent to {reminder.email}")
        return {"success": True, "message": "Reminder sent successfully"}

    async def send_due_reminders(self, now: Optional[datetime] = None) -> dict:
        """
        Email every unsent reminder whose date has passed.

        A reminder that cannot be delivered stays unsent and is logged; the
        sweep carries on with the rest. Returns the attempted/succeeded counts.
        """
        now = to_storage(now) if now else utc_now()
        due = self.repo.get_due_reminders(self.db, now)
        if not due:
            logger.info("📭 No reminders due for sending")
            return {"attempted": 0, "succeeded": 0, "message": "No reminders due for sending"}

        succeeded = 0
        for reminder in due:
            try:
                await self._deliver(reminder)
                succeeded += 1
            except WorkshopError as e:
                logger.error(f"❌ Reminder {reminder.id} not sent: {e.message}")
            except SQLAlchemyError as e:
                self.db.rollback()
                logger.error(f"❌ Reminder {reminder.id} failed on the database: {e}")

        logger.info(f"📬 Reminder sweep: {succeeded} of {len(due)} sent")
        return {
            "attempted": len(due),
            "succeeded": succeeded,
            "message": f"Successfully sent {succeeded} of {len(due)} reminders",
        }
