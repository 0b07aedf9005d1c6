"""Scheduling service - Booking services into availability slots"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ...auth import ROLE_CLIENT, Principal
from ...email_service import send_booking_confirmation
from ...models import ServiceRecord, Vehicle
from ...shared.errors import (
    AuthorizationError,
    DependencyError,
    NotFoundError,
    SlotUnavailableError,
    ValidationError,
)
from ...shared.timeutils import local_day_bounds, slot_instant, to_local
from ...shared.validators import split_scheduled_time
from ..availability.service import check_date, check_time
from .repository import SchedulingRepository

logger = logging.getLogger(__name__)

NO_NAME = "No name provided"
NO_EMAIL = "No email provided"


def vehicle_summary(vehicle: Optional[Vehicle]) -> str:
    """'<make> <model> (<year>) - <vin>' for schedule listings"""
    if not vehicle:
        return " () - No VIN"
    return f"{vehicle.make} {vehicle.model} ({vehicle.year}) - {vehicle.vin or 'No VIN'}"


def resolve_slot(
    date_key: Optional[str], time: Optional[str], scheduled_time: Optional[str]
) -> tuple[str, str]:
    """Accept either a date and a time or the combined 'YYYY-MM-DDTHH:MM' form"""
    if not date_key and not time and scheduled_time:
        try:
            return split_scheduled_time(scheduled_time)
        except ValueError as e:
            raise ValidationError(str(e)) from e
    return check_date(date_key), check_time(time)


class SchedulingService:
    """Service layer for booking business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = SchedulingRepository()

    def _get_bookable_vehicle(self, vehicle_id: str, principal: Principal) -> Vehicle:
        vehicle = self.repo.get_vehicle(self.db, vehicle_id)
        if not vehicle:
            raise NotFoundError("Vehicle not found")
        if principal.role == ROLE_CLIENT and (
            not vehicle.customer or vehicle.customer.user_id != principal.uid
        ):
            logger.warning(f"⚠️ Client {principal.uid} tried to book vehicle {vehicle_id}")
            raise AuthorizationError("You can only book services for your own vehicles")
        return vehicle

    def _ensure_slot_bookable(self, date_key: str, time: str) -> None:
        slot = self.repo.get_slot(self.db, date_key, time)
        if not slot:
            raise SlotUnavailableError(f"No slot at {time} on {date_key}")
        if slot.availability.is_blocked:
            raise SlotUnavailableError(f"{date_key} is blocked")
        if not slot.available:
            raise SlotUnavailableError("Selected time slot is not available")

    def schedule_service(
        self,
        vehicle_id: Optional[str],
        service_type: Optional[str],
        date_key: Optional[str],
        time: Optional[str],
        principal: Principal,
        scheduled_time: Optional[str] = None,
    ) -> ServiceRecord:
        """
        Book a service into a slot.

        Checks run in order (input, vehicle, slot) and nothing is written until
        they all pass. The slot flip and the service insert then commit together;
        losing a race for the slot raises SlotUnavailableError with no writes.
        """
        if not vehicle_id or not vehicle_id.strip():
            raise ValidationError("Vehicle ID is required")
        if not service_type or not service_type.strip():
            raise ValidationError("Service type is required")
        date_key, time = resolve_slot(date_key, time, scheduled_time)

        vehicle = self._get_bookable_vehicle(vehicle_id.strip(), principal)
        self._ensure_slot_bookable(date_key, time)

        service = self.repo.claim_slot_and_create_service(
            self.db,
            date_key,
            time,
            vehicle_id=vehicle.id,
            service_type=service_type.strip(),
            service_date=slot_instant(date_key, time),
            status="scheduled",
            customer_name=principal.name or NO_NAME,
            customer_email=principal.email or NO_EMAIL,
        )
        if not service:
            logger.warning(f"🏁 Lost the race for slot {date_key} {time} (vehicle {vehicle.id})")
            raise SlotUnavailableError("Selected time slot was just taken")

        logger.info(
            f"✅ Booked {service.service_type} for vehicle {vehicle.id} at {date_key} {time} "
            f"(service {service.id})"
        )
        return service

    def list_schedule(self, date_key: Optional[str]) -> list[dict]:
        """Scheduled services of one workshop day, ordered by time"""
        date_key = check_date(date_key)
        start, end = local_day_bounds(date_key)
        services = self.repo.get_scheduled_services(self.db, start, end)
        return [
            {
                "id": s.id,
                "date": date_key,
                "time": to_local(s.service_date).strftime("%H:%M"),
                "customerName": s.customer_name,
                "customerEmail": s.customer_email,
                "serviceType": s.service_type,
                "vehicleInfo": vehicle_summary(s.vehicle),
            }
            for s in services
        ]


async def notify_booking(principal: Principal, service: dict) -> None:
    """Email a booking confirmation; the booking stands even if the mail fails"""
    if not principal.email:
        return
    try:
        await send_booking_confirmation(
            to=principal.email,
            customer_name=principal.name or principal.email,
            service_type=service["serviceType"],
            vehicle_info=service["vehicleInfo"],
            date_key=service["date"],
            time=service["time"],
        )
    except DependencyError as e:
        logger.warning(f"⚠️ Booking confirmation for service {service['id']} not sent: {e.message}")
