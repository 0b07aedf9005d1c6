"""Service record service - Business logic for service history"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ...auth import ROLE_ADMIN, ROLE_CLIENT, STAFF_ROLES, Principal, ensure_role
from ...models import ServiceRecord, Vehicle
from ...shared.errors import NotFoundError, ValidationError
from ...shared.pagination import clamp_page, pagination_meta
from ...shared.timeutils import to_storage
from ...shared.validators import parse_datetime
from ..customers.repository import CustomerRepository
from ..customers.service import customer_to_dict, ensure_customer_access
from ..vehicles.repository import VehicleRepository
from ..vehicles.service import vehicle_to_dict
from .repository import ServiceRecordRepository
from .schemas import ServiceRecordCreate, ServiceRecordUpdate

logger = logging.getLogger(__name__)

SERVICE_STATUSES = ("scheduled", "in_progress", "completed", "cancelled")
REMINDER_TYPES = ("time", "mileage", "both")


def default_reminder_message(service_type: str, vehicle: Vehicle) -> str:
    return f"Reminder for {service_type} service for your {vehicle.make} {vehicle.model}"


def parse_timestamp(value: str, field: str):
    """ISO timestamp from the wire as naive UTC"""
    try:
        return to_storage(parse_datetime(value))
    except ValueError as e:
        raise ValidationError(f"Invalid {field}: {value}") from e


def check_status(status: str) -> str:
    if status not in SERVICE_STATUSES:
        raise ValidationError(f"Status must be one of {', '.join(SERVICE_STATUSES)}")
    return status


def check_reminder_type(reminder_type: str) -> str:
    if reminder_type not in REMINDER_TYPES:
        raise ValidationError(f"Reminder type must be one of {', '.join(REMINDER_TYPES)}")
    return reminder_type


def service_to_dict(service: ServiceRecord) -> dict:
    return {
        "id": service.id,
        "vehicleId": service.vehicle_id,
        "serviceType": service.service_type,
        "serviceDate": service.service_date,
        "status": service.status,
        "mileage": service.mileage,
        "description": service.description,
        "parts": service.parts or [],
        "cost": service.cost,
        "technicianId": service.technician_id,
        "customerName": service.customer_name,
        "customerEmail": service.customer_email,
        "createdAt": service.created_at,
        "updatedAt": service.updated_at,
    }


def service_detail_to_dict(service: ServiceRecord, with_reminders: bool = False) -> dict:
    detail = service_to_dict(service)
    vehicle = service.vehicle
    detail["vehicle"] = vehicle_to_dict(vehicle) if vehicle else None
    detail["customer"] = customer_to_dict(vehicle.customer) if vehicle and vehicle.customer else None
    detail["reminders"] = (
        [
            {
                "id": r.id,
                "reminderType": r.reminder_type,
                "reminderDate": r.reminder_date,
                "mileageThreshold": r.mileage_threshold,
                "sent": r.sent,
            }
            for r in service.reminders
        ]
        if with_reminders
        else []
    )
    return detail


class ServiceRecordService:
    """Service layer for service history business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = ServiceRecordRepository()
        self.vehicles = VehicleRepository()
        self.customers = CustomerRepository()

    def list_services(
        self,
        principal: Principal,
        page: int = 1,
        limit: int = 50,
        search: Optional[str] = None,
        vehicle_id: Optional[str] = None,
    ) -> dict:
        page, limit = clamp_page(page, limit)
        customer_ids = None
        if principal.role == ROLE_CLIENT:
            customer_ids = self.customers.customer_ids_for_user(self.db, principal.uid)

        services, total = self.repo.list_services(
            self.db, page, limit, search, vehicle_id, customer_ids
        )
        return {
            "services": [service_detail_to_dict(s) for s in services],
            "pagination": pagination_meta(total, page, limit),
        }

    def get_service(self, service_id: str, principal: Principal) -> ServiceRecord:
        service = self.repo.get_service(self.db, service_id)
        if not service:
            raise NotFoundError("Service not found")
        if principal.role == ROLE_CLIENT:
            ensure_customer_access(principal, service.vehicle.customer if service.vehicle else None)
        return service

    def create_service(self, data: ServiceRecordCreate, principal: Principal) -> ServiceRecord:
        """Record a service done in the workshop, with an optional follow-up reminder"""
        ensure_role(principal, *STAFF_ROLES)
        if not data.vehicleId or not data.serviceType or not data.serviceDate:
            raise ValidationError("VehicleId, serviceType, and serviceDate are required")
        if data.mileage is not None and data.mileage < 0:
            raise ValidationError("Mileage cannot be negative")
        service_date = parse_timestamp(data.serviceDate, "serviceDate")
        status = check_status(data.status or "completed")

        vehicle = self.vehicles.get_vehicle(self.db, data.vehicleId)
        if not vehicle:
            raise NotFoundError("Vehicle not found")

        reminder_data = None
        wants_reminder = data.reminderDate or (
            data.reminderType == "mileage" and data.mileageThreshold
        )
        if wants_reminder and vehicle.customer:
            reminder_data = {
                "vehicle_id": vehicle.id,
                "customer_id": vehicle.customer_id,
                "reminder_type": check_reminder_type(data.reminderType or "time"),
                "reminder_date": (
                    parse_timestamp(data.reminderDate, "reminderDate") if data.reminderDate else None
                ),
                "mileage_threshold": data.mileageThreshold,
                "sent": False,
                "email": vehicle.customer.email,
                "message": default_reminder_message(data.serviceType, vehicle),
            }

        service = self.repo.create_service(
            self.db,
            vehicle,
            {
                "service_type": data.serviceType.strip(),
                "service_date": service_date,
                "status": status,
                "mileage": data.mileage,
                "description": data.description,
                "parts": data.parts or [],
                "cost": data.cost,
                "technician_id": principal.uid,
            },
            reminder_data,
        )
        logger.info(
            f"🔧 Service {service.id} recorded for vehicle {vehicle.id} by {principal.uid}"
            + (" with reminder" if reminder_data else "")
        )
        return service

    def update_service(
        self, service_id: str, data: ServiceRecordUpdate, principal: Principal
    ) -> ServiceRecord:
        ensure_role(principal, *STAFF_ROLES)
        service = self.get_service(service_id, principal)
        if data.mileage is not None and data.mileage < 0:
            raise ValidationError("Mileage cannot be negative")

        return self.repo.update_service(
            self.db,
            service,
            service_type=data.serviceType,
            service_date=(
                parse_timestamp(data.serviceDate, "serviceDate") if data.serviceDate else None
            ),
            status=check_status(data.status) if data.status else None,
            mileage=data.mileage,
            description=data.description,
            parts=data.parts,
            cost=data.cost,
        )

    def delete_service(self, service_id: str, principal: Principal) -> dict:
        """Admins only; reminders of the service are removed with it"""
        ensure_role(principal, ROLE_ADMIN)
        service = self.get_service(service_id, principal)
        self.repo.delete_service(self.db, service)
        logger.info(f"🗑️ Service {service_id} deleted by {principal.uid}")
        return {"success": True}
