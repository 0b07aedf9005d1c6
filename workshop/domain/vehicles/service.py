"""Vehicle service - Business logic for vehicle operations"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ...auth import ROLE_CLIENT, STAFF_ROLES, Principal, ensure_role
from ...models import Vehicle
from ...shared.errors import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from ...shared.pagination import clamp_page, pagination_meta
from ...shared.timeutils import utc_now
from ...shared.validators import validate_vin
from ..customers.repository import CustomerRepository
from ..customers.service import customer_to_dict, ensure_customer_access
from .repository import VehicleRepository
from .schemas import VehicleCreate, VehicleUpdate

logger = logging.getLogger(__name__)

MIN_YEAR = 1886


def vehicle_to_dict(vehicle: Vehicle) -> dict:
    return {
        "id": vehicle.id,
        "vin": vehicle.vin,
        "make": vehicle.make,
        "model": vehicle.model,
        "year": vehicle.year,
        "color": vehicle.color,
        "licensePlate": vehicle.license_plate,
        "customerId": vehicle.customer_id,
        "mileage": vehicle.mileage,
        "createdAt": vehicle.created_at,
        "updatedAt": vehicle.updated_at,
    }


def vehicle_detail_to_dict(vehicle: Vehicle) -> dict:
    detail = vehicle_to_dict(vehicle)
    detail["customer"] = customer_to_dict(vehicle.customer) if vehicle.customer else None
    detail["services"] = [
        {
            "id": s.id,
            "serviceType": s.service_type,
            "serviceDate": s.service_date,
            "status": s.status,
            "mileage": s.mileage,
            "cost": s.cost,
        }
        for s in vehicle.services
    ]
    return detail


def _check_year(year: int) -> int:
    if not MIN_YEAR <= year <= utc_now().year + 1:
        raise ValidationError(f"Invalid model year {year}")
    return year


def _check_mileage(mileage: Optional[int]) -> Optional[int]:
    if mileage is not None and mileage < 0:
        raise ValidationError("Mileage cannot be negative")
    return mileage


class VehicleService:
    """Service layer for vehicle business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = VehicleRepository()
        self.customers = CustomerRepository()

    def list_vehicles(
        self,
        principal: Principal,
        page: int = 1,
        limit: int = 50,
        customer_id: Optional[str] = None,
    ) -> dict:
        page, limit = clamp_page(page, limit)

        customer_ids = [customer_id] if customer_id else None
        if principal.role == ROLE_CLIENT:
            own_ids = self.customers.customer_ids_for_user(self.db, principal.uid)
            if customer_id and customer_id not in own_ids:
                raise AuthorizationError("Unauthorized to access this customer")
            customer_ids = customer_ids or own_ids

        vehicles, total = self.repo.list_vehicles(self.db, page, limit, customer_ids)
        return {
            "vehicles": [vehicle_to_dict(v) for v in vehicles],
            "pagination": pagination_meta(total, page, limit),
        }

    def get_vehicle(self, vehicle_id: str, principal: Principal, with_history: bool = False) -> Vehicle:
        vehicle = self.repo.get_vehicle(self.db, vehicle_id, with_history=with_history)
        if not vehicle:
            raise NotFoundError("Vehicle not found")
        ensure_customer_access(principal, vehicle.customer)
        return vehicle

    def create_vehicle(self, data: VehicleCreate, principal: Principal) -> Vehicle:
        ensure_role(principal, *STAFF_ROLES)
        if not all([data.vin, data.make, data.model, data.year, data.customerId]):
            raise ValidationError("VIN, make, model, year, and customerId are required")
        try:
            vin = validate_vin(data.vin)
        except ValueError as e:
            raise ValidationError(str(e)) from e
        year = _check_year(data.year)
        mileage = _check_mileage(data.mileage) or 0

        if not self.customers.get_customer(self.db, data.customerId):
            raise NotFoundError("Customer not found")
        if self.repo.get_by_vin(self.db, vin):
            raise ConflictError("Vehicle with this VIN already exists")

        vehicle = self.repo.create_vehicle(
            self.db,
            vin=vin,
            make=data.make.strip(),
            model=data.model.strip(),
            year=year,
            color=data.color or "",
            license_plate=data.licensePlate or "",
            customer_id=data.customerId,
            mileage=mileage,
        )
        logger.info(f"🚗 Vehicle {vin} created for customer {data.customerId}")
        return vehicle

    def update_vehicle(self, vehicle_id: str, data: VehicleUpdate, principal: Principal) -> Vehicle:
        ensure_role(principal, *STAFF_ROLES)
        vehicle = self.get_vehicle(vehicle_id, principal)

        if data.vin is not None and data.vin.strip().upper() != vehicle.vin:
            raise ValidationError("VIN cannot be changed")

        return self.repo.update_vehicle(
            self.db,
            vehicle,
            make=data.make.strip() if data.make else None,
            model=data.model.strip() if data.model else None,
            year=_check_year(data.year) if data.year is not None else None,
            color=data.color,
            license_plate=data.licensePlate,
            mileage=_check_mileage(data.mileage),
        )

    def delete_vehicle(self, vehicle_id: str, principal: Principal) -> dict:
        ensure_role(principal, *STAFF_ROLES)
        vehicle = self.get_vehicle(vehicle_id, principal)
        self.repo.delete_vehicle(self.db, vehicle)
        logger.info(f"🗑️ Vehicle {vehicle_id} deleted by {principal.uid}")
        return {"success": True}
