"""Service record repository - Database operations for service history"""

from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session, joinedload, selectinload

from ...models import Reminder, ServiceRecord, Vehicle
from ...shared.pagination import paginate


class ServiceRecordRepository:
    """Repository for service record database operations"""

    @staticmethod
    def list_services(
        db: Session,
        page: int,
        limit: int,
        search: Optional[str] = None,
        vehicle_id: Optional[str] = None,
        customer_ids: Optional[list[str]] = None,
    ) -> tuple[list[ServiceRecord], int]:
        query = db.query(ServiceRecord).options(
            joinedload(ServiceRecord.vehicle).joinedload(Vehicle.customer)
        )
        if search:
            pattern = f"%{search}%"
            query = query.filter(
                or_(
                    ServiceRecord.service_type.ilike(pattern),
                    ServiceRecord.description.ilike(pattern),
                )
            )
        if vehicle_id:
            query = query.filter(ServiceRecord.vehicle_id == vehicle_id)
        if customer_ids is not None:
            query = query.join(Vehicle, ServiceRecord.vehicle_id == Vehicle.id).filter(
                Vehicle.customer_id.in_(customer_ids)
            )
        return paginate(query.order_by(ServiceRecord.service_date.desc()), page, limit)

    @staticmethod
    def get_service(db: Session, service_id: str) -> Optional[ServiceRecord]:
        return (
            db.query(ServiceRecord)
            .options(
                joinedload(ServiceRecord.vehicle).joinedload(Vehicle.customer),
                selectinload(ServiceRecord.reminders),
            )
            .filter(ServiceRecord.id == service_id)
            .first()
        )

    @staticmethod
    def create_service(
        db: Session,
        vehicle: Vehicle,
        service_data: dict,
        reminder_data: Optional[dict] = None,
    ) -> ServiceRecord:
        """Insert a service, bump the vehicle's odometer and add the follow-up reminder, in one commit"""
        service = ServiceRecord(vehicle_id=vehicle.id, **service_data)
        db.add(service)
        if service.mileage is not None:
            vehicle.mileage = service.mileage
        if reminder_data is not None:
            db.flush()
            db.add(Reminder(service_id=service.id, **reminder_data))
        db.commit()
        db.refresh(service)
        return service

    @staticmethod
    def update_service(db: Session, service: ServiceRecord, **updates) -> ServiceRecord:
        for key, value in updates.items():
            if value is not None:
                setattr(service, key, value)
        vehicle = service.vehicle
        if vehicle and service.mileage is not None and service.mileage > (vehicle.mileage or 0):
            vehicle.mileage = service.mileage
        db.commit()
        db.refresh(service)
        return service

    @staticmethod
    def delete_service(db: Session, service: ServiceRecord) -> None:
        """Delete a service with its reminders"""
        db.delete(service)
        db.commit()
