"""Vehicle repository - Database operations for vehicles"""

from typing import Optional

from sqlalchemy.orm import Session, joinedload, selectinload

from ...models import Vehicle
from ...shared.pagination import paginate


class VehicleRepository:
    """Repository for vehicle database operations"""

    @staticmethod
    def list_vehicles(
        db: Session, page: int, limit: int, customer_ids: Optional[list[str]] = None
    ) -> tuple[list[Vehicle], int]:
        query = db.query(Vehicle)
        if customer_ids is not None:
            query = query.filter(Vehicle.customer_id.in_(customer_ids))
        return paginate(query.order_by(Vehicle.created_at.desc()), page, limit)

    @staticmethod
    def get_vehicle(db: Session, vehicle_id: str, with_history: bool = False) -> Optional[Vehicle]:
        query = db.query(Vehicle).options(joinedload(Vehicle.customer))
        if with_history:
            query = query.options(selectinload(Vehicle.services))
        return query.filter(Vehicle.id == vehicle_id).first()

    @staticmethod
    def get_by_vin(db: Session, vin: str) -> Optional[Vehicle]:
        return db.query(Vehicle).filter(Vehicle.vin == vin).first()

    @staticmethod
    def create_vehicle(db: Session, **vehicle_data) -> Vehicle:
        vehicle = Vehicle(**vehicle_data)
        db.add(vehicle)
        db.commit()
        db.refresh(vehicle)
        return vehicle

    @staticmethod
    def update_vehicle(db: Session, vehicle: Vehicle, **updates) -> Vehicle:
        for key, value in updates.items():
            if value is not None:
                setattr(vehicle, key, value)
        db.commit()
        db.refresh(vehicle)
        return vehicle

    @staticmethod
    def delete_vehicle(db: Session, vehicle: Vehicle) -> None:
        """Delete a vehicle; its services and their reminders go with it"""
        db.delete(vehicle)
        db.commit()
