"""Vehicle domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from ...schemas import Pagination
from ..customers.schemas import CustomerResponse


class VehicleCreate(BaseModel):
    vin: Optional[str] = None
    make: Optional[str] = None
    model: Optional[str] = None
    year: Optional[int] = None
    color: Optional[str] = None
    licensePlate: Optional[str] = None
    customerId: Optional[str] = None
    mileage: Optional[int] = None


class VehicleUpdate(BaseModel):
    """The VIN is not updatable; a mismatching `vin` is rejected"""

    vin: Optional[str] = None
    make: Optional[str] = None
    model: Optional[str] = None
    year: Optional[int] = None
    color: Optional[str] = None
    licensePlate: Optional[str] = None
    mileage: Optional[int] = None


class VehicleResponse(BaseModel):
    id: str
    vin: str
    make: str
    model: str
    year: int
    color: Optional[str] = None
    licensePlate: Optional[str] = None
    customerId: str
    mileage: int
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None


class VehicleServiceSummary(BaseModel):
    id: str
    serviceType: str
    serviceDate: datetime
    status: str
    mileage: Optional[int] = None
    cost: Optional[float] = None


class VehicleDetail(VehicleResponse):
    customer: Optional[CustomerResponse] = None
    services: list[VehicleServiceSummary] = []


class VehicleEnvelope(BaseModel):
    vehicle: VehicleResponse


class VehicleDetailEnvelope(BaseModel):
    vehicle: VehicleDetail


class VehicleListResponse(BaseModel):
    vehicles: list[VehicleResponse]
    pagination: Pagination
