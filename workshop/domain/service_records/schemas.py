"""Service record domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from ...schemas import Pagination
from ..customers.schemas import CustomerResponse
from ..vehicles.schemas import VehicleResponse


class ServiceRecordCreate(BaseModel):
    """
    Schema for recording a service by hand.

    Setting `reminderDate`, or `reminderType="mileage"` with a
    `mileageThreshold`, also creates a reminder for the next service.
    """

    vehicleId: Optional[str] = None
    serviceType: Optional[str] = None
    serviceDate: Optional[str] = None
    status: Optional[str] = None
    mileage: Optional[int] = None
    description: Optional[str] = None
    parts: Optional[list[str]] = None
    cost: Optional[float] = None
    reminderDate: Optional[str] = None
    reminderType: Optional[str] = None
    mileageThreshold: Optional[int] = None


class ServiceRecordUpdate(BaseModel):
    serviceType: Optional[str] = None
    serviceDate: Optional[str] = None
    status: Optional[str] = None
    mileage: Optional[int] = None
    description: Optional[str] = None
    parts: Optional[list[str]] = None
    cost: Optional[float] = None


class ServiceRecordResponse(BaseModel):
    id: str
    vehicleId: str
    serviceType: str
    serviceDate: datetime
    status: str
    mileage: Optional[int] = None
    description: Optional[str] = None
    parts: list[str] = []
    cost: Optional[float] = None
    technicianId: Optional[str] = None
    customerName: Optional[str] = None
    customerEmail: Optional[str] = None
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None


class ServiceReminderSummary(BaseModel):
    id: str
    reminderType: str
    reminderDate: Optional[datetime] = None
    mileageThreshold: Optional[int] = None
    sent: bool


class ServiceRecordDetail(ServiceRecordResponse):
    vehicle: Optional[VehicleResponse] = None
    customer: Optional[CustomerResponse] = None
    reminders: list[ServiceReminderSummary] = []


class ServiceRecordEnvelope(BaseModel):
    service: ServiceRecordResponse


class ServiceRecordDetailEnvelope(BaseModel):
    service: ServiceRecordDetail


class ServiceRecordListResponse(BaseModel):
    services: list[ServiceRecordDetail]
    pagination: Pagination
