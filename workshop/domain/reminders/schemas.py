"""Reminder domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from ...schemas import Pagination
from ..customers.schemas import CustomerResponse
from ..vehicles.schemas import VehicleResponse, VehicleServiceSummary


class ReminderCreate(BaseModel):
    serviceId: Optional[str] = None
    vehicleId: Optional[str] = None
    customerId: Optional[str] = None
    reminderDate: Optional[str] = None
    reminderType: Optional[str] = None
    mileageThreshold: Optional[int] = None
    message: Optional[str] = None


class ReminderUpdate(BaseModel):
    """Any update re-arms the reminder (sent goes back to false)"""

    reminderDate: Optional[str] = None
    reminderType: Optional[str] = None
    mileageThreshold: Optional[int] = None
    message: Optional[str] = None


class ReminderResponse(BaseModel):
    id: str
    serviceId: str
    vehicleId: str
    customerId: str
    reminderType: str
    reminderDate: Optional[datetime] = None
    mileageThreshold: Optional[int] = None
    sent: bool
    email: str
    message: Optional[str] = None
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None


class ReminderDetail(ReminderResponse):
    service: Optional[VehicleServiceSummary] = None
    vehicle: Optional[VehicleResponse] = None
    customer: Optional[CustomerResponse] = None


class ReminderEnvelope(BaseModel):
    reminder: ReminderResponse


class ReminderDetailEnvelope(BaseModel):
    reminder: ReminderDetail


class ReminderListResponse(BaseModel):
    reminders: list[ReminderDetail]
    pagination: Pagination


class SweepResult(BaseModel):
    """Outcome of one pass over the due reminders"""

    attempted: int
    succeeded: int
    message: str


class SendOneResult(BaseModel):
    success: bool = True
    message: str
