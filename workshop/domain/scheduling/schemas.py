"""Scheduling domain schemas - Pydantic models for validation"""

from typing import Optional

from pydantic import BaseModel


class BookingRequest(BaseModel):
    """
    Schema for booking a slot.

    Either `date` + `time` or the combined `scheduledTime` ("YYYY-MM-DDTHH:MM")
    identifies the slot. Presence is checked by the service so a missing field
    is a ValidationError like any other malformed input.
    """

    vehicleId: Optional[str] = None
    serviceType: Optional[str] = None
    date: Optional[str] = None
    time: Optional[str] = None
    scheduledTime: Optional[str] = None


class BookingResponse(BaseModel):
    success: bool = True
    serviceId: str


class ScheduleEntry(BaseModel):
    id: str
    date: str
    time: str
    customerName: Optional[str] = None
    customerEmail: Optional[str] = None
    serviceType: str
    vehicleInfo: str


class ScheduleResponse(BaseModel):
    schedules: list[ScheduleEntry]
