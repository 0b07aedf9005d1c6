"""Availability domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel


class WorkingHours(BaseModel):
    """Opening hours of one day; slots start every `interval` minutes in [start, end)"""

    start: str = "09:00"
    end: str = "17:00"
    interval: int = 30


class TimeSlot(BaseModel):
    time: str
    available: bool = True


class AvailabilityResponse(BaseModel):
    date: str
    isBlocked: bool
    workingHours: WorkingHours
    timeSlots: list[TimeSlot]
    updatedAt: Optional[datetime] = None
    updatedBy: Optional[str] = None


class AvailabilityUpdate(BaseModel):
    """Schema for upserting a day. Omitted hours or slots keep their stored value"""

    date: str
    isBlocked: bool = False
    workingHours: Optional[WorkingHours] = None
    timeSlots: Optional[list[TimeSlot]] = None


class SlotToggle(BaseModel):
    date: str
    time: str
    available: bool


class GenerateSlotsRequest(BaseModel):
    date: Optional[str] = None
    workingHours: WorkingHours
