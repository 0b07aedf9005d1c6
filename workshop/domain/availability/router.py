"""Availability router - FastAPI endpoints for workshop availability"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import STAFF_ROLES, Principal, get_current_principal, require_roles
from ...database import get_db
from .schemas import (
    AvailabilityResponse,
    AvailabilityUpdate,
    GenerateSlotsRequest,
    SlotToggle,
    TimeSlot,
)
from .service import AvailabilityService, generate_slots

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/availability", tags=["Availability"])


def get_availability_service(db: Session = Depends(get_db)) -> AvailabilityService:
    """Dependency injection for AvailabilityService"""
    return AvailabilityService(db)


@router.get("", response_model=AvailabilityResponse)
async def get_availability(
    date: Optional[str] = Query(None),
    principal: Principal = Depends(get_current_principal),
    service: AvailabilityService = Depends(get_availability_service),
):
    """Get the working hours and slots of a day"""
    return service.get_availability(date)


@router.post("", response_model=AvailabilityResponse)
async def set_availability(
    data: AvailabilityUpdate,
    principal: Principal = Depends(get_current_principal),
    service: AvailabilityService = Depends(get_availability_service),
):
    """Create or replace a day's availability (admin/worker)"""
    return service.set_availability(
        data.date, data.isBlocked, data.workingHours, data.timeSlots, principal
    )


@router.post("/slots", response_model=AvailabilityResponse)
async def set_slot_availability(
    data: SlotToggle,
    principal: Principal = Depends(get_current_principal),
    service: AvailabilityService = Depends(get_availability_service),
):
    """Open or close a single slot (admin/worker)"""
    return service.set_slot_availability(data.date, data.time, data.available, principal)


@router.post("/generate-slots", response_model=list[TimeSlot])
async def preview_slots(
    data: GenerateSlotsRequest,
    principal: Principal = Depends(require_roles(*STAFF_ROLES)),
):
    """Preview the slots working hours would produce, without saving"""
    return generate_slots(data.workingHours, data.date)
