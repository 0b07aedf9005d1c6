"""Scheduling router - FastAPI endpoints for booking and the day schedule"""

import logging
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, Query
from sqlalchemy.orm import Session

from ...auth import Principal, get_current_principal
from ...database import get_db
from ...shared.timeutils import to_local
from .schemas import BookingRequest, BookingResponse, ScheduleResponse
from .service import SchedulingService, notify_booking, vehicle_summary

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/schedule", tags=["Schedule"])


def get_scheduling_service(db: Session = Depends(get_db)) -> SchedulingService:
    """Dependency injection for SchedulingService"""
    return SchedulingService(db)


@router.get("", response_model=ScheduleResponse)
async def get_schedule(
    date: Optional[str] = Query(None),
    principal: Principal = Depends(get_current_principal),
    service: SchedulingService = Depends(get_scheduling_service),
):
    """Get the services scheduled on a day"""
    return {"schedules": service.list_schedule(date)}


@router.post("", response_model=BookingResponse)
async def schedule_service(
    data: BookingRequest,
    background_tasks: BackgroundTasks,
    principal: Principal = Depends(get_current_principal),
    service: SchedulingService = Depends(get_scheduling_service),
):
    """Book a service into an open slot"""
    record = service.schedule_service(
        data.vehicleId,
        data.serviceType,
        data.date,
        data.time,
        principal,
        scheduled_time=data.scheduledTime,
    )

    local = to_local(record.service_date)
    background_tasks.add_task(
        notify_booking,
        principal,
        {
            "id": record.id,
            "date": local.strftime("%Y-%m-%d"),
            "time": local.strftime("%H:%M"),
            "serviceType": record.service_type,
            "vehicleInfo": vehicle_summary(record.vehicle),
        },
    )
    return BookingResponse(serviceId=record.id)
