"""Reminder router - FastAPI endpoints for reminders and sending them"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import STAFF_ROLES, Principal, get_current_principal, require_roles
from ...database import get_db
from ...schemas import SuccessResponse
from .schemas import (
    ReminderCreate,
    ReminderDetailEnvelope,
    ReminderEnvelope,
    ReminderListResponse,
    ReminderUpdate,
    SendOneResult,
    SweepResult,
)
from .service import ReminderService, reminder_to_dict

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/reminders", tags=["Reminders"])


def get_reminder_service(db: Session = Depends(get_db)) -> ReminderService:
    """Dependency injection for ReminderService"""
    return ReminderService(db)


# ============================================================================
# SENDING
# ============================================================================


@router.post("/send", response_model=SweepResult)
async def send_due_reminders(
    principal: Principal = Depends(require_roles(*STAFF_ROLES)),
    service: ReminderService = Depends(get_reminder_service),
):
    """Send every reminder that is due (admin/worker)"""
    logger.info(f"📨 Reminder sweep requested by {principal.uid}")
    return await service.send_due_reminders()


@router.post("/{reminder_id}/send", response_model=SendOneResult)
async def send_reminder(
    reminder_id: str,
    principal: Principal = Depends(require_roles(*STAFF_ROLES)),
    service: ReminderService = Depends(get_reminder_service),
):
    """Send one reminder now (admin/worker)"""
    return await service.send_reminder(reminder_id)


# ============================================================================
# CORE CRUD OPERATIONS
# ============================================================================


@router.get("", response_model=ReminderListResponse)
async def list_reminders(
    page: int = Query(1),
    limit: int = Query(50),
    vehicleId: Optional[str] = Query(None),
    customerId: Optional[str] = Query(None),
    upcoming: bool = Query(False),
    dateFilter: str = Query("all"),
    principal: Principal = Depends(get_current_principal),
    service: ReminderService = Depends(get_reminder_service),
):
    """List reminders by date; clients only see their own"""
    return service.list_reminders(
        principal,
        page,
        limit,
        vehicle_id=vehicleId,
        customer_id=customerId,
        upcoming=upcoming,
        date_filter=dateFilter,
    )


@router.get("/{reminder_id}", response_model=ReminderDetailEnvelope)
async def get_reminder(
    reminder_id: str,
    principal: Principal = Depends(get_current_principal),
    service: ReminderService = Depends(get_reminder_service),
):
    return {"reminder": service.get_reminder_detail(reminder_id, principal)}


@router.post("", response_model=ReminderEnvelope, status_code=201)
async def create_reminder(
    data: ReminderCreate,
    principal: Principal = Depends(get_current_principal),
    service: ReminderService = Depends(get_reminder_service),
):
    return {"reminder": reminder_to_dict(service.create_reminder(data, principal))}


@router.put("/{reminder_id}", response_model=ReminderEnvelope)
async def update_reminder(
    reminder_id: str,
    data: ReminderUpdate,
    principal: Principal = Depends(get_current_principal),
    service: ReminderService = Depends(get_reminder_service),
):
    """Change a reminder; it becomes unsent again"""
    return {"reminder": reminder_to_dict(service.update_reminder(reminder_id, data, principal))}


@router.delete("/{reminder_id}", response_model=SuccessResponse)
async def delete_reminder(
    reminder_id: str,
    principal: Principal = Depends(get_current_principal),
    service: ReminderService = Depends(get_reminder_service),
):
    return service.delete_reminder(reminder_id, principal)
