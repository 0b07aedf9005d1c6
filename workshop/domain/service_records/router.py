"""Service record router - FastAPI endpoints for service history"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import Principal, get_current_principal
from ...database import get_db
from ...schemas import SuccessResponse
from .schemas import (
    ServiceRecordCreate,
    ServiceRecordDetailEnvelope,
    ServiceRecordEnvelope,
    ServiceRecordListResponse,
    ServiceRecordUpdate,
)
from .service import ServiceRecordService, service_detail_to_dict, service_to_dict

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/services", tags=["Services"])


def get_service_record_service(db: Session = Depends(get_db)) -> ServiceRecordService:
    """Dependency injection for ServiceRecordService"""
    return ServiceRecordService(db)


@router.get("", response_model=ServiceRecordListResponse)
async def list_services(
    page: int = Query(1),
    limit: int = Query(50),
    search: Optional[str] = Query(None),
    vehicleId: Optional[str] = Query(None),
    principal: Principal = Depends(get_current_principal),
    service: ServiceRecordService = Depends(get_service_record_service),
):
    """List services newest first; clients only see their own vehicles' history"""
    return service.list_services(principal, page, limit, search, vehicleId)


@router.get("/{service_id}", response_model=ServiceRecordDetailEnvelope)
async def get_service(
    service_id: str,
    principal: Principal = Depends(get_current_principal),
    service: ServiceRecordService = Depends(get_service_record_service),
):
    record = service.get_service(service_id, principal)
    return {"service": service_detail_to_dict(record, with_reminders=True)}


@router.post("", response_model=ServiceRecordEnvelope, status_code=201)
async def create_service(
    data: ServiceRecordCreate,
    principal: Principal = Depends(get_current_principal),
    service: ServiceRecordService = Depends(get_service_record_service),
):
    """Record a completed service (admin/worker)"""
    return {"service": service_to_dict(service.create_service(data, principal))}


@router.put("/{service_id}", response_model=ServiceRecordEnvelope)
async def update_service(
    service_id: str,
    data: ServiceRecordUpdate,
    principal: Principal = Depends(get_current_principal),
    service: ServiceRecordService = Depends(get_service_record_service),
):
    return {"service": service_to_dict(service.update_service(service_id, data, principal))}


@router.delete("/{service_id}", response_model=SuccessResponse)
async def delete_service(
    service_id: str,
    principal: Principal = Depends(get_current_principal),
    service: ServiceRecordService = Depends(get_service_record_service),
):
    """Delete a service and its reminders (admin only)"""
    return service.delete_service(service_id, principal)
