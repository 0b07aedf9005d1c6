"""Vehicle router - FastAPI endpoints for vehicle operations"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import Principal, get_current_principal
from ...database import get_db
from ...schemas import SuccessResponse
from .schemas import (
    VehicleCreate,
    VehicleDetailEnvelope,
    VehicleEnvelope,
    VehicleListResponse,
    VehicleUpdate,
)
from .service import VehicleService, vehicle_detail_to_dict, vehicle_to_dict

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/vehicles", tags=["Vehicles"])


def get_vehicle_service(db: Session = Depends(get_db)) -> VehicleService:
    """Dependency injection for VehicleService"""
    return VehicleService(db)


@router.get("", response_model=VehicleListResponse)
async def list_vehicles(
    page: int = Query(1),
    limit: int = Query(50),
    customerId: Optional[str] = Query(None),
    principal: Principal = Depends(get_current_principal),
    service: VehicleService = Depends(get_vehicle_service),
):
    """List vehicles; clients only see their own"""
    return service.list_vehicles(principal, page, limit, customerId)


@router.get("/{vehicle_id}", response_model=VehicleDetailEnvelope)
async def get_vehicle(
    vehicle_id: str,
    principal: Principal = Depends(get_current_principal),
    service: VehicleService = Depends(get_vehicle_service),
):
    """Get a vehicle with its owner and service history, newest first"""
    vehicle = service.get_vehicle(vehicle_id, principal, with_history=True)
    return {"vehicle": vehicle_detail_to_dict(vehicle)}


@router.post("", response_model=VehicleEnvelope, status_code=201)
async def create_vehicle(
    data: VehicleCreate,
    principal: Principal = Depends(get_current_principal),
    service: VehicleService = Depends(get_vehicle_service),
):
    return {"vehicle": vehicle_to_dict(service.create_vehicle(data, principal))}


@router.put("/{vehicle_id}", response_model=VehicleEnvelope)
async def update_vehicle(
    vehicle_id: str,
    data: VehicleUpdate,
    principal: Principal = Depends(get_current_principal),
    service: VehicleService = Depends(get_vehicle_service),
):
    return {"vehicle": vehicle_to_dict(service.update_vehicle(vehicle_id, data, principal))}


@router.delete("/{vehicle_id}", response_model=SuccessResponse)
async def delete_vehicle(
    vehicle_id: str,
    principal: Principal = Depends(get_current_principal),
    service: VehicleService = Depends(get_vehicle_service),
):
    """Delete a vehicle and its service history (admin/worker)"""
    return service.delete_vehicle(vehicle_id, principal)
