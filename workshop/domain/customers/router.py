"""Customer router - FastAPI endpoints for customer operations"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import Principal, get_current_principal
from ...database import get_db
from ...schemas import SuccessResponse
from .schemas import CustomerCreate, CustomerEnvelope, CustomerListResponse, CustomerUpdate
from .service import CustomerService, customer_to_dict

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/customers", tags=["Customers"])
auth_router = APIRouter(prefix="/auth", tags=["Auth"])


def get_customer_service(db: Session = Depends(get_db)) -> CustomerService:
    """Dependency injection for CustomerService"""
    return CustomerService(db)


# ============================================================================
# CORE CRUD OPERATIONS
# ============================================================================


@router.get("", response_model=CustomerListResponse)
async def list_customers(
    page: int = Query(1),
    limit: int = Query(50),
    search: Optional[str] = Query(None),
    principal: Principal = Depends(get_current_principal),
    service: CustomerService = Depends(get_customer_service),
):
    """List customers; clients only see their own record"""
    return service.list_customers(principal, page, limit, search)


@router.get("/me", response_model=CustomerEnvelope)
async def get_my_customer(
    principal: Principal = Depends(get_current_principal),
    service: CustomerService = Depends(get_customer_service),
):
    """Get the customer record linked to the caller"""
    return {"customer": customer_to_dict(service.get_my_customer(principal))}


@router.get("/{customer_id}", response_model=CustomerEnvelope)
async def get_customer(
    customer_id: str,
    principal: Principal = Depends(get_current_principal),
    service: CustomerService = Depends(get_customer_service),
):
    return {"customer": customer_to_dict(service.get_customer(customer_id, principal))}


@router.post("", response_model=CustomerEnvelope, status_code=201)
async def create_customer(
    data: CustomerCreate,
    principal: Principal = Depends(get_current_principal),
    service: CustomerService = Depends(get_customer_service),
):
    """Create a customer (admin/worker)"""
    return {"customer": customer_to_dict(service.create_customer(data, principal))}


@router.put("/{customer_id}", response_model=CustomerEnvelope)
async def update_customer(
    customer_id: str,
    data: CustomerUpdate,
    principal: Principal = Depends(get_current_principal),
    service: CustomerService = Depends(get_customer_service),
):
    """Update a customer (admin/worker)"""
    return {"customer": customer_to_dict(service.update_customer(customer_id, data, principal))}


@router.delete("/{customer_id}", response_model=SuccessResponse)
async def delete_customer(
    customer_id: str,
    principal: Principal = Depends(get_current_principal),
    service: CustomerService = Depends(get_customer_service),
):
    """Delete a customer with their vehicles and service history (admin/worker)"""
    return service.delete_customer(customer_id, principal)


# ============================================================================
# SELF REGISTRATION
# ============================================================================


@auth_router.post("/register-client", response_model=CustomerEnvelope, status_code=201)
async def register_client(
    data: CustomerCreate,
    principal: Principal = Depends(get_current_principal),
    service: CustomerService = Depends(get_customer_service),
):
    """Create the customer record for the signed-in user"""
    return {"customer": customer_to_dict(service.register_client(data, principal))}
