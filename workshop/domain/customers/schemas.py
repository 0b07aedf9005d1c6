"""Customer domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from ...schemas import Pagination


class CustomerCreate(BaseModel):
    """Schema for creating a customer (staff, or a client registering themselves)"""

    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    userId: Optional[str] = None


class CustomerUpdate(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None


class CustomerResponse(BaseModel):
    """Schema for customer response"""

    id: str
    name: str
    email: str
    phone: Optional[str] = None
    address: Optional[str] = None
    userId: Optional[str] = None
    createdAt: Optional[datetime] = None
    updatedAt: Optional[datetime] = None


class CustomerEnvelope(BaseModel):
    customer: CustomerResponse


class CustomerListResponse(BaseModel):
    customers: list[CustomerResponse]
    pagination: Pagination
