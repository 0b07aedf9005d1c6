"""Customer service - Business logic for customer operations"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ...auth import ROLE_CLIENT, STAFF_ROLES, Principal, ensure_role
from ...models import Customer
from ...shared.errors import AuthorizationError, ConflictError, NotFoundError, ValidationError
from ...shared.pagination import clamp_page, pagination_meta
from ...shared.validators import validate_email
from .repository import CustomerRepository
from .schemas import CustomerCreate, CustomerUpdate

logger = logging.getLogger(__name__)


def customer_to_dict(customer: Customer) -> dict:
    return {
        "id": customer.id,
        "name": customer.name,
        "email": customer.email,
        "phone": customer.phone,
        "address": customer.address,
        "userId": customer.user_id,
        "createdAt": customer.created_at,
        "updatedAt": customer.updated_at,
    }


def ensure_customer_access(principal: Principal, customer: Optional[Customer]) -> None:
    """Clients may only reach records that hang off a customer linked to them"""
    if principal.role == ROLE_CLIENT and (not customer or customer.user_id != principal.uid):
        raise AuthorizationError("Unauthorized to access this customer")


def _checked_email(email: Optional[str]) -> str:
    try:
        return validate_email(email)
    except ValueError as e:
        raise ValidationError(str(e)) from e


class CustomerService:
    """Service layer for customer business logic"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = CustomerRepository()

    def list_customers(
        self, principal: Principal, page: int = 1, limit: int = 50, search: Optional[str] = None
    ) -> dict:
        page, limit = clamp_page(page, limit)
        user_id = principal.uid if principal.role == ROLE_CLIENT else None
        customers, total = self.repo.list_customers(self.db, page, limit, search, user_id)
        return {
            "customers": [customer_to_dict(c) for c in customers],
            "pagination": pagination_meta(total, page, limit),
        }

    def get_customer(self, customer_id: str, principal: Principal) -> Customer:
        customer = self.repo.get_customer(self.db, customer_id)
        if not customer:
            raise NotFoundError("Customer not found")
        ensure_customer_access(principal, customer)
        return customer

    def get_my_customer(self, principal: Principal) -> Customer:
        customer = self.repo.get_by_user_id(self.db, principal.uid)
        if not customer:
            raise NotFoundError("No customer record found")
        return customer

    def _create(self, data: CustomerCreate, user_id: Optional[str]) -> Customer:
        if not data.name or not data.name.strip() or not data.email:
            raise ValidationError("Name and email are required")
        email = _checked_email(data.email)
        if self.repo.get_by_email(self.db, email):
            raise ConflictError("Customer with this email already exists")

        customer = self.repo.create_customer(
            self.db,
            name=data.name.strip(),
            email=email,
            phone=data.phone,
            address=data.address or "",
            user_id=user_id,
        )
        logger.info(f"✅ Customer created: {customer.id}")
        return customer

    def create_customer(self, data: CustomerCreate, principal: Principal) -> Customer:
        """Staff create a customer, optionally linked to an existing account"""
        ensure_role(principal, *STAFF_ROLES)
        return self._create(data, data.userId)

    def register_client(self, data: CustomerCreate, principal: Principal) -> Customer:
        """The caller creates the customer record linked to their own uid"""
        logger.info(f"📥 Registering customer record for {principal.uid}")
        return self._create(data, principal.uid)

    def update_customer(self, customer_id: str, data: CustomerUpdate, principal: Principal) -> Customer:
        ensure_role(principal, *STAFF_ROLES)
        if not data.name or not data.email or not data.phone:
            raise ValidationError("Name, email, and phone are required")
        customer = self.get_customer(customer_id, principal)

        email = _checked_email(data.email)
        if email != customer.email:
            existing = self.repo.get_by_email(self.db, email)
            if existing and existing.id != customer.id:
                raise ConflictError("Customer with this email already exists")

        return self.repo.update_customer(
            self.db,
            customer,
            name=data.name.strip(),
            email=email,
            phone=data.phone,
            address=data.address,
        )

    def delete_customer(self, customer_id: str, principal: Principal) -> dict:
        ensure_role(principal, *STAFF_ROLES)
        customer = self.get_customer(customer_id, principal)
        self.repo.delete_customer(self.db, customer)
        logger.info(f"🗑️ Customer {customer_id} deleted by {principal.uid}")
        return {"success": True}
