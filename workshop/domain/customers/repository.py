"""Customer repository - Database operations for customers"""

from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from ...models import Customer
from ...shared.pagination import paginate


class CustomerRepository:
    """Repository for customer database operations"""

    @staticmethod
    def list_customers(
        db: Session, page: int, limit: int, search: Optional[str] = None, user_id: Optional[str] = None
    ) -> tuple[list[Customer], int]:
        query = db.query(Customer)
        if search:
            pattern = f"%{search}%"
            query = query.filter(
                or_(
                    Customer.name.ilike(pattern),
                    Customer.email.ilike(pattern),
                    Customer.phone.ilike(pattern),
                )
            )
        if user_id is not None:
            query = query.filter(Customer.user_id == user_id)
        return paginate(query.order_by(Customer.created_at.desc()), page, limit)

    @staticmethod
    def get_customer(db: Session, customer_id: str) -> Optional[Customer]:
        return db.query(Customer).filter(Customer.id == customer_id).first()

    @staticmethod
    def get_by_email(db: Session, email: str) -> Optional[Customer]:
        return db.query(Customer).filter(Customer.email == email).first()

    @staticmethod
    def get_by_user_id(db: Session, user_id: str) -> Optional[Customer]:
        return db.query(Customer).filter(Customer.user_id == user_id).first()

    @staticmethod
    def customer_ids_for_user(db: Session, user_id: str) -> list[str]:
        """Ids of every customer record linked to an identity-provider uid"""
        return [row.id for row in db.query(Customer.id).filter(Customer.user_id == user_id).all()]

    @staticmethod
    def create_customer(db: Session, **customer_data) -> Customer:
        customer = Customer(**customer_data)
        db.add(customer)
        db.commit()
        db.refresh(customer)
        return customer

    @staticmethod
    def update_customer(db: Session, customer: Customer, **updates) -> Customer:
        for key, value in updates.items():
            setattr(customer, key, value)
        db.commit()
        db.refresh(customer)
        return customer

    @staticmethod
    def delete_customer(db: Session, customer: Customer) -> None:
        """Delete a customer; vehicles, services and reminders go with it"""
        db.delete(customer)
        db.commit()
