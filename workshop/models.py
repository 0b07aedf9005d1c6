import uuid

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from .database import Base
from .shared.timeutils import utc_now


def generate_id():
    """Generate an opaque record identifier"""
    return str(uuid.uuid4())


class Customer(Base):
    __tablename__ = "customers"

    id = Column(String(36), primary_key=True, default=generate_id)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    phone = Column(String(50), nullable=True)
    address = Column(Text, nullable=True)
    # Identity-provider uid of the client account linked to this customer
    user_id = Column(String(128), index=True, nullable=True)
    created_at = Column(DateTime, default=utc_now, nullable=False)
    updated_at = Column(DateTime, default=utc_now, onupdate=utc_now, nullable=False)

    vehicles = relationship("Vehicle", back_populates="customer", cascade="all, delete-orphan")


class Vehicle(Base):
    __tablename__ = "vehicles"

    id = Column(String(36), primary_key=True, default=generate_id)
    vin = Column(String(17), unique=True, index=True, nullable=False)
    make = Column(String(100), nullable=False)
    model = Column(String(100), nullable=False)
    year = Column(Integer, nullable=False)
    color = Column(String(50), nullable=True)
    license_plate = Column(String(20), nullable=True)
    customer_id = Column(String(36), ForeignKey("customers.id"), index=True, nullable=False)
    mileage = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime, default=utc_now, nullable=False)
    updated_at = Column(DateTime, default=utc_now, onupdate=utc_now, nullable=False)

    customer = relationship("Customer", back_populates="vehicles")
    services = relationship(
        "ServiceRecord",
        back_populates="vehicle",
        cascade="all, delete-orphan",
        order_by="ServiceRecord.service_date.desc()",
    )


class ServiceRecord(Base):
    __tablename__ = "services"

    id = Column(String(36), primary_key=True, default=generate_id)
    vehicle_id = Column(String(36), ForeignKey("vehicles.id"), index=True, nullable=False)
    service_type = Column(String(100), nullable=False)
    service_date = Column(DateTime, index=True, nullable=False)  # naive UTC
    status = Column(String(20), default="scheduled", nullable=False)  # scheduled, in_progress, completed, cancelled
    mileage = Column(Integer, nullable=True)
    description = Column(Text, nullable=True)
    parts = Column(JSON, default=list, nullable=True)
    cost = Column(Float, nullable=True)
    technician_id = Column(String(128), nullable=True)
    # Contact details of whoever booked, captured at booking time
    customer_name = Column(String(255), nullable=True)
    customer_email = Column(String(255), nullable=True)
    created_at = Column(DateTime, default=utc_now, nullable=False)
    updated_at = Column(DateTime, default=utc_now, onupdate=utc_now, nullable=False)

    vehicle = relationship("Vehicle", back_populates="services")
    reminders = relationship("Reminder", back_populates="service", cascade="all, delete-orphan")


class Reminder(Base):
    __tablename__ = "reminders"

    id = Column(String(36), primary_key=True, default=generate_id)
    service_id = Column(String(36), ForeignKey("services.id"), index=True, nullable=False)
    vehicle_id = Column(String(36), index=True, nullable=False)
    customer_id = Column(String(36), index=True, nullable=False)
    reminder_type = Column(String(10), default="time", nullable=False)  # time, mileage, both
    reminder_date = Column(DateTime, index=True, nullable=True)  # naive UTC
    mileage_threshold = Column(Integer, nullable=True)
    sent = Column(Boolean, default=False, nullable=False)
    email = Column(String(255), nullable=False)
    message = Column(Text, nullable=True)
    created_at = Column(DateTime, default=utc_now, nullable=False)
    updated_at = Column(DateTime, default=utc_now, onupdate=utc_now, nullable=False)

    service = relationship("ServiceRecord", back_populates="reminders")


class Availability(Base):
    """Bookable state of one workshop calendar day"""

    __tablename__ = "availability"

    date = Column(String(10), primary_key=True)  # YYYY-MM-DD
    is_blocked = Column(Boolean, default=False, nullable=False)
    work_start = Column(String(5), default="09:00", nullable=False)
    work_end = Column(String(5), default="17:00", nullable=False)
    interval_minutes = Column(Integer, default=30, nullable=False)
    updated_at = Column(DateTime, default=utc_now, onupdate=utc_now, nullable=False)
    updated_by = Column(String(128), nullable=True)

    slots = relationship(
        "AvailabilitySlot",
        back_populates="availability",
        cascade="all, delete-orphan",
        order_by="AvailabilitySlot.time",
    )


class AvailabilitySlot(Base):
    """One bookable start time; claimed by a conditional UPDATE on (date, time)"""

    __tablename__ = "availability_slots"
    __table_args__ = (UniqueConstraint("date", "time", name="uq_availability_slot"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    date = Column(String(10), ForeignKey("availability.date"), index=True, nullable=False)
    time = Column(String(5), nullable=False)  # HH:MM, zero padded so string order is time order
    available = Column(Boolean, default=True, nullable=False)

    availability = relationship("Availability", back_populates="slots")
