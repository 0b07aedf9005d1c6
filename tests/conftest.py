import pytest
from fastapi.testclient import TestClient

from workshop.auth import Principal, get_current_principal
from workshop.database import init_db
from workshop.main import create_app
from workshop.models import Customer, Reminder, ServiceRecord, Vehicle
from workshop.shared.errors import DependencyError
from workshop.shared.timeutils import utc_now

ADMIN = Principal(uid="admin-1", role="admin", email="admin@workshop.test", name="Ada Admin")
WORKER = Principal(uid="worker-1", role="worker", email="worker@workshop.test", name="Walt Worker")
CLIENT = Principal(uid="client-1", role="client", email="carl@example.com", name="Carl Client")
OTHER_CLIENT = Principal(uid="client-2", role="client", email="olga@example.com", name="Olga Other")

VIN = "1HGCM82633A004352"


@pytest.fixture
def app():
    app = create_app("sqlite://")
    init_db(app.state.engine)
    yield app
    app.dependency_overrides.clear()
    app.state.engine.dispose()


@pytest.fixture
def db(app):
    session = app.state.session_factory()
    yield session
    session.close()


@pytest.fixture
def login(app):
    """Make every request run as the given principal"""

    def use(principal):
        app.dependency_overrides[get_current_principal] = lambda: principal

    return use


@pytest.fixture
def client(app, login):
    login(ADMIN)
    return TestClient(app)


def add_customer(db, customer_id="c1", email="carl@example.com", user_id=CLIENT.uid):
    customer = Customer(id=customer_id, name="Carl Client", email=email, phone="555-0100", user_id=user_id)
    db.add(customer)
    db.commit()
    return customer


def add_vehicle(db, vehicle_id="v1", customer_id="c1", vin=VIN, mileage=42000):
    vehicle = Vehicle(
        id=vehicle_id,
        vin=vin,
        make="Toyota",
        model="Corolla",
        year=2018,
        customer_id=customer_id,
        mileage=mileage,
    )
    db.add(vehicle)
    db.commit()
    return vehicle


def add_service(db, service_id="s1", vehicle_id="v1", service_type="Oil Change", service_date=None):
    service = ServiceRecord(
        id=service_id,
        vehicle_id=vehicle_id,
        service_type=service_type,
        service_date=service_date or utc_now(),
        status="completed",
        mileage=42000,
    )
    db.add(service)
    db.commit()
    return service


@pytest.fixture
def seeded(db):
    """Customer c1 (linked to CLIENT) owning vehicle v1"""
    add_customer(db)
    add_vehicle(db)
    return db


def add_reminder(db, reminder_id, vehicle_id="v1", reminder_date=None, email="carl@example.com", **extra):
    reminder = Reminder(
        id=reminder_id,
        service_id="s1",
        vehicle_id=vehicle_id,
        customer_id="c1",
        reminder_type=extra.pop("reminder_type", "time"),
        reminder_date=reminder_date,
        sent=extra.pop("sent", False),
        email=email,
        message=extra.pop("message", "Time for an oil change"),
        **extra,
    )
    db.add(reminder)
    db.commit()
    return reminder


class FakeSender:
    """Records every email instead of sending it"""

    def __init__(self, fail_for=()):
        self.sent = []
        self.fail_for = set(fail_for)

    async def __call__(self, to, subject, mjml_content):
        if to in self.fail_for:
            raise DependencyError("Relay refused the message")
        self.sent.append({"to": to, "subject": subject, "mjml": mjml_content})
        return {"id": f"msg-{len(self.sent)}"}
