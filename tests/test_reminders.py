import asyncio
from datetime import datetime, timedelta

import pytest

from conftest import ADMIN, CLIENT, OTHER_CLIENT, WORKER, FakeSender, add_reminder, add_service
from workshop.domain.reminders.router import get_reminder_service
from workshop.domain.reminders.schemas import ReminderCreate, ReminderUpdate
from workshop.domain.reminders.service import ReminderService, date_filter_bounds
from workshop.models import Reminder
from workshop.shared.errors import (
    AuthorizationError,
    NotFoundError,
    ValidationError,
)

NOW = datetime(2025, 3, 12, 8, 0)


@pytest.fixture
def history(seeded):
    add_service(seeded, service_date=datetime(2024, 9, 1, 10, 0))
    return seeded


def sent_flags(db):
    db.expire_all()
    return {r.id: r.sent for r in db.query(Reminder).all()}


# ============================================================================
# SWEEP
# ============================================================================


def test_sweep_skips_reminders_it_cannot_deliver(history):
    add_reminder(history, "r1", reminder_date=NOW - timedelta(days=3))
    add_reminder(history, "r2", vehicle_id="gone", reminder_date=NOW - timedelta(days=2))
    add_reminder(history, "r3", reminder_date=NOW - timedelta(days=1))
    sender = FakeSender()

    result = asyncio.run(ReminderService(history, sender=sender).send_due_reminders(now=NOW))

    assert result["attempted"] == 3
    assert result["succeeded"] == 2
    assert result["message"] == "Successfully sent 2 of 3 reminders"
    assert sent_flags(history) == {"r1": True, "r2": False, "r3": True}
    assert len(sender.sent) == 2
    assert sender.sent[0]["subject"] == "Service Reminder for your Toyota Corolla"
    assert "Time for an oil change" in sender.sent[0]["mjml"]


def test_sweep_leaves_failed_deliveries_unsent(history):
    add_reminder(history, "r1", reminder_date=NOW - timedelta(days=1), email="bounce@example.com")
    add_reminder(history, "r2", reminder_date=NOW - timedelta(hours=1))
    sender = FakeSender(fail_for={"bounce@example.com"})

    result = asyncio.run(ReminderService(history, sender=sender).send_due_reminders(now=NOW))

    assert (result["attempted"], result["succeeded"]) == (2, 1)
    assert sent_flags(history) == {"r1": False, "r2": True}


def test_sweep_only_picks_due_unsent_dated_reminders(history):
    add_reminder(history, "past", reminder_date=NOW - timedelta(minutes=1))
    add_reminder(history, "exact", reminder_date=NOW)
    add_reminder(history, "future", reminder_date=NOW + timedelta(days=1))
    add_reminder(history, "done", reminder_date=NOW - timedelta(days=5), sent=True)
    add_reminder(history, "mileage", reminder_type="mileage", mileage_threshold=50000)
    sender = FakeSender()

    result = asyncio.run(ReminderService(history, sender=sender).send_due_reminders(now=NOW))

    assert result["attempted"] == 2
    flags = sent_flags(history)
    assert flags["past"] and flags["exact"]
    assert not flags["future"] and not flags["mileage"]


def test_sweep_with_nothing_due(history):
    result = asyncio.run(ReminderService(history, sender=FakeSender()).send_due_reminders(now=NOW))
    assert result == {"attempted": 0, "succeeded": 0, "message": "No reminders due for sending"}


def test_second_sweep_does_not_resend(history):
    add_reminder(history, "r1", reminder_date=NOW - timedelta(days=1))
    sender = FakeSender()
    service = ReminderService(history, sender=sender)

    asyncio.run(service.send_due_reminders(now=NOW))
    again = asyncio.run(service.send_due_reminders(now=NOW))

    assert again["attempted"] == 0
    assert len(sender.sent) == 1


def test_send_one_reminder_regardless_of_date(history):
    add_reminder(history, "r1", reminder_date=NOW + timedelta(days=30))
    sender = FakeSender()

    result = asyncio.run(ReminderService(history, sender=sender).send_reminder("r1"))

    assert result["success"] is True
    assert sent_flags(history)["r1"] is True
    with pytest.raises(NotFoundError):
        asyncio.run(ReminderService(history, sender=sender).send_reminder("missing"))


# ============================================================================
# RECORDS
# ============================================================================


def test_create_reminder_fills_email_and_message(history):
    reminder = ReminderService(history).create_reminder(
        ReminderCreate(
            serviceId="s1",
            vehicleId="v1",
            customerId="c1",
            reminderType="time",
            reminderDate="2025-09-01T09:00:00Z",
        ),
        WORKER,
    )
    assert reminder.email == "carl@example.com"
    assert reminder.message == "Reminder for Oil Change service for your Toyota Corolla"
    assert reminder.reminder_date == datetime(2025, 9, 1, 9, 0)
    assert reminder.sent is False


@pytest.mark.parametrize(
    "payload",
    [
        {"vehicleId": "v1", "customerId": "c1", "reminderType": "time", "reminderDate": "2025-09-01"},
        {"serviceId": "s1", "vehicleId": "v1", "customerId": "c1", "reminderType": "weekly"},
        {"serviceId": "s1", "vehicleId": "v1", "customerId": "c1", "reminderType": "time"},
        {
            "serviceId": "s1",
            "vehicleId": "v1",
            "customerId": "c1",
            "reminderType": "time",
            "reminderDate": "someday",
        },
    ],
)
def test_create_reminder_rejects_bad_input(history, payload):
    with pytest.raises(ValidationError):
        ReminderService(history).create_reminder(ReminderCreate(**payload), ADMIN)


def test_mileage_reminder_needs_no_date(history):
    reminder = ReminderService(history).create_reminder(
        ReminderCreate(
            serviceId="s1", vehicleId="v1", customerId="c1", reminderType="mileage", mileageThreshold=50000
        ),
        ADMIN,
    )
    assert reminder.reminder_date is None
    assert reminder.mileage_threshold == 50000


def test_clients_cannot_create_reminders(history):
    with pytest.raises(AuthorizationError):
        ReminderService(history).create_reminder(
            ReminderCreate(serviceId="s1", vehicleId="v1", customerId="c1", reminderType="mileage"),
            CLIENT,
        )


def test_update_rearms_a_sent_reminder(history):
    add_reminder(history, "r1", reminder_date=NOW - timedelta(days=1), sent=True)

    reminder = ReminderService(history).update_reminder(
        "r1", ReminderUpdate(reminderType="time", reminderDate="2025-06-01T00:00:00Z"), ADMIN
    )

    assert reminder.sent is False
    assert reminder.reminder_date == datetime(2025, 6, 1)
    assert reminder.message == "Time for an oil change"


def test_list_upcoming_and_client_scoping(history):
    add_reminder(history, "r1", reminder_date=NOW + timedelta(days=1))
    add_reminder(history, "r2", reminder_date=NOW - timedelta(days=1))
    add_reminder(history, "r3", reminder_date=NOW + timedelta(days=2), sent=True)
    service = ReminderService(history)

    upcoming = service.list_reminders(ADMIN, upcoming=True, now=NOW)
    assert [r["id"] for r in upcoming["reminders"]] == ["r1"]

    mine = service.list_reminders(CLIENT, now=NOW)
    assert [r["id"] for r in mine["reminders"]] == ["r2", "r1", "r3"]
    assert mine["reminders"][0]["vehicle"]["vin"]
    assert service.list_reminders(OTHER_CLIENT, now=NOW)["reminders"] == []

    with pytest.raises(AuthorizationError):
        service.get_reminder("r1", OTHER_CLIENT)


def test_date_filter_bounds():
    now = datetime(2025, 3, 12, 15, 30)  # a Wednesday

    assert date_filter_bounds("all", now) == (None, None)
    assert date_filter_bounds("today", now) == (datetime(2025, 3, 12), datetime(2025, 3, 13))
    assert date_filter_bounds("week", now) == (datetime(2025, 3, 10), datetime(2025, 3, 17))
    assert date_filter_bounds("month", now) == (datetime(2025, 3, 1), datetime(2025, 4, 1))
    assert date_filter_bounds("year", now) == (datetime(2025, 1, 1), datetime(2026, 1, 1))
    assert date_filter_bounds("month", datetime(2025, 12, 5)) == (
        datetime(2025, 12, 1),
        datetime(2026, 1, 1),
    )
    assert date_filter_bounds("month", datetime(2024, 1, 31)) == (datetime(2024, 1, 1), datetime(2024, 2, 1))
    assert date_filter_bounds("year", datetime(2024, 2, 29)) == (datetime(2024, 1, 1), datetime(2025, 1, 1))
    with pytest.raises(ValidationError):
        date_filter_bounds("decade", now)


# ============================================================================
# HTTP
# ============================================================================


def test_send_endpoint_runs_the_sweep(app, client, history):
    add_reminder(history, "r1", reminder_date=datetime(2020, 1, 1))
    sender = FakeSender()
    app.dependency_overrides[get_reminder_service] = lambda: ReminderService(history, sender=sender)

    response = client.post("/reminders/send")

    assert response.status_code == 200
    assert response.json()["attempted"] == 1
    assert response.json()["succeeded"] == 1
    assert sender.sent[0]["to"] == "carl@example.com"


def test_send_endpoint_is_staff_only(client, login, history):
    login(CLIENT)
    assert client.post("/reminders/send").status_code == 403
    assert client.post("/reminders/r1/send").status_code == 403


def test_reminder_crud_over_http(client, history):
    created = client.post(
        "/reminders",
        json={
            "serviceId": "s1",
            "vehicleId": "v1",
            "customerId": "c1",
            "reminderType": "both",
            "reminderDate": "2025-09-01T09:00:00Z",
            "mileageThreshold": 60000,
        },
    )
    assert created.status_code == 201
    reminder_id = created.json()["reminder"]["id"]

    detail = client.get(f"/reminders/{reminder_id}")
    assert detail.status_code == 200
    assert detail.json()["reminder"]["service"]["serviceType"] == "Oil Change"

    assert client.delete(f"/reminders/{reminder_id}").json() == {"success": True}
    assert client.get(f"/reminders/{reminder_id}").status_code == 404
