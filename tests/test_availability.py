import pytest
from fastapi.testclient import TestClient

from conftest import ADMIN, CLIENT, WORKER
from workshop.domain.availability.schemas import TimeSlot, WorkingHours
from workshop.domain.availability.service import AvailabilityService, generate_slots
from workshop.shared.errors import AuthorizationError, ValidationError

DAY = "2025-03-10"


def times(slots):
    return [slot.time for slot in slots]


def test_generate_slots_evenly_divisible():
    slots = generate_slots(WorkingHours(start="09:00", end="17:00", interval=30), DAY)
    assert len(slots) == 16
    assert slots[0].time == "09:00"
    assert slots[-1].time == "16:30"
    assert all(slot.available for slot in slots)


def test_generate_slots_end_is_exclusive_when_not_divisible():
    slots = generate_slots(WorkingHours(start="09:00", end="10:00", interval=25), DAY)
    assert times(slots) == ["09:00", "09:25", "09:50"]


def test_generate_slots_strictly_increasing_and_before_end():
    slots = generate_slots(WorkingHours(start="08:15", end="12:40", interval=45))
    assert times(slots) == sorted(set(times(slots)))
    assert all(t < "12:40" for t in times(slots))


@pytest.mark.parametrize("start,end", [("17:00", "09:00"), ("09:00", "09:00")])
def test_generate_slots_empty_when_start_not_before_end(start, end):
    assert generate_slots(WorkingHours(start=start, end=end, interval=30), DAY) == []


def test_generate_slots_interval_wider_than_the_day():
    slots = generate_slots(WorkingHours(start="09:00", end="17:00", interval=480), DAY)
    assert times(slots) == ["09:00"]


def test_generate_slots_one_minute_interval():
    slots = generate_slots(WorkingHours(start="09:00", end="09:03", interval=1), DAY)
    assert times(slots) == ["09:00", "09:01", "09:02"]


@pytest.mark.parametrize("interval", [0, -15])
def test_generate_slots_rejects_non_positive_interval(interval):
    with pytest.raises(ValidationError):
        generate_slots(WorkingHours(start="09:00", end="17:00", interval=interval))


def test_get_availability_defaults_for_unknown_day(db):
    view = AvailabilityService(db).get_availability(DAY)
    assert view["date"] == DAY
    assert view["isBlocked"] is False
    assert view["workingHours"].start == "09:00"
    assert view["workingHours"].end == "17:00"
    assert view["workingHours"].interval == 30
    assert view["timeSlots"] == []


def test_get_availability_rejects_bad_date(db):
    with pytest.raises(ValidationError):
        AvailabilityService(db).get_availability("10/03/2025")


def test_set_availability_stores_sorted_slots_and_stamp(db):
    service = AvailabilityService(db)
    hours = WorkingHours(start="09:00", end="11:00", interval=60)
    slots = [TimeSlot(time="10:00"), TimeSlot(time="09:00", available=False)]

    view = service.set_availability(DAY, False, hours, slots, WORKER)

    assert [(s.time, s.available) for s in view["timeSlots"]] == [("09:00", False), ("10:00", True)]
    assert view["updatedBy"] == WORKER.uid
    assert view["updatedAt"] is not None


def test_set_availability_replaces_slot_list(db):
    service = AvailabilityService(db)
    hours = WorkingHours(start="09:00", end="12:00", interval=60)
    service.set_availability(DAY, False, hours, generate_slots(hours), ADMIN)

    view = service.set_availability(
        DAY, False, hours, [TimeSlot(time="10:00"), TimeSlot(time="11:30")], ADMIN
    )

    assert times(view["timeSlots"]) == ["10:00", "11:30"]


def test_set_availability_without_slots_keeps_existing(db):
    service = AvailabilityService(db)
    hours = WorkingHours(start="09:00", end="11:00", interval=60)
    service.set_availability(DAY, False, hours, generate_slots(hours), ADMIN)

    view = service.set_availability(DAY, True, None, None, ADMIN)

    assert view["isBlocked"] is True
    assert times(view["timeSlots"]) == ["09:00", "10:00"]
    assert view["workingHours"].interval == 60


def test_set_availability_rejects_duplicate_times(db):
    with pytest.raises(ValidationError):
        AvailabilityService(db).set_availability(
            DAY, False, WorkingHours(), [TimeSlot(time="09:00"), TimeSlot(time="09:00")], ADMIN
        )


def test_set_availability_requires_staff(db):
    with pytest.raises(AuthorizationError):
        AvailabilityService(db).set_availability(DAY, False, WorkingHours(), [], CLIENT)
    assert AvailabilityService(db).get_availability(DAY)["updatedAt"] is None


def test_set_slot_availability_toggles_only_that_slot(db):
    service = AvailabilityService(db)
    hours = WorkingHours(start="09:00", end="10:30", interval=30)
    service.set_availability(DAY, False, hours, generate_slots(hours), ADMIN)

    view = service.set_slot_availability(DAY, "09:30", False, WORKER)

    assert [(s.time, s.available) for s in view["timeSlots"]] == [
        ("09:00", True),
        ("09:30", False),
        ("10:00", True),
    ]


def test_set_slot_availability_unknown_time_is_a_no_op(db):
    service = AvailabilityService(db)
    hours = WorkingHours(start="09:00", end="10:00", interval=30)
    service.set_availability(DAY, False, hours, generate_slots(hours), ADMIN)

    view = service.set_slot_availability(DAY, "12:00", False, ADMIN)

    assert [(s.time, s.available) for s in view["timeSlots"]] == [("09:00", True), ("09:30", True)]


def test_set_slot_availability_unknown_day_creates_nothing(db):
    view = AvailabilityService(db).set_slot_availability("2025-04-01", "09:00", False, ADMIN)
    assert view["timeSlots"] == []
    assert view["updatedAt"] is None


def test_set_slot_availability_requires_staff(db):
    with pytest.raises(AuthorizationError):
        AvailabilityService(db).set_slot_availability(DAY, "09:00", False, CLIENT)


# ============================================================================
# HTTP
# ============================================================================


def test_availability_endpoints_round_trip(client):
    payload = {
        "date": DAY,
        "isBlocked": False,
        "workingHours": {"start": "09:00", "end": "10:00", "interval": 30},
        "timeSlots": [{"time": "09:00", "available": True}, {"time": "09:30", "available": True}],
    }
    assert client.post("/availability", json=payload).status_code == 200

    toggled = client.post("/availability/slots", json={"date": DAY, "time": "09:00", "available": False})
    assert toggled.status_code == 200

    response = client.get("/availability", params={"date": DAY})
    assert response.status_code == 200
    body = response.json()
    assert body["workingHours"] == {"start": "09:00", "end": "10:00", "interval": 30}
    assert body["timeSlots"] == [
        {"time": "09:00", "available": False},
        {"time": "09:30", "available": True},
    ]


def test_availability_requires_date(client):
    response = client.get("/availability")
    assert response.status_code == 400
    assert response.json()["error"] == "ValidationError"


def test_availability_write_forbidden_for_client(client, login):
    login(CLIENT)
    response = client.post("/availability", json={"date": DAY, "isBlocked": True})
    assert response.status_code == 403
    assert response.json()["error"] == "AuthorizationError"


def test_availability_rejects_bad_interval(client):
    response = client.post(
        "/availability",
        json={"date": DAY, "workingHours": {"start": "09:00", "end": "17:00", "interval": 0}},
    )
    assert response.status_code == 400


def test_generate_slots_preview(client):
    response = client.post(
        "/availability/generate-slots",
        json={"date": DAY, "workingHours": {"start": "09:00", "end": "10:00", "interval": 20}},
    )
    assert response.status_code == 200
    assert [s["time"] for s in response.json()] == ["09:00", "09:20", "09:40"]


def test_availability_without_token_is_unauthenticated(app):
    response = TestClient(app).get("/availability", params={"date": DAY})
    assert response.status_code == 401
    assert response.json()["error"] == "Unauthenticated"
