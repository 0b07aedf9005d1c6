import asyncio
import smtplib
from datetime import datetime, timedelta

import pytest

from conftest import CLIENT
from workshop import config, email_service
from workshop.domain.scheduling.service import notify_booking, vehicle_summary
from workshop.email_templates import booking_confirmation_template, service_reminder_template
from workshop.shared.errors import DependencyError
from workshop.shared.timeutils import local_day_bounds, parse_utc_offset, slot_instant, to_local
from workshop.shared.validators import (
    split_scheduled_time,
    validate_date_key,
    validate_time_of_day,
    validate_vin,
)

PLUS_TWO = parse_utc_offset("+02:00")


# ============================================================================
# TIME
# ============================================================================


def test_parse_utc_offset():
    assert parse_utc_offset("+00:00").utcoffset(None) == timedelta(0)
    assert parse_utc_offset("-0530").utcoffset(None) == -timedelta(hours=5, minutes=30)
    with pytest.raises(ValueError):
        parse_utc_offset("Europe/Berlin")


def test_slot_instant_is_stored_as_utc():
    assert slot_instant("2025-03-10", "09:00", PLUS_TWO) == datetime(2025, 3, 10, 7, 0)
    assert slot_instant("2025-03-10", "01:00", PLUS_TWO) == datetime(2025, 3, 9, 23, 0)


def test_local_day_bounds():
    assert local_day_bounds("2025-03-10", PLUS_TWO) == (
        datetime(2025, 3, 9, 22, 0),
        datetime(2025, 3, 10, 22, 0),
    )


def test_to_local_round_trips_a_slot():
    stored = slot_instant("2025-03-10", "16:30", PLUS_TWO)
    assert to_local(stored, PLUS_TWO).strftime("%Y-%m-%d %H:%M") == "2025-03-10 16:30"


# ============================================================================
# VALIDATORS
# ============================================================================


def test_validate_vin():
    assert validate_vin(" 1hgcm82633a004352 ") == "1HGCM82633A004352"
    for bad in (None, "", "1HGCM82633A00435", "1HGCM82633A00435Q"):
        with pytest.raises(ValueError):
            validate_vin(bad)


def test_validate_date_and_time():
    assert validate_date_key("2024-02-29") == "2024-02-29"
    assert validate_time_of_day("23:59") == "23:59"
    for bad in ("2023-02-29", "10/03/2025", None):
        with pytest.raises(ValueError):
            validate_date_key(bad)
    for bad in ("24:00", "9:00", "noon", None):
        with pytest.raises(ValueError):
            validate_time_of_day(bad)


def test_split_scheduled_time():
    assert split_scheduled_time("2025-03-10T09:30") == ("2025-03-10", "09:30")
    assert split_scheduled_time("2025-03-10T09:30:00") == ("2025-03-10", "09:30")
    with pytest.raises(ValueError):
        split_scheduled_time("2025-03-10 09:30")


def test_vehicle_summary_without_vehicle():
    assert vehicle_summary(None) == " () - No VIN"


# ============================================================================
# EMAIL
# ============================================================================


def test_templates_escape_user_text():
    mjml = service_reminder_template(
        message="<b>Due</b> soon",
        make="Toyota",
        model="Corolla",
        year=2018,
        vin="1HGCM82633A004352",
        last_service_type="Oil Change",
        last_service_date="2024-09-01",
    )
    assert "&lt;b&gt;Due&lt;/b&gt; soon" in mjml
    assert "<mjml>" in mjml

    confirmation = booking_confirmation_template(
        "Carl & Co", "Oil Change", "Toyota Corolla (2018) - 1HGCM82633A004352", "2025-03-10", "09:00"
    )
    assert "Carl &amp; Co" in confirmation
    assert "2025-03-10" in confirmation


@pytest.fixture
def plain_html(monkeypatch):
    monkeypatch.setattr(email_service, "compile_mjml_to_html", lambda content: "<p>hello</p>")


def test_send_email_without_transport(monkeypatch, plain_html):
    monkeypatch.setattr(config, "EMAIL_HOST", None)
    monkeypatch.setattr(config, "RESEND_API_KEY", None)
    with pytest.raises(DependencyError):
        asyncio.run(email_service.send_email("a@example.com", "Hi", "<mjml></mjml>"))


def test_send_email_prefers_smtp(monkeypatch, plain_html):
    calls = []
    monkeypatch.setattr(config, "EMAIL_HOST", "smtp.example.com")
    monkeypatch.setattr(
        email_service,
        "send_via_smtp",
        lambda recipients, subject, html, sender: calls.append(recipients) or {"id": "smtp-1"},
    )

    result = asyncio.run(email_service.send_email("a@example.com", "Hi", "<mjml></mjml>"))

    assert result == {"id": "smtp-1"}
    assert calls == [["a@example.com"]]


def test_send_email_falls_back_to_resend(monkeypatch, plain_html):
    def broken_smtp(*args):
        raise smtplib.SMTPException("relay down")

    sent = []
    monkeypatch.setattr(config, "EMAIL_HOST", "smtp.example.com")
    monkeypatch.setattr(config, "RESEND_API_KEY", "re_test")
    monkeypatch.setattr(email_service, "send_via_smtp", broken_smtp)
    monkeypatch.setattr(email_service.resend.Emails, "send", lambda params: sent.append(params) or {"id": "re-1"})

    result = asyncio.run(email_service.send_email("a@example.com", "Hi", "<mjml></mjml>"))

    assert result == {"id": "re-1"}
    assert sent[0]["to"] == ["a@example.com"]
    assert sent[0]["html"] == "<p>hello</p>"


def test_smtp_failure_without_fallback(monkeypatch, plain_html):
    def broken_smtp(*args):
        raise OSError("connection refused")

    monkeypatch.setattr(config, "EMAIL_HOST", "smtp.example.com")
    monkeypatch.setattr(config, "RESEND_API_KEY", None)
    monkeypatch.setattr(email_service, "send_via_smtp", broken_smtp)

    with pytest.raises(DependencyError):
        asyncio.run(email_service.send_email("a@example.com", "Hi", "<mjml></mjml>"))


class FakeSMTP:
    """Relay connection whose STARTTLS handshake fails"""

    instances = []

    def __init__(self, host, port, timeout=None):
        self.closed = False
        FakeSMTP.instances.append(self)

    def starttls(self, context=None):
        raise smtplib.SMTPNotSupportedError("STARTTLS extension not supported by server.")

    def quit(self):
        raise smtplib.SMTPServerDisconnected("Connection unexpectedly closed")

    def close(self):
        self.closed = True


def test_failed_starttls_still_closes_the_connection(monkeypatch):
    FakeSMTP.instances = []
    monkeypatch.setattr(config, "EMAIL_HOST", "smtp.example.com")
    monkeypatch.setattr(config, "EMAIL_PORT", 587)
    monkeypatch.setattr(config, "EMAIL_SECURE", False)
    monkeypatch.setattr(email_service.smtplib, "SMTP", FakeSMTP)

    with pytest.raises(smtplib.SMTPNotSupportedError):
        email_service.send_via_smtp(["a@example.com"], "Hi", "<p>hello</p>", "Workshop <noreply@workshop.local>")

    assert len(FakeSMTP.instances) == 1
    assert FakeSMTP.instances[0].closed is True


def test_booking_confirmation_failure_is_not_raised(monkeypatch):
    async def failing(**kwargs):
        raise DependencyError("Email service not configured")

    monkeypatch.setattr("workshop.domain.scheduling.service.send_booking_confirmation", failing)
    booking = {
        "id": "s1",
        "date": "2025-03-10",
        "time": "09:00",
        "serviceType": "Oil Change",
        "vehicleInfo": "Toyota Corolla (2018) - 1HGCM82633A004352",
    }

    asyncio.run(notify_booking(CLIENT, booking))


# ============================================================================
# APP
# ============================================================================


def test_security_headers(client):
    response = client.get("/")
    assert response.status_code == 200
    assert response.headers["X-Frame-Options"] == "DENY"
    assert response.headers["X-Content-Type-Options"] == "nosniff"
    assert response.headers["Cache-Control"] == "no-store"


def test_health_is_excluded_from_security_headers(client):
    response = client.get("/health")
    assert response.json() == {"status": "healthy"}
    assert "X-Frame-Options" not in response.headers
