"""Integration tests for the booking wizard endpoints."""
from datetime import date, timedelta

import pytest
from fastapi.testclient import TestClient

from clinic_booking.api_server import app
from clinic_booking.dependencies import get_clinic_client, get_session_manager
from clinic_booking.session_manager import WizardSessionManager
from clinic_booking.upstream import UpstreamStatusError

SLOT = {"StartTime": "2025-06-01T09:00:00", "EndTime": "2025-06-01T09:30:00"}
FORM = {"fullName": "Ana Park", "prefix": "52", "mobileRest": "7654321", "description": ""}


@pytest.fixture
def wizards():
    return WizardSessionManager()


@pytest.fixture
def client(mock_client, wizards):
    app.dependency_overrides[get_clinic_client] = lambda: mock_client
    app.dependency_overrides[get_session_manager] = lambda: wizards
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def booking_day():
    return (date.today() + timedelta(days=3)).isoformat()


def open_wizard(client, doctor_id=101):
    response = client.post("/api/wizards", json={"doctorId": doctor_id})
    assert response.status_code == 201
    return response.json()["id"]


def to_form(client, wizard_id, booking_day):
    client.post(f"/api/wizards/{wizard_id}/date", json={"date": booking_day})
    return client.post(f"/api/wizards/{wizard_id}/time-slot", json=SLOT)


class TestWizardFlow:

    def test_open_starts_on_date_step(self, client, wizards):
        response = client.post("/api/wizards", json={"doctorId": 101})

        view = response.json()
        assert response.status_code == 201
        assert view["step"] == "date"
        assert view["doctor"]["Name"] == "Sara Haddad"
        assert view["id"] in wizards

    def test_full_booking(self, client, mock_client, booking_day):
        wizard_id = open_wizard(client)

        response = client.post(f"/api/wizards/{wizard_id}/date", json={"date": booking_day})
        assert response.status_code == 200
        assert response.json()["step"] == "time_slot"
        assert response.json()["time_slots"] == [SLOT]

        response = client.post(f"/api/wizards/{wizard_id}/time-slot", json=SLOT)
        assert response.json()["step"] == "form"
        assert response.json()["selected_slot"] == SLOT

        response = client.post(f"/api/wizards/{wizard_id}/submit", json=FORM)
        view = response.json()
        assert response.status_code == 200
        assert view["step"] == "confirmation"
        assert view["confirmation"]["patient_name"] == "Ana Park"
        assert view["confirmation"]["mobile"] == "+971527654321"
        assert view["confirmation"]["doctor_name"] == "Dr. Sara Haddad"
        assert view["confirmation"]["time_range"] == "9:00 AM - 9:30 AM"
        assert view["confirmation"]["description"] is None

        sent = mock_client.add_appointment.call_args[0][0]
        assert sent.mobile_no == "+971527654321"
        assert sent.app_date == f"{booking_day} 00:00"

    def test_get_wizard(self, client):
        wizard_id = open_wizard(client)

        response = client.get(f"/api/wizards/{wizard_id}")

        assert response.status_code == 200
        assert response.json()["id"] == wizard_id

    def test_back_from_form(self, client, mock_client, booking_day):
        wizard_id = open_wizard(client)
        to_form(client, wizard_id, booking_day)

        response = client.post(f"/api/wizards/{wizard_id}/back")

        assert response.json()["step"] == "time_slot"
        assert mock_client.fetch_time_slots.call_count == 2

    def test_close_then_reopen_starts_fresh(self, client, booking_day):
        wizard_id = open_wizard(client)
        to_form(client, wizard_id, booking_day)

        assert client.delete(f"/api/wizards/{wizard_id}").status_code == 204
        assert client.get(f"/api/wizards/{wizard_id}").status_code == 404

        new_id = open_wizard(client)
        view = client.get(f"/api/wizards/{new_id}").json()
        assert new_id != wizard_id
        assert view["step"] == "date"
        assert view["selected_slot"] is None


class TestWizardFailures:

    def test_unknown_doctor(self, client):
        response = client.post("/api/wizards", json={"doctorId": 999})

        assert response.status_code == 404
        assert response.json()["code"] == "DOCTOR_NOT_FOUND"

    def test_unknown_wizard(self, client):
        response = client.get("/api/wizards/wiz-missing")

        assert response.status_code == 404
        assert response.json()["code"] == "WIZARD_NOT_FOUND"

    def test_past_date(self, client):
        wizard_id = open_wizard(client)
        yesterday = (date.today() - timedelta(days=1)).isoformat()

        response = client.post(f"/api/wizards/{wizard_id}/date", json={"date": yesterday})

        assert response.status_code == 422
        assert response.json()["code"] == "INVALID_SELECTION"

    def test_slot_fetch_failure_keeps_200(self, client, mock_client, booking_day):
        mock_client.fetch_time_slots.side_effect = UpstreamStatusError(500, "boom")
        wizard_id = open_wizard(client)

        response = client.post(f"/api/wizards/{wizard_id}/date", json={"date": booking_day})

        view = response.json()
        assert response.status_code == 200
        assert view["step"] == "time_slot"
        assert view["time_slots"] == []
        assert view["error"] == "Failed to load available time slots"

    def test_skipping_steps_conflicts(self, client):
        wizard_id = open_wizard(client)

        response = client.post(f"/api/wizards/{wizard_id}/time-slot", json=SLOT)

        assert response.status_code == 409
        assert response.json()["code"] == "INVALID_TRANSITION"

    def test_invalid_mobile(self, client, mock_client, booking_day):
        wizard_id = open_wizard(client)
        to_form(client, wizard_id, booking_day)

        response = client.post(
            f"/api/wizards/{wizard_id}/submit", json={**FORM, "mobileRest": "123"}
        )

        assert response.status_code == 422
        assert response.json()["step"] == "form"
        assert response.json()["error"] == "Please enter a valid UAE mobile number"
        mock_client.add_appointment.assert_not_called()

    def test_booking_failure_then_retry(self, client, mock_client, booking_day):
        mock_client.add_appointment.side_effect = [UpstreamStatusError(500, "boom"), {"Success": True}]
        wizard_id = open_wizard(client)
        to_form(client, wizard_id, booking_day)

        failed = client.post(f"/api/wizards/{wizard_id}/submit", json=FORM)
        assert failed.status_code == 502
        assert failed.json()["step"] == "form"
        assert failed.json()["error"] == "Failed to book appointment"

        retried = client.post(f"/api/wizards/{wizard_id}/submit", json=FORM)
        assert retried.status_code == 200
        assert retried.json()["step"] == "confirmation"

    def test_malformed_date(self, client):
        wizard_id = open_wizard(client)

        response = client.post(f"/api/wizards/{wizard_id}/date", json={"date": "tomorrow"})

        assert response.status_code == 422
        assert response.json()["code"] == "VALIDATION_ERROR"


class TestPrintableConfirmation:

    def test_print_after_confirmation(self, client, booking_day):
        wizard_id = open_wizard(client)
        to_form(client, wizard_id, booking_day)
        client.post(f"/api/wizards/{wizard_id}/submit", json=FORM)

        response = client.get(f"/api/wizards/{wizard_id}/confirmation/print")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/html")
        assert "Ana Park" in response.text
        assert "window.print()" in response.text

    def test_print_before_confirmation(self, client):
        wizard_id = open_wizard(client)

        response = client.get(f"/api/wizards/{wizard_id}/confirmation/print")

        assert response.status_code == 409
