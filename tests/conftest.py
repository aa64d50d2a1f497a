"""Shared test fixtures."""
from datetime import date
from unittest.mock import Mock

import pytest

from clinic_booking.models import Doctor, Lookup, TimeSlot
from clinic_booking.upstream import ClinicApiClient
from clinic_booking.wizard import BookingWizard


LOOKUP_PAYLOAD = {
    "Doctors": [
        {"DoctorID": 101, "Name": "Sara Haddad", "DoctorSpecialityID": 10,
         "ClinicID": 1, "ImgPath": "0", "LicenseNo": "DHA-10231"},
        {"DoctorID": 102, "Name": "Omar Khalil", "DoctorSpecialityID": 11,
         "ClinicID": 2, "ImgPath": "", "LicenseNo": "DHA-22310"},
        {"DoctorID": 103, "Name": "Lina Farouk", "DoctorSpecialityID": 12,
         "ClinicID": 3, "ImgPath": "/images/doctors/103.jpg", "LicenseNo": 30112},
        {"DoctorID": 104, "Name": "Sarah Omar", "DoctorSpecialityID": 10,
         "ClinicID": 1, "ImgPath": None, "LicenseNo": "DHA-40001"},
    ],
    "Clinics": [
        {"Id": 1, "Name": "General Medicine", "ShowInApp": True},
        {"Id": 2, "Name": "Pediatrics", "ShowInApp": True},
        {"Id": 3, "Name": "Dermatology", "ShowInApp": False},
    ],
}


@pytest.fixture
def lookup_payload() -> dict:
    return LOOKUP_PAYLOAD


@pytest.fixture
def lookup() -> Lookup:
    return Lookup.model_validate(LOOKUP_PAYLOAD)


@pytest.fixture
def doctors(lookup):
    return lookup.doctors


@pytest.fixture
def doctor(lookup) -> Doctor:
    return lookup.doctors[0]


@pytest.fixture
def morning_slot() -> TimeSlot:
    return TimeSlot(StartTime="2025-06-01T09:00:00", EndTime="2025-06-01T09:30:00")


@pytest.fixture
def second_slot() -> TimeSlot:
    return TimeSlot(StartTime="2025-06-01T09:30:00", EndTime="2025-06-01T10:00:00")


@pytest.fixture
def mock_client(lookup, morning_slot):
    """Clinic API client double with successful defaults."""
    client = Mock(spec=ClinicApiClient)
    client.fetch_lookup.return_value = lookup
    client.fetch_time_slots.return_value = [morning_slot]
    client.add_appointment.return_value = {"Success": True, "AppointmentID": 1001}
    return client


@pytest.fixture
def wizard(doctor, mock_client) -> BookingWizard:
    """Wizard whose 'today' is 2025-05-01."""
    return BookingWizard(doctor, mock_client, today=lambda: date(2025, 5, 1))


@pytest.fixture
def mock_response():
    """Create a mock requests.Response."""
    def _create(status_code: int = 200, json_body=None, text: str = ""):
        response = Mock()
        response.status_code = status_code
        response.ok = 200 <= status_code < 400
        response.text = text
        if json_body is None:
            response.json.side_effect = ValueError("No JSON")
        else:
            response.json.return_value = json_body
        return response
    return _create

