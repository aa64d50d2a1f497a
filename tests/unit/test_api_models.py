"""Test upstream records and request body models."""
from datetime import datetime

import pytest
from pydantic import ValidationError

from clinic_booking.models import (
    BookAppointmentBody,
    Doctor,
    ErrorResponse,
    Lookup,
    PatientFormBody,
    TimeSlot,
)


class TestUpstreamRecords:

    def test_doctor_from_upstream_names(self):
        doctor = Doctor.model_validate({
            "DoctorID": 7, "Name": "Sara Haddad", "ClinicID": 3, "LicenseNo": 1234,
            "SomethingNew": "ignored",
        })

        assert doctor.doctor_id == 7
        assert doctor.clinic_id == 3
        assert doctor.license_no == "1234"
        assert doctor.img_path is None

    def test_doctor_dumps_upstream_names(self, doctor):
        data = doctor.model_dump(by_alias=True)

        assert data["DoctorID"] == 101
        assert data["Name"] == "Sara Haddad"

    def test_doctor_is_frozen(self, doctor):
        with pytest.raises(ValidationError):
            doctor.name = "Someone else"

    def test_missing_lists_default_empty(self):
        lookup = Lookup.model_validate({})

        assert lookup.doctors == []
        assert lookup.clinics == []

    def test_clinic_visible_by_default(self):
        lookup = Lookup.model_validate({"Clinics": [{"Id": 1, "Name": "General"}]})

        assert lookup.clinics[0].show_in_app is True

    def test_time_slots_compare_by_value(self, morning_slot):
        same = TimeSlot(start_time=datetime(2025, 6, 1, 9, 0), end_time=datetime(2025, 6, 1, 9, 30))

        assert same == morning_slot


class TestBookAppointmentBody:

    def test_camel_case_fields(self):
        body = BookAppointmentBody.model_validate({
            "doctorId": 101,
            "date": "2025-06-01T00:00:00",
            "timeSlot": {"StartTime": "2025-06-01T09:00:00", "EndTime": "2025-06-01T09:30:00"},
            "fullName": "Ana Park",
            "mobile": "+971527654321",
        })

        assert body.doctor_id == 101
        assert body.time_slot.start_time == datetime(2025, 6, 1, 9, 0)
        assert body.description == ""

    def test_full_name_required(self):
        with pytest.raises(ValidationError):
            BookAppointmentBody.model_validate({
                "doctorId": 101,
                "date": "2025-06-01T00:00:00",
                "timeSlot": {"StartTime": "2025-06-01T09:00:00", "EndTime": "2025-06-01T09:30:00"},
                "fullName": "",
                "mobile": "+971527654321",
            })

    def test_blank_full_name_rejected(self):
        with pytest.raises(ValidationError):
            BookAppointmentBody.model_validate({
                "doctorId": 101,
                "date": "2025-06-01T00:00:00",
                "timeSlot": {"StartTime": "2025-06-01T09:00:00", "EndTime": "2025-06-01T09:30:00"},
                "fullName": "   ",
                "mobile": "+971527654321",
            })

    def test_full_name_trimmed(self):
        body = BookAppointmentBody.model_validate({
            "doctorId": 101,
            "date": "2025-06-01T00:00:00",
            "timeSlot": {"StartTime": "2025-06-01T09:00:00", "EndTime": "2025-06-01T09:30:00"},
            "fullName": "  Ana Park ",
            "mobile": "+971527654321",
        })

        assert body.full_name == "Ana Park"


def test_patient_form_defaults():
    form = PatientFormBody.model_validate({})

    assert form.prefix == "50"
    assert form.full_name == ""
    assert form.mobile_rest == ""


def test_error_response_optional_fields():
    error = ErrorResponse(error="Wizard Not Found")

    assert error.model_dump() == {"error": "Wizard Not Found", "detail": None, "code": None}
