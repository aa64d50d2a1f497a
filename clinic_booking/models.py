"""Pydantic models for upstream data, API bodies and wizard views.

Upstream records keep the clinic-management API's PascalCase names as
aliases; Python code uses the snake_case field names.
"""
from datetime import date, datetime
from typing import Annotated, Any, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, StringConstraints

from clinic_booking import config


class UpstreamModel(BaseModel):
    """Base for records read from the clinic-management API."""
    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        coerce_numbers_to_str=True,
        extra="ignore",
    )


class Doctor(UpstreamModel):
    doctor_id: int = Field(..., alias="DoctorID")
    name: str = Field(..., alias="Name")
    speciality_id: Optional[int] = Field(None, alias="DoctorSpecialityID")
    clinic_id: Optional[int] = Field(None, alias="ClinicID")
    img_path: Optional[str] = Field(None, alias="ImgPath")
    license_no: Optional[str] = Field(None, alias="LicenseNo")


class Clinic(UpstreamModel):
    id: int = Field(..., alias="Id")
    name: str = Field(..., alias="Name")
    show_in_app: bool = Field(True, alias="ShowInApp")


class Lookup(UpstreamModel):
    """Clinics and doctors of one branch."""
    doctors: List[Doctor] = Field(default_factory=list, alias="Doctors")
    clinics: List[Clinic] = Field(default_factory=list, alias="Clinics")


class TimeSlot(UpstreamModel):
    start_time: datetime = Field(..., alias="StartTime")
    end_time: datetime = Field(..., alias="EndTime")


class BookingRequest(BaseModel):
    """
    Appointment record posted to the upstream AddAppointmentForWeb endpoint.

    Every value is a string; dates use the upstream's formats
    (minute precision for AppDate/StDate, millisecond precision for EndDate).
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    doctor_id: str = Field(..., alias="DoctorID")
    app_date: str = Field(..., alias="AppDate")
    patient: str = Field(..., alias="Patient")
    patient_id: str = Field(..., alias="PatientID")
    mobile_no: str = Field(..., alias="MobileNo")
    updated_by: str = Field(..., alias="UpdatedBy")
    room_id: str = Field(..., alias="RoomID")
    appointment_reasons_id: str = Field(..., alias="AppointmentReasonsID")
    st_date: str = Field(..., alias="StDate")
    end_date: str = Field(..., alias="EndDate")
    description: str = Field(..., alias="Description")
    non_arabic: str = Field(..., alias="NonArabic")
    how_to_know: str = Field(..., alias="HowToKnow")
    status_id: str = Field(..., alias="StatusID")
    branch_id: str = Field(..., alias="BranchID")
    fname: str = Field(..., alias="Fname")
    mname: str = Field(..., alias="MName")
    lname: str = Field(..., alias="LName")

    def to_payload(self) -> dict:
        """Upstream JSON body."""
        return self.model_dump(by_alias=True)


class PatientInput(BaseModel):
    """Validated patient details; `mobile` is already normalized."""
    model_config = ConfigDict(frozen=True)

    full_name: str
    mobile: str
    description: str = ""


class BookedAppointment(BaseModel):
    """Server-acknowledged booking kept by a confirmed wizard."""
    model_config = ConfigDict(frozen=True)

    doctor: Doctor
    date: date
    time_slot: TimeSlot
    full_name: str
    mobile: str
    description: str = ""
    upstream_response: Any = None


class ConfirmationSummary(BaseModel):
    patient_name: str
    mobile: str
    doctor_name: str
    date: str
    time_range: str
    description: Optional[str] = None


# ---------------------------------------------------------------------------
# Request bodies
# ---------------------------------------------------------------------------

class BookAppointmentBody(BaseModel):
    """Body of POST /api/book-appointment."""
    doctor_id: Union[int, str] = Field(..., alias="doctorId")
    date: datetime
    time_slot: TimeSlot = Field(..., alias="timeSlot")
    full_name: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)] = Field(
        ..., alias="fullName"
    )
    mobile: str
    description: Optional[str] = ""

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "doctorId": 101,
                "date": "2025-06-01T00:00:00",
                "timeSlot": {
                    "StartTime": "2025-06-01T09:00:00",
                    "EndTime": "2025-06-01T09:30:00"
                },
                "fullName": "Ana Park",
                "mobile": "+971527654321",
                "description": ""
            }
        }
    )


class CreateWizardBody(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    doctor_id: int = Field(..., alias="doctorId")


class DateSelectionBody(BaseModel):
    date: date


class PatientFormBody(BaseModel):
    """
    Raw patient form. Validation happens in the wizard so a bad value
    leaves the wizard on the form step with a message.
    """
    model_config = ConfigDict(populate_by_name=True)

    full_name: str = Field("", alias="fullName")
    prefix: str = Field(config.MOBILE_PREFIXES[0])
    mobile_rest: str = Field("", alias="mobileRest")
    description: str = ""


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------

class WizardView(BaseModel):
    """Snapshot of a booking wizard returned by the wizard endpoints."""
    id: str
    step: str
    doctor: Doctor
    selected_date: Optional[date] = None
    time_slots: List[TimeSlot] = Field(default_factory=list)
    selected_slot: Optional[TimeSlot] = None
    error: Optional[str] = None
    confirmation: Optional[ConfirmationSummary] = None


class DoctorListResponse(BaseModel):
    doctors: List[Doctor]
    total: int


class ErrorResponse(BaseModel):
    """Error response schema."""
    error: str = Field(..., description="Error message")
    detail: Optional[str] = Field(None, description="Detailed error information")
    code: Optional[str] = Field(None, description="Error code")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "error": "Wizard Not Found",
                "detail": "Wizard wiz-1a2b3c not found",
                "code": "WIZARD_NOT_FOUND"
            }
        }
    )
