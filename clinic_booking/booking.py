"""Booking submission: patient validation and upstream payload assembly.

The upstream expects a fixed-shape record. Its date fields deliberately use
different precisions:
- AppDate, StDate: "yyyy-MM-dd HH:mm"
- EndDate: "yyyy-MM-dd HH:mm:ss.SSS"
"""
import re
from datetime import date, datetime, time
from typing import Any, Optional, Tuple, Union

from clinic_booking import config
from clinic_booking.logging_config import get_logger
from clinic_booking.models import BookingRequest, PatientInput, TimeSlot

logger = get_logger(__name__)

INVALID_MOBILE_MESSAGE = "Please enter a valid UAE mobile number"
MISSING_NAME_MESSAGE = "Please enter your full name"


class PatientInputError(ValueError):
    """Raised when patient details fail validation; no request is sent."""
    pass


def split_name(full_name: str) -> Tuple[str, str, str]:
    """
    Split a full name into (first, middle, last).

    Example:
        >>> split_name("John Michael Smith")
        ('John', 'Michael', 'Smith')
        >>> split_name("Cher")
        ('Cher', '', '')
    """
    parts = full_name.split()
    if not parts:
        return "", "", ""

    first = parts[0]
    middle = " ".join(parts[1:-1]) if len(parts) > 2 else ""
    last = parts[-1] if len(parts) > 1 else ""
    return first, middle, last


def build_mobile(prefix: str, rest: str) -> str:
    """
    Assemble a UAE mobile number: +971 + carrier prefix + 7 digits.

    Characters other than ASCII digits typed into `rest` are dropped first.

    Raises:
        PatientInputError: Unknown prefix or not exactly 7 digits
    """
    digits = re.sub(r"[^0-9]", "", rest or "")
    if prefix not in config.MOBILE_PREFIXES or len(digits) != config.MOBILE_SUBSCRIBER_DIGITS:
        raise PatientInputError(INVALID_MOBILE_MESSAGE)
    return f"{config.MOBILE_COUNTRY_CODE}{prefix}{digits}"


def build_patient_input(
    full_name: str,
    prefix: str,
    mobile_rest: str,
    description: Optional[str] = ""
) -> PatientInput:
    if not full_name or not full_name.strip():
        raise PatientInputError(MISSING_NAME_MESSAGE)

    return PatientInput(
        full_name=full_name,
        mobile=build_mobile(prefix, mobile_rest),
        description=description or "",
    )


def format_minutes(value: datetime) -> str:
    return value.strftime("%Y-%m-%d %H:%M")


def format_milliseconds(value: datetime) -> str:
    return f"{value.strftime('%Y-%m-%d %H:%M:%S')}.{value.microsecond // 1000:03d}"


def _as_datetime(value: Union[date, datetime]) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime.combine(value, time())


def build_booking_request(
    doctor_id: Union[int, str],
    appointment_date: Union[date, datetime],
    time_slot: TimeSlot,
    patient: PatientInput
) -> BookingRequest:
    """
    Build the upstream booking record.

    Args:
        doctor_id: Selected doctor
        appointment_date: Selected calendar date
        time_slot: Selected free slot
        patient: Validated patient details

    Returns:
        Frozen BookingRequest with institutional defaults applied
    """
    first, middle, last = split_name(patient.full_name)

    return BookingRequest.model_validate({
        **config.INSTITUTIONAL_DEFAULTS,
        "DoctorID": str(doctor_id),
        "AppDate": format_minutes(_as_datetime(appointment_date)),
        "Patient": patient.full_name,
        "MobileNo": patient.mobile,
        "StDate": format_minutes(time_slot.start_time),
        "EndDate": format_milliseconds(time_slot.end_time),
        "Description": patient.description or config.DEFAULT_DESCRIPTION,
        "Fname": first,
        "MName": middle,
        "LName": last,
    })


def submit_booking(
    client,
    doctor_id: Union[int, str],
    appointment_date: Union[date, datetime],
    time_slot: TimeSlot,
    patient: PatientInput
) -> Tuple[BookingRequest, Any]:
    """
    Build the booking record and POST it once.

    Args:
        client: ClinicApiClient

    Returns:
        (booking_request, upstream_response_body)

    Raises:
        UpstreamError: Transport failure or non-success status
    """
    booking = build_booking_request(doctor_id, appointment_date, time_slot, patient)
    logger.info(
        "booking_submitted",
        doctor_id=booking.doctor_id,
        start=booking.st_date,
    )
    response_body = client.add_appointment(booking)
    logger.info("booking_accepted", doctor_id=booking.doctor_id, start=booking.st_date)
    return booking, response_body
