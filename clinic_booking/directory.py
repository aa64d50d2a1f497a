"""Doctor directory filtering.

Pure functions over the lookup dataset: clinic selection plus a
case-insensitive name search. An empty result is a normal outcome.
"""
from typing import Iterable, List, Optional, Union

from clinic_booking import config
from clinic_booking.models import Doctor, Lookup


class DoctorNotFoundError(Exception):
    """Raised when a doctor id is not part of the lookup."""
    pass


def _is_any_clinic(clinic_filter: Optional[Union[int, str]]) -> bool:
    if clinic_filter is None:
        return True
    value = str(clinic_filter).strip().lower()
    return value in ("", "any", config.ALL_CLINICS)


def matches_clinic(doctor: Doctor, clinic_filter: Optional[Union[int, str]]) -> bool:
    if _is_any_clinic(clinic_filter):
        return True
    try:
        return doctor.clinic_id == int(clinic_filter)
    except (TypeError, ValueError):
        return False


def matches_search(doctor: Doctor, query: Optional[str]) -> bool:
    if not query:
        return True
    return query.lower() in doctor.name.lower()


def filter_doctors(
    doctors: Iterable[Doctor],
    clinic_filter: Optional[Union[int, str]] = config.ALL_CLINICS,
    query: Optional[str] = ""
) -> List[Doctor]:
    """
    Filter doctors by clinic and name.

    Args:
        doctors: Full doctor list from the lookup
        clinic_filter: "0"/"any" for every clinic, otherwise a clinic id
        query: Substring searched in the doctor's name, case-insensitive

    Returns:
        Matching doctors in their original order

    Example:
        >>> filter_doctors(lookup.doctors, "3", "sara")
        [Doctor(doctor_id=7, name='Sara Haddad', ...)]
    """
    return [
        doctor for doctor in doctors
        if matches_clinic(doctor, clinic_filter) and matches_search(doctor, query)
    ]


def find_doctor(lookup: Lookup, doctor_id: int) -> Doctor:
    for doctor in lookup.doctors:
        if doctor.doctor_id == doctor_id:
            return doctor
    raise DoctorNotFoundError(f"Doctor {doctor_id} not found")


def has_image(doctor: Doctor) -> bool:
    """The upstream marks a missing photo with an empty path or "0"."""
    return bool(doctor.img_path) and doctor.img_path != "0"
