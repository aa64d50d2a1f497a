"""Configuration for the clinic booking service.

Static business constants live here next to the environment-driven settings
for the upstream clinic-management API.
"""
import os
from dotenv import load_dotenv

load_dotenv()

CENTER_NAME = "Prima Cure Medical Center"
CENTER_TAGLINE = "Your Health, Our Priority"

# Upstream clinic-management API
CLINIC_API_BASE_URL = os.getenv("CLINIC_API_BASE_URL", "http://localhost:5000").rstrip("/")
CLINIC_API_KEY = os.getenv("CLINIC_API_KEY", "")
CLINIC_API_KEY_HEADER = "apikey"
CLINIC_API_TIMEOUT = int(os.getenv("CLINIC_API_TIMEOUT", "15"))
# Only applies to GET transport errors. The booking POST is never retried.
CLINIC_API_GET_RETRIES = int(os.getenv("CLINIC_API_GET_RETRIES", "0"))

LOOKUP_PATH = "/api/ApiLookUpController/GetLookupCalenderForWeb"
FREE_SLOTS_PATH = "/api/ApiAppointmentController/GetFreeAppForDr"
ADD_APPOINTMENT_PATH = "/api/ApiAppointmentController/AddAppointmentForWeb"

# Every upstream request is scoped to this facility.
BRANCH_ID = "22"

# Fixed fields of every booking record sent upstream.
INSTITUTIONAL_DEFAULTS = {
    "PatientID": "9999",
    "UpdatedBy": "2",
    "RoomID": "3",
    "AppointmentReasonsID": "5",
    "NonArabic": "1",
    "HowToKnow": "4",
    "StatusID": "1",
    "BranchID": BRANCH_ID,
}
DEFAULT_DESCRIPTION = "Appointment"

# UAE mobile numbers
MOBILE_COUNTRY_CODE = "+971"
MOBILE_PREFIXES = ("50", "52", "54", "55", "56", "58")
MOBILE_SUBSCRIBER_DIGITS = 7

# Clinic filter value meaning "all clinics"
ALL_CLINICS = "0"

# Booking wizard
BOOKING_MIN_LEAD_DAYS = int(os.getenv("BOOKING_MIN_LEAD_DAYS", "0"))
WIZARD_MAX_AGE_MINUTES = int(os.getenv("WIZARD_MAX_AGE_MINUTES", "60"))

# Server
HOST = os.getenv("HOST", "0.0.0.0")
PORT = int(os.getenv("PORT", "8000"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_JSON = os.getenv("LOG_JSON", "true").lower() == "true"

# Mock upstream (development only)
MOCK_API_PORT = int(os.getenv("MOCK_API_PORT", "5000"))
