"""Client for the upstream clinic-management API.

Covers the three calls the booking service needs:
- lookup (clinics + doctors of the branch)
- free time slots of a doctor on a date
- add appointment

Raw variants return the upstream JSON untouched for the pass-through proxy
endpoints; the typed variants parse it into models for the booking wizard.
"""
from datetime import date as dt_date
from typing import Any, List, Optional, Union

import requests
from pydantic import TypeAdapter, ValidationError

from clinic_booking import config
from clinic_booking.http_client import create_default_session
from clinic_booking.logging_config import get_logger
from clinic_booking.models import BookingRequest, Lookup, TimeSlot

logger = get_logger(__name__)

_time_slots_adapter = TypeAdapter(List[TimeSlot])


class UpstreamError(Exception):
    """Base error for failed calls to the clinic-management API."""
    pass


class UpstreamUnavailableError(UpstreamError):
    """Raised on transport failures (connection refused, timeout, ...)."""
    pass


class UpstreamStatusError(UpstreamError):
    """Raised when the upstream answers with a non-success status."""

    def __init__(self, status_code: int, body: str = ""):
        self.status_code = status_code
        self.body = body
        super().__init__(f"Upstream returned HTTP {status_code}")


class UpstreamResponseError(UpstreamError):
    """Raised when a success response does not have the expected shape."""
    pass


class ClinicApiClient:
    """Thin wrapper over a requests session bound to the upstream base URL."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        session: Optional[requests.Session] = None,
        branch_id: str = config.BRANCH_ID,
    ):
        self.base_url = (base_url or config.CLINIC_API_BASE_URL).rstrip("/")
        self.session = session or create_default_session()
        self.branch_id = branch_id

    def _url(self, path: str) -> str:
        return f"{self.base_url}{path}"

    def _check(self, response: requests.Response, what: str) -> requests.Response:
        if not response.ok:
            logger.error(
                "upstream_call_failed",
                call=what,
                status_code=response.status_code,
                body=response.text,
            )
            raise UpstreamStatusError(response.status_code, response.text)
        return response

    def _get(self, path: str, params: dict, what: str) -> Any:
        try:
            response = self.session.get(self._url(path), params=params)
        except requests.exceptions.RequestException as e:
            logger.error("upstream_unreachable", call=what, error=str(e))
            raise UpstreamUnavailableError(f"Could not reach clinic API: {e}") from e

        self._check(response, what)
        try:
            return response.json()
        except ValueError as e:
            raise UpstreamResponseError(f"Upstream {what} returned invalid JSON") from e

    # =========================================================
    # Lookup
    # =========================================================
    def fetch_lookup_raw(self) -> Any:
        return self._get(
            config.LOOKUP_PATH,
            {"branchId": self.branch_id},
            "lookup"
        )

    def fetch_lookup(self) -> Lookup:
        data = self.fetch_lookup_raw()
        try:
            return Lookup.model_validate(data)
        except ValidationError as e:
            raise UpstreamResponseError(f"Unexpected lookup payload: {e}") from e

    # =========================================================
    # Time slots
    # =========================================================
    def fetch_time_slots_raw(
        self,
        doctor_id: Union[int, str],
        request_date: Union[dt_date, str]
    ) -> Any:
        if isinstance(request_date, dt_date):
            request_date = request_date.isoformat()

        return self._get(
            config.FREE_SLOTS_PATH,
            {
                "RequestDate": request_date,
                "DoctorID": str(doctor_id),
                "BranchID": self.branch_id,
            },
            "time slots"
        )

    def fetch_time_slots(self, doctor_id: Union[int, str], request_date: dt_date) -> List[TimeSlot]:
        """
        Free slots of a doctor on a date, already filtered by the upstream.

        Not cached: every call hits the upstream.
        """
        data = self.fetch_time_slots_raw(doctor_id, request_date)
        try:
            return _time_slots_adapter.validate_python(data)
        except ValidationError as e:
            raise UpstreamResponseError(f"Unexpected time slot payload: {e}") from e

    # =========================================================
    # Booking
    # =========================================================
    def add_appointment(self, booking: BookingRequest) -> Any:
        """
        POST a booking record. Sent once; never retried.

        Returns:
            The upstream JSON body, or None when the body is not JSON
        """
        try:
            response = self.session.post(
                self._url(config.ADD_APPOINTMENT_PATH),
                json=booking.to_payload(),
            )
        except requests.exceptions.RequestException as e:
            logger.error("upstream_unreachable", call="booking", error=str(e))
            raise UpstreamUnavailableError(f"Could not reach clinic API: {e}") from e

        self._check(response, "booking")
        try:
            return response.json()
        except ValueError:
            logger.warning("upstream_booking_non_json_body")
            return None
