"""Booking wizard: one visitor's in-progress booking with one doctor.

Steps: date -> time_slot -> form -> confirmation (see clinic_booking.state).

Failures never corrupt the wizard. A failed slot fetch, a rejected patient
form or a failed booking POST leave the wizard on the same step with a short
message in `error`; the user retries by repeating the action.
"""
import uuid
from datetime import date, datetime, timedelta, UTC
from typing import Callable, List, Optional

from clinic_booking import config
from clinic_booking.booking import PatientInputError, build_patient_input, submit_booking
from clinic_booking.confirmation import build_summary
from clinic_booking.logging_config import get_logger
from clinic_booking.models import BookedAppointment, Doctor, TimeSlot, WizardView
from clinic_booking.state import (
    INITIAL_STEP,
    InvalidTransitionError,
    WizardStep,
    previous_step,
    validate_transition,
)
from clinic_booking.upstream import UpstreamError

logger = get_logger(__name__)

SLOTS_UNAVAILABLE_MESSAGE = "Failed to load available time slots"
BOOKING_FAILED_MESSAGE = "Failed to book appointment"


class InvalidSelectionError(ValueError):
    """Raised when a selected date or time slot is not bookable."""
    pass


class BookingWizard:
    """
    Four-step booking flow for a single doctor.

    Args:
        doctor: Doctor being booked
        client: ClinicApiClient used for slot fetches and the booking POST
        today: Callable returning the current date (injectable for tests)
        min_lead_days: Earliest bookable date is today + this many days
        wizard_id: Identifier; generated when omitted
    """

    def __init__(
        self,
        doctor: Doctor,
        client,
        today: Optional[Callable[[], date]] = None,
        min_lead_days: int = config.BOOKING_MIN_LEAD_DAYS,
        wizard_id: Optional[str] = None,
    ):
        self.id = wizard_id or f"wiz-{uuid.uuid4().hex[:12]}"
        self.doctor = doctor
        self._client = client
        self._today = today or date.today
        self.min_lead_days = min_lead_days
        self.created_at = datetime.now(UTC)
        self.last_activity = self.created_at
        self._clear()

    def _clear(self):
        self.step: WizardStep = INITIAL_STEP
        self.selected_date: Optional[date] = None
        self.time_slots: List[TimeSlot] = []
        self.selected_slot: Optional[TimeSlot] = None
        self.booking: Optional[BookedAppointment] = None
        self.error: Optional[str] = None

    # =========================================================
    # Transitions
    # =========================================================
    def _require(self, intended: WizardStep, action: str):
        if not validate_transition(self.step, intended):
            raise InvalidTransitionError(self.step, action)

    def _move_to(self, intended: WizardStep):
        logger.info(
            "wizard_transition",
            wizard_id=self.id,
            from_step=self.step.value,
            to_step=intended.value,
        )
        self.step = intended

    def touch(self):
        self.last_activity = datetime.now(UTC)

    @property
    def earliest_date(self) -> date:
        return self._today() + timedelta(days=self.min_lead_days)

    def select_date(self, selected: date) -> List[TimeSlot]:
        """
        Store the date, move to time_slot and fetch that day's free slots.

        A failed fetch still moves to time_slot, with an empty slot list and
        an error message.

        Raises:
            InvalidTransitionError: Not on the date step
            InvalidSelectionError: Date earlier than the earliest bookable date
        """
        self._require(WizardStep.TIME_SLOT, "select a date")
        if selected < self.earliest_date:
            raise InvalidSelectionError(
                f"Please choose a date on or after {self.earliest_date.isoformat()}"
            )

        self.selected_date = selected
        self.selected_slot = None
        self._move_to(WizardStep.TIME_SLOT)
        self._load_time_slots()
        return self.time_slots

    def refresh_time_slots(self) -> List[TimeSlot]:
        if self.step != WizardStep.TIME_SLOT:
            raise InvalidTransitionError(self.step, "refresh time slots")
        self._load_time_slots()
        return self.time_slots

    def _load_time_slots(self):
        self.error = None
        try:
            self.time_slots = self._client.fetch_time_slots(
                self.doctor.doctor_id, self.selected_date
            )
        except UpstreamError as e:
            logger.warning(
                "time_slots_unavailable",
                wizard_id=self.id,
                doctor_id=self.doctor.doctor_id,
                date=self.selected_date.isoformat(),
                error=str(e),
            )
            self.time_slots = []
            self.error = SLOTS_UNAVAILABLE_MESSAGE

    def select_time_slot(self, slot: TimeSlot):
        """
        Raises:
            InvalidTransitionError: Not on the time_slot step
            InvalidSelectionError: Slot is not one of the fetched slots
        """
        self._require(WizardStep.FORM, "select a time slot")
        if slot not in self.time_slots:
            raise InvalidSelectionError("The selected time slot is not available")

        self.selected_slot = slot
        self.error = None
        self._move_to(WizardStep.FORM)

    def submit(
        self,
        full_name: str,
        prefix: str,
        mobile_rest: str,
        description: str = ""
    ) -> BookedAppointment:
        """
        Validate the patient form and book the appointment.

        On success the wizard moves to confirmation. On any failure it stays
        on the form step with `error` set and the exception is re-raised.

        Raises:
            InvalidTransitionError: Not on the form step
            PatientInputError: Form rejected; no request was sent
            UpstreamError: Booking POST failed
        """
        self._require(WizardStep.CONFIRMATION, "submit a booking")

        try:
            patient = build_patient_input(full_name, prefix, mobile_rest, description)
        except PatientInputError as e:
            self.error = str(e)
            raise

        try:
            _, response_body = submit_booking(
                self._client,
                self.doctor.doctor_id,
                self.selected_date,
                self.selected_slot,
                patient,
            )
        except UpstreamError as e:
            logger.warning("booking_failed", wizard_id=self.id, error=str(e))
            self.error = BOOKING_FAILED_MESSAGE
            raise

        self.booking = BookedAppointment(
            doctor=self.doctor,
            date=self.selected_date,
            time_slot=self.selected_slot,
            full_name=patient.full_name,
            mobile=patient.mobile,
            description=patient.description,
            upstream_response=response_body,
        )
        self.error = None
        self._move_to(WizardStep.CONFIRMATION)
        return self.booking

    def back(self) -> WizardStep:
        """
        Go back one step (time_slot -> date, form -> time_slot).

        Returning to time_slot clears the selected slot and refetches the
        slots of the stored date.
        """
        target = previous_step(self.step)
        if target is None:
            raise InvalidTransitionError(self.step, "go back")

        self.error = None
        self._move_to(target)
        if target == WizardStep.TIME_SLOT:
            self.selected_slot = None
            self._load_time_slots()
        return self.step

    def reset(self):
        """Discard every selection and start again on the date step."""
        logger.info("wizard_reset", wizard_id=self.id)
        self._clear()

    # =========================================================
    # Views
    # =========================================================
    def view(self) -> WizardView:
        return WizardView(
            id=self.id,
            step=self.step.value,
            doctor=self.doctor,
            selected_date=self.selected_date,
            time_slots=self.time_slots,
            selected_slot=self.selected_slot,
            error=self.error,
            confirmation=build_summary(self.booking) if self.booking else None,
        )
